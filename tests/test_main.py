"""Tests for the command line interface."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pubspec_bump.config import ConfigError, ProjectConfig
from pubspec_bump.git import GitError
from pubspec_bump.main import build_bump_config, cli
from pubspec_bump.version import BumpKind


@pytest.fixture
def project_dir(tmp_path):
    """Create a minimal pubspec project under git."""
    (tmp_path / ".git").mkdir()
    (tmp_path / "pubspec.yaml").write_text("name: test_project\nversion: 1.0.0\n")
    (tmp_path / "version.txt").write_text("1.0.0\n")
    return tmp_path


def test_build_bump_config_flag_priority():
    """Test command line bump flags resolve with major first."""
    config = build_bump_config(ProjectConfig(), minor=True, patch=True)

    assert config.bump_kind is BumpKind.MINOR


def test_build_bump_config_uses_project_defaults():
    """Test config file values apply when no flag is given."""
    project_config = ProjectConfig(
        {
            "bump-type": "major",
            "diff-tag": "latest",
            "diff-context": 1,
            "extra-files": {"a.txt": r"(\d+\.\d+\.\d+)"},
        }
    )

    config = build_bump_config(project_config, extra_file=(r"b.txt=v(\d+\.\d+\.\d+)",))

    assert config.bump_kind is BumpKind.MAJOR
    assert config.diff_tag == "latest"
    assert config.diff_context == 2
    assert list(config.extra_files) == ["a.txt", "b.txt"]


def test_build_bump_config_cli_overrides():
    """Test command line values win over the config file."""
    project_config = ProjectConfig({"bump-type": "major", "diff-tag": "v1.0.0"})

    config = build_bump_config(project_config, patch=True, diff_tag="v2.0.0", diff_context=30)

    assert config.bump_kind is BumpKind.PATCH
    assert config.diff_tag == "v2.0.0"
    assert config.diff_context == 30


def test_build_bump_config_bad_extra_file():
    """Test a malformed --extra-file is rejected before bumping."""
    with pytest.raises(ConfigError):
        build_bump_config(ProjectConfig(), extra_file=("no-separator",))


def test_cli_bumps_project(project_dir):
    """Test a patch bump from the command line."""
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            str(project_dir),
            "--no-changelog",
            "--extra-file",
            r"version.txt=(\d+\.\d+\.\d+)",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Version: 1.0.1" in result.output
    assert "version: 1.0.1" in (project_dir / "pubspec.yaml").read_text()
    assert (project_dir / "version.txt").read_text() == "1.0.1\n"
    assert not (project_dir / "CHANGELOG.md").exists()


def test_cli_minor_dry_run(project_dir):
    """Test a dry-run minor bump leaves the project untouched."""
    runner = CliRunner()

    result = runner.invoke(cli, [str(project_dir), "--minor", "--no-changelog", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Version: 1.1.0" in result.output
    assert "Dry run - no files modified" in result.output
    assert "version: 1.0.0" in (project_dir / "pubspec.yaml").read_text()


def test_cli_no_bump(project_dir):
    """Test --no-bump reports the current version."""
    runner = CliRunner()

    result = runner.invoke(cli, [str(project_dir), "--no-bump", "--no-changelog"])

    assert result.exit_code == 0, result.output
    assert "Version: 1.0.0" in result.output


def test_cli_writes_placeholder_changelog(project_dir):
    """Test an empty diff produces a placeholder CHANGELOG section."""
    runner = CliRunner()

    with patch("pubspec_bump.git.DiffSource.extract_diff", return_value=""):
        result = runner.invoke(cli, [str(project_dir), "--api-key", "sk-test"])

    assert result.exit_code == 0, result.output
    assert (project_dir / "CHANGELOG.md").read_text() == "## 1.0.1\n\n- ?\n\n"


def test_cli_missing_project_dir(tmp_path):
    """Test a missing project directory exits with an error."""
    runner = CliRunner()

    result = runner.invoke(cli, [str(tmp_path / "missing"), "--no-changelog"])

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_cli_not_a_repository(tmp_path):
    """Test a project outside git exits with an error."""
    (tmp_path / "pubspec.yaml").write_text("version: 1.0.0\n")
    runner = CliRunner()

    result = runner.invoke(cli, [str(tmp_path), "--no-changelog"])

    assert result.exit_code == 1
    assert "Git repository not detected" in result.output
    assert (tmp_path / "pubspec.yaml").read_text() == "version: 1.0.0\n"


def test_cli_invalid_extra_file(project_dir):
    """Test a bad --extra-file pattern is a configuration error."""
    runner = CliRunner()

    result = runner.invoke(cli, [str(project_dir), "--extra-file", "a.txt=(unclosed"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert "version: 1.0.0" in (project_dir / "pubspec.yaml").read_text()


def test_cli_git_failure(project_dir):
    """Test a failing diff is reported as a git error."""
    runner = CliRunner()

    with patch(
        "pubspec_bump.git.DiffSource.extract_diff",
        side_effect=GitError("Git command failed: bad revision"),
    ):
        result = runner.invoke(cli, [str(project_dir), "--diff-tag", "nope"])

    assert result.exit_code == 1
    assert "Git error: Git command failed: bad revision" in result.output


def test_cli_print_config():
    """Test the configuration template is printed."""
    runner = CliRunner()

    result = runner.invoke(cli, ["--print-config"])

    assert result.exit_code == 0
    assert "extra-files" in result.output
