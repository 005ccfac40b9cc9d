"""Tests for configuration generation and loading."""

import tempfile
from pathlib import Path

import pytest
import yaml

from pubspec_bump.config import (
    BumpConfig,
    ConfigError,
    ProjectConfig,
    clamp_diff_context,
    compile_version_pattern,
    generate_config_template,
    load_config,
    parse_extra_file_option,
)
from pubspec_bump.version import BumpKind


@pytest.fixture
def temp_config_file():
    """Create a temporary config file for testing."""
    config_content = """
bump-type: minor
diff-tag: last
diff-context: 25
changelog-path: docs/CHANGELOG.md
extra-files:
  lib/src/version.dart: "const version = '([^']+)'"
  package.json: '("version":\\s*")\\d+\\.\\d+\\.\\d+(")'
openai:
  model: gpt-4o-mini
"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(config_content)
        temp_path = f.name

    yield temp_path
    Path(temp_path).unlink()


def test_clamp_diff_context():
    """Test the diff context is clamped to 2..100."""
    assert clamp_diff_context(0) == 2
    assert clamp_diff_context(2) == 2
    assert clamp_diff_context(42) == 42
    assert clamp_diff_context(1000) == 100


def test_bump_config_clamps_diff_context():
    """Test the clamp applies when building a BumpConfig."""
    assert BumpConfig(diff_context=1).diff_context == 2
    assert BumpConfig().diff_context == 10


def test_compile_version_pattern_group_limit():
    """Test patterns with more than three groups are rejected."""
    assert compile_version_pattern(r"(a)(b)(c)").groups == 3

    with pytest.raises(ConfigError, match="4 capture groups"):
        compile_version_pattern(r"(a)(b)(c)(d)", "file.txt")


def test_compile_version_pattern_invalid_regex():
    """Test invalid regular expressions are rejected."""
    with pytest.raises(ConfigError, match="Invalid version pattern for 'x.txt'"):
        compile_version_pattern(r"(\d+", "x.txt")


def test_parse_extra_file_option():
    """Test splitting a file=pattern option on the first '='."""
    file_path, pattern = parse_extra_file_option(r"lib/a.dart=version\s*=\s*'([^']+)'")

    assert file_path == "lib/a.dart"
    assert pattern.pattern == r"version\s*=\s*'([^']+)'"


@pytest.mark.parametrize("option", ["lib/a.dart", "=(\\d+)", "lib/a.dart="])
def test_parse_extra_file_option_malformed(option):
    """Test malformed options are rejected."""
    with pytest.raises(ConfigError):
        parse_extra_file_option(option)


def test_project_config_from_file(temp_config_file):
    """Test loading all supported keys."""
    config = ProjectConfig.from_file(temp_config_file)

    assert config.get_bump_kind() is BumpKind.MINOR
    assert config.get_diff_tag() == "last"
    assert config.get_diff_context() == 25
    assert config.get_manifest_path() == "pubspec.yaml"
    assert config.get_changelog_path() == "docs/CHANGELOG.md"
    assert config.get_openai_model() == "gpt-4o-mini"

    extra_files = config.get_extra_files()
    assert list(extra_files) == ["lib/src/version.dart", "package.json"]
    assert extra_files["package.json"].groups == 2


def test_project_config_defaults():
    """Test an empty configuration falls back to defaults."""
    config = ProjectConfig()

    assert config.get_bump_kind() is None
    assert config.get_diff_tag() is None
    assert config.get_diff_context() == 10
    assert config.get_changelog_path() == "CHANGELOG.md"
    assert config.get_extra_files() == {}
    assert config.get_openai_model() is None


def test_project_config_invalid_bump_type():
    """Test an unknown bump type is rejected."""
    with pytest.raises(ConfigError, match="'bump-type'"):
        ProjectConfig({"bump-type": "huge"})


def test_project_config_invalid_extra_files():
    """Test extra files must be a mapping."""
    with pytest.raises(ConfigError, match="'extra-files'"):
        ProjectConfig({"extra-files": ["a.txt"]})


def test_project_config_non_string_extra_file_path():
    """Test extra file paths must be strings."""
    with pytest.raises(ConfigError, match="Extra file path '1' must be a string"):
        ProjectConfig({"extra-files": {1: r"(\d+\.\d+\.\d+)"}})


def test_project_config_missing_file():
    """Test an explicit missing file is an error."""
    with pytest.raises(ConfigError, match="Configuration file not found"):
        ProjectConfig.from_file("/nonexistent/pubspec-bump.yaml")


def test_load_config_default_file(tmp_path):
    """Test the default file in the project directory is picked up."""
    (tmp_path / "pubspec-bump.yaml").write_text("bump-type: major\n")

    assert load_config(tmp_path).get_bump_kind() is BumpKind.MAJOR


def test_load_config_without_file(tmp_path):
    """Test a project without a config file gets an empty configuration."""
    assert load_config(tmp_path).raw == {}


def test_generate_config_template_is_valid_yaml():
    """Test the generated template parses and loads."""
    template = generate_config_template()
    config_dict = yaml.safe_load(template)

    assert isinstance(config_dict, dict)
    for key in ["bump-type", "diff-context", "manifest-path", "changelog-path", "extra-files"]:
        assert key in config_dict

    config = ProjectConfig(config_dict)
    assert config.get_bump_kind() is BumpKind.PATCH
