"""CLI interface for pubspec-bump."""

import sys
from pathlib import Path

import click

from pubspec_bump import __version__
from pubspec_bump.bump import BumpError, BumpOrchestrator
from pubspec_bump.config import (
    BumpConfig,
    ConfigError,
    ProjectConfig,
    generate_config_template,
    load_config,
    parse_extra_file_option,
)
from pubspec_bump.generator import (
    DEFAULT_MODEL,
    GeneratorError,
    OpenAIChangelogGenerator,
    get_openai_api_key,
)
from pubspec_bump.git import GitError
from pubspec_bump.logger import ConsoleLogger
from pubspec_bump.version import BumpKind, VersionError


def build_bump_config(
    project_config: ProjectConfig,
    *,
    major: bool = False,
    minor: bool = False,
    patch: bool = False,
    no_bump: bool = False,
    no_changelog: bool = False,
    no_extra: bool = False,
    dry_run: bool = False,
    diff_tag: str | None = None,
    diff_context: int | None = None,
    extra_file: tuple[str, ...] = (),
) -> BumpConfig:
    """Combine command line options with the project configuration.

    Command line values win; ``--extra-file`` entries are merged after the
    configured extra files.

    Raises:
        ConfigError: If an extra file option or pattern is invalid
    """
    if major or minor or patch:
        bump_kind = BumpKind.resolve(major=major, minor=minor, patch=patch)
    else:
        bump_kind = project_config.get_bump_kind() or BumpKind.PATCH

    extra_files = project_config.get_extra_files()
    for option in extra_file:
        file_path, pattern = parse_extra_file_option(option)
        extra_files[file_path] = pattern

    return BumpConfig(
        bump_kind=bump_kind,
        no_bump=no_bump,
        no_changelog=no_changelog,
        no_extra=no_extra,
        dry_run=dry_run,
        diff_tag=diff_tag if diff_tag is not None else project_config.get_diff_tag(),
        diff_context=(
            diff_context if diff_context is not None else project_config.get_diff_context()
        ),
        extra_files=extra_files,
        manifest_path=project_config.get_manifest_path(),
        changelog_path=project_config.get_changelog_path(),
    )


@click.command()
@click.help_option("--help", "-h")
@click.version_option(__version__, "--version", "-v")
@click.argument(
    "project_dir",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option("--major", is_flag=True, help="Bump the major version (X.0.0)")
@click.option("--minor", is_flag=True, help="Bump the minor version (0.X.0)")
@click.option("--patch", is_flag=True, help="Bump the patch version (0.0.X, default)")
@click.option("--no-bump", is_flag=True, help="Keep the current manifest version")
@click.option(
    "--no-changelog", is_flag=True, help="Skip CHANGELOG generation and update"
)
@click.option("--no-extra", is_flag=True, help="Skip all extra file updates")
@click.option(
    "--dry-run",
    "-d",
    is_flag=True,
    help="Show what would be done without modifying any files",
)
@click.option(
    "--diff-tag",
    default=None,
    help="Git ref to diff against ('last' or 'latest' for the highest tag)",
)
@click.option(
    "--diff-context",
    type=int,
    default=None,
    help="Lines of context in the git diff (2-100, default: 10)",
)
@click.option(
    "--extra-file",
    multiple=True,
    metavar="FILE=PATTERN",
    help="Extra file to update, with a regex locating its version (repeatable)",
)
@click.option(
    "--api-key",
    default=None,
    help="OpenAI API key (default: $OPENAI_API_KEY)",
)
@click.option(
    "--model",
    default=None,
    help=f"OpenAI model for CHANGELOG generation (default: {DEFAULT_MODEL})",
)
@click.option(
    "--config",
    "-c",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to configuration file (default: pubspec-bump.yaml in the project)",
)
@click.option(
    "--print-config",
    is_flag=True,
    help="Print a documented configuration template and exit",
)
def cli(
    project_dir: Path,
    major: bool,
    minor: bool,
    patch: bool,
    no_bump: bool,
    no_changelog: bool,
    no_extra: bool,
    dry_run: bool,
    diff_tag: str | None,
    diff_context: int | None,
    extra_file: tuple[str, ...],
    api_key: str | None,
    model: str | None,
    config: Path | None,
    print_config: bool,
):
    """Bump the version of a pubspec project and update its CHANGELOG.

    Generates a CHANGELOG entry from the pending git diff, increments the
    version in pubspec.yaml, prepends the entry to CHANGELOG.md and writes
    the new version into any configured extra files.
    """
    if print_config:
        click.echo(generate_config_template())
        return

    try:
        project_config = load_config(project_dir, config)
        bump_config = build_bump_config(
            project_config,
            major=major,
            minor=minor,
            patch=patch,
            no_bump=no_bump,
            no_changelog=no_changelog,
            no_extra=no_extra,
            dry_run=dry_run,
            diff_tag=diff_tag,
            diff_context=diff_context,
            extra_file=extra_file,
        )

        logger = ConsoleLogger()
        generator = OpenAIChangelogGenerator(
            api_key=get_openai_api_key(api_key, project_config.raw),
            model=model or project_config.get_openai_model() or DEFAULT_MODEL,
            logger=logger,
        )

        orchestrator = BumpOrchestrator(
            project_dir,
            bump_config,
            generator=generator,
            logger=logger,
        )
        result = orchestrator.bump()

        click.echo(f"\nVersion: {result.version}")
        if result.changelog_entry is not None:
            click.echo(f"📝 CHANGELOG entry:\n{result.changelog_entry}")
        if result.updated_files:
            click.echo("Updated files:")
            for file_path in result.updated_files:
                click.echo(f"  ✓ {file_path}")
        if dry_run:
            click.echo("\nDry run - no files modified")

    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except BumpError as e:
        click.echo(f"Bump error: {e}", err=True)
        sys.exit(1)
    except VersionError as e:
        click.echo(f"Version error: {e}", err=True)
        sys.exit(1)
    except GitError as e:
        click.echo(f"Git error: {e}", err=True)
        sys.exit(1)
    except GeneratorError as e:
        click.echo(f"CHANGELOG generation error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
