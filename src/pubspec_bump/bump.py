"""Version bump orchestration for pubspec-bump."""

from dataclasses import dataclass
from pathlib import Path

from pubspec_bump.bumper import bump_files
from pubspec_bump.changelog import format_changelog_entry, prepend_to_changelog
from pubspec_bump.config import BumpConfig
from pubspec_bump.generator import ChangelogGenerator
from pubspec_bump.git import DiffSource, GitRunner, VersionControlRunner
from pubspec_bump.logger import Logger, get_default_logger
from pubspec_bump.resolver import ChangelogEntryResolver
from pubspec_bump.version import VersionChange, bump_manifest


class BumpError(Exception):
    """Raised when the project can't be bumped."""

    pass


@dataclass(frozen=True)
class BumpResult:
    """Outcome of a successful bump."""

    version: str
    changelog_entry: str | None
    updated_files: tuple[Path, ...] = ()


class BumpOrchestrator:
    """Bumps the version of a project and records it in its CHANGELOG.

    A bump runs these steps in order, aborting on the first fatal error:

    1. Check the project directory exists and is under version control
    2. Resolve a CHANGELOG entry from the pending diff
    3. Bump the manifest version
    4. Prepend the entry to the changelog
    5. Propagate the version to the configured extra files

    Steps already written are not rolled back when a later step fails.
    """

    def __init__(
        self,
        project_dir: str | Path,
        config: BumpConfig | None = None,
        *,
        runner: VersionControlRunner | None = None,
        generator: ChangelogGenerator | None = None,
        logger: Logger | None = None,
    ):
        self.project_dir = Path(project_dir)
        self.config = config or BumpConfig()
        self.runner = runner or GitRunner()
        self.generator = generator
        self.logger = logger or get_default_logger()

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / self.config.manifest_path

    @property
    def changelog_path(self) -> Path:
        return self.project_dir / self.config.changelog_path

    def check_project(self) -> None:
        """Verify the project directory exists and is under version control.

        Raises:
            BumpError: If either check fails
        """
        if not self.project_dir.is_dir():
            raise BumpError(f"Project directory does not exist: {self.project_dir}")

        if self.config.dry_run:
            self.logger.log("🧪  Dry run mode - no files will be modified")

        self.logger.log(f"📁  Project directory: {self.project_dir.absolute()}")

        if not self.runner.has_versioning(self.project_dir):
            raise BumpError(f"Git repository not detected in {self.project_dir}")

        self.logger.log("✅  Git repository detected")

    def resolve_changelog_entry(self) -> str | None:
        """Generate the raw CHANGELOG entry for the pending changes."""
        diff_source = DiffSource(self.project_dir, self.runner, self.logger)
        resolver = ChangelogEntryResolver(
            diff_source,
            self.generator,
            no_changelog=self.config.no_changelog,
            diff_tag=self.config.diff_tag,
            diff_context=self.config.diff_context,
            logger=self.logger,
        )
        return resolver.resolve()

    def bump_version(self) -> VersionChange:
        """Increment the manifest version according to the configuration."""
        return bump_manifest(
            self.manifest_path,
            self.config.bump_kind,
            no_bump=self.config.no_bump,
            dry_run=self.config.dry_run,
            logger=self.logger,
        )

    def update_changelog(self, version: str, entry: str | None) -> str | None:
        """Prepend the formatted entry for ``version`` to the changelog.

        Returns:
            The formatted section, or None when the changelog is skipped
        """
        if self.config.no_changelog:
            self.logger.log("⏭️  [SKIP] Skipping CHANGELOG update. (--no-changelog)")
            return None

        section = format_changelog_entry(version, entry)
        name = self.changelog_path.name

        if self.config.dry_run:
            self.logger.log(f"📝  [SKIP] Updated {name}")
        elif prepend_to_changelog(self.changelog_path, section):
            self.logger.log(f"📝  Created {name}")
        else:
            self.logger.log(f"📝  Updated {name}")

        return section

    def update_extra_files(self, version: str) -> list[Path]:
        """Write ``version`` into every configured extra file.

        Returns:
            Files that changed (or would change in dry-run), in configuration order
        """
        extra_files = self.config.extra_files
        if not extra_files:
            return []

        if self.config.no_extra:
            self.logger.log(
                f"⏭️  [SKIP] Skipping {len(extra_files)} extra files update. (--no-extra)"
            )
            return []

        return bump_files(
            extra_files,
            version,
            self.project_dir,
            dry_run=self.config.dry_run,
            logger=self.logger,
        )

    def bump(self) -> BumpResult:
        """Run the full bump workflow.

        Returns:
            BumpResult with the new version, CHANGELOG section and updated files

        Raises:
            BumpError: If the project directory or git repository is missing
            VersionError: If the manifest version can't be read
            GitError: If the diff can't be extracted
            GeneratorError: If CHANGELOG generation fails
        """
        self.check_project()

        entry = self.resolve_changelog_entry()

        change = self.bump_version()
        version = str(change.current)

        section = self.update_changelog(version, entry)

        updated_files = self.update_extra_files(version)

        if self.config.dry_run:
            self.logger.log(f"🚀  [SKIP] Version bumped to {version}")
        else:
            self.logger.log(f"🚀  Version bumped to {version}")

        return BumpResult(
            version=version,
            changelog_entry=section,
            updated_files=tuple(updated_files),
        )
