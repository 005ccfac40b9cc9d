"""Decides whether and how a CHANGELOG entry is generated."""

from pubspec_bump.generator import ChangelogGenerator
from pubspec_bump.git import DiffSource
from pubspec_bump.logger import Logger, get_default_logger


class ChangelogEntryResolver:
    """Produces the raw CHANGELOG entry for the pending changes.

    Must run before the manifest is bumped so the diff reflects the
    pre-bump state.
    """

    def __init__(
        self,
        diff_source: DiffSource,
        generator: ChangelogGenerator | None = None,
        *,
        no_changelog: bool = False,
        diff_tag: str | None = None,
        diff_context: int = 10,
        logger: Logger | None = None,
    ):
        self.diff_source = diff_source
        self.generator = generator
        self.no_changelog = no_changelog
        self.diff_tag = diff_tag
        self.diff_context = diff_context
        self.logger = logger or get_default_logger()

    def resolve(self) -> str | None:
        """Extract the diff and delegate it to the generator.

        Returns:
            Generated entry, or None when skipped, the diff is empty, or the
            generator produced nothing

        Raises:
            GitError: If the diff can't be extracted
            GeneratorError: If the generator fails
        """
        if self.no_changelog:
            self.logger.log("⏭️  [SKIP] Skipping CHANGELOG generation. (--no-changelog)")
            return None

        if self.generator is None:
            self.logger.warning(
                "⚠️  No CHANGELOG generator defined - skipping CHANGELOG entries generation."
            )
            return None

        patch = self.diff_source.extract_diff(self.diff_tag, self.diff_context)
        if not patch.strip():
            self.logger.warning("⚠️  Empty patch, no CHANGELOG to generate.")
            return None

        self.logger.log(f"🧠  {self.generator!r} - generating CHANGELOG entries...")
        return self.generator.generate(patch)
