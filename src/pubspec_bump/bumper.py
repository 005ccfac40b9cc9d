"""Extra file version bumping for pubspec-bump."""

import os
import re
from dataclasses import dataclass
from pathlib import Path

from pubspec_bump.logger import Logger, get_default_logger

# Patterns may declare at most this many capture groups
MAX_PATTERN_GROUPS = 3


@dataclass(frozen=True)
class VersionReplacement:
    """A single rewrite performed by :func:`replace_version`."""

    text: str
    matched: str
    replacement: str
    old_version: str | None


def _build_replacement(match: re.Match[str], version: str) -> tuple[str, str | None]:
    """Compute the replacement for one match based on its group count.

    Returns:
        Tuple of (replacement text, replaced old version or None)
    """
    groups = match.re.groups
    matched = match.group(0)

    if groups == 0:
        return version, None

    if groups == 1:
        old_version = match.group(1)
        if old_version is None:
            return version, None
        # Position of the group relative to the whole match
        start = match.start(1) - match.start(0)
        end = start + len(old_version)
        return f"{matched[:start]}{version}{matched[end:]}", old_version

    before = match.group(1) or ""
    if groups == 2:
        after = match.group(2) or ""
        return f"{before}{version}{after}", None

    after = match.group(3) or ""
    return f"{before}{version}{after}", match.group(2)


def replace_version(
    text: str, pattern: re.Pattern[str], version: str
) -> VersionReplacement | None:
    """Replace the first version occurrence matched by ``pattern``.

    The replacement depends on the number of capture groups in ``pattern``:

    - 0 groups: the whole match becomes ``version``
    - 1 group: only the captured text is replaced, the rest of the match is kept
    - 2 groups: ``group1 + version + group2``
    - 3 groups: ``group1 + version + group3`` (group 2 is the old version)

    Args:
        text: Text to search
        pattern: Compiled version pattern
        version: Version string to write

    Returns:
        VersionReplacement, or None if nothing matched or the text already
        carries ``version``
    """
    match = pattern.search(text)
    if match is None:
        return None

    replacement, old_version = _build_replacement(match, version)
    updated = f"{text[: match.start()]}{replacement}{text[match.end():]}"

    if updated == text:
        return None

    return VersionReplacement(
        text=updated,
        matched=match.group(0),
        replacement=replacement,
        old_version=old_version,
    )


def update_file_version(
    project_dir: Path,
    relative_path: str,
    pattern: re.Pattern[str],
    version: str,
    *,
    dry_run: bool = False,
    logger: Logger | None = None,
) -> Path | None:
    """Update the version in one file relative to ``project_dir``.

    Args:
        project_dir: Project root directory
        relative_path: File path relative to the project root
        pattern: Compiled version pattern (see :func:`replace_version`)
        version: Version string to write
        dry_run: If True, don't write changes
        logger: Destination for progress messages

    Returns:
        Path of the file if it changed (or would change in dry-run), else None
    """
    logger = logger or get_default_logger()
    file_path = Path(os.path.normpath(project_dir / relative_path))

    if not file_path.is_file():
        logger.warning(f"⚠️  File not found, skipping update: {file_path}")
        return None

    with open(file_path, "r", newline="") as f:
        content = f.read()

    result = replace_version(content, pattern, version)
    if result is None:
        return None

    name = file_path.name
    if result.old_version is not None:
        logger.log(
            f"📄  {name}:\n   🔄  Replacing version `{result.old_version}` with `{version}`:\n"
            f"   ✨ `{result.matched}` → `{result.replacement}`"
        )
    else:
        logger.log(
            f"📄  {name}:\n   🔄  Replacing with version `{version}`:\n"
            f"   ✨ `{result.matched}` → `{result.replacement}`"
        )

    if dry_run:
        logger.log(f"   🔧  [SKIP] Updated file version: {name}")
    else:
        with open(file_path, "w", newline="") as f:
            f.write(result.text)
        logger.log(f"   🔧  Updated file version: {name}")

    return file_path


def bump_files(
    extra_files: dict[str, re.Pattern[str]],
    version: str,
    project_dir: Path,
    *,
    dry_run: bool = False,
    logger: Logger | None = None,
) -> list[Path]:
    """Bump version in every configured extra file.

    Files that are missing, don't match, or already carry ``version`` are
    skipped and left out of the result.

    Args:
        extra_files: Mapping of relative file path to version pattern
        version: Version string to write
        project_dir: Project root directory
        dry_run: If True, don't write changes
        logger: Destination for progress messages

    Returns:
        Paths of the files that changed, in configuration order
    """
    updated: list[Path] = []

    for relative_path, pattern in extra_files.items():
        file_path = update_file_version(
            project_dir,
            relative_path,
            pattern,
            version,
            dry_run=dry_run,
            logger=logger,
        )
        if file_path is not None:
            updated.append(file_path)

    return updated
