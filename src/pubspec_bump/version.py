"""Semantic version parsing and bumping utilities."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from pubspec_bump.logger import Logger, get_default_logger

# Version line of the manifest, e.g. "version: 1.2.3" or "version: 1.2.3-dev.1+4"
MANIFEST_VERSION_PATTERN = re.compile(
    r"^version:\s*(\d+)\.(\d+)\.(\d+)(\S*)", re.MULTILINE
)

DEFAULT_MANIFEST = "pubspec.yaml"


class VersionError(Exception):
    """Raised when version operations fail."""

    pass


@dataclass(frozen=True)
class SemanticVersion:
    """A major.minor.patch version with an opaque suffix."""

    major: int
    minor: int
    patch: int
    suffix: str = ""

    def __post_init__(self):
        if min(self.major, self.minor, self.patch) < 0:
            raise VersionError(f"Version components must be non-negative: {self}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self.suffix}"


@dataclass(frozen=True)
class VersionChange:
    """Outcome of a manifest bump.

    ``new`` is None when the bump was skipped.
    """

    old: SemanticVersion
    new: SemanticVersion | None

    @property
    def current(self) -> SemanticVersion:
        return self.new if self.new is not None else self.old


class BumpKind(str, Enum):
    """Which version component a bump increments."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @classmethod
    def resolve(
        cls,
        major: bool | None = None,
        minor: bool | None = None,
        patch: bool | None = None,
    ) -> "BumpKind":
        """Pick a bump kind from selection flags.

        Major wins over minor, which wins over patch. No flag means patch.
        """
        if major:
            return cls.MAJOR
        if minor:
            return cls.MINOR
        if patch:
            return cls.PATCH
        return cls.PATCH

    def apply(self, version: SemanticVersion) -> SemanticVersion:
        """Return ``version`` bumped by this kind, keeping its suffix."""
        if self is BumpKind.MAJOR:
            return replace(version, major=version.major + 1, minor=0, patch=0)
        elif self is BumpKind.MINOR:
            return replace(version, minor=version.minor + 1, patch=0)
        return replace(version, patch=version.patch + 1)


def parse_version(version_str: str) -> SemanticVersion:
    """Parse a version string such as '1.2.3' or '1.2.3-beta'.

    Args:
        version_str: Version string

    Returns:
        Parsed SemanticVersion

    Raises:
        VersionError: If version string is invalid
    """
    match = re.fullmatch(r"(\d+)\.(\d+)\.(\d+)(\S*)", version_str.strip())
    if not match:
        raise VersionError(f"Invalid version string '{version_str}'")

    major, minor, patch, suffix = match.groups()
    return SemanticVersion(int(major), int(minor), int(patch), suffix)


def find_manifest_version(content: str) -> re.Match[str] | None:
    """Locate the authoritative version line of a manifest."""
    return MANIFEST_VERSION_PATTERN.search(content)


def read_manifest_version(manifest_path: Path) -> SemanticVersion:
    """Read the current version from a manifest file.

    Raises:
        VersionError: If the manifest is missing or has no version line
    """
    if not manifest_path.is_file():
        raise VersionError(f"Failed to read manifest: {manifest_path} not found")

    with open(manifest_path, "r", newline="") as f:
        content = f.read()

    match = find_manifest_version(content)
    if match is None:
        raise VersionError(f"No valid version line found in {manifest_path}")

    major, minor, patch, suffix = match.groups()
    return SemanticVersion(int(major), int(minor), int(patch), suffix)


def bump_manifest(
    manifest_path: Path,
    kind: BumpKind,
    *,
    no_bump: bool = False,
    dry_run: bool = False,
    logger: Logger | None = None,
) -> VersionChange:
    """Increment the version line of a manifest.

    Only the first version line is rewritten; the rest of the file is kept
    byte for byte.

    Args:
        manifest_path: Path to the manifest (e.g. pubspec.yaml)
        kind: Which version component to bump
        no_bump: Report the current version without touching the file
        dry_run: Compute the new version but don't write it
        logger: Destination for progress messages

    Returns:
        VersionChange with the old and new versions

    Raises:
        VersionError: If the manifest is missing or unparseable
    """
    logger = logger or get_default_logger()
    name = manifest_path.name

    old_version = read_manifest_version(manifest_path)

    if no_bump:
        logger.log(
            f"⏭️  [SKIP] Version bump skipped for `{old_version}` in `{name}`. (--no-bump)"
        )
        return VersionChange(old_version, None)

    new_version = kind.apply(old_version)
    logger.log(f"🔢  Version bump({kind.value}): `{old_version}` -> `{new_version}`")

    if dry_run:
        logger.log(f"🔢  [SKIP] {name}: {old_version} → {new_version}")
        return VersionChange(old_version, new_version)

    with open(manifest_path, "r", newline="") as f:
        content = f.read()

    match = find_manifest_version(content)
    if match is None:
        raise VersionError(f"No valid version line found in {manifest_path}")

    updated = f"{content[: match.start()]}version: {new_version}{content[match.end():]}"
    with open(manifest_path, "w", newline="") as f:
        f.write(updated)

    logger.log(f"🔢  {name}: {old_version} → {new_version}")
    return VersionChange(old_version, new_version)
