"""CHANGELOG entry formatting for pubspec-bump."""

import re
from pathlib import Path

DEFAULT_CHANGELOG = "CHANGELOG.md"

# Placeholder body used when no entry could be generated
PLACEHOLDER_BODY = "- ?"

# Leading version header of a generated entry, e.g. "## 1.2.3" or "## 1.2.3-dev"
VERSION_HEADER_PATTERN = re.compile(r"^##\s+\d+\.\d+\.\d+\S*")


def format_changelog_entry(version: str, entry: str | None) -> str:
    """Normalise a CHANGELOG entry for a release.

    - Empty entries become a placeholder section
    - A leading version header is rewritten to ``version``
    - A missing version header is prepended

    Args:
        version: Version the entry belongs to
        entry: Raw entry text (e.g. generated from a diff) or None

    Returns:
        Markdown section ending with a blank line
    """
    if entry is None or not entry.strip():
        return f"## {version}\n\n{PLACEHOLDER_BODY}\n\n"

    text = entry.strip()

    if VERSION_HEADER_PATTERN.match(text):
        text = VERSION_HEADER_PATTERN.sub(lambda _: f"## {version}", text, count=1)
        return f"{text}\n\n"

    return f"## {version}\n\n{text}\n\n"


def prepend_to_changelog(changelog_path: Path, section: str) -> bool:
    """Prepend a section to the changelog file.

    Newest entries come first. The file is created when missing.

    Args:
        changelog_path: Path to changelog file
        section: Formatted section (see :func:`format_changelog_entry`)

    Returns:
        True if the file was created, False if it was updated
    """
    if changelog_path.exists():
        with open(changelog_path, "r", newline="") as f:
            existing_content = f.read()
        created = False
    else:
        existing_content = ""
        created = True

    with open(changelog_path, "w", newline="") as f:
        f.write(section + existing_content)

    return created
