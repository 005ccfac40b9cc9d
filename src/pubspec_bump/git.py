"""Git operations for pubspec-bump."""

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from pubspec_bump.logger import Logger, get_default_logger

# Diff references resolved to the highest existing tag
LATEST_TAG_ALIASES = ("last", "latest")


class GitError(Exception):
    """Raised when git operations fail."""

    pass


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a version control command."""

    returncode: int
    stdout: str
    stderr: str = ""


class VersionControlRunner(ABC):
    """Executes version control commands and detects repositories."""

    @abstractmethod
    def run(self, args: list[str], cwd: Path) -> CommandResult:
        """Run a version control command.

        Args:
            args: Command arguments (e.g., ['diff', '-U10'])
            cwd: Working directory

        Returns:
            CommandResult; a non-zero return code is not an exception
        """
        pass

    @abstractmethod
    def has_versioning(self, project_dir: Path) -> bool:
        """Check whether ``project_dir`` is under version control."""
        pass


class GitRunner(VersionControlRunner):
    """Runs the ``git`` executable."""

    def run(self, args: list[str], cwd: Path) -> CommandResult:
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=str(cwd),
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError:
            raise GitError("Git not found. Please ensure git is installed.")

        return CommandResult(result.returncode, result.stdout, result.stderr)

    def has_versioning(self, project_dir: Path) -> bool:
        """Check for a ``.git`` directory, or a ``.git`` file of a linked worktree."""
        git_path = project_dir / ".git"
        if git_path.is_dir():
            return True

        if not git_path.is_file():
            return False

        with open(git_path, "r") as f:
            return f.read().startswith("gitdir:")


class DiffSource:
    """Retrieves pending changes and tags of a project."""

    def __init__(
        self,
        project_dir: Path,
        runner: VersionControlRunner | None = None,
        logger: Logger | None = None,
    ):
        self.project_dir = project_dir
        self.runner = runner or GitRunner()
        self.logger = logger or get_default_logger()

    def _run(self, args: list[str]) -> CommandResult:
        self.logger.log(f"💻  Running> git {' '.join(args)}")
        return self.runner.run(args, self.project_dir)

    def list_tags(self) -> list[str]:
        """Get all tags, highest version first.

        Returns:
            Tag names in descending version order, or an empty list if there
            are no tags or the command fails
        """
        result = self._run(["tag", "--sort=-v:refname"])
        if result.returncode != 0:
            self.logger.warning(f"⚠️  Can't list Git tags: {result.stderr.strip()}")
            return []

        tags = [line.strip() for line in result.stdout.split("\n") if line.strip()]

        if len(tags) > 5:
            shown = f"[{', '.join(tags[:5])}]...#{len(tags)}"
        else:
            shown = f"[{', '.join(tags)}]"
        self.logger.log(f"🏷️  Git tags: {shown}")

        return tags

    def resolve_latest_tag(self) -> str | None:
        """Get the highest version tag, or None if there are no tags."""
        tags = self.list_tags()
        if not tags:
            return None

        self.logger.log(f"🏷️  Highest Git tag: {tags[0]}")
        return tags[0]

    def extract_diff(self, reference: str | None = None, context_lines: int = 10) -> str:
        """Extract the pending changes as a unified diff.

        Args:
            reference: Baseline ref; 'last'/'latest' resolve to the highest
                tag. None diffs the uncommitted working tree.
            context_lines: Lines of context around each change

        Returns:
            Raw diff text (may be empty)

        Raises:
            GitError: If the diff command fails
        """
        reference = reference.strip() if reference else None

        if reference and reference.lower() in LATEST_TAG_ALIASES:
            latest_tag = self.resolve_latest_tag()
            if latest_tag:
                self.logger.log(f"🏷️  Last Git tag: {latest_tag}")
                reference = latest_tag
            else:
                self.logger.warning(
                    f"⚠️  Can't resolve last Git tag. Using tag <{reference}> as reference"
                )

        args = ["diff"]
        if reference:
            args += [reference, "HEAD"]
        args.append(f"-U{context_lines}")

        result = self._run(args)
        if result.returncode != 0:
            raise GitError(f"Git command failed: {result.stderr.strip()}")

        patch = result.stdout
        size = len(patch.encode())
        if reference:
            self.logger.log(
                f"🧩  Git patch extracted from tag <{reference}> ({size} bytes)"
            )
        else:
            self.logger.log(f"🧩  Git patch extracted ({size} bytes)")

        return patch
