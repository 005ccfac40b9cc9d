"""Configuration loading and parsing for pubspec-bump."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pubspec_bump.bumper import MAX_PATTERN_GROUPS
from pubspec_bump.changelog import DEFAULT_CHANGELOG
from pubspec_bump.version import DEFAULT_MANIFEST, BumpKind

DEFAULT_CONFIG_FILENAME = "pubspec-bump.yaml"

# Bounds for the number of diff context lines
MIN_DIFF_CONTEXT = 2
MAX_DIFF_CONTEXT = 100
DEFAULT_DIFF_CONTEXT = 10


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


def clamp_diff_context(lines: int) -> int:
    """Clamp the diff context line count to the supported range."""
    return max(MIN_DIFF_CONTEXT, min(MAX_DIFF_CONTEXT, lines))


def compile_version_pattern(pattern: str, file_path: str = "") -> re.Pattern[str]:
    """Compile an extra file version pattern.

    Args:
        pattern: Regular expression with at most three capture groups
        file_path: File the pattern belongs to (for error messages)

    Returns:
        Compiled pattern

    Raises:
        ConfigError: If the pattern is invalid or has too many groups
    """
    where = f" for '{file_path}'" if file_path else ""
    if not pattern:
        raise ConfigError(f"Empty version pattern{where}")

    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"Invalid version pattern{where}: {e}")

    if compiled.groups > MAX_PATTERN_GROUPS:
        raise ConfigError(
            f"Version pattern{where} has {compiled.groups} capture groups, "
            f"at most {MAX_PATTERN_GROUPS} are supported"
        )

    return compiled


def parse_extra_file_option(option: str) -> tuple[str, re.Pattern[str]]:
    """Parse a ``file=pattern`` option.

    The value is split on the first '=', so patterns may contain '='.

    Raises:
        ConfigError: If the option is malformed
    """
    file_path, sep, pattern = option.partition("=")
    file_path = file_path.strip()
    if not sep or not file_path:
        raise ConfigError(f"Invalid extra file '{option}', expected 'file=pattern'")

    return file_path, compile_version_pattern(pattern, file_path)


def compile_extra_files(extra_files: dict[str, str]) -> dict[str, re.Pattern[str]]:
    """Compile a mapping of file path to pattern string, keeping its order."""
    return {
        file_path: compile_version_pattern(pattern, file_path)
        for file_path, pattern in extra_files.items()
    }


@dataclass(frozen=True)
class BumpConfig:
    """Options controlling a single bump."""

    bump_kind: BumpKind = BumpKind.PATCH
    no_bump: bool = False
    no_changelog: bool = False
    no_extra: bool = False
    dry_run: bool = False
    diff_tag: str | None = None
    diff_context: int = DEFAULT_DIFF_CONTEXT
    extra_files: dict[str, re.Pattern[str]] = field(default_factory=dict)
    manifest_path: str = DEFAULT_MANIFEST
    changelog_path: str = DEFAULT_CHANGELOG

    def __post_init__(self):
        # Frozen dataclass: bypass __setattr__ to store the clamped value
        object.__setattr__(self, "diff_context", clamp_diff_context(self.diff_context))


class ProjectConfig:
    """Project configuration loaded from a YAML file.

    A missing default file yields an empty configuration.
    """

    def __init__(self, data: dict[str, Any] | None = None, config_path: Path | None = None):
        self.config_path = config_path
        self._config: dict[str, Any] = data or {}
        self._validate_config()

    @classmethod
    def from_file(cls, config_path: str | Path) -> "ProjectConfig":
        """Load configuration from a YAML file.

        Raises:
            ConfigError: If the file doesn't exist or is invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parsing error in {config_path}: {e}")

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping: {config_path}")

        return cls(data, config_path)

    def _validate_config(self) -> None:
        """Validate the types of the configured values."""
        if "bump-type" in self._config:
            try:
                BumpKind(self._config["bump-type"])
            except ValueError:
                raise ConfigError("'bump-type' must be one of: major, minor, patch")

        if "diff-context" in self._config:
            if not isinstance(self._config["diff-context"], int):
                raise ConfigError("'diff-context' must be an integer")

        for key in ("diff-tag", "manifest-path", "changelog-path"):
            if key in self._config and not isinstance(self._config[key], str):
                raise ConfigError(f"'{key}' must be a string")

        extra_files = self._config.get("extra-files") or {}
        if not isinstance(extra_files, dict):
            raise ConfigError("'extra-files' must be a mapping of file path to pattern")
        for file_path, pattern in extra_files.items():
            if not isinstance(file_path, str):
                raise ConfigError(f"Extra file path '{file_path}' must be a string")
            if not isinstance(pattern, str):
                raise ConfigError(f"Pattern for extra file '{file_path}' must be a string")

        if "openai" in self._config and not isinstance(self._config["openai"], dict):
            raise ConfigError("'openai' must be a mapping")

    @property
    def raw(self) -> dict[str, Any]:
        return self._config

    def get_bump_kind(self) -> BumpKind | None:
        """Get the default bump kind, or None if not configured."""
        if "bump-type" not in self._config:
            return None
        return BumpKind(self._config["bump-type"])

    def get_diff_tag(self) -> str | None:
        return self._config.get("diff-tag")

    def get_diff_context(self) -> int:
        return self._config.get("diff-context", DEFAULT_DIFF_CONTEXT)

    def get_manifest_path(self) -> str:
        """Get the manifest path, 'pubspec.yaml' by default."""
        return self._config.get("manifest-path", DEFAULT_MANIFEST)

    def get_changelog_path(self) -> str:
        """Get the changelog file path, 'CHANGELOG.md' by default."""
        return self._config.get("changelog-path", DEFAULT_CHANGELOG)

    def get_extra_files(self) -> dict[str, re.Pattern[str]]:
        """Get the compiled extra file patterns in file order.

        Raises:
            ConfigError: If a pattern is invalid
        """
        return compile_extra_files(self._config.get("extra-files") or {})

    def get_openai_model(self) -> str | None:
        openai_config = self._config.get("openai") or {}
        return openai_config.get("model")


def load_config(project_dir: Path, config_path: str | Path | None = None) -> ProjectConfig:
    """Load the project configuration.

    Args:
        project_dir: Project root, searched for the default config file
        config_path: Explicit configuration file, which must exist

    Returns:
        Loaded configuration (empty if no default file exists)

    Raises:
        ConfigError: If the config file is invalid or an explicit file is missing
    """
    if config_path is not None:
        return ProjectConfig.from_file(config_path)

    default_path = project_dir / DEFAULT_CONFIG_FILENAME
    if default_path.exists():
        return ProjectConfig.from_file(default_path)

    return ProjectConfig()


def generate_config_template() -> str:
    """Generate a configuration file template with all parameters documented.

    Returns:
        YAML configuration template as a string with inline documentation
    """
    template = """# pubspec-bump configuration
#
# Place this file as pubspec-bump.yaml in the project root, or pass it with
# --config. Command line options take precedence over these values.

# Version component to bump when no --major/--minor/--patch flag is given
# Type: one of major, minor, patch
# Default: patch
bump-type: patch

# Baseline git ref for the CHANGELOG diff
# Type: string ("last" or "latest" resolve to the highest version tag)
# Default: none (diff the uncommitted working tree)
# diff-tag: last

# Lines of context requested from git diff (clamped to 2..100)
# Type: integer
# Default: 10
diff-context: 10

# Manifest carrying the authoritative "version: X.Y.Z" line
# Type: string
# Default: "pubspec.yaml"
manifest-path: "pubspec.yaml"

# Changelog file, new entries are prepended
# Type: string
# Default: "CHANGELOG.md"
changelog-path: "CHANGELOG.md"

# Extra files receiving the new version
# Type: mapping of relative file path to regular expression
# Default: {} (no extra files)
#
# Only the first match in each file is rewritten. The number of capture
# groups decides what is replaced:
#   0 groups: the whole match
#   1 group:  only the captured version
#   2 groups: result is group1 + version + group2
#   3 groups: result is group1 + version + group3 (group2 is the old version)
extra-files: {}
  # lib/src/version.dart: "const version = '([^']+)'"
  # package.json: '("version":\\s*")\\d+\\.\\d+\\.\\d+(")'

# OpenAI settings for CHANGELOG generation
# The API key is read from --api-key or OPENAI_API_KEY first.
openai:
  model: "gpt-4.1-mini"
  # api-key: "sk-xxx"
"""
    return template
