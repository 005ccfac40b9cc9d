"""pubspec-bump - Semantic version bumping with generated CHANGELOG entries."""

from importlib.metadata import version

try:
    __version__ = version("pubspec-bump")
except Exception:
    __version__ = "0.0.0-dev"
