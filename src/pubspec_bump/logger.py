"""Console output for pubspec-bump."""

from abc import ABC, abstractmethod

import click


class Logger(ABC):
    """Destination for progress and warning messages."""

    @abstractmethod
    def log(self, message: str) -> None:
        """Record an informational message."""
        pass

    def warning(self, message: str) -> None:
        """Record a recoverable problem.

        Defaults to :meth:`log`; override to route warnings elsewhere.
        """
        self.log(message)


class ConsoleLogger(Logger):
    """Logger writing to the terminal through click."""

    def log(self, message: str) -> None:
        click.echo(message)


class RecordingLogger(Logger):
    """Logger keeping every message in memory.

    Useful when embedding the bumper or asserting on its output.
    """

    def __init__(self):
        self.messages: list[str] = []

    def log(self, message: str) -> None:
        self.messages.append(message)

    def contains(self, fragment: str) -> bool:
        """Check whether any recorded message contains a fragment."""
        return any(fragment in message for message in self.messages)


def get_default_logger() -> Logger:
    """Return the logger used when none is injected."""
    return ConsoleLogger()
