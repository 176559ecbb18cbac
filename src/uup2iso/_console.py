"""Console output: the leveled user-facing logger and the diagnostics console."""

import threading
from datetime import datetime
from enum import Enum

from rich.console import Console
from rich.text import Text

# Diagnostics (stdlib logging via RichHandler) go to stderr so they never mix
# with the timestamped run log on stdout.
diagnostics_console = Console(stderr=True)


class LogLevel(Enum):
    INFORMATION = "Information"
    WARNING = "Warning"
    ERROR = "Error"


# (label, style) per level; labels are padded to the same width.
_LEVEL_FORMAT: dict[LogLevel, tuple[str, str]] = {
    LogLevel.INFORMATION: ("Information", "white"),
    LogLevel.WARNING: ("  Warning  ", "yellow"),
    LogLevel.ERROR: ("   Error   ", "red"),
}


class ConsoleLogger:
    """Timestamped, leveled run log written to a rich console.

    Every write happens inside :attr:`lock`, so messages logged from the
    media backend's worker threads never interleave with the main flow.
    The lock is re-entrant and shared with callers that need to update their
    own state and log as one step.
    """

    _console: Console
    _lock: threading.RLock

    def __init__(self, console: Console | None = None) -> None:
        self._console = console if console is not None else Console(highlight=False)
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def log(
        self,
        message: str,
        level: LogLevel = LogLevel.INFORMATION,
        inline: bool = False,
    ) -> None:
        """Write *message* as one line, or overwrite the current line if *inline*."""
        with self._lock:
            if not message:
                self._console.print()
                return

            label, style = _LEVEL_FORMAT[level]
            stamp = datetime.now().strftime("[%H:%M:%S]")
            text = Text(f"{stamp}[{label}] {message}", style=style)

            if inline:
                # rich strips control codes from Text, so the carriage return
                # goes straight to the underlying file.
                self._console.file.write("\r")
                self._console.print(text, end="", soft_wrap=True, highlight=False)
            else:
                self._console.print(text, soft_wrap=True, highlight=False)

    def warning(self, message: str) -> None:
        self.log(message, LogLevel.WARNING)

    def error(self, message: str) -> None:
        self.log(message, LogLevel.ERROR)
