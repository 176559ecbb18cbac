import traceback
from dataclasses import dataclass
from pathlib import Path


class Uup2IsoError(Exception):
    """Base class for errors raised by uup2iso itself."""


class UnsupportedPlatformError(Uup2IsoError):
    """Raised when the host operating system family cannot be determined."""


class CompanionNotFoundError(Uup2IsoError):
    """Raised when the DISM broker helper is required but not on disk."""

    path: Path

    def __init__(self, path: Path) -> None:
        super().__init__(f"Could not find: {path}")
        self.path = path


class MediaCreatorError(Uup2IsoError):
    """Raised when no usable media creation backend can be loaded."""


@dataclass(frozen=True, slots=True)
class ErrorCause:
    """One link of a flattened exception chain."""

    type_name: str
    message: str
    stack: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorCause":
        return cls(
            type_name=type(exc).__name__,
            message=str(exc),
            stack="".join(traceback.format_tb(exc.__traceback__)).rstrip(),
        )

    def describe(self) -> str:
        """Return ``Type: message``, or just the type name when the message is empty."""
        if not self.message:
            return self.type_name
        return f"{self.type_name}: {self.message}"


def _next_cause(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def flatten_exception_chain(exc: BaseException) -> list[ErrorCause]:
    """Walk *exc* and its nested causes, outermost first.

    Explicit causes (``raise ... from ...``) take precedence over the implicit
    context. The walk stops at the end of the chain or when a cause repeats.
    """
    causes: list[ErrorCause] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        causes.append(ErrorCause.from_exception(current))
        current = _next_cause(current)
    return causes
