"""Locate the DISM broker helper shipped next to the executable."""

import logging
import sys
from pathlib import Path

from .exceptions import CompanionNotFoundError

logger = logging.getLogger(__name__)

HELPER_DIRECTORY: str = "UUPMediaConverterDismBroker"
HELPER_EXECUTABLE: str = "UUPMediaConverterDismBroker.exe"


def executable_path() -> Path:
    """Return the absolute path of the running program.

    Frozen builds report the bundled binary; otherwise the launched script
    (the console-script shim or ``__main__.py``) is used.
    """
    if getattr(sys, "frozen", False) or not sys.argv or not sys.argv[0]:
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


def executable_directory(executable: Path | None = None) -> Path:
    if executable is None:
        executable = executable_path()
    return executable.parent


def parent_executable_directory(executable: Path | None = None) -> Path:
    return executable_directory(executable).parent


def companion_candidates(executable: Path | None = None) -> list[Path]:
    """Return the helper locations to probe, in priority order.

    The helper may be installed one level up in its own folder, in its own
    folder beside the executable, or directly beside it.
    """
    own_dir = executable_directory(executable)
    parent_dir = own_dir.parent
    return [
        parent_dir / HELPER_DIRECTORY / HELPER_EXECUTABLE,
        own_dir / HELPER_DIRECTORY / HELPER_EXECUTABLE,
        own_dir / HELPER_EXECUTABLE,
    ]


def find_companion(executable: Path | None = None) -> Path:
    """Return the first existing helper candidate.

    Raises :class:`CompanionNotFoundError` carrying the last attempted path
    when none of the candidates exists.
    """
    candidates = companion_candidates(executable)
    for candidate in candidates:
        logger.debug(f"Looking for DISM broker at {candidate}")
        if candidate.is_file():
            logger.debug(f"Found DISM broker at {candidate}")
            return candidate

    raise CompanionNotFoundError(candidates[-1])
