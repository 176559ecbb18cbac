"""Host operating system and privilege detection."""

import ctypes
import logging
import sys
from dataclasses import dataclass
from enum import Enum

from .exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)


class OSFamily(Enum):
    WINDOWS = "Windows"
    LINUX = "Linux"
    MACOS = "macOS"
    FREEBSD = "FreeBSD"


# Tested in order; the first prefix matching the platform identifier wins.
_PLATFORM_PREFIXES: tuple[tuple[str, OSFamily], ...] = (
    ("darwin", OSFamily.MACOS),
    ("linux", OSFamily.LINUX),
    ("win32", OSFamily.WINDOWS),
    ("freebsd", OSFamily.FREEBSD),
)


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    family: OSFamily
    is_elevated: bool


def detect_os_family(platform_id: str | None = None) -> OSFamily:
    """Map a ``sys.platform`` style identifier to an :class:`OSFamily`.

    Raises :class:`UnsupportedPlatformError` when no known family matches.
    """
    if platform_id is None:
        platform_id = sys.platform

    for prefix, family in _PLATFORM_PREFIXES:
        if platform_id.startswith(prefix):
            return family

    raise UnsupportedPlatformError(
        f"Cannot determine operating system! (platform: {platform_id!r})"
    )


def _windows_is_admin() -> bool:
    """Return whether the current process token is in the Administrators group."""
    try:
        return ctypes.windll.shell32.IsUserAnAdmin() != 0  # type: ignore[attr-defined]
    except (AttributeError, OSError):
        logger.debug("IsUserAnAdmin query failed", exc_info=True)
        return False


def is_elevated(family: OSFamily) -> bool:
    """Return whether the process runs with administrative rights.

    Only Windows has an elevation concept here; other families always
    report ``False``.
    """
    if family is not OSFamily.WINDOWS:
        return False
    return _windows_is_admin()


def detect_platform(platform_id: str | None = None) -> PlatformInfo:
    family = detect_os_family(platform_id)
    elevated = is_elevated(family)
    logger.debug(f"Detected platform {family.value} (elevated: {elevated})")
    return PlatformInfo(family=family, is_elevated=elevated)
