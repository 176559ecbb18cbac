"""Contract of the external media creation backend and its discovery."""

import importlib
import logging
from collections.abc import Callable
from enum import Enum
from importlib.metadata import EntryPoint, entry_points
from typing import Protocol, TypeAlias

from .exceptions import MediaCreatorError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP: str = "uup2iso.media_creators"


class ProcessPhase(Enum):
    READING_METADATA = "ReadingMetadata"
    PREPARING_FILES = "PreparingFiles"
    CREATING_WINDOWS_INSTALLER = "CreatingWindowsInstaller"
    INTEGRATING_WINRE = "IntegratingWinRE"
    APPLYING_IMAGE = "ApplyingImage"
    CAPTURING_IMAGE = "CapturingImage"
    CREATING_ISO = "CreatingISO"
    ERROR = "Error"

    @classmethod
    def coerce(cls, phase: "ProcessPhase | str") -> "ProcessPhase":
        """Accept a member, its display value (``"CreatingISO"``) or its name."""
        if isinstance(phase, cls):
            return phase
        try:
            return cls(phase)
        except ValueError:
            pass
        try:
            return cls[str(phase).upper()]
        except KeyError:
            raise ValueError(f"Unknown process phase: {phase!r}") from None


class CompressionType(Enum):
    XPRESS = "XPRESS"
    LZX = "LZX"
    LZMS = "LZMS"


# (phase, is_indeterminate, percentage, sub_operation); may be called from any thread.
ProgressCallback: TypeAlias = Callable[[ProcessPhase | str, bool, int, str], None]


class MediaCreator(Protocol):
    def __call__(
        self,
        destination: str,
        source: str,
        edition: str | None,
        language_code: str,
        integrate_updates: bool,
        compression: CompressionType,
        progress: ProgressCallback,
    ) -> None: ...


def _installed_media_creators() -> list[EntryPoint]:
    return sorted(entry_points(group=ENTRY_POINT_GROUP), key=lambda ep: ep.name)


def _import_reference(reference: str) -> object:
    module_name, _, attribute = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise MediaCreatorError(
            f"Could not import media creator module {module_name!r}"
        ) from exc

    target: object = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise MediaCreatorError(
                f"Module {module_name!r} has no attribute {attribute!r}"
            ) from exc
    return target


def _load_entry_point(name: str | None) -> object:
    installed = _installed_media_creators()
    if not installed:
        raise MediaCreatorError(
            "No media creation backend is installed. Install a package providing "
            f"the {ENTRY_POINT_GROUP!r} entry point or pass --media-creator MODULE:ATTR"
        )

    if name is None:
        selected = installed[0]
    else:
        matches = [ep for ep in installed if ep.name == name]
        if not matches:
            available = ", ".join(ep.name for ep in installed)
            raise MediaCreatorError(
                f"Unknown media creator {name!r}. Available: {available}"
            )
        selected = matches[0]

    logger.debug(f"Loading media creator entry point {selected.name} ({selected.value})")
    try:
        return selected.load()
    except ImportError as exc:
        raise MediaCreatorError(
            f"Could not load media creator {selected.name!r}"
        ) from exc


def load_media_creator(reference: str | None = None) -> MediaCreator:
    """Resolve the backend used to build the ISO.

    *reference* is either ``package.module:attribute``, the name of an
    installed ``uup2iso.media_creators`` entry point, or ``None`` for the
    first installed entry point by name.
    """
    if reference and ":" in reference:
        logger.debug(f"Importing media creator {reference}")
        target = _import_reference(reference)
    else:
        target = _load_entry_point(reference or None)

    if not callable(target):
        raise MediaCreatorError(f"Media creator {reference!r} is not callable")
    return target  # type: ignore[return-value]
