import logging
import os
import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from rich.logging import RichHandler

from . import APP_NAME, __version__
from ._console import ConsoleLogger, LogLevel, diagnostics_console
from .companion import find_companion
from .exceptions import CompanionNotFoundError, flatten_exception_chain
from .media import CompressionType, MediaCreator, load_media_creator
from .platform_probe import OSFamily, detect_platform
from .progress import ProgressCoalescer

logger = logging.getLogger(__name__)

BANNER: tuple[str, ...] = (
    f"{APP_NAME} {__version__} - Converts an UUP file set to an usable ISO file",
    f"Copyright (c) {APP_NAME} contributors",
    "",
    "This program comes with ABSOLUTELY NO WARRANTY.",
    "This is free software, and you are welcome to redistribute it under certain conditions.",
    "",
    f"{APP_NAME} is licensed under the MIT license.",
    "This software uses rich (MIT license) for console output.",
    "",
)

USAGE: str = (
    f"Usage: {APP_NAME} <UUP File set path> <Destination ISO file> <Language Code> [Edition]"
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


@dataclass(frozen=True, slots=True)
class InvocationArguments:
    source_path: Path
    destination: str
    language_code: str
    edition: str | None


class ParserExit(Exception):
    """Raised by :class:`MyArgParser` instead of exiting the interpreter."""

    status: int

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


class MyArgParser(ArgumentParser):
    """Argument parser that prints help on error and reports exits to the caller."""

    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        """Print *message* to stderr and raise :class:`ParserExit` with *status*."""
        if message:
            _ = sys.stderr.write(message)
        raise ParserExit(status)

    def error(self, message: str) -> NoReturn:
        """Print the error message followed by full help, then exit."""
        _ = sys.stderr.write(f"{self.prog}: {message}\n\n")
        self.print_help(sys.stderr)
        self.exit(EXIT_USAGE)


def _parse_bool_env(value: str | None, *, env_var: str) -> bool | None:
    """Parse an environment variable string into a boolean, or ``None`` if unset."""
    if value is None:
        return None

    normalized = value.strip().lower()
    true_values = {"1", "true", "yes", "y", "on"}
    false_values = {"0", "false", "no", "n", "off"}

    if normalized in true_values:
        return True
    if normalized in false_values:
        return False

    raise ValueError(
        f"Invalid boolean value for {env_var}: {value!r}. "
        "Use one of 1/0, true/false, yes/no, on/off."
    )


def _argparser() -> MyArgParser:
    """Build the CLI parser; positionals are optional so short calls print usage."""
    parser = MyArgParser(
        prog=APP_NAME, description="Converts an UUP file set to an usable ISO file"
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "positionals",
        metavar="ARG",
        nargs="*",
        help="<UUP File set path> <Destination ISO file> <Language Code> [Edition]; "
        "without an edition all available editions are built",
    )
    parser.add_argument(
        "--media-creator",
        dest="media_creator",
        metavar="REF",
        help="Media creation backend: entry point name or MODULE:ATTR (env: UUP2ISO_MEDIA_CREATOR)",
        default=None,
    )
    parser.add_argument(
        "-d",
        "--debug",
        dest="debug",
        help="Debug output and pause after errors (env: UUP2ISO_DEBUG)",
        action="store_true",
        default=None,
    )

    return parser


def _configure_logging(debug: bool) -> None:
    #   default : WARNING via RichHandler on stderr
    #   -d      : DEBUG for everything, raw format
    if debug:
        logging.basicConfig(
            format="%(levelname)s: %(name)s: %(message)s", level=logging.DEBUG
        )
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[
                RichHandler(console=diagnostics_console, show_path=False, markup=False)
            ],
        )


def _make_pause(debug: bool) -> Callable[[], None] | None:
    """Return a wait-for-Enter hook, only for interactive debug runs."""
    if not debug or not sys.stdin.isatty():
        return None

    def pause() -> None:
        try:
            _ = input("Press Enter to continue...")
        except EOFError:
            pass

    return pause


def _print_banner(console_logger: ConsoleLogger) -> None:
    for line in BANNER:
        console_logger.log(line)


def _warn_environment(
    console_logger: ConsoleLogger, family: OSFamily, elevated: bool, edition: str | None
) -> None:
    if family is OSFamily.MACOS:
        console_logger.warning(
            "WARNING: For successful ISO creation, please install cdrtools via brew"
        )
    elif family is OSFamily.LINUX:
        console_logger.warning(
            "WARNING: For successful ISO creation, please install genisoimage"
        )

    console_logger.warning(
        "WARNING: This tool does NOT currently integrate updates into the finished media file. "
        "Any UUP set with updates (KBXXXXX).MSU/.CAB will not have the update integrated."
    )

    if elevated:
        return

    console_logger.warning(
        "WARNING: This tool is NOT currently running under Windows as administrator. "
        "The resulting image will be less clean/proper compared to Microsoft original."
    )
    if not edition:
        console_logger.warning(
            "WARNING: You are attempting to create an ISO media with potentially all editions available. "
            "Due to the tool not running under Windows as administrator, this request might not be fulfilled."
        )


def report_exception(console_logger: ConsoleLogger, exc: BaseException) -> None:
    """Log a failure and each of its nested causes, outermost first."""
    with console_logger.lock:
        console_logger.log("An error occurred!", LogLevel.ERROR)
        for cause in flatten_exception_chain(exc):
            console_logger.log(cause.describe(), LogLevel.ERROR)
            if cause.stack:
                console_logger.log(cause.stack, LogLevel.ERROR)


def _create_image(
    invocation: InvocationArguments,
    media_creator: MediaCreator | None,
    media_creator_ref: str | None,
    progress: ProgressCoalescer,
) -> None:
    if media_creator is None:
        media_creator = load_media_creator(media_creator_ref)

    logger.debug(
        f"Creating {invocation.destination} from {invocation.source_path} "
        f"(language: {invocation.language_code}, edition: {invocation.edition})"
    )
    media_creator(
        invocation.destination,
        str(invocation.source_path),
        invocation.edition,
        invocation.language_code,
        False,
        CompressionType.LZX,
        progress,
    )


def run(
    argv: Sequence[str],
    *,
    console_logger: ConsoleLogger | None = None,
    media_creator: MediaCreator | None = None,
) -> int:
    """Run one conversion and return the process exit status."""
    if console_logger is None:
        console_logger = ConsoleLogger()

    _print_banner(console_logger)

    try:
        args: Namespace = _argparser().parse_intermixed_args(list(argv))
    except ParserExit as exc:
        return exc.status

    try:
        debug = (
            args.debug
            if args.debug is not None
            else _parse_bool_env(os.environ.get("UUP2ISO_DEBUG"), env_var="UUP2ISO_DEBUG")
        )
    except ValueError as exc:
        _ = sys.stderr.write(f"ERROR: {exc}\n\n")
        _argparser().print_help(sys.stderr)
        return EXIT_USAGE
    debug = debug if debug is not None else False
    media_creator_ref: str | None = args.media_creator or os.environ.get(
        "UUP2ISO_MEDIA_CREATOR"
    )

    _configure_logging(debug)

    # Tokens past the edition are ignored.
    positionals: list[str] = args.positionals
    if len(positionals) < 3:
        console_logger.log(USAGE)
        return EXIT_OK
    source, destination, language = positionals[:3]
    edition = positionals[3] if len(positionals) > 3 else None

    invocation = InvocationArguments(
        source_path=Path(source).resolve(),
        destination=destination,
        language_code=language,
        edition=edition,
    )

    platform_info = detect_platform()
    _warn_environment(
        console_logger,
        platform_info.family,
        platform_info.is_elevated,
        invocation.edition,
    )

    if platform_info.is_elevated:
        try:
            broker = find_companion()
        except CompanionNotFoundError as exc:
            console_logger.error(f"ERROR: Could not find: {exc.path}")
            return EXIT_FAILURE
        logger.debug(f"Using DISM broker {broker}")

    pause = _make_pause(debug)
    progress = ProgressCoalescer(console_logger, on_error=pause)

    try:
        _create_image(invocation, media_creator, media_creator_ref, progress)
    except Exception as exc:
        logger.debug("Media creation failed", exc_info=True)
        report_exception(console_logger, exc)
        if pause is not None:
            pause()
        return EXIT_FAILURE

    console_logger.log("All done.")
    return EXIT_OK


def main() -> None:
    """Entry point: run the converter and exit with its status."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
