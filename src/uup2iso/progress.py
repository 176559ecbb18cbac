"""Turn the backend's progress stream into log lines without repeats."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ._console import ConsoleLogger, LogLevel
from .media import ProcessPhase

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressState:
    phase: ProcessPhase
    is_indeterminate: bool
    percentage: int
    sub_operation: str

    def same_as(self, other: "ProgressState") -> bool:
        # is_indeterminate is not part of the comparison.
        return (
            self.phase is other.phase
            and self.percentage == other.percentage
            and self.sub_operation == other.sub_operation
        )

    def render(self) -> str:
        progress = "" if self.is_indeterminate else f" [Progress: {self.percentage}%]"
        return f"[{self.phase.value}]{progress} {self.sub_operation}"


INITIAL_STATE = ProgressState(
    phase=ProcessPhase.READING_METADATA,
    is_indeterminate=False,
    percentage=-1,
    sub_operation="",
)


class ProgressCoalescer:
    """Progress callback that drops re-announcements of the last state.

    The comparison, the state update and the write all run under the
    logger's lock, so the backend may call this from any thread.
    """

    _logger: ConsoleLogger
    _on_error: Callable[[], None] | None
    _last: ProgressState

    def __init__(
        self,
        console_logger: ConsoleLogger,
        *,
        on_error: Callable[[], None] | None = None,
    ) -> None:
        self._logger = console_logger
        self._on_error = on_error
        self._last = INITIAL_STATE

    @property
    def last_emitted(self) -> ProgressState:
        return self._last

    def __call__(
        self,
        phase: ProcessPhase | str,
        is_indeterminate: bool,
        percentage: int,
        sub_operation: str,
    ) -> None:
        state = ProgressState(
            phase=ProcessPhase.coerce(phase),
            is_indeterminate=bool(is_indeterminate),
            percentage=int(percentage),
            sub_operation=sub_operation or "",
        )

        with self._logger.lock:
            if state.same_as(self._last):
                return
            self._last = state

            if state.phase is not ProcessPhase.ERROR:
                self._logger.log(state.render())
                return

            self._logger.log("An error occurred!", LogLevel.ERROR)
            self._logger.log(
                state.sub_operation or "No details were provided.", LogLevel.ERROR
            )

        logger.debug("Backend reported an error phase")
        if self._on_error is not None:
            self._on_error()
