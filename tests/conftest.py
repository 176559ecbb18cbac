import io

import pytest
from rich.console import Console

from uup2iso._console import ConsoleLogger


class CapturedLogger:
    """A ConsoleLogger writing to an in-memory, colourless console."""

    def __init__(self) -> None:
        self.buffer = io.StringIO()
        self.console_logger = ConsoleLogger(
            Console(file=self.buffer, width=500, color_system=None, highlight=False)
        )

    @property
    def output(self) -> str:
        return self.buffer.getvalue()

    def lines(self) -> list[str]:
        return self.output.splitlines()

    def error_lines(self) -> list[str]:
        return [line for line in self.lines() if "[   Error   ]" in line]

    def warning_lines(self) -> list[str]:
        return [line for line in self.lines() if "[  Warning  ]" in line]


@pytest.fixture
def captured() -> CapturedLogger:
    return CapturedLogger()
