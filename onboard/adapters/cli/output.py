"""
Mirror of remote session output to the console and the run log
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from ...core.logging import get_stdout_console

TRANSCRIPT_LOGGER = "onboard.transcript"


class OutputMirror:
    """
    Receives raw output chunks; echoes them unchanged to the console and
    writes complete lines to the run log.
    """

    def __init__(self, log_file: Optional[Path] = None, console: Optional[Console] = None):
        self.console = console or get_stdout_console()
        self._pending = ""
        self._logger = logging.getLogger(TRANSCRIPT_LOGGER)
        self._logger.propagate = False
        self._logger.setLevel(logging.INFO)
        self._handler: Optional[logging.Handler] = None
        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._handler = logging.FileHandler(log_file, encoding="utf-8")
            self._handler.setFormatter(logging.Formatter("%(asctime)s - remote - %(message)s"))
            self._logger.addHandler(self._handler)

    def __call__(self, chunk: str) -> None:
        self.console.out(chunk, end="", highlight=False)
        self._pending += chunk
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._logger.info(line.rstrip("\r"))

    def close(self) -> None:
        if self._pending:
            self._logger.info(self._pending)
            self._pending = ""
        if self._handler:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
