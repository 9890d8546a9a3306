"""Diagnostic reporters handed to each harness component."""

import logging
from typing import Protocol

from systest.errors import Diagnostic


class Reporter(Protocol):
    """Channel for informational and warning diagnostics."""

    def debug(self, event: Diagnostic, message: str, **fields: object) -> None: ...

    def info(self, event: Diagnostic, message: str, **fields: object) -> None: ...

    def warning(self, event: Diagnostic, message: str, **fields: object) -> None: ...


class LoggingReporter:
    """Reporter that forwards diagnostics to a stdlib logger with structured extras."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("systest")

    def debug(self, event: Diagnostic, message: str, **fields: object) -> None:
        self._log(logging.DEBUG, event, message, fields)

    def info(self, event: Diagnostic, message: str, **fields: object) -> None:
        self._log(logging.INFO, event, message, fields)

    def warning(self, event: Diagnostic, message: str, **fields: object) -> None:
        self._log(logging.WARNING, event, message, fields)

    def _log(self, level: int, event: Diagnostic, message: str, fields: dict[str, object]) -> None:
        self._logger.log(level, message, extra={"event": event.value, **fields})
