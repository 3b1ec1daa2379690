"""Diagnostic reporting and the append-only error log."""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import List, Optional

from .logging import get_logger
from .models import Diagnostic, DiagnosticKind

_LOG_LEVELS = {
    DiagnosticKind.ERROR: logging.ERROR,
    DiagnosticKind.WARNING: logging.WARNING,
    DiagnosticKind.NOTE: logging.INFO,
}


class Messager:
    """Collects build diagnostics and mirrors them to the constgen logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("diagnostics")
        self.diagnostics: List[Diagnostic] = []

    def print_message(
        self, kind: DiagnosticKind, message: str, element: Optional[str] = None
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, message=message, element=element)
        self.diagnostics.append(diagnostic)
        self.logger.log(_LOG_LEVELS[kind], message)
        return diagnostic

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is DiagnosticKind.ERROR]

    @property
    def has_errors(self) -> bool:
        return any(d.kind is DiagnosticKind.ERROR for d in self.diagnostics)


class ErrorLog:
    """Append-only failure log kept for post-mortem inspection.

    Entries accumulate across runs; the file is never truncated or rotated.
    Each entry is the message, a blank line, and the formatted traceback.
    A log that cannot be written is reported as a warning and otherwise
    ignored, so a failing class never stops the rest of the pass.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.logger = get_logger("diagnostics")

    def dump(self, message: str, exc: BaseException) -> bool:
        trace = "".join(traceback.format_exception(exc))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(f"{message}\n\n{trace}\n")
        except OSError as log_exc:
            self.logger.warning("Unable to write error log %s: %s", self.path, log_exc)
            return False
        return True


__all__ = ["ErrorLog", "Messager"]
