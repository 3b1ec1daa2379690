"""Tests for constgen.diagnostics."""

from __future__ import annotations

from pathlib import Path

import pytest

from constgen.diagnostics import ErrorLog, Messager
from constgen.models import DiagnosticKind


def _raise(message: str) -> BaseException:
    try:
        raise OSError(message)
    except OSError as exc:
        return exc


def test_error_log_appends_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "camel-apt-error.log"

    ErrorLog(path).dump("Unable to generate source code file: a.B", _raise("disk full"))
    ErrorLog(path).dump("Unable to generate source code file: a.C", _raise("read only"))

    text = path.read_text(encoding="utf-8")
    assert text.index("a.B") < text.index("a.C")
    assert "OSError: disk full" in text
    assert "OSError: read only" in text
    assert text.count("Traceback (most recent call last)") == 2


def test_error_log_keeps_existing_content(tmp_path: Path) -> None:
    path = tmp_path / "camel-apt-error.log"
    path.write_text("earlier entry\n", encoding="utf-8")

    ErrorLog(path).dump("new entry", _raise("boom"))

    assert path.read_text(encoding="utf-8").startswith("earlier entry\nnew entry\n\n")


def test_error_log_write_failure_is_logged_not_raised(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "camel-apt-error.log"
    path.mkdir()

    error_log = ErrorLog(path)
    error_log.logger.addHandler(caplog.handler)
    try:
        written = error_log.dump("Unable to generate source code file: a.B", _raise("boom"))
    finally:
        error_log.logger.removeHandler(caplog.handler)

    assert written is False
    assert "Unable to write error log" in caplog.text


def test_messager_tracks_errors() -> None:
    messager = Messager()

    messager.print_message(DiagnosticKind.NOTE, "starting")
    messager.print_message(DiagnosticKind.WARNING, "careful", element="a.B")
    assert not messager.has_errors

    diagnostic = messager.print_message(DiagnosticKind.ERROR, "failed", element="a.C")

    assert messager.has_errors
    assert messager.errors == [diagnostic]
    assert diagnostic.element == "a.C"
    assert [d.kind for d in messager.diagnostics] == [
        DiagnosticKind.NOTE,
        DiagnosticKind.WARNING,
        DiagnosticKind.ERROR,
    ]
