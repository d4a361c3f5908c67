"""Tests for core types: Result[T] and Diag."""

from clipnote.core import Diag, Result, Severity


def test_severity_values() -> None:
    assert Severity.ERROR == "error"
    assert Severity.WARNING == "warning"


def test_diag_defaults() -> None:
    d = Diag(severity=Severity.ERROR, code="CLIPBOARD_UNAVAILABLE", message="denied")
    assert d.code == "CLIPBOARD_UNAVAILABLE"
    assert d.hint is None


def test_result_empty_is_ok() -> None:
    r: Result[str] = Result()
    assert r.ok is True
    assert r.data is None
    assert r.first_error is None


def test_result_error_helper() -> None:
    r: Result[str] = Result()
    r.error("NOT_FOUND", "Notebook nb_x not found", hint="check the id")
    assert r.ok is False
    assert r.has_errors is True
    assert r.first_error is not None
    assert r.first_error.code == "NOT_FOUND"
    assert r.first_error.hint == "check the id"


def test_warnings_keep_result_ok() -> None:
    r: Result[str] = Result(data="partial")
    r.warning("IMAGE_READ_FAILED", "could not read image/png")
    assert r.ok is True
    assert r.first_error is None
    assert r.diagnostics[0].severity == Severity.WARNING


def test_first_error_skips_warnings() -> None:
    r: Result[str] = Result()
    r.warning("W", "warn")
    r.error("E1", "first")
    r.error("E2", "second")
    assert r.first_error is not None
    assert r.first_error.code == "E1"


def test_result_serialization() -> None:
    r: Result[str] = Result(data="test")
    r.warning("W", "warn")
    d = r.model_dump()
    assert d["data"] == "test"
    assert d["diagnostics"][0]["severity"] == "warning"
