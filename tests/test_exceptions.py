import pytest

from uup2iso.exceptions import CompanionNotFoundError, ErrorCause, flatten_exception_chain


def _raise_chain() -> None:
    try:
        try:
            raise OSError("disk unreadable")
        except OSError as inner:
            raise ValueError("metadata is corrupt") from inner
    except ValueError:
        raise RuntimeError("could not create media")


def test_chain_outermost_to_innermost() -> None:
    with pytest.raises(RuntimeError) as excinfo:
        _raise_chain()

    causes = flatten_exception_chain(excinfo.value)

    assert [cause.describe() for cause in causes] == [
        "RuntimeError: could not create media",
        "ValueError: metadata is corrupt",
        "OSError: disk unreadable",
    ]
    assert all("_raise_chain" in cause.stack for cause in causes)


def test_suppressed_context_ends_chain() -> None:
    try:
        try:
            raise KeyError("edition")
        except KeyError:
            raise LookupError("no such edition") from None
    except LookupError as exc:
        causes = flatten_exception_chain(exc)

    assert len(causes) == 1


def test_cycle_terminates() -> None:
    first = ValueError("first")
    second = ValueError("second")
    first.__cause__ = second
    second.__cause__ = first

    assert [cause.message for cause in flatten_exception_chain(first)] == [
        "first",
        "second",
    ]


def test_unraised_exception_has_no_stack() -> None:
    cause = ErrorCause.from_exception(RuntimeError())

    assert cause.stack == ""
    assert cause.describe() == "RuntimeError"


def test_companion_error_keeps_path(tmp_path) -> None:
    error = CompanionNotFoundError(tmp_path / "broker.exe")

    assert error.path == tmp_path / "broker.exe"
