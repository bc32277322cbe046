"""Test classes OperationResult and HistoryEntry."""
from pydantic import ValidationError
import pytest

from prodcalc.common.models import HistoryEntry, OperationResult


def test_operation_result_success_line() -> None:
    """A successful result renders as 'expr = display'."""
    res = OperationResult(expression="2 + 2 * 3", line=3, result=8.0, display="8")
    assert res.ok
    assert res.to_line() == "2 + 2 * 3 = 8"


def test_operation_result_error_line() -> None:
    """A failed result renders the error kind and message."""
    res = OperationResult(expression="5/0", error_kind="DivideByZeroError", error="Divide by zero")
    assert not res.ok
    assert res.result is None
    assert res.to_line() == "5/0 -> ERROR: DivideByZeroError: Divide by zero"


def test_operation_result_round_trips_through_dump() -> None:
    """Results survive model_dump, as sent through worker pipes."""
    res = OperationResult(expression="1/3", line=2, result=1 / 3, display="0.333333333333")
    assert OperationResult(**res.model_dump()) == res


def test_operation_result_invalid_line() -> None:
    """Line numbers start at 1."""
    with pytest.raises(ValidationError):
        OperationResult(expression="1", line=0)


def test_operation_result_invalid_result_type() -> None:
    """Test that invalid result type raises a validation error."""
    with pytest.raises(ValidationError):
        OperationResult(expression="2 + 2", result="not a float")


def test_history_entry_is_frozen() -> None:
    entry = HistoryEntry(expression="1+1", result="2")
    with pytest.raises(ValidationError):
        entry.result = "3"
