"""Unit tests for EvaluationWorker using real Pipe connections."""
from multiprocessing import Pipe

import pytest

from prodcalc.batch.worker import EvaluationWorker


@pytest.mark.parametrize(
    "expr,expected,display",
    [
        ("2 + 3", 5.0, "5"),
        ("10 - 4", 6.0, "6"),
        ("2^3^2", 512.0, "512"),
        ("1/4", 0.25, "0.25"),
        ("sqrt(9)", 3.0, "3"),
    ],
)
def test_worker_sends_result_for_valid_expression(expr: str, expected: float, display: str) -> None:
    """Worker sends computed result through the connection for valid expressions."""
    parent_conn, child_conn = Pipe()
    worker = EvaluationWorker(conn=child_conn, expression=expr, line_number=1)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 1
    assert msg["expression"] == expr
    assert msg["result"] == expected
    assert msg["display"] == display
    assert msg["error_kind"] is None


@pytest.mark.parametrize(
    "expr,kind",
    [
        ("2 +", "StackUnderflowError"),
        ("5/0", "DivideByZeroError"),
        ("(2+3", "MismatchedParenError"),
        ("3 4", "MalformedExpressionError"),
        ("2 # 3", "LexError"),
    ],
)
def test_worker_sends_error_for_invalid_expression(expr: str, kind: str) -> None:
    """Worker sends the error kind and message for failing expressions."""
    parent_conn, child_conn = Pipe()
    worker = EvaluationWorker(conn=child_conn, expression=expr, line_number=2)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 2
    assert msg["expression"] == expr
    assert msg["result"] is None
    assert msg["error_kind"] == kind
    assert isinstance(msg["error"], str)


def test_worker_closes_connection() -> None:
    """The parent sees EOF after the single result."""
    parent_conn, child_conn = Pipe()
    EvaluationWorker(conn=child_conn, expression="1", line_number=1).run()
    parent_conn.recv()
    with pytest.raises(EOFError):
        parent_conn.recv()


def test_worker_rejects_empty_expression() -> None:
    """Pydantic validation prevents creating EvaluationWorker with empty expression."""
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        EvaluationWorker(conn=child_conn, expression="  ", line_number=1)


def test_worker_rejects_invalid_line_number() -> None:
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        EvaluationWorker(conn=child_conn, expression="1", line_number=0)
