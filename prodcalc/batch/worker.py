"""Worker process for evaluating one arithmetic expression."""
from multiprocessing.connection import Connection

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prodcalc.common.errors import EvalError
from prodcalc.common.formatting import format_number
from prodcalc.common.logger import logger
from prodcalc.common.models import OperationResult
from prodcalc.common.parser import ExpressionParser


class EvaluationWorker(BaseModel):
    """
    Worker responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch runner
        - Receives one expression only
        - Sends an OperationResult dump through a Pipe
        - Terminates immediately after computation
    """

    # Allow multiprocessing.Connection, and keep the instance read-only
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the runner")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def evaluate(self) -> OperationResult:
        """
        Evaluate the expression without sending anything.

        :return: Result carrying either the value or the error kind
        :rtype: OperationResult
        """
        try:
            value = ExpressionParser.evaluate(self.expression)
        except EvalError as exc:
            logger.error(f"Worker failed on line {self.line_number}: {type(exc).__name__}: {exc}")
            return OperationResult(
                expression=self.expression,
                line=self.line_number,
                error_kind=type(exc).__name__,
                error=str(exc),
            )
        return OperationResult(
            expression=self.expression,
            line=self.line_number,
            result=value,
            display=format_number(value),
        )

    def run(self) -> None:
        """
        Evaluate the expression and send the result through the pipe.

        :return: None
        """
        logger.info(f"Worker started on line {self.line_number}: {self.expression}")
        try:
            result = self.evaluate()
            self.conn.send(result.model_dump())
        finally:
            # Always close the connection
            self.conn.close()
        logger.info(f"Worker finished on line {self.line_number}: {result.display or result.error_kind}")
