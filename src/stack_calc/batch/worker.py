"""Worker process for evaluating one expression."""
from multiprocessing.connection import Connection
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stack_calc.common.errors import ErrorKind, ExpressionError
from stack_calc.common.logger import logger
from stack_calc.common.operations import OperationResult
from stack_calc.common.parser import ExpressionParser


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single expression.

    Lifecycle:
        - Spawned by the batch runner
        - Receives one expression only
        - Sends an OperationResult payload through a Pipe
        - Terminates immediately after computation
    """

    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the runner")
    expression: str = Field(..., description="Single infix expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def compute(self) -> OperationResult:
        """
        Evaluate the expression and describe the outcome.

        :return: Result carrying either a value or an error kind
        :rtype: OperationResult
        """
        postfix: Optional[str] = ExpressionParser.infix_to_postfix(self.expression)
        if postfix is None:
            return OperationResult(
                expression=self.expression,
                line=self.line_number,
                error_kind=ErrorKind.MALFORMED_GROUPING,
                error="Unbalanced brackets",
            )
        return OperationResult(
            expression=self.expression,
            line=self.line_number,
            postfix=postfix,
            result=ExpressionParser.postfix_eval(postfix),
        )

    def run(self) -> None:
        """
        Evaluate the expression and send the result or error through the pipe.

        :return: None
        """
        logger.info(f"Worker started on line {self.line_number}: {self.expression}")

        try:
            outcome = self.compute()
        except ExpressionError as exc:
            outcome = OperationResult(
                expression=self.expression,
                line=self.line_number,
                error_kind=exc.kind,
                error=str(exc),
            )
        except Exception as exc:
            logger.exception(f"Worker crashed on line {self.line_number}: {self.expression!r}")
            outcome = OperationResult(
                expression=self.expression,
                line=self.line_number,
                error_kind=ErrorKind.INTERNAL_ERROR,
                error=f"{type(exc).__name__}: {exc}",
            )

        try:
            self.conn.send(outcome.model_dump(mode="json"))
        finally:
            # Always close the connection
            self.conn.close()

        if outcome.ok:
            logger.info(f"Worker finished on line {self.line_number}: {outcome.result}")
        else:
            logger.error(f"Worker failed on line {self.line_number} [{outcome.error_kind.value}]: {outcome.error}")
