"""Pydantic models for expression requests and evaluation results."""
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from stack_calc.common.errors import ErrorKind


class OperationRequest(BaseModel):
    """Represents a single infix expression to evaluate."""

    expression: str = Field(..., description="Infix expression as a string")


class OperationResult(BaseModel):
    """Represents the outcome of an evaluated expression: a value or an error kind."""

    expression: str = Field(..., description="Original infix expression")
    line: Optional[int] = Field(default=None, ge=1, description="Line number in the input file")
    postfix: Optional[str] = Field(default=None, description="Postfix form, when conversion succeeded")
    result: Optional[int] = Field(default=None, description="Evaluated integer result")
    error_kind: Optional[ErrorKind] = Field(default=None, description="Kind of failure")
    error: Optional[str] = Field(default=None, description="Failure message")

    @model_validator(mode="after")
    def result_xor_error(self) -> "OperationResult":
        """Ensure exactly one of result and error_kind is set."""
        if (self.result is None) == (self.error_kind is None):
            raise ValueError("Exactly one of result and error_kind must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def format_line(self) -> str:
        """
        Render the result as a line of the results file.

        :return: ``<line>: <expr> = <value>`` or ``<line>: <expr> -> ERROR[<kind>]: <message>``
        :rtype: str
        """
        prefix = f"{self.line}: " if self.line is not None else ""
        if self.ok:
            return f"{prefix}{self.expression} = {self.result}"
        return f"{prefix}{self.expression} -> ERROR[{self.error_kind.value}]: {self.error}"
