"""Error taxonomy of the expression pipeline."""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kind of failure reported for an expression."""

    MALFORMED_GROUPING = "malformed_grouping"
    UNKNOWN_OPERATOR = "unknown_operator"
    DIVISION_BY_ZERO = "division_by_zero"
    STACK_UNDERFLOW = "stack_underflow"
    MALFORMED_EXPRESSION = "malformed_expression"
    UNBOUND_OPERAND = "unbound_operand"
    INTERNAL_ERROR = "internal_error"


class ExpressionError(ValueError):
    """
    Base class for fatal expression errors.

    Unbalanced brackets are not an ExpressionError: the pipeline reports them
    as an absent result (None).

    :param str message: Human readable description
    :param Optional[str] token: Offending token, if any
    """

    kind: ErrorKind = ErrorKind.MALFORMED_EXPRESSION

    def __init__(self, message: str, token: Optional[str] = None):
        super().__init__(message)
        self.token = token


class UnknownOperatorError(ExpressionError):
    """Token is neither an operand nor a supported operator."""

    kind = ErrorKind.UNKNOWN_OPERATOR


class DivisionByZeroError(ExpressionError):
    """Right-hand operand of ``/`` is zero."""

    kind = ErrorKind.DIVISION_BY_ZERO


class StackUnderflowError(ExpressionError):
    """An operator or closing bracket found too few items on its stack."""

    kind = ErrorKind.STACK_UNDERFLOW


class MalformedExpressionError(ExpressionError):
    """Operands are left over after evaluation."""

    kind = ErrorKind.MALFORMED_EXPRESSION


class UnboundOperandError(ExpressionError):
    """Letter operand has no value to evaluate with."""

    kind = ErrorKind.UNBOUND_OPERAND
