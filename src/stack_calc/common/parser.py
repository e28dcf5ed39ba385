"""Compile infix expressions to postfix and evaluate them with stacks."""
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Sequence, Union

from stack_calc.common.brackets import is_balanced
from stack_calc.common.errors import (
    DivisionByZeroError,
    MalformedExpressionError,
    StackUnderflowError,
    UnboundOperandError,
    UnknownOperatorError,
)
from stack_calc.common.stack import Stack


# Type alias for operator functions (taking two ints, returning an int)
OperatorFn = Callable[[int, int], int]

# Rank of every symbol allowed on the operator stack
PRECEDENCE: Mapping[str, int] = MappingProxyType({
    "(": 1,
    ")": 1,
    "+": 2,
    "-": 2,
    "*": 3,
    "/": 3,
})


def _divide(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    if b == 0:
        raise DivisionByZeroError(f"Division by zero: {a} / {b}", token="/")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


OPERATIONS: Mapping[str, OperatorFn] = MappingProxyType({
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _divide,
})


class ExpressionParser:
    """
    Compile and evaluate integer arithmetic expressions.

    Algorithm:
        1. Check that brackets are balanced (unbalanced input gives None)
        2. Tokenize based on whitespace
        3. Convert to postfix (Reverse Polish Notation) using Shunting-yard
        4. Evaluate postfix using a value stack

    Operands are single characters: a digit ``0-9`` or a letter ``A-Z``.
    Letters only evaluate when a value is bound to them.

    Examples:
        - Infix expression: 2 + 3 * 4
        - Corresponding postfix: 2 3 4 * +
    """

    @staticmethod
    def tokenize(expr: str) -> List[str]:
        """
        Split an expression into tokens.

        Tokens must be space-separated (e.g., "( 2 + 3 ) * 4").

        :param str expr: Expression as a string

        :return: List of tokens
        :rtype: List[str]
        """
        return expr.split()

    @staticmethod
    def is_operand(token: str) -> bool:
        """
        Determine if a token is an operand.

        :param str token: Token string

        :return: True for a single digit or uppercase letter, else False
        :rtype: bool
        """
        return len(token) == 1 and ("0" <= token <= "9" or "A" <= token <= "Z")

    @staticmethod
    def to_postfix(
        tokens: Sequence[str], precedence: Mapping[str, int] = PRECEDENCE
    ) -> List[str]:
        """
        Convert infix tokens into postfix order using the Shunting-yard algorithm.

        Operators of equal precedence are emitted left to right.

        :param Sequence[str] tokens: Infix tokens
        :param Mapping[str, int] precedence: Rank of each operator and bracket

        :return: List of tokens in postfix order
        :rtype: List[str]
        :raises UnknownOperatorError: If a token is neither an operand nor in the precedence table
        :raises StackUnderflowError: If a ``)`` has no matching ``(``
        """
        output: List[str] = []
        ops: Stack[str] = Stack()

        for token in tokens:
            if ExpressionParser.is_operand(token):
                output.append(token)
            elif token == "(":
                ops.push(token)
            elif token == ")":
                top = ops.pop()
                while top != "(":
                    if top is None:
                        raise StackUnderflowError("Unmatched closing bracket", token=token)
                    output.append(top)
                    top = ops.pop()
            else:
                if token not in precedence:
                    raise UnknownOperatorError(f"Unknown operator: {token!r}", token=token)
                rank = precedence[token]
                while not ops.is_empty() and precedence[ops.peek()] >= rank:
                    output.append(ops.pop())
                ops.push(token)

        # Remaining operators, stack top first
        output.extend(ops.drain())
        return output

    @staticmethod
    def infix_to_postfix(
        expr: str, precedence: Mapping[str, int] = PRECEDENCE
    ) -> Optional[str]:
        """
        Convert an infix expression to a space-separated postfix expression.

        :param str expr: Infix expression
        :param Mapping[str, int] precedence: Rank of each operator and bracket

        :return: Postfix expression, or None if the brackets are unbalanced
        :rtype: Optional[str]
        """
        if not is_balanced(expr):
            return None
        tokens = ExpressionParser.tokenize(expr)
        return " ".join(ExpressionParser.to_postfix(tokens, precedence))

    @staticmethod
    def _operand_value(token: str, bindings: Mapping[str, int]) -> int:
        if "0" <= token <= "9":
            return int(token)
        if token not in bindings:
            raise UnboundOperandError(f"No value bound to operand {token!r}", token=token)
        return bindings[token]

    @staticmethod
    def postfix_eval(
        postfix: Union[str, Sequence[str]],
        bindings: Optional[Mapping[str, int]] = None,
    ) -> int:
        """
        Evaluate a postfix expression.

        The most recently pushed value is the right-hand operand, the one below it the left-hand operand.

        :param postfix: Space-separated postfix expression or list of tokens
        :param Optional[Mapping[str, int]] bindings: Values of letter operands

        :return: Computed integer result
        :rtype: int
        :raises UnknownOperatorError: If a token is not an operand or one of ``+ - * /``
        :raises DivisionByZeroError: If the right-hand operand of ``/`` is zero
        :raises StackUnderflowError: If an operator lacks operands or nothing is left to return
        :raises MalformedExpressionError: If more than one value is left
        :raises UnboundOperandError: If a letter operand has no binding
        """
        tokens = ExpressionParser.tokenize(postfix) if isinstance(postfix, str) else postfix
        bindings = bindings or {}
        values: Stack[int] = Stack()

        for token in tokens:
            if ExpressionParser.is_operand(token):
                values.push(ExpressionParser._operand_value(token, bindings))
                continue

            if token not in OPERATIONS:
                raise UnknownOperatorError(f"Unknown operator: {token!r}", token=token)

            # Operator requires two operands
            if len(values) < 2:
                raise StackUnderflowError(f"Not enough operands for {token!r}", token=token)
            right: int = values.pop()
            left: int = values.pop()
            values.push(OPERATIONS[token](left, right))

        if values.is_empty():
            raise StackUnderflowError("Empty expression")
        if len(values) > 1:
            raise MalformedExpressionError(
                f"Invalid expression (remaining operands): {' '.join(map(str, reversed(list(values))))}"
            )
        return values.pop()

    @staticmethod
    def evaluate(expr: str, bindings: Optional[Mapping[str, int]] = None) -> Optional[int]:
        """
        Evaluate an infix expression.

        :param str expr: Infix expression string
        :param Optional[Mapping[str, int]] bindings: Values of letter operands

        :return: Computed integer result, or None if the brackets are unbalanced
        :rtype: Optional[int]
        :raises ExpressionError: If the expression cannot be evaluated
        """
        postfix = ExpressionParser.infix_to_postfix(expr)
        if postfix is None:
            return None
        return ExpressionParser.postfix_eval(postfix, bindings)


tokenize = ExpressionParser.tokenize
to_postfix = ExpressionParser.to_postfix
infix_to_postfix = ExpressionParser.infix_to_postfix
postfix_eval = ExpressionParser.postfix_eval
evaluate = ExpressionParser.evaluate
expression_calc = evaluate
