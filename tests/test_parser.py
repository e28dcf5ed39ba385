"""Test class ExpressionParser and the module-level pipeline functions."""

import pytest

from stack_calc.common.brackets import is_balanced
from stack_calc.common.errors import (
    DivisionByZeroError,
    ErrorKind,
    ExpressionError,
    MalformedExpressionError,
    StackUnderflowError,
    UnboundOperandError,
    UnknownOperatorError,
)
from stack_calc.common.parser import (
    PRECEDENCE,
    ExpressionParser,
    evaluate,
    expression_calc,
    infix_to_postfix,
    postfix_eval,
)


def test_tokenize_basic():
    """Tokenize splits a simple expression into correct tokens."""
    expr = "3 + 4 * 2"
    tokens = ExpressionParser.tokenize(expr)
    assert tokens == ["3", "+", "4", "*", "2"]


@pytest.mark.parametrize("token,expected", [
    ("0", True),
    ("9", True),
    ("A", True),
    ("Z", True),
    ("a", False),
    ("10", False),
    ("+", False),
    ("(", False),
])
def test_is_operand(token, expected):
    """is_operand accepts single digits and uppercase letters only."""
    assert ExpressionParser.is_operand(token) == expected


def test_precedence_table_is_read_only():
    """The shared precedence table cannot be modified."""
    with pytest.raises(TypeError):
        PRECEDENCE["^"] = 4


@pytest.mark.parametrize("expr,expected", [
    ("3 + 4", "3 4 +"),
    ("2 + 3 * 4", "2 3 4 * +"),
    ("( 2 + 3 ) * 4", "2 3 + 4 *"),
    ("8 - 3 - 2", "8 3 - 2 -"),
    ("8 / 4 / 2", "8 4 / 2 /"),
    ("6 * 2 / 3", "6 2 * 3 /"),
    ("A * B + C * D", "A B * C D * +"),
    ("( A + B ) * C - ( D - E ) * ( F + G )", "A B + C * D E - F G + * -"),
    ("( ( 1 + 2 ) )", "1 2 +"),
    ("", ""),
])
def test_infix_to_postfix(expr, expected):
    """infix_to_postfix orders operators by precedence, left to right on ties."""
    assert infix_to_postfix(expr) == expected


@pytest.mark.parametrize("expr", [
    "( 2 + 3",
    "2 + 3 )",
    ") 2 + 3 (",
    "( 2 + 3 ]",
])
def test_infix_to_postfix_unbalanced_returns_none(expr):
    """Unbalanced input gives no postfix at all."""
    assert infix_to_postfix(expr) is None
    assert evaluate(expr) is None


def test_to_postfix_unknown_operator():
    """Tokens absent from the precedence table are fatal."""
    with pytest.raises(UnknownOperatorError) as excinfo:
        ExpressionParser.to_postfix(["2", "^", "3"])
    assert excinfo.value.token == "^"
    assert excinfo.value.kind is ErrorKind.UNKNOWN_OPERATOR


def test_to_postfix_multi_digit_token_is_not_an_operand():
    """Multi-character tokens are not operands."""
    with pytest.raises(UnknownOperatorError):
        infix_to_postfix("10 + 2")


def test_to_postfix_stray_closing_bracket():
    """A closing bracket without opener underflows the operator stack."""
    with pytest.raises(StackUnderflowError):
        ExpressionParser.to_postfix(["2", ")"])


def test_to_postfix_custom_precedence():
    """A caller-supplied precedence table drives the conversion."""
    flat = {"(": 1, ")": 1, "+": 2, "-": 2, "*": 2, "/": 2}
    assert ExpressionParser.to_postfix("2 + 3 * 4".split(), flat) == ["2", "3", "+", "4", "*"]


@pytest.mark.parametrize("postfix,expected", [
    ("3 4 +", 7),
    ("8 3 - 2 -", 3),
    ("2 3 4 * +", 14),
    ("2 3 + 4 *", 20),
    ("9 2 /", 4),
    ("2 9 -", -7),
    ("7", 7),
])
def test_postfix_eval(postfix, expected):
    """postfix_eval reduces the postfix form to an integer."""
    assert postfix_eval(postfix) == expected


def test_postfix_eval_accepts_token_list():
    """postfix_eval works on a token sequence as well as a string."""
    assert postfix_eval(["6", "3", "-"]) == 3


@pytest.mark.parametrize("expr,expected", [
    ("( 2 - 9 ) / 2", -3),
    ("( 0 - 7 ) / ( 0 - 2 )", 3),
    ("7 / ( 0 - 2 )", -3),
])
def test_division_truncates_toward_zero(expr, expected):
    """Integer division truncates toward zero for negative values."""
    assert evaluate(expr) == expected


def test_division_by_zero():
    """Dividing by zero is fatal."""
    with pytest.raises(DivisionByZeroError) as excinfo:
        postfix_eval("4 0 /")
    assert excinfo.value.token == "/"


@pytest.mark.parametrize("postfix,error", [
    ("4 +", StackUnderflowError),
    ("+", StackUnderflowError),
    ("", StackUnderflowError),
    ("1 2", MalformedExpressionError),
    ("1 2 %", UnknownOperatorError),
    ("1 2 (", UnknownOperatorError),
    ("X 1 +", UnboundOperandError),
])
def test_postfix_eval_errors(postfix, error):
    """Malformed postfix raises the matching error kind."""
    with pytest.raises(error):
        postfix_eval(postfix)


def test_errors_are_value_errors():
    """Every fatal expression error is a ValueError."""
    with pytest.raises(ValueError):
        evaluate("3 +")


def test_postfix_eval_with_bindings():
    """Letter operands take their values from bindings."""
    assert postfix_eval("A B * C +", {"A": 3, "B": 4, "C": 5}) == 17


@pytest.mark.parametrize("expr,expected", [
    ("3 + 4", 7),
    ("9 - 2", 7),
    ("3 * 5", 15),
    ("8 / 2", 4),
    ("8 - 3 - 2", 3),
    ("2 + 3 * 4", 14),
    ("( 2 + 3 ) * 4", 20),
    ("7 + 3 * 2 - 4 / 2", 11),
    ("( ( 9 - 1 ) / ( 1 + 1 ) ) * 3", 12),
])
def test_evaluate_valid(expr, expected):
    """Evaluate returns correct result for valid expressions."""
    assert evaluate(expr) == expected
    assert expression_calc(expr) == expected


@pytest.mark.parametrize("expr", [
    "3 +",
    "* 3",
    "3 4 + 5",
    "",
    "4 / 0",
    "2 ^ 3",
])
def test_evaluate_invalid_expression(expr):
    """Evaluate raises an ExpressionError for malformed expressions."""
    with pytest.raises(ExpressionError):
        evaluate(expr)


@pytest.mark.parametrize("expr", [
    "8 - 3 - 2",
    "2 + 3 * 4",
    "( 2 + 3 ) * 4",
    "( 9 - 1 ) / 2 + 6 * ( 2 - 5 )",
])
def test_postfix_then_eval_matches_evaluate(expr):
    """Evaluating the converted postfix equals evaluating the infix directly."""
    assert postfix_eval(infix_to_postfix(expr)) == evaluate(expr)


def test_evaluate_with_bindings():
    """evaluate passes bindings through to the evaluator."""
    assert evaluate("( A + B ) * C", {"A": 1, "B": 2, "C": 3}) == 9


@pytest.mark.parametrize("expr,bracket", [
    ("[ 2 + 3 ] * 4", "["),
    ("{ 2 + 3 } * 4", "{"),
    ("4 * [ 2 ]", "["),
    ("4 * { 2 }", "{"),
])
def test_square_and_curly_brackets_are_not_grouping(expr, bracket):
    """Balanced [ ] and { } pass the bracket check but are unknown operators to the converter."""
    assert is_balanced(expr)
    with pytest.raises(UnknownOperatorError) as excinfo:
        evaluate(expr)
    assert excinfo.value.token == bracket


@pytest.mark.parametrize("bracket", ["[", "]", "{", "}"])
def test_to_postfix_rejects_non_round_brackets(bracket):
    """Only ( and ) group in the converter."""
    with pytest.raises(UnknownOperatorError) as excinfo:
        ExpressionParser.to_postfix(["2", bracket, "3"])
    assert excinfo.value.token == bracket
