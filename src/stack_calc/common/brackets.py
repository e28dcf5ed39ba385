"""Check that brackets in a text are balanced and correctly nested."""
from stack_calc.common.stack import Stack

OPENERS = "([{"
CLOSERS = ")]}"


def brackets_match(opener: str, closer: str) -> bool:
    """
    Tell whether an opening and a closing bracket form a pair.

    A pair matches when both characters sit at the same position in their alphabet.

    :param str opener: Opening bracket
    :param str closer: Closing bracket

    :return: True if the brackets are of the same kind
    :rtype: bool
    """
    return OPENERS.find(opener) == CLOSERS.find(closer)


def is_balanced(text: str) -> bool:
    """
    Check whether every closing bracket matches the most recently opened one.

    Characters other than ``()[]{}`` are ignored. The scan stops at the first failure.

    :param str text: Raw text to check

    :return: True if the text is balanced
    :rtype: bool
    """
    stack: Stack[str] = Stack()

    for char in text:
        if char in OPENERS:
            stack.push(char)
        elif char in CLOSERS:
            opener = stack.pop()
            if opener is None or not brackets_match(opener, char):
                return False

    # Unclosed openers left behind
    return stack.is_empty()
