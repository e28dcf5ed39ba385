"""
Command-line entry point.

Two modes:
- ``stack-calc FILE``: evaluate every line of a text file or archive in worker
  processes and write one result line per expression
- ``stack-calc --expression EXPR``: evaluate a single expression in-process
  and print its postfix form and value
"""

import argparse
from pathlib import Path
import sys
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, FilePath, ValidationError, model_validator

from stack_calc.batch.runner import BatchRunner, RunnerConfig
from stack_calc.common.errors import ExpressionError
from stack_calc.common.logger import logger
from stack_calc.common.parser import ExpressionParser
from stack_calc.common.reader import read_expressions


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    file_path : FilePath, optional
        Path to the file containing expressions.
    expression : str, optional
        Single expression to evaluate instead of a file.
    output : Path, optional
        Results file; derived from file_path when omitted.
    workers : int, optional
        Maximum number of worker processes.
    """

    model_config = ConfigDict(frozen=True)

    file_path: Optional[FilePath] = None
    expression: Optional[str] = None
    output: Optional[Path] = None
    workers: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def file_xor_expression(self) -> "CliArgs":
        """Ensure exactly one input source is given."""
        if (self.file_path is None) == (self.expression is None):
            raise ValueError("Provide exactly one of a file path or --expression")
        return self


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param Optional[List[str]] argv: Arguments, defaults to sys.argv[1:]

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="stack-calc",
        description="Compile infix expressions to postfix and evaluate them",
    )
    parser.add_argument(
        "file_path",
        nargs="?",
        help="Path to a .txt, .zip, .tar.xz or .7z file with one expression per line",
    )
    parser.add_argument("-e", "--expression", help="Evaluate a single expression, e.g. \"( 2 + 3 ) * 4\"")
    parser.add_argument("-o", "--output", help="Path of the results file")
    parser.add_argument("-w", "--workers", type=int, help="Maximum number of worker processes")

    args = parser.parse_args(argv)

    try:
        return CliArgs(
            file_path=args.file_path,
            expression=args.expression,
            output=args.output,
            workers=args.workers,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct the results file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations.7z
    output: resources/operations_7z_results.txt

    input: resources/operations.tar.xz
    output: resources/operations_tar_xz_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name
    for suffix in input_path.suffixes:
        stem = stem[: -len(suffix)]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def evaluate_one(expression: str) -> int:
    """
    Evaluate one expression and print the outcome.

    :param str expression: Infix expression

    :return: Process exit status
    :rtype: int
    """
    postfix = ExpressionParser.infix_to_postfix(expression)
    if postfix is None:
        print(f"{expression} -> ERROR[malformed_grouping]: Unbalanced brackets", file=sys.stderr)
        return 1
    try:
        value = ExpressionParser.postfix_eval(postfix)
    except ExpressionError as exc:
        print(f"{expression} -> ERROR[{exc.kind.value}]: {exc}", file=sys.stderr)
        return 1
    print(f"postfix: {postfix}")
    print(f"value: {value}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function used by the ``stack-calc`` console script.
    """
    cli_args = parse_args(argv)

    if cli_args.expression is not None:
        return evaluate_one(cli_args.expression)

    input_path: Path = Path(cli_args.file_path)
    output_path: Path = cli_args.output or build_output_path(input_path)

    expressions = read_expressions(input_path)
    runner = BatchRunner(config=RunnerConfig(output_file=output_path, max_workers=cli_args.workers))
    results = runner.run(expressions)
    logger.info(f"Results written to {output_path}")

    return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
