"""
Command-line entrypoint.

Three modes:
- ``prodcalc EXPR...`` evaluates the expressions given as arguments
- ``prodcalc --file PATH`` evaluates a file or archive in worker processes
- ``prodcalc`` with no arguments starts an interactive session
"""

import argparse
from pathlib import Path
import sys
from typing import List, Optional, TextIO

from pydantic import BaseModel, Field, FilePath, ValidationError

from prodcalc.batch.loader import ExpressionLoader
from prodcalc.batch.runner import BatchRunner
from prodcalc.common.config import CalculatorConfig
from prodcalc.common.errors import EvalError
from prodcalc.common.formatting import format_number
from prodcalc.common.logger import build_logger
from prodcalc.common.parser import ExpressionParser
from prodcalc.session.session import CalculatorSession


# Options recognised before the first expression
FILE_OPTIONS = ("-f", "--file")
HELP_OPTIONS = ("-h", "--help")


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expressions : list of str
        Expressions to evaluate directly.
    file_path : FilePath, optional
        Path to a file containing one expression per line.
    """

    expressions: List[str] = Field(default_factory=list)
    file_path: Optional[FilePath] = None


def _mark_expressions(argv: List[str]) -> List[str]:
    """
    Insert "--" before the first expression so that "-5+2" is not read as an option.

    :param argv: Raw arguments

    :return: Arguments with "--" in front of the first expression
    """
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            return list(argv)
        if arg in FILE_OPTIONS:
            i += 2
        elif arg in HELP_OPTIONS or arg.startswith("--file="):
            i += 1
        else:
            return argv[:i] + ["--"] + argv[i:]
    return list(argv)


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments, defaults to sys.argv[1:]

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(prog="prodcalc", description="Evaluate arithmetic expressions")
    parser.add_argument("expressions", nargs="*", help="Expressions to evaluate, e.g. '2+3*4'")
    parser.add_argument("-f", "--file", dest="file_path", help="File or archive with one expression per line")

    args = parser.parse_args(_mark_expressions(sys.argv[1:] if argv is None else argv))
    # After "--" a file option shows up among the expressions
    mixed = any(e in FILE_OPTIONS or e.startswith("--file=") for e in args.expressions)
    if args.expressions and (args.file_path or mixed):
        parser.error("give either expressions or --file, not both")

    try:
        return CliArgs(expressions=args.expressions, file_path=args.file_path)
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct the results path next to the input file.

    Dots in the extensions become underscores and '_results.txt' is appended.

    Examples
    --------
    input: resources/operations.7z
    output: resources/operations_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def evaluate_arguments(expressions: List[str], out: TextIO) -> int:
    """Print one result line per expression; return 1 if any failed."""
    status = 0
    for expr in expressions:
        try:
            out.write(f"{expr} = {format_number(ExpressionParser.evaluate(expr))}\n")
        except EvalError as exc:
            out.write(f"{expr} -> ERROR: {type(exc).__name__}: {exc}\n")
            status = 1
    return status


def run_batch(input_path: Path, config: CalculatorConfig) -> int:
    output_path = build_output_path(input_path)
    expressions = ExpressionLoader().load(input_path)
    results = BatchRunner(output_file=output_path, settings=config).run(expressions)
    print(f"{len(results)} results written to {output_path}")
    return 0 if all(r.ok for r in results) else 1


def repl(session: CalculatorSession, lines: TextIO, out: TextIO) -> int:
    """
    Interactive loop: each line is typed into the session and committed with '='.

    Commands: ':history', ':clear' (history), ':quit'.
    """
    for raw in lines:
        line = raw.strip()
        if line == ":quit":
            break
        if line == ":history":
            for entry in session.history:
                out.write(f"{entry.expression} = {entry.result}\n")
            continue
        if line == ":clear":
            session.clear_history()
            continue
        session.press("AC")
        if line:
            session.press(line)
        out.write(session.press("=") + "\n")
        out.flush()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function used by the console script.
    """
    cli_args = parse_args(argv)
    try:
        config = CalculatorConfig.from_env()
    except ValidationError as exc:
        print(f"Invalid PRODCALC_* environment: {exc}", file=sys.stderr)
        return 2
    build_logger(level=config.log_level)

    if cli_args.file_path is not None:
        try:
            return run_batch(Path(cli_args.file_path), config)
        except ValueError as exc:
            print(f"Cannot read {cli_args.file_path}: {exc}", file=sys.stderr)
            return 2
    if cli_args.expressions:
        return evaluate_arguments(cli_args.expressions, sys.stdout)
    return repl(CalculatorSession(settings=config), sys.stdin, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
