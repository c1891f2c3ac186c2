#!/usr/bin/env python3
"""
EFP command line.

Parses an EFP source file and prints every top-level expression, one per
line, in canonical prefix form. Expressions are printed as they are parsed,
so everything before a syntax error is still shown.

Usage:
    efp [file] [options]

Options:
    --source        Print re-parseable EFP source instead of prefix form
    --check         Only check the file parses; print a summary
    -v, --verbose   Log parser decisions to stderr
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .parser import Parser, ParseError, raised_recursion_limit
from .printer import print_expr, format_source

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_FILE = "example.efp"

EXIT_OK = 0
EXIT_PARSE_ERROR = 1
EXIT_IO_ERROR = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="efp",
        description="Parse EFP source and print its syntax tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    efp                         # Parse example.efp in the current directory
    efp program.efp             # Print each expression in prefix form
    efp program.efp --source    # Print normalized EFP source
    efp program.efp --check     # Syntax check only
        """
    )

    parser.add_argument('file', nargs='?', default=DEFAULT_SOURCE_FILE,
                        help=f'EFP source file (default: {DEFAULT_SOURCE_FILE})')

    # Output options
    output = parser.add_mutually_exclusive_group()
    output.add_argument('--source', action='store_true',
                        help='Print re-parseable EFP source instead of prefix form')
    output.add_argument('--check', action='store_true',
                        help='Only check that the file parses')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log parser decisions to stderr')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')

    return parser


def run(path: str, source_form: bool = False, check_only: bool = False) -> int:
    """Parse a file and print its expressions. Returns the exit status."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            source = f.read()
    except OSError as e:
        print(f"efp: cannot read {path}: {e.strerror}", file=sys.stderr)
        return EXIT_IO_ERROR

    render = format_source if source_form else print_expr
    parser = Parser(source, path)
    count = 0

    try:
        for expression in parser.iter_expressions():
            count += 1
            if not check_only:
                with raised_recursion_limit():
                    text = render(expression)
                print(text)
    except ParseError as e:
        logger.debug("stopped after %d expressions", count)
        print(str(e), end="", file=sys.stderr)
        return EXIT_PARSE_ERROR
    except RecursionError:
        logger.debug("printer recursion limit hit after %d expressions", count)
        print(f"efp: {path}: expression {count} is nested too deeply to print",
              file=sys.stderr)
        return EXIT_PARSE_ERROR

    if check_only:
        print(f"{path}: OK ({count} expressions)")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the efp command"""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    return run(args.file, source_form=args.source, check_only=args.check)


if __name__ == "__main__":
    sys.exit(main())
