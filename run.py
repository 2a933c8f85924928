#!/usr/bin/env python3
"""
Runs a BASIC program file, or starts the web IDE with --serve.
"""
import argparse
import logging
import sys

from pydantic import ValidationError
from termcolor import colored

from config import InterpreterSettings
from errors import BasicError
from interpreter import run_source

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Line-numbered BASIC interpreter")
    parser.add_argument("file", nargs="?", help="BASIC source file to run")
    parser.add_argument("--max-iterations", type=int, help="line executions allowed before a run is stopped")
    parser.add_argument("-v", "--verbose", action="store_true", help="log lexer/parser/interpreter activity")
    parser.add_argument("--serve", action="store_true", help="start the web IDE instead of running a file")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    return parser


def report(error, stream=None):
    """Prints error to stderr, highlighted like a compiler diagnostic."""
    stream = stream or sys.stderr
    prefix = f"{error.phase} " if isinstance(error, BasicError) and error.phase else ""
    message = colored(f"{prefix}error: ", "red", attrs=["bold"])
    message += colored(type(error).__name__, attrs=["bold"]) + f": {error}"
    print(message, file=stream)


def serve(host, port):
    import uvicorn
    uvicorn.run("main:app", host=host, port=port)


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        settings = InterpreterSettings.from_env(
            max_iterations=args.max_iterations,
            log_level="DEBUG" if args.verbose else None,
        )
    except ValidationError as e:
        print(colored("error: ", "red", attrs=["bold"]) + f"invalid settings\n{e}", file=sys.stderr)
        return 2
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.serve:
        serve(args.host, args.port)
        return 0

    if args.file is None:
        build_parser().print_usage(sys.stderr)
        return 2

    try:
        with open(args.file, encoding="utf-8") as source_file:
            source = source_file.read()
    except OSError as e:
        print(colored("error: ", "red", attrs=["bold"]) + f"'{args.file}' could not be opened: {e.strerror}", file=sys.stderr)
        return 1

    try:
        halt = run_source(source, settings)
    except BasicError as e:
        report(e)
        return 1
    except KeyboardInterrupt:
        print(colored("error: ", "red", attrs=["bold"]) + "keyboard interrupt", file=sys.stderr)
        return 1

    logger.info("program halted: %s", halt.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
