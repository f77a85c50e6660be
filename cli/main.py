"""CLI entry point.

With no arguments the interactive REPL starts. Otherwise the arguments are
run as a single command, e.g. `sharedrive share report.pdf bob`.
"""

import os
import shlex
import sys

from common.logging_config import setup_logging
from cli.commands import dispatch_command
from cli.parser import ParseError, parse_command
from cli.repl import repl_loop


def run_once(args: list[str]) -> int:
    """Run one command from argv; returns the process exit code."""
    try:
        cmd_obj = parse_command(shlex.join(args))
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    result = dispatch_command(cmd_obj)
    print(result)
    return 1 if result.startswith("Error") else 0


def main() -> None:
    """Entry point for CLI."""
    args = sys.argv[1:]
    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)
    logger.debug("Debug logging enabled")

    if args:
        sys.exit(run_once(args))

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
