#!/usr/bin/env python3
"""
Error reporting for the interolog command line and MITAB ingestion.
"""
import re
import sys
import traceback
import logging
from functools import wraps
from typing import Callable, Optional

from .exceptions import InterologError

# Exit codes of cli_error_handler
EXIT_ERROR = 1
EXIT_UNEXPECTED = 2
EXIT_INTERRUPTED = 130


def error_location(error: InterologError) -> Optional[str]:
    """Where a file error happened, as ``path`` or ``path:line``

    Returns:
        None when the error details carry no path
    """
    path = error.details.get("path")
    if not path:
        return None
    line_number = error.details.get("line_number")
    return f"{path}:{line_number}" if line_number else str(path)


def format_error(error: Exception, verbose: bool = False) -> str:
    """Format an error message for display

    Parse and file errors are prefixed with their location. In verbose
    mode the remaining details (e.g. the offending MITAB line) follow.
    """
    if isinstance(error, InterologError):
        location = error_location(error)
        msg = f"{error.__class__.__name__}: {error.message}"
        if location:
            msg = f"{location}: {msg}"
        extra = {key: value for key, value in error.details.items()
                 if key not in ("path", "line_number")}
        if verbose and extra:
            msg += "\nDetails:" + "".join(f"\n  {key}: {value}" for key, value in extra.items())
        return msg

    if verbose:
        return f"Unexpected Error ({error.__class__.__name__}): {str(error)}\n{traceback.format_exc()}"
    return f"Unexpected Error: {str(error)}"


def cli_error_handler(func: Callable[..., int]) -> Callable[..., int]:
    """Decorator for the CLI entry point: report errors and exit with a status code

    Application errors exit with 1, anything else with 2 and an
    interrupt with 130. ``--verbose`` in the arguments turns on details.
    """
    @wraps(func)
    def wrapper(argv=None, *args, **kwargs) -> int:
        logger = logging.getLogger("interolog.cli")
        arguments = sys.argv[1:] if argv is None else argv
        verbose = any(arg == '--verbose' or re.fullmatch(r'-v+', arg) for arg in arguments)
        try:
            return func(argv, *args, **kwargs)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            print("\nOperation cancelled by user", file=sys.stderr)
            sys.exit(EXIT_INTERRUPTED)
        except InterologError as e:
            logger.debug(f"{e.__class__.__name__}: {e.message}", exc_info=True)
            print(format_error(e, verbose=verbose), file=sys.stderr)
            sys.exit(EXIT_ERROR)
        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            print(format_error(e), file=sys.stderr)
            print("See log for details. Run with --verbose for more information.", file=sys.stderr)
            sys.exit(EXIT_UNEXPECTED)
    return wrapper


def log_exception(logger: logging.Logger, error: InterologError, level: int = logging.ERROR) -> None:
    """Log an application error with its location"""
    logger.log(level, format_error(error, verbose=True))
