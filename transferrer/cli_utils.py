"""
Common CLI utilities and decorators for consistent command behavior.

Commands return their data; standard_command turns that into JSONL on
stdout and turns exceptions into a JSON error object plus an exit code.
"""

import json
import logging
import sys
import click
from functools import wraps
from typing import Any, Dict
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)

logger = logging.getLogger(__name__)


def _emit(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False), flush=True)


def _print_jsonl(result: Any) -> None:
    if isinstance(result, (list, tuple)):
        for item in result:
            _emit(item)
    else:
        _emit(result)


def _error_object(exc: Exception) -> Dict[str, Any]:
    error = {"error": str(exc), "type": type(exc).__name__}
    if isinstance(exc, CommandError):
        error["exit_code"] = exc.exit_code
    return error


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - JSONL output on stdout (one object per line)
    - --quiet/-q suppresses data and error objects, leaving only logs
    - Fatal errors are logged (console and run log file), emitted as a JSON
      error object and mapped to an exit code
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        quiet = kwargs.get('quiet', False)

        try:
            result = func(*args, **kwargs)
        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except Exception as e:
            if isinstance(e, CommandError):
                logger.error(str(e))
            else:
                logger.exception(f"Command failed: {e}")
            if not quiet:
                _emit(_error_object(e))
            sys.exit(get_exit_code_for_exception(e))

        if result is not None and not quiet:
            _print_jsonl(result)
        sys.exit(SUCCESS)

    return wrapper


# Options shared by commands
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                           help='Show debug logging'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                         help='Suppress data output, show only logs'),
    'dry_run': click.option('--dry-run', is_flag=True,
                           help='Sign transfers but do not submit them'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'dry_run')
        def my_command(verbose, dry_run):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            func = common_options[name](func)
        return func
    return decorator
