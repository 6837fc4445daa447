"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
from functools import wraps

import click

from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)

LOG_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Send the gitsplit log hierarchy to stderr.

    INFO by default, DEBUG with --verbose. Calling it again rebinds the
    existing handler to the current stderr instead of adding another one.
    """
    logger = logging.getLogger("gitsplit")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in logger.handlers:
        if getattr(handler, "_gitsplit", False):
            handler.setStream(sys.stderr)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._gitsplit = True
    logger.addHandler(handler)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Logging on stderr (--verbose switches to DEBUG)
    - Consistent error handling, one JSON error object on stdout
    - Exit code taken from the exception
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        configure_logging(kwargs.get('verbose', False))
        logger = logging.getLogger("gitsplit")

        try:
            func(*args, **kwargs)
        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            logger.error(str(e))
            error_obj = {
                "error": str(e),
                "type": type(e).__name__,
                "exit_code": e.exit_code,
            }
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            error_obj = {
                "error": str(e),
                "type": type(e).__name__,
            }
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))

        sys.exit(SUCCESS)

    return wrapper


# Standard options that the commands share
common_options = {
    'config': click.option('-c', '--config', 'config_path', type=click.Path(dir_okay=False),
                           help='Configuration file (default: .gitsplit.yml or GITSPLIT_CONFIG)'),
    'ref': click.option('--ref', 'refs', multiple=True,
                        help='Only process this reference (repeatable)'),
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Enable debug logging'),
    'pretty': click.option('--pretty', is_flag=True,
                           help='Display with rich formatting'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('config', 'verbose')
        def my_command(config_path, verbose):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
