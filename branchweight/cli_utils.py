"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Generator
from .progress import get_progress
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import OUTPUT_FORMATS, format_output, get_format_from_env


def standard_command():
    """
    Decorator that provides standard CLI behavior:
    - Progress reporting on stderr
    - Clean data output on stdout in the requested format
    - --quiet/-q to suppress data output
    - Consistent error handling and exit codes

    The wrapped command may return a generator, list or dict of records
    to print, or None when it has handled output itself.
    """
    def decorator(func):

        @wraps(func)
        def wrapper(*args, **kwargs):
            verbose = kwargs.get('verbose', False)
            quiet = kwargs.get('quiet', False)
            output_format = kwargs.get('format', None)
            fields_str = kwargs.get('fields', None)
            fields = fields_str.split(',') if fields_str else None

            if output_format is None:
                output_format = get_format_from_env('jsonl')

            progress = get_progress(enabled=verbose or None)
            kwargs['progress'] = progress

            try:
                result = func(*args, **kwargs)

                if quiet:
                    # Consume the generator but don't output
                    if isinstance(result, Generator):
                        for _ in result:
                            pass
                elif result is None or output_format == 'table':
                    # Command handles its own output
                    pass
                elif isinstance(result, (Generator, list, tuple)):
                    for line in format_output(iter(result), output_format, fields):
                        print(line, flush=True)
                elif isinstance(result, dict):
                    for line in format_output(iter([result]), output_format, fields):
                        print(line, flush=True)
                else:
                    print(result, flush=True)

                sys.exit(SUCCESS)

            except KeyboardInterrupt:
                progress.error("Interrupted by user")
                sys.exit(INTERRUPTED)
            except click.ClickException:
                # Click exceptions already have their exit code
                raise
            except CommandError as e:
                progress.error(str(e))
                if not quiet:
                    error_obj = {
                        "error": str(e),
                        "type": type(e).__name__,
                        "exit_code": e.exit_code
                    }
                    print(json.dumps(error_obj, ensure_ascii=False), flush=True)
                sys.exit(e.exit_code)
            except Exception as e:
                progress.error(f"Command failed: {e}")
                if not quiet:
                    error_obj = {
                        "error": str(e),
                        "type": type(e).__name__
                    }
                    print(json.dumps(error_obj, ensure_ascii=False), flush=True)
                sys.exit(get_exit_code_for_exception(e))

        return wrapper
    return decorator


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                           help='Force progress output and debug logging'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                         help='Suppress data output, show only progress'),
    'format': click.option('-f', '--format',
                         type=click.Choice(list(OUTPUT_FORMATS)),
                         help='Output format (default: jsonl, or from BRANCHWEIGHT_FORMAT env)'),
    'fields': click.option('--fields',
                         help='Comma-separated list of fields to include (for CSV/TSV)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
