"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the dxfkit commands.

Copyright (c) 2026 dxfkit Contributors
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    FORMAT_ERROR = 1     # Malformed file, invalid record, or advisories under --strict
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for the dxfkit commands.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from dxfkit.errors import CodecError, DxfError

    if isinstance(error, CodecError):
        # Codec errors carry their own "file:line: error:" prefix
        click.echo(str(error), err=True)
        sys.exit(ExitCode.FORMAT_ERROR)

    elif isinstance(error, DxfError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.FORMAT_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
