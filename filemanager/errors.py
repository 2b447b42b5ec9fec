#!/usr/bin/env python3
"""
Exception hierarchy for the file manager.

Only two kinds of failure are ever shown to the user: malformed input and
failed operations. Everything raised inside the core derives from one of them
so the dispatcher can translate it into the matching notice.
"""

from typing import Any, Optional


class FileManagerError(Exception):
    """Base class for all file manager errors."""

    notice = 'Operation failed'


class InvalidInput(FileManagerError):
    """Malformed command: unknown verb, bad flag, or unusable navigation target."""

    notice = 'Invalid input'


class MissingArgument(InvalidInput):
    """A required positional argument was not supplied."""

    def __init__(self, name: str = 'path'):
        super().__init__(f"missing argument: {name}")
        self.name = name


class OperationFailed(FileManagerError):
    """
    The underlying filesystem or stream action failed.

    The original cause (an OSError or a failed TransferResult) is kept on
    ``cause`` for logging; it is never printed to the user.
    """

    notice = 'Operation failed'

    def __init__(self, message: str, cause: Optional[Any] = None):
        super().__init__(message)
        self.cause = cause
