#!/usr/bin/env python3
"""
Path resolution against the session's current directory.

Pure string manipulation: nothing here touches the filesystem.
"""

import os
from typing import Optional

from .errors import MissingArgument


def resolve_path(token: Optional[str], current_directory: str) -> str:
    """
    Resolve a user-supplied path token into a canonical absolute path.

    Absolute tokens are taken as-is; relative tokens are joined onto
    ``current_directory``. In both cases ``.`` and ``..`` components and
    redundant separators are collapsed.

    Raises:
        MissingArgument: if ``token`` is empty or None.
    """
    if not token:
        raise MissingArgument()

    if os.path.isabs(token):
        full_path = token
    else:
        full_path = os.path.join(current_directory, token)

    resolved = os.path.normpath(full_path)

    # POSIX keeps a leading '//' as implementation-defined; collapse it
    if resolved.startswith('//'):
        resolved = resolved[1:]

    return resolved


def parent_directory(path: str) -> str:
    """Return the parent of ``path``; the root is its own parent."""
    return os.path.dirname(os.path.normpath(path)) or path
