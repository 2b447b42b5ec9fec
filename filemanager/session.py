#!/usr/bin/env python3
"""
Session state for the file manager.

The session owns a single navigation cursor, the current directory. It is
only mutated through navigate_up() and navigate_to(); operations receive a
snapshot of it instead of holding a reference to the live value.
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

from .errors import InvalidInput, OperationFailed
from .paths import resolve_path, parent_directory

logger = logging.getLogger(__name__)


class EntryKind(Enum):
    """Kinds of directory entries, in display order."""
    DIRECTORY = 'directory'
    FILE = 'file'


@dataclass(frozen=True)
class DirectoryEntry:
    """A single child of a listed directory."""
    name: str
    kind: EntryKind

    def sort_key(self):
        """Directories first, then by name within each group."""
        return (0 if self.kind is EntryKind.DIRECTORY else 1, self.name)


class SessionState:
    """
    Holds the current directory for one interactive session.

    Invariant: ``current_directory`` always names a directory that existed
    the last time it was validated. A failed navigation leaves it untouched.
    """

    def __init__(self, initial_directory: str):
        """Initialize with an absolute, existing directory."""
        initial = os.path.abspath(initial_directory)
        if not os.path.isdir(initial):
            raise InvalidInput(f"not a directory: {initial}")
        self._current = initial

    @property
    def current_directory(self) -> str:
        return self._current

    def snapshot(self) -> str:
        """Return the current directory as seen at operation start."""
        return self._current

    # Navigation

    def navigate_up(self) -> str:
        """Move to the parent directory. A no-op at the filesystem root."""
        parent = parent_directory(self._current)
        if parent != self._current:
            logger.debug("up: %s -> %s", self._current, parent)
            self._current = parent
        return self._current

    def navigate_to(self, token: str) -> str:
        """
        Change the current directory to ``token``.

        The token is resolved against the current directory and must name an
        existing, accessible directory. Otherwise InvalidInput is raised and
        the session is left unchanged.
        """
        target = resolve_path(token, self._current)

        if not os.path.isdir(target) or not os.access(target, os.X_OK):
            logger.debug("cd: rejected %s", target)
            raise InvalidInput(f"cannot navigate to {token}")

        logger.debug("cd: %s -> %s", self._current, target)
        self._current = target
        return self._current

    # Inspection

    def list_entries(self) -> List[DirectoryEntry]:
        """
        Enumerate direct children of the current directory.

        Returns entries sorted with directories before files, each group
        ordered by name.

        Raises:
            OperationFailed: if the directory cannot be read.
        """
        directory = self.snapshot()
        entries = []
        try:
            with os.scandir(directory) as it:
                for item in it:
                    try:
                        is_dir = item.is_dir()
                    except OSError:
                        is_dir = False
                    kind = EntryKind.DIRECTORY if is_dir else EntryKind.FILE
                    entries.append(DirectoryEntry(name=item.name, kind=kind))
        except OSError as e:
            raise OperationFailed(f"cannot list {directory}", cause=e) from e

        return sorted(entries, key=DirectoryEntry.sort_key)
