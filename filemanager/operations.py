#!/usr/bin/env python3
"""
File operations for the file manager.

Every operation follows the same shape: check its arguments, resolve all
paths against a snapshot of the current directory, then touch the
filesystem. Streaming work (read, copy, move, hash, compress, decompress)
goes through StreamTransfer; rename, create and delete are direct metadata
calls. Failures are raised as InvalidInput or OperationFailed and never
printed here.
"""

import os
import sys
import json
from dataclasses import dataclass
from typing import Any, List, Optional, TextIO

from .errors import InvalidInput, OperationFailed
from .paths import resolve_path
from .session import DirectoryEntry
from .system_info import SystemInfo
from .transfer import StreamTransfer, TransferTask, TransferResult, Transform


@dataclass
class CommandResult:
    """
    Result of executing one command line.

    ``text`` is what the terminal shows after the command (None for
    silent commands and for output that was already streamed).
    ``exit_code`` is 0 on success, 1 for a failed operation and 2 for
    invalid input.
    """
    data: Any = None
    text: Optional[str] = None
    exit_code: int = 0

    def __str__(self) -> str:
        return self.text if self.text is not None else ''


def format_entries(entries: List[DirectoryEntry]) -> str:
    """Render directory entries as an indexed Name/Type table."""
    index_width = max(len('(index)'), len(str(max(len(entries) - 1, 0))))
    name_width = max([len('Name')] + [len(e.name) for e in entries])
    type_width = max([len('Type')] + [len(e.kind.value) for e in entries])

    def row(index, name, kind):
        return f"{index:<{index_width}} | {name:<{name_width}} | {kind:<{type_width}}".rstrip()

    lines = [row('(index)', 'Name', 'Type')]
    lines.append('-' * len(lines[0]))
    for i, entry in enumerate(entries):
        lines.append(row(str(i), entry.name, entry.kind.value))
    return '\n'.join(lines)


class OperationSet:
    """
    Catalog of file operations.

    Operations take the current directory as their first argument, captured
    by the caller at command start, followed by the user's positional tokens.
    """

    OS_FLAGS = ('--EOL', '--cpus', '--homedir', '--username', '--architecture')

    def __init__(self, transfer: Optional[StreamTransfer] = None,
                 system_info: Optional[SystemInfo] = None,
                 output: Optional[TextIO] = None):
        self.transfer = transfer or StreamTransfer()
        self.system_info = system_info or SystemInfo()
        self.output = output or sys.stdout

    def _run(self, task: TransferTask, action: str) -> TransferResult:
        result = self.transfer.run(task)
        self._check(result, action)
        return result

    @staticmethod
    def _check(result: TransferResult, action: str):
        if not result.ok:
            raise OperationFailed(f"{action} failed: {result.reason.value}", cause=result)

    @staticmethod
    def _target_in(cwd: str, source: str, dest_dir: Optional[str]) -> str:
        """Destination file for copy/move: dest_dir joined with the source's base name."""
        directory = resolve_path(dest_dir, cwd)
        return os.path.join(directory, os.path.basename(source))

    # Reading

    def read_print(self, cwd: str, path: Optional[str] = None) -> CommandResult:
        """Stream a file's contents to the output chunk by chunk.

        Usage:
            cat PATH
        """
        source = resolve_path(path, cwd)
        result = self._run(TransferTask(source_path=source, sink_stream=self.output), 'cat')
        return CommandResult(data=result.bytes_read)

    def hash(self, cwd: str, path: Optional[str] = None) -> CommandResult:
        """Print the SHA-256 digest of a file as lowercase hex.

        Usage:
            hash PATH
        """
        source = resolve_path(path, cwd)
        result = self._run(TransferTask(source_path=source, transform=Transform.HASH), 'hash')
        return CommandResult(data=result.digest, text=result.digest)

    # Creating, renaming, deleting

    def create(self, cwd: str, path: Optional[str] = None) -> CommandResult:
        """Create a new empty file. Fails if the path already exists.

        Usage:
            add PATH
        """
        target = resolve_path(path, cwd)
        try:
            with open(target, 'x'):
                pass
        except (OSError, ValueError) as e:
            raise OperationFailed(f"cannot create {target}", cause=e) from e
        return CommandResult(data=target)

    def rename(self, cwd: str, path: Optional[str] = None,
               new_path: Optional[str] = None) -> CommandResult:
        """Rename a file or directory.

        Usage:
            rn PATH NEW_PATH
        """
        source = resolve_path(path, cwd)
        target = resolve_path(new_path, cwd)
        try:
            os.rename(source, target)
        except (OSError, ValueError) as e:
            raise OperationFailed(f"cannot rename {source}", cause=e) from e
        return CommandResult(data=target)

    def delete(self, cwd: str, path: Optional[str] = None) -> CommandResult:
        """Remove a file.

        Usage:
            rm PATH
        """
        target = resolve_path(path, cwd)
        try:
            os.remove(target)
        except (OSError, ValueError) as e:
            raise OperationFailed(f"cannot remove {target}", cause=e) from e
        return CommandResult(data=target)

    # Copying and moving

    def copy(self, cwd: str, path: Optional[str] = None,
             dest_dir: Optional[str] = None) -> CommandResult:
        """Copy a file into a directory, keeping its name.

        Usage:
            cp PATH DEST_DIR
        """
        source = resolve_path(path, cwd)
        target = self._target_in(cwd, source, dest_dir)
        self._run(TransferTask(source_path=source, sink_path=target), 'cp')
        return CommandResult(data=target)

    def move(self, cwd: str, path: Optional[str] = None,
             dest_dir: Optional[str] = None) -> CommandResult:
        """Move a file into a directory. The source is deleted only after a complete copy.

        Usage:
            mv PATH DEST_DIR
        """
        source = resolve_path(path, cwd)
        target = self._target_in(cwd, source, dest_dir)
        self._check(self.transfer.move(source, target), 'mv')
        return CommandResult(data=target)

    # Compression

    def compress(self, cwd: str, path: Optional[str] = None,
                 dest_path: Optional[str] = None) -> CommandResult:
        """Compress a file into a Brotli stream.

        Usage:
            compress PATH DEST_PATH
        """
        source = resolve_path(path, cwd)
        target = resolve_path(dest_path, cwd)
        self._run(TransferTask(source_path=source, sink_path=target,
                               transform=Transform.COMPRESS), 'compress')
        return CommandResult(data=target)

    def decompress(self, cwd: str, path: Optional[str] = None,
                   dest_path: Optional[str] = None) -> CommandResult:
        """Decompress a file produced by compress.

        Usage:
            decompress PATH DEST_PATH
        """
        source = resolve_path(path, cwd)
        target = resolve_path(dest_path, cwd)
        self._run(TransferTask(source_path=source, sink_path=target,
                               transform=Transform.DECOMPRESS), 'decompress')
        return CommandResult(data=target)

    # Host information

    def os_info(self, cwd: str, *flags: str) -> CommandResult:
        """Show host information selected by a flag.

        Usage:
            os --EOL | --cpus | --homedir | --username | --architecture
        """
        flag = next((f for f in self.OS_FLAGS if f in flags), None)
        info = self.system_info

        if flag == '--EOL':
            eol = info.eol()
            return CommandResult(data=eol, text=f"End of Line character is: {json.dumps(eol)}")
        elif flag == '--cpus':
            cpus = info.cpus()
            lines = [f"Total CPUs: {len(cpus)}"]
            for i, cpu in enumerate(cpus, 1):
                lines.append(f"CPU {i}:")
                lines.append(f"  Model: {cpu.model}")
                lines.append(f"  Clock rate: {cpu.speed_ghz:.2f} GHz")
            return CommandResult(data=cpus, text='\n'.join(lines))
        elif flag == '--homedir':
            home = info.homedir()
            return CommandResult(data=home, text=f"Home Directory: {home}")
        elif flag == '--username':
            user = info.username()
            return CommandResult(data=user, text=f"Current System Username: {user}")
        elif flag == '--architecture':
            arch = info.architecture()
            return CommandResult(data=arch, text=f"CPU Architecture: {arch}")

        raise InvalidInput(f"unknown os flag: {' '.join(flags) or '<none>'}")
