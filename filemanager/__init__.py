"""
filemanager - An interactive command shell over the real filesystem

This package provides a stateful shell with a single current-directory
cursor, a table-driven command dispatcher, and a streaming transfer engine
for copy, move, hash, compress and decompress operations.
"""

__version__ = "0.1.0"

from .errors import (
    FileManagerError,
    InvalidInput,
    MissingArgument,
    OperationFailed,
)

from .paths import resolve_path

from .session import (
    SessionState,
    DirectoryEntry,
    EntryKind,
)

from .transfer import (
    StreamTransfer,
    TransferTask,
    TransferResult,
    Transform,
    FailureReason,
)

from .operations import (
    OperationSet,
    CommandResult,
)

from .system_info import (
    SystemInfo,
    CpuInfo,
)

from .command_parser import (
    Command,
    CommandParser,
)

from .dispatcher import (
    CommandDispatcher,
    DispatcherState,
    Verb,
    VERBS,
)

from .terminal import (
    TerminalSession,
    TerminalConfig,
)

__all__ = [
    # Errors
    "FileManagerError",
    "InvalidInput",
    "MissingArgument",
    "OperationFailed",

    # Paths and session
    "resolve_path",
    "SessionState",
    "DirectoryEntry",
    "EntryKind",

    # Streaming
    "StreamTransfer",
    "TransferTask",
    "TransferResult",
    "Transform",
    "FailureReason",

    # Operations
    "OperationSet",
    "CommandResult",
    "SystemInfo",
    "CpuInfo",

    # Command handling
    "Command",
    "CommandParser",
    "CommandDispatcher",
    "DispatcherState",
    "Verb",
    "VERBS",

    # Terminal
    "TerminalSession",
    "TerminalConfig",

    # Version info
    "__version__",
]
