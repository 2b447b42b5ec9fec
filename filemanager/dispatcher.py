#!/usr/bin/env python3
"""
Command dispatcher for the file manager.

The dispatcher owns the verb table, the session state and the operation
catalog. It takes one input line at a time, matches it to a verb, checks the
argument count, runs the handler with a snapshot of the current directory,
and turns any failure into one of two fixed notices. Whatever happens, it
finishes by showing the current directory.

Design Principles:
- The verb table is static data: precedence and arity are visible at a glance
- Handlers raise; only the dispatcher decides what the user sees
- Exactly one location line per input line
"""

import sys
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO, Tuple

from .command_parser import Command, CommandParser
from .errors import FileManagerError, InvalidInput, OperationFailed
from .operations import CommandResult, OperationSet, format_entries
from .session import SessionState

logger = logging.getLogger(__name__)

INVALID_INPUT = InvalidInput.notice
OPERATION_FAILED = OperationFailed.notice

EXIT_FAILED = 1
EXIT_INVALID = 2


class DispatcherState(Enum):
    """Lifecycle of a dispatcher."""
    READY = 'ready'
    EXECUTING = 'executing'
    CLOSED = 'closed'


@dataclass(frozen=True)
class Verb:
    """
    One row of the verb table.

    ``handler`` names a method on ``target`` ('dispatcher' or 'operations').
    Prefix verbs match the start of the raw line; all others match the
    first token exactly. ``variadic`` verbs receive every argument, the rest
    receive exactly ``arity`` of them.
    """
    name: str
    arity: int
    handler: str
    target: str = 'operations'
    prefix: bool = False
    variadic: bool = False

    def matches(self, command: Command) -> bool:
        if self.prefix:
            return command.raw.startswith(self.name)
        return command.name == self.name


# Order is precedence: the first matching row wins
VERBS: Tuple[Verb, ...] = (
    Verb('.exit', 0, '_exit', target='dispatcher', prefix=True),
    Verb('up', 0, '_up', target='dispatcher'),
    Verb('cd', 1, '_cd', target='dispatcher'),
    Verb('ls', 0, '_ls', target='dispatcher'),
    Verb('cat', 1, 'read_print'),
    Verb('add', 1, 'create'),
    Verb('rn', 2, 'rename'),
    Verb('cp', 2, 'copy'),
    Verb('mv', 2, 'move'),
    Verb('rm', 1, 'delete'),
    Verb('os', 1, 'os_info', variadic=True),
    Verb('hash', 1, 'hash'),
    Verb('compress', 2, 'compress'),
    Verb('decompress', 2, 'decompress'),
)


class CommandDispatcher:
    """
    Executes input lines against a session, one at a time.

    Output (streamed file contents, tables, digests, notices and the
    location line) goes to ``output``.
    """

    def __init__(self, session: SessionState,
                 operations: Optional[OperationSet] = None,
                 output: Optional[TextIO] = None,
                 verbs: Tuple[Verb, ...] = VERBS):
        self.session = session
        self.output = output or sys.stdout
        self.operations = operations or OperationSet(output=self.output)
        self.parser = CommandParser()
        self.verbs = verbs
        self.state = DispatcherState.READY

    @property
    def closed(self) -> bool:
        return self.state is DispatcherState.CLOSED

    def match(self, command: Optional[Command]) -> Optional[Verb]:
        """Return the first verb in the table that matches ``command``."""
        if command is None:
            return None
        for verb in self.verbs:
            if verb.matches(command):
                return verb
        return None

    def dispatch(self, command_line: str) -> Optional[CommandResult]:
        """
        Execute one input line.

        Returns the command's result, or None once the dispatcher is closed.
        The location line is written after every command except ``.exit``.
        """
        if self.closed:
            logger.debug("ignoring input after exit: %r", command_line)
            return None

        self.state = DispatcherState.EXECUTING
        try:
            result = self._execute(self.parser.parse(command_line))
        finally:
            if self.state is DispatcherState.EXECUTING:
                self.state = DispatcherState.READY

        if result.text:
            self._write(result.text)

        if not self.closed:
            self.show_location()
        return result

    def show_location(self):
        """Print the current directory."""
        self._write(f"You are currently in {self.session.current_directory}")

    def _write(self, text: str):
        self.output.write(text + '\n')
        self.output.flush()

    def _execute(self, command: Optional[Command]) -> CommandResult:
        verb = self.match(command)
        if verb is None:
            logger.debug("no verb matches %r", command.raw if command else '')
            return CommandResult(text=INVALID_INPUT, exit_code=EXIT_INVALID)

        if len(command.args) < verb.arity:
            logger.debug("%s expects %d argument(s), got %d",
                         verb.name, verb.arity, len(command.args))
            return CommandResult(text=INVALID_INPUT, exit_code=EXIT_INVALID)

        owner = self if verb.target == 'dispatcher' else self.operations
        handler = getattr(owner, verb.handler)
        args = command.args if verb.variadic else command.args[:verb.arity]
        cwd = self.session.snapshot()

        try:
            return handler(cwd, *args)
        except FileManagerError as e:
            logger.debug("%s: %s (cause: %r)", verb.name, e, getattr(e, 'cause', None))
            exit_code = EXIT_INVALID if isinstance(e, InvalidInput) else EXIT_FAILED
            return CommandResult(text=e.notice, exit_code=exit_code)
        except (OSError, ValueError) as e:
            # Raw OS and path errors from a handler are operation failures too
            logger.debug("%s: unexpected %s: %s", verb.name, type(e).__name__, e)
            return CommandResult(text=OPERATION_FAILED, exit_code=EXIT_FAILED)

    # Session verbs

    def _exit(self, cwd: str) -> CommandResult:
        self.state = DispatcherState.CLOSED
        return CommandResult(data='exit')

    def _up(self, cwd: str) -> CommandResult:
        return CommandResult(data=self.session.navigate_up())

    def _cd(self, cwd: str, path: str) -> CommandResult:
        return CommandResult(data=self.session.navigate_to(path))

    def _ls(self, cwd: str) -> CommandResult:
        entries = self.session.list_entries()
        return CommandResult(data=entries, text=format_entries(entries))
