#!/usr/bin/env python3
"""
Terminal front end for the file manager.

This module wires configuration, session state, operations and the
dispatcher together and runs the read-eval-print loop: greeting, one line
at a time through the dispatcher, and a closing notice on ``.exit``, end of
input or Ctrl-C.
"""

import os
import sys
import logging
import argparse
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from .dispatcher import CommandDispatcher, OPERATION_FAILED
from .errors import InvalidInput
from .operations import OperationSet
from .session import SessionState
from .system_info import SystemInfo
from .transfer import StreamTransfer, DEFAULT_CHUNK_SIZE, DEFAULT_QUEUE_DEPTH

logger = logging.getLogger(__name__)

DEFAULT_USER = 'Guest'


@dataclass
class TerminalConfig:
    """Configuration for a terminal session."""
    user: str = DEFAULT_USER
    initial_dir: str = field(default_factory=lambda: os.path.expanduser('~'))
    chunk_size: int = DEFAULT_CHUNK_SIZE
    queue_depth: int = DEFAULT_QUEUE_DEPTH
    remove_partial: bool = False
    log_level: str = 'WARNING'


class TerminalSession:
    """
    Main terminal session manager.

    Owns the REPL loop. Commands are read and executed strictly one after
    another; a command and all of its I/O finish before the next line is
    read.
    """

    def __init__(self, config: Optional[TerminalConfig] = None,
                 output: Optional[TextIO] = None,
                 system_info: Optional[SystemInfo] = None):
        """Initialize terminal session."""
        self.config = config or TerminalConfig()
        self.output = output or sys.stdout
        self.session = SessionState(self.config.initial_dir)
        self.transfer = StreamTransfer(
            chunk_size=self.config.chunk_size,
            queue_depth=self.config.queue_depth,
            remove_partial=self.config.remove_partial,
        )
        self.operations = OperationSet(
            transfer=self.transfer,
            system_info=system_info or SystemInfo(),
            output=self.output,
        )
        self.dispatcher = CommandDispatcher(
            self.session, operations=self.operations, output=self.output
        )
        self.running = False

    def _write(self, text: str):
        self.output.write(text + '\n')
        self.output.flush()

    def greet(self):
        """Print the welcome banner and the starting location."""
        self._write(f"Welcome to the File Manager, {self.config.user}!")
        self.dispatcher.show_location()

    def farewell(self):
        """Print the closing notice."""
        self._write(f"Thank you for using File Manager, {self.config.user}, goodbye!")

    def execute_command(self, command_line: str) -> Optional[str]:
        """
        Execute a command line and return its text output.

        Returns None once the session has been closed by ``.exit``.
        """
        result = self.dispatcher.dispatch(command_line)
        if result is None or self.dispatcher.closed:
            return None
        return str(result)

    def run_interactive(self, lines: Optional[TextIO] = None) -> int:
        """
        Run the read-eval-print loop until exit.

        ``lines`` defaults to reading from the terminal with input().
        """
        self.running = True
        self.greet()
        self._write("Print your command...")

        try:
            if lines is None:
                while self.running:
                    try:
                        command_line = input()
                    except EOFError:
                        break
                    self._step(command_line)
            else:
                for command_line in lines:
                    self._step(command_line.rstrip('\r\n'))
                    if not self.running:
                        break
        except KeyboardInterrupt:
            # The transfer in flight has already closed its handles
            logger.debug("interrupted")
            self._write('')
        finally:
            self.running = False
            self.farewell()
        return 0

    def _step(self, command_line: str):
        try:
            output = self.execute_command(command_line)
        except Exception:
            logger.debug("unexpected error running %r", command_line, exc_info=True)
            self._write(OPERATION_FAILED)
            self.dispatcher.show_location()
            return
        if output is None:
            self.running = False

    def run_command(self, command_line: str) -> str:
        """
        Run a single command and return output.

        This method is useful for non-interactive use.
        """
        output = self.execute_command(command_line)
        return output if output is not None else ''

    def run_script(self, script_lines: List[str]) -> List[str]:
        """
        Run a script (list of command lines) and return outputs.

        Blank lines and lines starting with '#' are skipped; ``.exit`` stops
        the script.
        """
        outputs = []
        for line in script_lines:
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            output = self.execute_command(line)
            if output is None:
                break
            outputs.append(output)

        return outputs


def positive_int(value: str) -> int:
    """argparse type for sizes that must be at least 1."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Interactive file manager')
    parser.add_argument('-u', '--username', default=DEFAULT_USER,
                        help='Name shown in the greeting')
    parser.add_argument('-d', '--directory', default=None,
                        help='Initial directory (default: home directory)')
    parser.add_argument('-c', '--command', action='append',
                        help='Execute command and exit (repeatable)')
    parser.add_argument('--chunk-size', type=positive_int, default=DEFAULT_CHUNK_SIZE,
                        help='Bytes read per chunk during transfers')
    parser.add_argument('--remove-partial', action='store_true',
                        help='Delete partially written files when a transfer fails')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Diagnostic log level (logs go to stderr)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the file manager."""
    args = build_arg_parser().parse_args(argv)

    config = TerminalConfig(
        user=args.username,
        chunk_size=args.chunk_size,
        remove_partial=args.remove_partial,
        log_level=args.log_level,
    )
    if args.directory:
        config.initial_dir = args.directory

    logging.basicConfig(
        level=config.log_level,
        format='[%(asctime)s] %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    try:
        session = TerminalSession(config=config)
    except (InvalidInput, OSError) as e:
        # Startup path resolution is the only fatal error
        print(f"Cannot start in {config.initial_dir}: {e}", file=sys.stderr)
        return 1

    if args.command:
        session.greet()
        for command_line in args.command:
            if session.execute_command(command_line) is None:
                break
        session.farewell()
        return 0

    return session.run_interactive()


if __name__ == '__main__':
    sys.exit(main())
