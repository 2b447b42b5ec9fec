#!/usr/bin/env python3
"""
Command parser for the file manager.

Turns one line of user input into a Command value. Parsing never fails and
never touches session state; deciding whether a command is valid is left to
the dispatcher.

Design Principles:
- Single responsibility: Parse commands, don't execute them
- Testable: Pure functions with predictable outputs
"""

from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class Command:
    """
    A single parsed input line.

    ``name`` is the verb (the first token); ``args`` are the remaining
    positional tokens in order. ``raw`` keeps the stripped input line so
    prefix-matched verbs can look at it.
    """
    name: str
    args: List[str] = field(default_factory=list)
    raw: str = ''

    def __str__(self) -> str:
        return ' '.join([self.name] + self.args)


class CommandParser:
    """
    Parser for the file manager's command grammar.

    Tokens are separated by runs of whitespace. There is no quoting or
    escaping, so backslashes in Windows paths survive untouched.
    """

    def parse(self, command_line: str) -> Optional[Command]:
        """
        Parse a command line into a Command.

        Returns None for empty or whitespace-only input.
        """
        if not command_line or command_line.strip() == '':
            return None

        raw = command_line.strip()
        tokens = self.tokenize(raw)
        return Command(name=tokens[0], args=tokens[1:], raw=raw)

    @staticmethod
    def tokenize(text: str) -> List[str]:
        """Split text into whitespace-separated tokens."""
        return text.split()
