#!/usr/bin/env python3
"""
Tests for the file manager command parser.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from filemanager.command_parser import Command, CommandParser


class TestCommandParser(unittest.TestCase):
    """Test the command parser."""

    def setUp(self):
        """Set up test fixtures."""
        self.parser = CommandParser()

    def test_parse_simple_command(self):
        """Test parsing a verb with no arguments."""
        cmd = self.parser.parse("ls")
        self.assertEqual(cmd.name, "ls")
        self.assertEqual(cmd.args, [])

    def test_parse_command_with_args(self):
        """Test positional arguments keep their order."""
        cmd = self.parser.parse("cp notes.txt backup")
        self.assertEqual(cmd.name, "cp")
        self.assertEqual(cmd.args, ["notes.txt", "backup"])

    def test_runs_of_whitespace(self):
        """Test that repeated spaces and tabs separate tokens."""
        cmd = self.parser.parse("  rn \t a.txt    b.txt  \n")
        self.assertEqual(cmd.name, "rn")
        self.assertEqual(cmd.args, ["a.txt", "b.txt"])
        self.assertEqual(cmd.raw, "rn \t a.txt    b.txt")

    def test_empty_input(self):
        """Test that blank lines parse to None."""
        self.assertIsNone(self.parser.parse(""))
        self.assertIsNone(self.parser.parse("   \n"))
        self.assertIsNone(self.parser.parse(None))

    def test_backslashes_preserved(self):
        """Test that Windows-style paths are not mangled."""
        cmd = self.parser.parse(r"cd C:\Users\guest")
        self.assertEqual(cmd.args, [r"C:\Users\guest"])

    def test_flags_are_plain_tokens(self):
        """Test that flags are not interpreted by the parser."""
        cmd = self.parser.parse("os --cpus")
        self.assertEqual(cmd.name, "os")
        self.assertEqual(cmd.args, ["--cpus"])


class TestCommand(unittest.TestCase):
    """Test the Command value."""

    def test_str(self):
        cmd = Command(name="mv", args=["a", "b"], raw="mv a b")
        self.assertEqual(str(cmd), "mv a b")


if __name__ == '__main__':
    unittest.main()
