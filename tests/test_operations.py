#!/usr/bin/env python3
"""
Tests for the file operation catalog.

Each operation is called the way the dispatcher calls it: with a snapshot
of the current directory followed by the user's tokens.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import hashlib
import pytest
import tempfile
import shutil

from filemanager.errors import InvalidInput, MissingArgument, OperationFailed
from filemanager.operations import OperationSet, CommandResult, format_entries
from filemanager.session import DirectoryEntry, EntryKind
from filemanager.system_info import SystemInfo, CpuInfo
from filemanager.transfer import StreamTransfer


class FakeSystemInfo(SystemInfo):
    """Deterministic host facts."""

    def eol(self):
        return '\n'

    def cpus(self):
        return [CpuInfo('Test CPU', 2400.0), CpuInfo('Test CPU', 3150.5)]

    def homedir(self):
        return '/home/tester'

    def username(self):
        return 'tester'

    def architecture(self):
        return 'x86_64'


@pytest.fixture
def temp_dir():
    """Create a temporary directory with a file and a subdirectory."""
    temp = tempfile.mkdtemp()
    with open(os.path.join(temp, 'notes.txt'), 'wb') as f:
        f.write(b'first line\nsecond line\n')
    os.mkdir(os.path.join(temp, 'backup'))
    yield temp
    shutil.rmtree(temp, ignore_errors=True)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def ops(output):
    return OperationSet(transfer=StreamTransfer(chunk_size=4),
                        system_info=FakeSystemInfo(), output=output)


def read(path):
    with open(path, 'rb') as f:
        return f.read()


class TestReadPrint:
    """cat"""

    def test_streams_contents(self, ops, output, temp_dir):
        result = ops.read_print(temp_dir, 'notes.txt')
        assert output.getvalue() == 'first line\nsecond line\n'
        assert result.text is None
        assert result.data == len('first line\nsecond line\n')

    def test_missing_file(self, ops, output, temp_dir):
        with pytest.raises(OperationFailed):
            ops.read_print(temp_dir, 'missing.txt')
        assert output.getvalue() == ''

    def test_missing_argument(self, ops, temp_dir):
        with pytest.raises(MissingArgument):
            ops.read_print(temp_dir)


class TestCreate:
    """add"""

    def test_creates_empty_file(self, ops, temp_dir):
        ops.create(temp_dir, 'new.txt')
        assert read(os.path.join(temp_dir, 'new.txt')) == b''

    def test_existing_file_untouched(self, ops, temp_dir):
        """Given an existing file, when adding it, then OperationFailed and no truncation."""
        with pytest.raises(OperationFailed):
            ops.create(temp_dir, 'notes.txt')
        assert read(os.path.join(temp_dir, 'notes.txt')) == b'first line\nsecond line\n'

    def test_missing_parent(self, ops, temp_dir):
        with pytest.raises(OperationFailed):
            ops.create(temp_dir, 'nope/new.txt')


class TestRename:
    """rn"""

    def test_rename(self, ops, temp_dir):
        ops.rename(temp_dir, 'notes.txt', 'renamed.txt')
        assert not os.path.exists(os.path.join(temp_dir, 'notes.txt'))
        assert read(os.path.join(temp_dir, 'renamed.txt')) == b'first line\nsecond line\n'

    def test_new_name_relative_to_current_directory(self, ops, temp_dir):
        ops.rename(temp_dir, 'notes.txt', 'backup/notes.txt')
        assert os.path.exists(os.path.join(temp_dir, 'backup', 'notes.txt'))

    def test_missing_source(self, ops, temp_dir):
        with pytest.raises(OperationFailed):
            ops.rename(temp_dir, 'missing.txt', 'other.txt')

    def test_missing_new_name(self, ops, temp_dir):
        with pytest.raises(InvalidInput):
            ops.rename(temp_dir, 'notes.txt')
        assert os.path.exists(os.path.join(temp_dir, 'notes.txt'))


class TestDelete:
    """rm"""

    def test_delete(self, ops, temp_dir):
        ops.delete(temp_dir, 'notes.txt')
        assert not os.path.exists(os.path.join(temp_dir, 'notes.txt'))

    def test_missing_path(self, ops, temp_dir):
        with pytest.raises(OperationFailed):
            ops.delete(temp_dir, 'missing.txt')

    def test_directory_not_removed(self, ops, temp_dir):
        with pytest.raises(OperationFailed):
            ops.delete(temp_dir, 'backup')
        assert os.path.isdir(os.path.join(temp_dir, 'backup'))


class TestCopyMove:
    """cp and mv"""

    def test_copy_keeps_base_name(self, ops, temp_dir):
        result = ops.copy(temp_dir, 'notes.txt', 'backup')
        target = os.path.join(temp_dir, 'backup', 'notes.txt')
        assert result.data == target
        assert read(target) == read(os.path.join(temp_dir, 'notes.txt'))

    def test_copy_absolute_paths(self, ops, temp_dir):
        source = os.path.join(temp_dir, 'notes.txt')
        ops.copy('/', source, os.path.join(temp_dir, 'backup'))
        assert os.path.exists(os.path.join(temp_dir, 'backup', 'notes.txt'))

    def test_copy_missing_source(self, ops, temp_dir):
        with pytest.raises(OperationFailed):
            ops.copy(temp_dir, 'missing.txt', 'backup')
        assert os.listdir(os.path.join(temp_dir, 'backup')) == []

    def test_copy_into_missing_directory(self, ops, temp_dir):
        with pytest.raises(OperationFailed):
            ops.copy(temp_dir, 'notes.txt', 'nowhere')

    def test_copy_into_own_directory(self, ops, temp_dir):
        """Copying a file onto itself fails instead of truncating it."""
        with pytest.raises(OperationFailed):
            ops.copy(temp_dir, 'notes.txt', '.')
        assert read(os.path.join(temp_dir, 'notes.txt')) == b'first line\nsecond line\n'

    def test_copy_missing_destination(self, ops, temp_dir):
        with pytest.raises(MissingArgument):
            ops.copy(temp_dir, 'notes.txt')

    def test_move(self, ops, temp_dir):
        ops.move(temp_dir, 'notes.txt', 'backup')
        assert not os.path.exists(os.path.join(temp_dir, 'notes.txt'))
        assert read(os.path.join(temp_dir, 'backup', 'notes.txt')) == b'first line\nsecond line\n'

    def test_failed_move_keeps_source(self, ops, temp_dir):
        """Given a nonexistent destination directory, then OperationFailed and the source remains."""
        with pytest.raises(OperationFailed):
            ops.move(temp_dir, 'notes.txt', 'nowhere')
        assert read(os.path.join(temp_dir, 'notes.txt')) == b'first line\nsecond line\n'


class TestHashAndCompression:
    """hash, compress, decompress"""

    def test_hash(self, ops, temp_dir):
        result = ops.hash(temp_dir, 'notes.txt')
        expected = hashlib.sha256(b'first line\nsecond line\n').hexdigest()
        assert result.data == expected
        assert result.text == expected

    def test_hash_missing(self, ops, temp_dir):
        with pytest.raises(OperationFailed):
            ops.hash(temp_dir, 'missing.txt')

    def test_round_trip(self, ops, temp_dir):
        ops.compress(temp_dir, 'notes.txt', 'notes.txt.br')
        ops.decompress(temp_dir, 'notes.txt.br', 'backup/restored.txt')
        assert read(os.path.join(temp_dir, 'backup', 'restored.txt')) == \
            read(os.path.join(temp_dir, 'notes.txt'))

    def test_round_trip_empty(self, ops, temp_dir):
        open(os.path.join(temp_dir, 'empty'), 'w').close()
        ops.compress(temp_dir, 'empty', 'empty.br')
        ops.decompress(temp_dir, 'empty.br', 'empty.out')
        assert read(os.path.join(temp_dir, 'empty.out')) == b''

    def test_decompress_plain_file(self, ops, temp_dir):
        """Decompressing uncompressed data fails; the partial output is left on disk."""
        with pytest.raises(OperationFailed):
            ops.decompress(temp_dir, 'notes.txt', 'out.txt')
        assert os.path.exists(os.path.join(temp_dir, 'out.txt'))

    def test_compress_missing_destination(self, ops, temp_dir):
        with pytest.raises(MissingArgument):
            ops.compress(temp_dir, 'notes.txt')


class TestOsInfo:
    """os"""

    def test_eol(self, ops):
        result = ops.os_info('/', '--EOL')
        assert result.text == 'End of Line character is: "\\n"'
        assert result.data == '\n'

    def test_cpus(self, ops):
        lines = ops.os_info('/', '--cpus').text.splitlines()
        assert lines == [
            'Total CPUs: 2',
            'CPU 1:',
            '  Model: Test CPU',
            '  Clock rate: 2.40 GHz',
            'CPU 2:',
            '  Model: Test CPU',
            '  Clock rate: 3.15 GHz',
        ]

    def test_homedir(self, ops):
        assert ops.os_info('/', '--homedir').text == 'Home Directory: /home/tester'

    def test_username(self, ops):
        assert ops.os_info('/', '--username').text == 'Current System Username: tester'

    def test_architecture(self, ops):
        assert ops.os_info('/', '--architecture').text == 'CPU Architecture: x86_64'

    def test_unknown_flag(self, ops):
        with pytest.raises(InvalidInput):
            ops.os_info('/', '--kernel')

    def test_no_flag(self, ops):
        with pytest.raises(InvalidInput):
            ops.os_info('/')


class TestFormatEntries:
    """ls table rendering"""

    def test_table(self):
        entries = [DirectoryEntry('A', EntryKind.DIRECTORY),
                   DirectoryEntry('a.txt', EntryKind.FILE)]
        lines = format_entries(entries).splitlines()

        assert lines[0].split(' | ') == ['(index)', 'Name ', 'Type']
        assert set(lines[1]) == {'-'}
        assert [part.strip() for part in lines[2].split('|')] == ['0', 'A', 'directory']
        assert [part.strip() for part in lines[3].split('|')] == ['1', 'a.txt', 'file']

    def test_empty(self):
        assert len(format_entries([]).splitlines()) == 2


class TestCommandResult:

    def test_str(self):
        assert str(CommandResult(text='abc')) == 'abc'
        assert str(CommandResult()) == ''


class TestUnrepresentablePaths:
    """Paths with an embedded NUL byte fail like any other bad path."""

    @pytest.mark.parametrize('name, args', [
        ('read_print', ['a\x00b']),
        ('hash', ['a\x00b']),
        ('create', ['a\x00b']),
        ('rename', ['notes.txt', 'a\x00b']),
        ('delete', ['a\x00b']),
        ('copy', ['a\x00b', 'backup']),
        ('move', ['notes.txt', 'back\x00up']),
        ('compress', ['notes.txt', 'a\x00b']),
    ])
    def test_operation_failed(self, ops, temp_dir, name, args):
        with pytest.raises(OperationFailed):
            getattr(ops, name)(temp_dir, *args)
        assert os.path.exists(os.path.join(temp_dir, 'notes.txt'))
