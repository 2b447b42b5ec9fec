#!/usr/bin/env python3
"""
Streaming transfer engine.

A transfer moves bytes from a source file to a sink through an optional
transform stage (identity, compress, decompress, hash). It is the only place
in the file manager where I/O runs concurrently: a reader thread produces
fixed-size chunks into a bounded queue while the calling thread transforms
them and writes them out. When the sink falls behind, the queue fills and
the reader blocks, so memory use stays bounded regardless of file size.

Design Principles:
- One call, one terminal result: run() always returns exactly one
  TransferResult and never raises for I/O problems
- Every handle the task opens is closed on every exit path
- The reader thread is always joined before run() returns
- Partial sink files are left in place unless remove_partial is set
"""

import os
import codecs
import hashlib
import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, TextIO

import brotli

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_QUEUE_DEPTH = 4

# Brotli's own default: densest output
DEFAULT_QUALITY = 11


class Transform(Enum):
    """Byte-stream stages that can sit between a source and a sink."""
    NONE = 'none'
    COMPRESS = 'compress'
    DECOMPRESS = 'decompress'
    HASH = 'hash'


class FailureReason(Enum):
    """Which part of a transfer failed."""
    SOURCE_ERROR = 'source'
    SINK_ERROR = 'sink'
    TRANSFORM_ERROR = 'transform'
    DELETE_ERROR = 'delete'


@dataclass
class TransferTask:
    """
    Describes a single transfer.

    ``sink_path`` names a file to create or truncate. ``sink_stream`` is a
    text stream (such as stdout) that receives decoded output instead. A
    HASH transfer uses neither.
    """
    source_path: str
    sink_path: Optional[str] = None
    transform: Transform = Transform.NONE
    sink_stream: Optional[TextIO] = None


@dataclass
class TransferResult:
    """Terminal outcome of a transfer: success with optional digest, or a tagged failure."""
    ok: bool
    digest: Optional[str] = None
    bytes_read: int = 0
    bytes_written: int = 0
    reason: Optional[FailureReason] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, digest: Optional[str] = None,
                bytes_read: int = 0, bytes_written: int = 0) -> 'TransferResult':
        return cls(ok=True, digest=digest,
                   bytes_read=bytes_read, bytes_written=bytes_written)

    @classmethod
    def failure(cls, reason: FailureReason, error: Optional[BaseException] = None,
                bytes_read: int = 0, bytes_written: int = 0) -> 'TransferResult':
        return cls(ok=False, reason=reason, error=error,
                   bytes_read=bytes_read, bytes_written=bytes_written)


class TransformError(Exception):
    """Raised by a stage when its input is not a valid stream."""


# Transform stages

class Stage:
    """Identity stage. Subclasses override feed() and finish()."""

    digest: Optional[str] = None

    def feed(self, data: bytes) -> bytes:
        return data

    def finish(self) -> bytes:
        return b''


class CompressStage(Stage):
    """Compress into a Brotli stream."""

    def __init__(self, quality: int = DEFAULT_QUALITY):
        self._engine = brotli.Compressor(quality=quality)

    def feed(self, data: bytes) -> bytes:
        return self._engine.process(data)

    def finish(self) -> bytes:
        return self._engine.finish()


class DecompressStage(Stage):
    """Decode a Brotli stream produced by CompressStage."""

    def __init__(self):
        self._engine = brotli.Decompressor()

    def feed(self, data: bytes) -> bytes:
        if self._engine.is_finished():
            raise TransformError("data after end of compressed stream")
        try:
            return self._engine.process(data)
        except brotli.error as e:
            raise TransformError(str(e)) from e

    def finish(self) -> bytes:
        if not self._engine.is_finished():
            raise TransformError("compressed stream is truncated")
        return b''


class HashStage(Stage):
    """Accumulate a SHA-256 digest; produces no output bytes."""

    def __init__(self):
        self._hash = hashlib.sha256()

    def feed(self, data: bytes) -> bytes:
        self._hash.update(data)
        return b''

    def finish(self) -> bytes:
        self.digest = self._hash.hexdigest()
        return b''


def build_stage(transform: Transform) -> Stage:
    """Create a fresh stage for ``transform``."""
    stages = {
        Transform.NONE: Stage,
        Transform.COMPRESS: CompressStage,
        Transform.DECOMPRESS: DecompressStage,
        Transform.HASH: HashStage,
    }
    return stages[transform]()


class TextSink:
    """
    Adapts a text stream so it can receive raw bytes.

    Bytes are decoded incrementally as UTF-8, so multi-byte characters split
    across chunks come out intact; undecodable bytes are replaced. The
    wrapped stream is flushed but never closed, and output always ends with
    a newline.
    """

    def __init__(self, stream: TextIO, encoding: str = 'utf-8'):
        self._stream = stream
        self._decoder = codecs.getincrementaldecoder(encoding)(errors='replace')
        self._last_char = ''

    def write(self, data: bytes) -> int:
        self._emit(self._decoder.decode(data))
        return len(data)

    def close(self):
        self._emit(self._decoder.decode(b'', final=True))
        if self._last_char and self._last_char != '\n':
            self._stream.write('\n')
        self._stream.flush()

    def _emit(self, text: str):
        if text:
            self._stream.write(text)
            self._last_char = text[-1]


class _ReadFailure:
    """Queue item carrying an error raised by the reader thread."""

    def __init__(self, error: BaseException):
        self.error = error


_END = object()


class _Handles:
    """Tracks everything a running transfer has opened."""

    def __init__(self):
        self.source: Any = None
        self.sink: Any = None
        self.sink_created = False
        self.reader: Optional[threading.Thread] = None

    def release(self) -> Optional[BaseException]:
        """Close source and sink. Returns the sink's close error, if any."""
        sink_error = None
        if self.source is not None:
            try:
                self.source.close()
            except OSError as e:
                logger.debug("closing source failed: %s", e)
            self.source = None
        if self.sink is not None:
            try:
                self.sink.close()
            except OSError as e:
                # close() flushes, so a full disk can surface only here
                sink_error = e
            self.sink = None
        return sink_error


class StreamTransfer:
    """
    Runs TransferTasks as bounded producer/consumer pipelines.

    Args:
        chunk_size: bytes read from the source per chunk.
        queue_depth: chunks buffered between reader and writer.
        remove_partial: delete the sink file when a transfer fails.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 queue_depth: int = DEFAULT_QUEUE_DEPTH,
                 remove_partial: bool = False):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if queue_depth <= 0:
            raise ValueError("queue_depth must be positive")
        self.chunk_size = chunk_size
        self.queue_depth = queue_depth
        self.remove_partial = remove_partial

    def run(self, task: TransferTask) -> TransferResult:
        """Execute ``task`` and return its single terminal result."""
        if task.transform is not Transform.HASH and task.sink_path is None \
                and task.sink_stream is None:
            raise ValueError("transfer needs a sink_path or sink_stream")

        logger.debug("transfer start: %s -> %s (%s)",
                     task.source_path, task.sink_path or '<stream>', task.transform.value)
        handles = _Handles()
        stop = threading.Event()
        try:
            result = self._execute(task, handles, stop)
        finally:
            stop.set()
            if handles.reader is not None:
                handles.reader.join()
            close_error = handles.release()

        if close_error is not None and result.ok:
            result = TransferResult.failure(FailureReason.SINK_ERROR, close_error,
                                            result.bytes_read, result.bytes_written)

        if not result.ok:
            logger.debug("transfer failed (%s): %s", result.reason.value, result.error)
            if self.remove_partial and handles.sink_created:
                self._remove_partial(task.sink_path)
        else:
            logger.debug("transfer done: %d bytes in, %d bytes out",
                         result.bytes_read, result.bytes_written)
        return result

    def move(self, source_path: str, sink_path: str) -> TransferResult:
        """
        Copy ``source_path`` to ``sink_path``, then delete the source.

        The source is removed only after the copy has fully succeeded. If
        that removal fails the whole move is reported as failed, even though
        the copy exists; the source is never lost silently.
        """
        result = self.run(TransferTask(source_path=source_path, sink_path=sink_path))
        if not result.ok:
            return result

        try:
            os.remove(source_path)
        except OSError as e:
            logger.debug("move: copied but could not delete %s: %s", source_path, e)
            return TransferResult.failure(FailureReason.DELETE_ERROR, e,
                                          result.bytes_read, result.bytes_written)
        return result

    # Pipeline internals

    def _execute(self, task: TransferTask, handles: _Handles,
                 stop: threading.Event) -> TransferResult:
        # open() raises ValueError for paths it cannot pass to the OS (embedded NUL)
        try:
            handles.source = open(task.source_path, 'rb')
        except (OSError, ValueError) as e:
            return TransferResult.failure(FailureReason.SOURCE_ERROR, e)

        try:
            handles.sink = self._open_sink(task, handles)
        except (OSError, ValueError) as e:
            return TransferResult.failure(FailureReason.SINK_ERROR, e)

        stage = build_stage(task.transform)
        chunks = queue.Queue(maxsize=self.queue_depth)

        handles.reader = threading.Thread(
            target=self._produce,
            args=(handles.source, chunks, stop),
            name='transfer-reader',
            daemon=True,
        )
        handles.reader.start()

        return self._consume(chunks, stage, handles.sink)

    def _open_sink(self, task: TransferTask, handles: _Handles):
        if task.transform is Transform.HASH:
            return None
        if task.sink_path is None:
            return TextSink(task.sink_stream)

        # Opening the sink for writing would truncate a source that is the same file
        if os.path.exists(task.sink_path) and os.path.samefile(task.source_path, task.sink_path):
            raise FileExistsError(f"source and destination are the same file: {task.sink_path}")

        sink = open(task.sink_path, 'wb')
        handles.sink_created = True
        return sink

    def _produce(self, source, chunks: queue.Queue, stop: threading.Event):
        """Reader thread: push chunks until EOF, error, or stop."""
        try:
            while not stop.is_set():
                chunk = source.read(self.chunk_size)
                if not chunk:
                    break
                if not self._put(chunks, chunk, stop):
                    return
        except (OSError, ValueError) as e:
            self._put(chunks, _ReadFailure(e), stop)
            return
        self._put(chunks, _END, stop)

    @staticmethod
    def _put(chunks: queue.Queue, item, stop: threading.Event) -> bool:
        """Blocking put that gives up once the consumer has stopped."""
        while not stop.is_set():
            try:
                chunks.put(item, timeout=0.05)
                return True
            except queue.Full:
                continue
        return False

    def _consume(self, chunks: queue.Queue, stage: Stage, sink) -> TransferResult:
        """Writer side: transform each chunk and write it to the sink."""
        bytes_read = 0
        bytes_written = 0

        while True:
            item = chunks.get()
            if item is _END:
                break
            if isinstance(item, _ReadFailure):
                return TransferResult.failure(FailureReason.SOURCE_ERROR, item.error,
                                              bytes_read, bytes_written)
            bytes_read += len(item)

            try:
                out = stage.feed(item)
            except TransformError as e:
                return TransferResult.failure(FailureReason.TRANSFORM_ERROR, e,
                                              bytes_read, bytes_written)

            if out and sink is not None:
                try:
                    sink.write(out)
                except OSError as e:
                    return TransferResult.failure(FailureReason.SINK_ERROR, e,
                                                  bytes_read, bytes_written)
                bytes_written += len(out)

        try:
            tail = stage.finish()
        except TransformError as e:
            return TransferResult.failure(FailureReason.TRANSFORM_ERROR, e,
                                          bytes_read, bytes_written)

        if tail and sink is not None:
            try:
                sink.write(tail)
            except OSError as e:
                return TransferResult.failure(FailureReason.SINK_ERROR, e,
                                              bytes_read, bytes_written)
            bytes_written += len(tail)

        return TransferResult.success(digest=stage.digest,
                                      bytes_read=bytes_read, bytes_written=bytes_written)

    @staticmethod
    def _remove_partial(path: Optional[str]):
        if not path:
            return
        try:
            os.remove(path)
            logger.debug("removed partial output %s", path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("could not remove partial output %s: %s", path, e)
