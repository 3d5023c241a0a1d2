"""Data to upload: chunking, flow padding, iteration and merkle roots."""

from __future__ import annotations

import os
import threading
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from .hashes import HASH_LENGTH, keccak256
from .merkle import Tree, TreeBuilder
from .parallel import Parallelizable, Result, serial

DEFAULT_CHUNK_SIZE = 256
DEFAULT_SEGMENT_MAX_CHUNKS = 1024
DEFAULT_SEGMENT_SIZE = DEFAULT_CHUNK_SIZE * DEFAULT_SEGMENT_MAX_CHUNKS

EMPTY_CHUNK = bytes(DEFAULT_CHUNK_SIZE)
EMPTY_CHUNK_HASH = keccak256(EMPTY_CHUNK)


class FileRequiredError(ValueError):
    """Raised when a directory is given where a file is required."""

    def __init__(self, message: str = "file required"):
        super().__init__(message)


class FileEmptyError(ValueError):
    """Raised when an empty file is opened."""

    def __init__(self, message: str = "file is empty"):
        super().__init__(message)


def num_splits(total: int, unit: int) -> int:
    """Number of units needed to hold `total` bytes (at least one)."""
    n = total - 1
    quotient = -((-n) // unit) if n < 0 else n // unit
    return quotient + 1


def next_pow2(value: int) -> int:
    """Smallest power of two not below value; zero stays zero."""
    if value <= 0:
        return 0
    return 1 << (value - 1).bit_length()


def compute_padded_size(chunks: int) -> tuple[int, int]:
    """Return (padded chunk count, next power of two of the chunk count)."""
    chunks_next_pow2 = next_pow2(chunks)
    if chunks_next_pow2 == chunks:
        return chunks_next_pow2, chunks_next_pow2
    min_chunk = chunks_next_pow2 // 16 if chunks_next_pow2 >= 16 else 1
    padded_chunks = ((chunks - 1) // min_chunk + 1) * min_chunk
    return padded_chunks, chunks_next_pow2


def iterator_padded_size(data_size: int, flow_padding: bool) -> int:
    """Size in bytes of data padded to whole chunks, optionally flow padded."""
    chunks = num_splits(data_size, DEFAULT_CHUNK_SIZE)
    if flow_padding:
        padded_chunks, _ = compute_padded_size(chunks)
        return padded_chunks * DEFAULT_CHUNK_SIZE
    return chunks * DEFAULT_CHUNK_SIZE


class IterableData(ABC):
    """Data that can be uploaded to the storage network."""

    _padded_size: int = 0

    @abstractmethod
    def size(self) -> int:
        """Data size in bytes."""

    @abstractmethod
    def read(self, offset: int, length: int) -> bytes:
        """Read at most `length` bytes starting at `offset`."""

    def num_chunks(self) -> int:
        return num_splits(self.size(), DEFAULT_CHUNK_SIZE)

    def num_segments(self) -> int:
        return num_splits(self.size(), DEFAULT_SEGMENT_SIZE)

    def padded_size(self) -> int:
        """Size in bytes after flow padding."""
        return self._padded_size

    def iterate(self, offset: int, batch: int, flow_padding: bool) -> Iterator[bytes]:
        """Yield successive blocks of `batch` bytes, zero padded to the padded size."""
        if batch <= 0 or batch % DEFAULT_CHUNK_SIZE:
            raise ValueError("batch size should align with chunk size")
        return self._blocks(offset, batch, iterator_padded_size(self.size(), flow_padding))

    def _blocks(self, offset: int, batch: int, padded_size: int) -> Iterator[bytes]:
        data_size = self.size()
        while 0 <= offset < padded_size:
            expected = min(batch, padded_size - offset)
            if offset >= data_size:
                block = bytes(expected)
            else:
                block = self.read(offset, expected)
                block += bytes(expected - len(block))
            offset += expected
            yield block


class File(IterableData):
    """Iterable data backed by a file on disk."""

    def __init__(self, handle, path: str, size: int):
        self._file = handle
        self._lock = threading.Lock()
        self.path = path
        self.name = os.path.basename(path)
        self._size = size
        self._padded_size = iterator_padded_size(size, True)

    @classmethod
    def open(cls, name: str) -> "File":
        """Open a non-empty regular file."""
        try:
            handle = open(name, "rb")
        except IsADirectoryError as exc:
            raise FileRequiredError() from exc
        try:
            info = os.fstat(handle.fileno())
            if os.path.isdir(name):
                raise FileRequiredError()
            if info.st_size == 0:
                raise FileEmptyError()
        except BaseException:
            handle.close()
            raise
        return cls(handle, name, info.st_size)

    def size(self) -> int:
        return self._size

    def read(self, offset: int, length: int) -> bytes:
        with self._lock:
            self._file.seek(offset)
            return self._file.read(length)

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "File":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class DataInMemory(IterableData):
    """Iterable data held in memory."""

    def __init__(self, data: bytes):
        if not data:
            raise ValueError("data is empty")
        self._data = bytes(data)
        self._padded_size = iterator_padded_size(len(self._data), True)

    def size(self) -> int:
        return len(self._data)

    def read(self, offset: int, length: int) -> bytes:
        return self._data[offset : offset + length]


def exists(name: str) -> bool:
    """Whether a file or directory exists at `name`."""
    try:
        with open(name, "rb"):
            pass
    except FileNotFoundError:
        return False
    except IsADirectoryError:
        return True
    return True


def num_segments_padded(data: IterableData) -> int:
    """Number of segments of the flow padded data."""
    return (data.padded_size() - 1) // DEFAULT_SEGMENT_SIZE + 1


def segment_root(chunks: bytes, empty_chunks_padded: int = 0) -> bytes:
    """Merkle root of the given chunks, followed by empty padding chunks."""
    builder = TreeBuilder()
    for start in range(0, len(chunks), DEFAULT_CHUNK_SIZE):
        builder.append(chunks[start : start + DEFAULT_CHUNK_SIZE])
    for _ in range(max(empty_chunks_padded, 0)):
        builder.append_hash(EMPTY_CHUNK_HASH)
    tree = builder.build()
    if tree is None:
        return bytes(HASH_LENGTH)
    return tree.root()


def read_at(data: IterableData, read_size: int, offset: int, padded_size: int) -> bytes:
    """Read up to read_size bytes at offset, zero filled beyond the data size."""
    if offset < 0 or offset >= padded_size:
        raise ValueError("invalid offset")
    expected = min(read_size, padded_size - offset)
    if offset >= data.size():
        return bytes(expected)
    buf = data.read(offset, expected)
    return buf + bytes(expected - len(buf))


class _TreeBuilderInitializer(Parallelizable):
    def __init__(self, data: IterableData, offset: int, batch: int, builder: TreeBuilder):
        self._data = data
        self._offset = offset
        self._batch = batch
        self._builder = builder

    def parallel_do(self, routine: int, task: int) -> bytes:
        offset = self._offset + task * self._batch
        buf = read_at(self._data, self._batch, offset, self._data.padded_size())
        return segment_root(buf)

    def parallel_collect(self, result: Result) -> None:
        self._builder.append_hash(result.value)


def _segment_tree(data: IterableData, offset: int, batch: int, tasks: int) -> Optional[Tree]:
    builder = TreeBuilder()
    initializer = _TreeBuilderInitializer(data, offset, batch, builder)
    serial(initializer, tasks, os.cpu_count() or 1, 0)
    return builder.build()


def merkle_tree(data: IterableData) -> Tree:
    """Build the merkle tree of the data, one leaf per segment."""
    return _segment_tree(data, 0, DEFAULT_SEGMENT_SIZE, num_segments_padded(data))