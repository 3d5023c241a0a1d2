"""Progress record stored at the end of a file being downloaded."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import BinaryIO

from .hashes import HASH_LENGTH

METADATA_SIZE = HASH_LENGTH + 8 + 8

_SIZES = struct.Struct(">qq")
_OFFSET = struct.Struct(">q")


class MetadataError(ValueError):
    """Raised when download metadata cannot be read or written."""


def _file_size(file: BinaryIO) -> int:
    file.flush()
    return os.fstat(file.fileno()).st_size


@dataclass
class Metadata:
    """Merkle root, total size and the offset to write next."""

    root: bytes
    size: int
    offset: int = 0

    def serialize(self) -> bytes:
        return bytes(self.root) + _SIZES.pack(self.size, self.offset)

    @classmethod
    def deserialize(cls, encoded: bytes) -> "Metadata":
        if len(encoded) != METADATA_SIZE:
            raise MetadataError(
                f"Invalid data length, expected = {METADATA_SIZE}, actual = {len(encoded)}"
            )
        size, offset = _SIZES.unpack(encoded[HASH_LENGTH:])
        return cls(root=bytes(encoded[:HASH_LENGTH]), size=size, offset=offset)

    @classmethod
    def load(cls, file: BinaryIO) -> "Metadata":
        """Read the metadata stored at the end of the file."""
        size = _file_size(file)
        if size < METADATA_SIZE:
            raise MetadataError(f"File size too small {size}")
        file.seek(size - METADATA_SIZE)
        buf = file.read(METADATA_SIZE)
        if len(buf) != METADATA_SIZE:
            raise MetadataError(
                f"Read metadata length mismatch, expected = {METADATA_SIZE}, actual = {len(buf)}"
            )
        return cls.deserialize(buf)

    def extend(self, file: BinaryIO) -> None:
        """Grow the file to hold the data plus metadata, and write the metadata."""
        size = _file_size(file)
        if 0 < size != self.size:
            raise MetadataError(f"Invalid file size, expected = {self.size}, actual = {size}")
        file.truncate(self.size + METADATA_SIZE)
        file.seek(self.size)
        encoded = self.serialize()
        written = file.write(encoded)
        if written != METADATA_SIZE:
            raise MetadataError(
                f"Written metadata length mismatch, expected = {METADATA_SIZE}, actual = {written}"
            )
        file.flush()

    def write(self, file: BinaryIO, data: bytes) -> None:
        """Write data at the current offset and record the new offset."""
        if self.offset + len(data) > self.size:
            raise MetadataError(
                f"Written data out of bound, offset = {self.offset}, "
                f"dataLen = {len(data)}, fileSize = {self.size}"
            )
        file.seek(self.offset)
        written = file.write(data)
        if written != len(data):
            raise MetadataError(
                f"Written data length mismatch, expected = {len(data)}, actual = {written}"
            )

        offset = self.offset + len(data)
        encoded = _OFFSET.pack(offset)
        file.seek(self.size + METADATA_SIZE - len(encoded))
        written = file.write(encoded)
        if written != len(encoded):
            raise MetadataError(
                f"Written offset length mismatch, expected = {len(encoded)}, actual = {written}"
            )
        file.flush()
        self.offset = offset