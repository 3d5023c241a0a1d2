"""Wire format of key-value stream operations and the tags that mark them."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from .hashes import ADDRESS_LENGTH, HASH_LENGTH

MAX_UINT64 = (1 << 64) - 1

STREAM_DOMAIN = hashlib.sha256(b"STREAM").digest()


class KvEncodingError(ValueError):
    """Base class of errors raised while building or encoding stream data."""


class KeyTooLargeError(KvEncodingError):
    """Raised when a key does not fit the encoding."""

    def __init__(self, message: str = "key too large"):
        super().__init__(message)


class KeyIsEmptyError(KvEncodingError):
    """Raised when a key is empty."""

    def __init__(self, message: str = "key is empty"):
        super().__init__(message)


class SizeTooLargeError(KvEncodingError):
    """Raised when a set of operations holds too many entries."""

    def __init__(self, message: str = "size too large"):
        super().__init__(message)


def create_tags(*stream_ids: bytes) -> bytes:
    """Tags for a transaction: the stream domain followed by each stream id."""
    return STREAM_DOMAIN + b"".join(bytes(stream_id) for stream_id in stream_ids)


class AccessControlType(IntEnum):
    """Kinds of access control operation on a stream."""

    GRANT_ADMIN_ROLE = 0x00
    RENOUNCE_ADMIN_ROLE = 0x01

    SET_KEY_TO_SPECIAL = 0x10
    SET_KEY_TO_NORMAL = 0x11

    GRANT_WRITE_ROLE = 0x20
    REVOKE_WRITE_ROLE = 0x21
    RENOUNCE_WRITE_ROLE = 0x22

    GRANT_SPECIAL_WRITE_ROLE = 0x30
    REVOKE_SPECIAL_WRITE_ROLE = 0x31
    RENOUNCE_SPECIAL_WRITE_ROLE = 0x32


@dataclass
class StreamRead:
    """A key read by the transaction."""

    stream_id: bytes
    key: bytes


@dataclass
class StreamWrite:
    """A key written by the transaction, with its new value."""

    stream_id: bytes
    key: bytes
    data: bytes


@dataclass
class AccessControl:
    """An access control operation; account and key are present only when it needs them."""

    type: AccessControlType
    stream_id: bytes
    account: Optional[bytes] = None
    key: Optional[bytes] = None


def _encode_size24(size: int) -> bytes:
    if size == 0:
        raise KeyIsEmptyError()
    if size >= 1 << 24:
        raise KeyTooLargeError()
    return size.to_bytes(3, "big")


def _encode_key(key: bytes) -> bytes:
    # Any failure to encode a key length is reported as a key that is too large.
    try:
        return _encode_size24(len(key)) + bytes(key)
    except KvEncodingError as exc:
        raise KeyTooLargeError() from exc


@dataclass
class StreamData:
    """Reads, writes and access controls to settle at the given version."""

    version: int = MAX_UINT64
    reads: list[StreamRead] = field(default_factory=list)
    writes: list[StreamWrite] = field(default_factory=list)
    controls: list[AccessControl] = field(default_factory=list)

    def size(self) -> int:
        """Size of the encoded data in bytes."""
        size = 8
        size += 4 + sum(HASH_LENGTH + 3 + len(r.key) for r in self.reads)
        size += 4 + sum(HASH_LENGTH + 3 + len(w.key) + 8 + len(w.data) for w in self.writes)
        size += 4
        for control in self.controls:
            size += 1 + HASH_LENGTH
            if control.account is not None:
                size += ADDRESS_LENGTH
            if control.key is not None:
                size += 3 + len(control.key)
        return size

    def encode(self) -> bytes:
        """Serialize to the binary form stored on the network."""
        parts = [struct.pack(">Q", self.version), struct.pack(">I", len(self.reads))]
        for read in self.reads:
            parts.append(bytes(read.stream_id))
            parts.append(_encode_key(read.key))

        parts.append(struct.pack(">I", len(self.writes)))
        for write in self.writes:
            parts.append(bytes(write.stream_id))
            parts.append(_encode_key(write.key))
            parts.append(struct.pack(">Q", len(write.data)))
        parts.extend(bytes(write.data) for write in self.writes)

        parts.append(struct.pack(">I", len(self.controls)))
        for control in self.controls:
            parts.append(bytes([int(control.type)]))
            parts.append(bytes(control.stream_id))
            if control.key is not None:
                parts.append(_encode_key(control.key))
            if control.account is not None:
                parts.append(bytes(control.account))
        return b"".join(parts)