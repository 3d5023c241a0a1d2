"""Collects key-value stream operations and serializes them into stream data."""

from __future__ import annotations

from typing import Optional

from .hashes import ADDRESS_LENGTH, HASH_LENGTH, encode_hex
from .kv_types import (
    AccessControl,
    AccessControlType,
    KeyIsEmptyError,
    KeyTooLargeError,
    SizeTooLargeError,
    StreamData,
    StreamRead,
    StreamWrite,
    create_tags,
)

MAX_SET_SIZE = 1 << 16
MAX_KEY_SIZE = 1 << 24
MAX_QUERY_SIZE = 1024 * 256


def _stream_id(value: bytes) -> bytes:
    value = bytes(value)
    if len(value) != HASH_LENGTH:
        raise ValueError(f"stream id must be {HASH_LENGTH} bytes, got {len(value)}")
    return value


def _account(value: bytes) -> bytes:
    value = bytes(value)
    if len(value) != ADDRESS_LENGTH:
        raise ValueError(f"account must be {ADDRESS_LENGTH} bytes, got {len(value)}")
    return value


def _check_key(key: bytes) -> None:
    if len(key) > MAX_KEY_SIZE:
        raise KeyTooLargeError()
    if not key:
        raise KeyIsEmptyError()


class StreamDataBuilder:
    """Caches reads, writes and access controls for one transaction.

    The version is the value below which every read and written key's version
    must lie when the operations are settled on chain.
    """

    def __init__(self, version: int):
        self.version = version
        self._stream_ids: dict[bytes, None] = {}
        self._controls: list[AccessControl] = []
        self._reads: dict[bytes, dict[bytes, None]] = {}
        self._writes: dict[bytes, dict[bytes, bytes]] = {}

    def build(self, sorted_: bool = False) -> StreamData:
        """Serialize the cached operations, optionally sorted by stream id and key."""
        if len(self._controls) > MAX_SET_SIZE:
            raise SizeTooLargeError()
        data = StreamData(version=self.version, controls=list(self._controls))

        for stream_id, keys in self._reads.items():
            for key in keys:
                _check_key(key)
                data.reads.append(StreamRead(stream_id=stream_id, key=key))
                if len(data.reads) > MAX_SET_SIZE:
                    raise SizeTooLargeError()

        for stream_id, values in self._writes.items():
            for key, value in values.items():
                _check_key(key)
                data.writes.append(StreamWrite(stream_id=stream_id, key=key, data=value))
                if len(data.writes) > MAX_SET_SIZE:
                    raise SizeTooLargeError()

        if sorted_:
            data.reads.sort(key=lambda r: (encode_hex(r.stream_id), encode_hex(r.key)))
            data.writes.sort(key=lambda w: (encode_hex(w.stream_id), encode_hex(w.key)))
        return data

    def build_tags(self, sorted_: bool = False) -> bytes:
        """Tags naming every stream written to or controlled."""
        ids = list(self._stream_ids)
        if sorted_:
            ids.sort(key=encode_hex)
        return create_tags(*ids)

    def set_version(self, version: int) -> "StreamDataBuilder":
        self.version = version
        return self

    def watch(self, stream_id: bytes, key: bytes) -> "StreamDataBuilder":
        """Cache a read of a key."""
        self._reads.setdefault(_stream_id(stream_id), {})[bytes(key)] = None
        return self

    def set(self, stream_id: bytes, key: bytes, data: bytes) -> "StreamDataBuilder":
        """Cache a write of a key; a later write to the same key replaces it."""
        stream_id = _stream_id(stream_id)
        self._stream_ids[stream_id] = None
        self._writes.setdefault(stream_id, {})[bytes(key)] = bytes(data)
        return self

    def _with_control(
        self,
        control_type: AccessControlType,
        stream_id: bytes,
        account: Optional[bytes] = None,
        key: Optional[bytes] = None,
    ) -> "StreamDataBuilder":
        stream_id = _stream_id(stream_id)
        self._stream_ids[stream_id] = None
        self._controls.append(
            AccessControl(
                type=control_type,
                stream_id=stream_id,
                account=None if account is None else _account(account),
                key=None if key is None else bytes(key),
            )
        )
        return self

    def grant_admin_role(self, stream_id: bytes, account: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.GRANT_ADMIN_ROLE, stream_id, account=account)

    def renounce_admin_role(self, stream_id: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.RENOUNCE_ADMIN_ROLE, stream_id)

    def set_key_to_special(self, stream_id: bytes, key: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.SET_KEY_TO_SPECIAL, stream_id, key=key)

    def set_key_to_normal(self, stream_id: bytes, key: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.SET_KEY_TO_NORMAL, stream_id, key=key)

    def grant_write_role(self, stream_id: bytes, account: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.GRANT_WRITE_ROLE, stream_id, account=account)

    def revoke_write_role(self, stream_id: bytes, account: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.REVOKE_WRITE_ROLE, stream_id, account=account)

    def renounce_write_role(self, stream_id: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.RENOUNCE_WRITE_ROLE, stream_id)

    def grant_special_write_role(
        self, stream_id: bytes, key: bytes, account: bytes
    ) -> "StreamDataBuilder":
        return self._with_control(
            AccessControlType.GRANT_SPECIAL_WRITE_ROLE, stream_id, account=account, key=key
        )

    def revoke_special_write_role(
        self, stream_id: bytes, key: bytes, account: bytes
    ) -> "StreamDataBuilder":
        return self._with_control(
            AccessControlType.REVOKE_SPECIAL_WRITE_ROLE, stream_id, account=account, key=key
        )

    def renounce_special_write_role(self, stream_id: bytes, key: bytes) -> "StreamDataBuilder":
        return self._with_control(AccessControlType.RENOUNCE_SPECIAL_WRITE_ROLE, stream_id, key=key)