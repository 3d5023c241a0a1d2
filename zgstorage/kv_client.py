"""Queries on key-value streams, and an iterator over a stream's keys."""

from __future__ import annotations

from typing import Optional

from .kv_builder import MAX_QUERY_SIZE
from .kv_node import KvClient
from .kv_types import MAX_UINT64
from .node_types import KeyValue, Value


class IteratorInvalidError(Exception):
    """Raised when moving an iterator that is not at a valid position."""

    def __init__(self, message: str = "iterator is invalid"):
        super().__init__(message)


class KvStreamClient:
    """Queries a key-value node; whole values are fetched page by page."""

    def __init__(self, node: KvClient):
        self._node = node

    def new_iterator(self, stream_id: bytes, version: Optional[int] = None) -> "KvIterator":
        """An iterator over the stream, positioned nowhere until it seeks."""
        return KvIterator(self, stream_id, MAX_UINT64 if version is None else version)

    def get_value(
        self, stream_id: bytes, key: bytes, version: Optional[int] = None
    ) -> Optional[Value]:
        """The whole value of a key, or None when the node returns no value."""
        current = MAX_UINT64 if version is None else version
        data = b""
        while True:
            seg = self._node.get_value(stream_id, key, len(data), MAX_QUERY_SIZE, current)
            if seg is None:
                return None
            if current == MAX_UINT64:
                current = seg.version
            elif current != seg.version:
                current = seg.version
                data = b""
            data += seg.data
            if len(data) == seg.size:
                return Value(version=current, data=data, size=seg.size)

    def get(
        self,
        stream_id: bytes,
        key: bytes,
        start_index: int,
        length: int,
        version: Optional[int] = None,
    ) -> Optional[Value]:
        """One page of the value of a key."""
        return self._node.get_value(stream_id, key, start_index, length, version)

    def get_next(
        self,
        stream_id: bytes,
        key: bytes,
        start_index: int,
        length: int,
        inclusive: bool,
        version: Optional[int] = None,
    ) -> Optional[KeyValue]:
        return self._node.get_next(stream_id, key, start_index, length, inclusive, version)

    def get_prev(
        self,
        stream_id: bytes,
        key: bytes,
        start_index: int,
        length: int,
        inclusive: bool,
        version: Optional[int] = None,
    ) -> Optional[KeyValue]:
        return self._node.get_prev(stream_id, key, start_index, length, inclusive, version)

    def get_first(
        self, stream_id: bytes, start_index: int, length: int, version: Optional[int] = None
    ) -> Optional[KeyValue]:
        return self._node.get_first(stream_id, start_index, length, version)

    def get_last(
        self, stream_id: bytes, start_index: int, length: int, version: Optional[int] = None
    ) -> Optional[KeyValue]:
        return self._node.get_last(stream_id, start_index, length, version)

    def get_transaction_result(self, tx_seq: int) -> str:
        return self._node.get_transaction_result(tx_seq)

    def get_holding_stream_ids(self) -> list[bytes]:
        return self._node.get_holding_stream_ids()

    def has_write_permission(
        self, account: bytes, stream_id: bytes, key: bytes, version: Optional[int] = None
    ) -> bool:
        return self._node.has_write_permission(account, stream_id, key, version)

    def is_admin(self, account: bytes, stream_id: bytes, version: Optional[int] = None) -> bool:
        return self._node.is_admin(account, stream_id, version)

    def is_special_key(self, stream_id: bytes, key: bytes, version: Optional[int] = None) -> bool:
        return self._node.is_special_key(stream_id, key, version)

    def is_writer_of_key(
        self, account: bytes, stream_id: bytes, key: bytes, version: Optional[int] = None
    ) -> bool:
        return self._node.is_writer_of_key(account, stream_id, key, version)

    def is_writer_of_stream(
        self, account: bytes, stream_id: bytes, version: Optional[int] = None
    ) -> bool:
        return self._node.is_writer_of_stream(account, stream_id, version)


class KvIterator:
    """Cursor over the keys of one stream at a fixed version."""

    def __init__(self, client: KvStreamClient, stream_id: bytes, version: int = MAX_UINT64):
        self._client = client
        self._stream_id = bytes(stream_id)
        self._version = version
        self._current: Optional[KeyValue] = None

    def valid(self) -> bool:
        """Whether the iterator is at an existing key."""
        return self._current is not None

    def key_value(self) -> Optional[KeyValue]:
        """The key and whole value at the current position."""
        return self._current

    def _move(self, found: Optional[KeyValue]) -> None:
        if found is None:
            self._current = None
            return
        value = self._client.get_value(self._stream_id, found.key, self._version)
        if value is None:
            self._current = None
            return
        self._current = KeyValue(
            version=value.version, key=found.key, data=value.data, size=value.size
        )

    def seek_before(self, key: bytes) -> None:
        """Move to the last key not after the given key."""
        self._move(self._client.get_prev(self._stream_id, key, 0, 0, True, self._version))

    def seek_after(self, key: bytes) -> None:
        """Move to the first key not before the given key."""
        self._move(self._client.get_next(self._stream_id, key, 0, 0, True, self._version))

    def seek_to_first(self) -> None:
        self._move(self._client.get_first(self._stream_id, 0, 0, self._version))

    def seek_to_last(self) -> None:
        self._move(self._client.get_last(self._stream_id, 0, 0, self._version))

    def next(self) -> None:
        """Move to the following key."""
        if self._current is None:
            raise IteratorInvalidError()
        self._move(
            self._client.get_next(self._stream_id, self._current.key, 0, 0, False, self._version)
        )

    def prev(self) -> None:
        """Move to the preceding key."""
        if self._current is None:
            raise IteratorInvalidError()
        self._move(
            self._client.get_prev(self._stream_id, self._current.key, 0, 0, False, self._version)
        )