"""RPC client of a key-value node."""

from __future__ import annotations

from typing import Any, Optional

from .hashes import encode_hex
from .node_types import KeyValue, Value, _decode_hash, _encode_bytes
from .rpc import RpcClient


def _with_version(args: list[Any], version: Optional[int]) -> list[Any]:
    if version is not None:
        args.append(version)
    return args


class KvClient(RpcClient):
    """Client of the kv RPC namespace; version, when given, pins the queried state."""

    def get_value(
        self,
        stream_id: bytes,
        key: bytes,
        start_index: int,
        length: int,
        version: Optional[int] = None,
    ) -> Optional[Value]:
        args = _with_version([encode_hex(stream_id), _encode_bytes(key), start_index, length], version)
        result = self.call("kv_getValue", *args)
        return None if result is None else Value.from_dict(result)

    def _key_value(self, method: str, args: list[Any]) -> Optional[KeyValue]:
        result = self.call(method, *args)
        return None if result is None else KeyValue.from_dict(result)

    def get_next(
        self,
        stream_id: bytes,
        key: bytes,
        start_index: int,
        length: int,
        inclusive: bool,
        version: Optional[int] = None,
    ) -> Optional[KeyValue]:
        args = [encode_hex(stream_id), _encode_bytes(key), start_index, length, inclusive]
        return self._key_value("kv_getNext", _with_version(args, version))

    def get_prev(
        self,
        stream_id: bytes,
        key: bytes,
        start_index: int,
        length: int,
        inclusive: bool,
        version: Optional[int] = None,
    ) -> Optional[KeyValue]:
        args = [encode_hex(stream_id), _encode_bytes(key), start_index, length, inclusive]
        return self._key_value("kv_getPrev", _with_version(args, version))

    def get_first(
        self, stream_id: bytes, start_index: int, length: int, version: Optional[int] = None
    ) -> Optional[KeyValue]:
        args = [encode_hex(stream_id), start_index, length]
        return self._key_value("kv_getFirst", _with_version(args, version))

    def get_last(
        self, stream_id: bytes, start_index: int, length: int, version: Optional[int] = None
    ) -> Optional[KeyValue]:
        args = [encode_hex(stream_id), start_index, length]
        return self._key_value("kv_getLast", _with_version(args, version))

    def get_transaction_result(self, tx_seq: int) -> str:
        """Replay status of the kv transaction with the given sequence id."""
        return self.call("kv_getTransactionResult", tx_seq) or ""

    def get_holding_stream_ids(self) -> list[bytes]:
        """Stream ids monitored by the node."""
        return [_decode_hash(v) for v in self.call("kv_getHoldingStreamIds") or []]

    def has_write_permission(
        self, account: bytes, stream_id: bytes, key: bytes, version: Optional[int] = None
    ) -> bool:
        args = [encode_hex(account), encode_hex(stream_id), _encode_bytes(key)]
        return bool(self.call("kv_hasWritePermission", *_with_version(args, version)))

    def is_admin(self, account: bytes, stream_id: bytes, version: Optional[int] = None) -> bool:
        args = [encode_hex(account), encode_hex(stream_id)]
        return bool(self.call("kv_isAdmin", *_with_version(args, version)))

    def is_special_key(self, stream_id: bytes, key: bytes, version: Optional[int] = None) -> bool:
        args = [encode_hex(stream_id), _encode_bytes(key)]
        return bool(self.call("kv_isSpecialKey", *_with_version(args, version)))

    def is_writer_of_key(
        self, account: bytes, stream_id: bytes, key: bytes, version: Optional[int] = None
    ) -> bool:
        args = [encode_hex(account), encode_hex(stream_id), _encode_bytes(key)]
        return bool(self.call("kv_isWriterOfKey", *_with_version(args, version)))

    def is_writer_of_stream(
        self, account: bytes, stream_id: bytes, version: Optional[int] = None
    ) -> bool:
        args = [encode_hex(account), encode_hex(stream_id)]
        return bool(self.call("kv_isWriterOfStream", *_with_version(args, version)))