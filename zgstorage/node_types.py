"""Records exchanged with storage and key-value nodes over RPC."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .hashes import HASH_LENGTH, decode_hex, encode_hex
from .merkle import Proof


def _encode_bytes(data: bytes) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def _decode_bytes(value: Optional[str]) -> bytes:
    if not value:
        return b""
    return base64.b64decode(value)


def _encode_hash(value: bytes) -> str:
    return encode_hex(value)


def _decode_hash(value: Optional[str]) -> bytes:
    if not value:
        return bytes(HASH_LENGTH)
    data = decode_hex(value)
    if len(data) != HASH_LENGTH:
        raise ValueError(f"hash must be {HASH_LENGTH} bytes, got {len(data)}")
    return data


def _decode_big(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    return int(value, 16)


def _int(data: dict, key: str) -> int:
    return int(data.get(key) or 0)


@dataclass
class Status:
    """Sync status of a storage node."""

    connected_peers: int = 0
    log_sync_height: int = 0
    log_sync_block: bytes = bytes(HASH_LENGTH)

    @classmethod
    def from_dict(cls, data: dict) -> "Status":
        return cls(
            connected_peers=_int(data, "connectedPeers"),
            log_sync_height=_int(data, "logSyncHeight"),
            log_sync_block=_decode_hash(data.get("logSyncBlock")),
        )


@dataclass
class Transaction:
    """The on-chain transaction of a file."""

    stream_ids: list[Optional[int]] = field(default_factory=list)
    data: bytes = b""
    data_merkle_root: bytes = bytes(HASH_LENGTH)
    start_entry_index: int = 0
    size: int = 0
    seq: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            stream_ids=[_decode_big(v) for v in data.get("streamIds") or []],
            data=_decode_bytes(data.get("data")),
            data_merkle_root=_decode_hash(data.get("dataMerkleRoot")),
            start_entry_index=_int(data, "startEntryIndex"),
            size=_int(data, "size"),
            seq=_int(data, "seq"),
        )


@dataclass
class FileInfo:
    """A file as known to a storage node."""

    tx: Transaction = field(default_factory=Transaction)
    finalized: bool = False
    is_cached: bool = False
    uploaded_seg_num: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "FileInfo":
        return cls(
            tx=Transaction.from_dict(data.get("tx") or {}),
            finalized=bool(data.get("finalized")),
            is_cached=bool(data.get("isCached")),
            uploaded_seg_num=_int(data, "uploadedSegNum"),
        )


@dataclass
class SegmentWithProof:
    """A data segment with its merkle proof within the file."""

    root: bytes = bytes(HASH_LENGTH)
    data: bytes = b""
    index: int = 0
    proof: Proof = field(default_factory=Proof)
    file_size: int = 0

    def to_dict(self) -> dict:
        return {
            "root": _encode_hash(self.root),
            "data": _encode_bytes(self.data),
            "index": self.index,
            "proof": self.proof.to_dict(),
            "fileSize": self.file_size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SegmentWithProof":
        return cls(
            root=_decode_hash(data.get("root")),
            data=_decode_bytes(data.get("data")),
            index=_int(data, "index"),
            proof=Proof.from_dict(data.get("proof") or {}),
            file_size=_int(data, "fileSize"),
        )


@dataclass
class Value:
    """A key-value value, possibly one page of it."""

    version: int = 0
    data: bytes = b""
    size: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Value":
        return cls(
            version=_int(data, "version"),
            data=_decode_bytes(data.get("data")),
            size=_int(data, "size"),
        )


@dataclass
class KeyValue:
    """A key with its value, possibly one page of it."""

    version: int = 0
    key: bytes = b""
    data: bytes = b""
    size: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "KeyValue":
        return cls(
            version=_int(data, "version"),
            key=_decode_bytes(data.get("key")),
            data=_decode_bytes(data.get("data")),
            size=_int(data, "size"),
        )


class PeerState(str, Enum):
    """Connection state of a network peer."""

    FOUND = "Found"
    CONNECTING = "Connecting"
    CONNECTED = "Connected"
    DISCONNECTING = "Disconnecting"
    DISCONNECTED = "Disconnected"


def _peer_state(value: str) -> Union[PeerState, str]:
    try:
        return PeerState(value)
    except ValueError:
        return value


@dataclass
class FileSyncGoal:
    """The chunk range a file sync aims for."""

    num_chunks: int = 0
    index_start: int = 0
    index_end: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "FileSyncGoal":
        return cls(
            num_chunks=_int(data, "numChunks"),
            index_start=_int(data, "indexStart"),
            index_end=_int(data, "indexEnd"),
        )


@dataclass
class FileSyncInfo:
    """Progress of a file sync; peers are counted by state."""

    elapsed_secs: int = 0
    peers: dict[Any, int] = field(default_factory=dict)
    goal: FileSyncGoal = field(default_factory=FileSyncGoal)
    next_chunks: int = 0
    state: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "FileSyncInfo":
        return cls(
            elapsed_secs=_int(data, "elapsedSecs"),
            peers={_peer_state(k): int(v) for k, v in (data.get("peers") or {}).items()},
            goal=FileSyncGoal.from_dict(data.get("goal") or {}),
            next_chunks=_int(data, "next_chunks"),
            state=data.get("state") or "",
        )


@dataclass
class NetworkInfo:
    """Network information of a node."""

    peer_id: str = ""
    listen_addresses: list[str] = field(default_factory=list)
    total_peers: int = 0
    banned_peers: int = 0
    disconnected_peers: int = 0
    connected_peers: int = 0
    connected_outgoing_peers: int = 0
    connected_incoming_peers: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkInfo":
        return cls(
            peer_id=data.get("peerId") or "",
            listen_addresses=list(data.get("listenAddresses") or []),
            total_peers=_int(data, "totalPeers"),
            banned_peers=_int(data, "bannedPeers"),
            disconnected_peers=_int(data, "disconnectedPeers"),
            connected_peers=_int(data, "connectedPeers"),
            connected_outgoing_peers=_int(data, "connectedOutgoingPeers"),
            connected_incoming_peers=_int(data, "connectedIncomingPeers"),
        )


@dataclass
class ClientInfo:
    """Client software of a remote peer."""

    version: str = ""
    os: str = ""
    protocol: str = ""
    agent: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ClientInfo":
        return cls(
            version=data.get("version") or "",
            os=data.get("os") or "",
            protocol=data.get("protocol") or "",
            agent=data.get("agent") or "",
        )


@dataclass
class PeerConnectionStatus:
    """Connection status of a remote peer."""

    status: str = ""
    connections_in: int = 0
    connections_out: int = 0
    last_seen_secs: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PeerConnectionStatus":
        return cls(
            status=data.get("status") or "",
            connections_in=_int(data, "connectionsIn"),
            connections_out=_int(data, "connectionsOut"),
            last_seen_secs=_int(data, "lastSeenSecs"),
        )


@dataclass
class PeerInfo:
    """Information about a remote peer."""

    client: ClientInfo = field(default_factory=ClientInfo)
    connection_status: PeerConnectionStatus = field(default_factory=PeerConnectionStatus)
    listening_addresses: list[str] = field(default_factory=list)
    seen_ips: list[str] = field(default_factory=list)
    is_trusted: bool = False
    connection_direction: str = ""
    enr: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "PeerInfo":
        return cls(
            client=ClientInfo.from_dict(data.get("client") or {}),
            connection_status=PeerConnectionStatus.from_dict(data.get("connectionStatus") or {}),
            listening_addresses=list(data.get("listeningAddresses") or []),
            seen_ips=list(data.get("seenIps") or []),
            is_trusted=bool(data.get("isTrusted")),
            connection_direction=data.get("connectionDirection") or "",
            enr=data.get("enr") or "",
        )