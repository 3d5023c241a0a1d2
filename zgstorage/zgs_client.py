"""RPC client of a storage node's zgs endpoint."""

from __future__ import annotations

from typing import Iterable, Optional

from .hashes import encode_hex
from .node_types import FileInfo, SegmentWithProof, Status, _decode_bytes
from .rpc import RpcClient
from .shard import ShardConfig


class ZgsClient(RpcClient):
    """Client of the zgs RPC namespace of a storage node."""

    def get_status(self) -> Status:
        """Sync status of the node."""
        return Status.from_dict(self.call("zgs_getStatus") or {})

    def get_file_info(self, root: bytes) -> Optional[FileInfo]:
        """Information about a file by its merkle root, or None if unknown."""
        result = self.call("zgs_getFileInfo", encode_hex(root))
        return None if result is None else FileInfo.from_dict(result)

    def get_file_info_by_tx_seq(self, tx_seq: int) -> Optional[FileInfo]:
        """Information about a file by its sequence id, or None if unknown."""
        result = self.call("zgs_getFileInfoByTxSeq", tx_seq)
        return None if result is None else FileInfo.from_dict(result)

    def upload_segment(self, segment: SegmentWithProof) -> int:
        return int(self.call("zgs_uploadSegment", segment.to_dict()) or 0)

    def upload_segments(self, segments: Iterable[SegmentWithProof]) -> int:
        payload = [segment.to_dict() for segment in segments]
        return int(self.call("zgs_uploadSegments", payload) or 0)

    def download_segment(self, root: bytes, start_index: int, end_index: int) -> Optional[bytes]:
        """Chunks [start_index, end_index) of a file, or None if not available."""
        result = self.call("zgs_downloadSegment", encode_hex(root), start_index, end_index)
        data = _decode_bytes(result)
        return data or None

    def download_segment_with_proof(self, root: bytes, index: int) -> Optional[SegmentWithProof]:
        """A segment with its merkle proof, or None if not available."""
        result = self.call("zgs_downloadSegmentWithProof", encode_hex(root), index)
        return None if result is None else SegmentWithProof.from_dict(result)

    def get_shard_config(self) -> ShardConfig:
        """The node's current shard configuration."""
        return ShardConfig.from_dict(self.call("zgs_getShardConfig") or {})


def new_zgs_clients(urls: Iterable[str]) -> list[ZgsClient]:
    """Create one client per URL."""
    return [ZgsClient(url) for url in urls]