"""RPC client of a storage node's admin endpoint."""

from __future__ import annotations

from typing import Optional

from .node_types import FileSyncInfo, NetworkInfo, PeerInfo
from .rpc import RpcClient


class AdminClient(RpcClient):
    """Client of the admin RPC namespace of a storage node."""

    def shutdown(self) -> int:
        """Ask the node to shut down."""
        return int(self.call("admin_shutdown") or 0)

    def start_sync_file(self, tx_seq: int) -> int:
        """Request synchronization of a file."""
        return int(self.call("admin_startSyncFile", tx_seq) or 0)

    def start_sync_chunks(self, tx_seq: int, start_index: int, end_index: int) -> int:
        """Request synchronization of chunks [start_index, end_index) of a file."""
        return int(self.call("admin_startSyncChunks", tx_seq, start_index, end_index) or 0)

    def terminate_sync(self, tx_seq: int) -> bool:
        """Terminate the sync of a file; True if a sync was terminated."""
        return bool(self.call("admin_terminateSync", tx_seq))

    def get_sync_status(self, tx_seq: int) -> str:
        """Sync status of a file."""
        return self.call("admin_getSyncStatus", tx_seq) or ""

    def get_sync_info(self, tx_seq: Optional[int] = None) -> dict[int, FileSyncInfo]:
        """Sync information of one file, or of all files when tx_seq is None."""
        if tx_seq is None:
            result = self.call("admin_getSyncInfo")
        else:
            result = self.call("admin_getSyncInfo", tx_seq)
        return {int(seq): FileSyncInfo.from_dict(info or {}) for seq, info in (result or {}).items()}

    def get_network_info(self) -> NetworkInfo:
        """Network information of the node."""
        return NetworkInfo.from_dict(self.call("admin_getNetworkInfo") or {})

    def get_peers(self) -> dict[str, Optional[PeerInfo]]:
        """All discovered network peers by peer id."""
        result = self.call("admin_getPeers") or {}
        return {
            peer_id: None if info is None else PeerInfo.from_dict(info)
            for peer_id, info in result.items()
        }