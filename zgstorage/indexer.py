"""Indexer service: reports the storage nodes it trusts and their shards."""

from __future__ import annotations

from typing import Iterable, Protocol

from .rpc import RpcError
from .shard import ShardedNode
from .zgs_client import ZgsClient


class NodeSource(Protocol):
    """Anything that can list sharded storage nodes."""

    def get_nodes(self) -> list[ShardedNode]: ...


class IndexerApi:
    """Serves the list of storage nodes with valid shard configurations."""

    namespace = "indexer"

    def __init__(self, nodes: Iterable[ZgsClient]):
        self._nodes = list(nodes)

    def get_nodes(self) -> list[ShardedNode]:
        """Storage nodes whose shard configuration is valid, in configured order."""
        result: list[ShardedNode] = []
        for client in self._nodes:
            try:
                config = client.get_shard_config()
            except RpcError as exc:
                raise RpcError(
                    f"Failed to query shard config from storage node: {exc.message}",
                    exc.code,
                    exc.data,
                ) from exc
            if config.is_valid():
                result.append(ShardedNode(url=client.url, config=config))
        return result