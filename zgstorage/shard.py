"""Shard configuration of storage nodes and replica-aware node selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass
class ShardConfig:
    """A node stores segments whose index modulo num_shard equals shard_id."""

    shard_id: int = 0
    num_shard: int = 0

    def has_segment(self, segment_index: int) -> bool:
        return self.num_shard < 2 or segment_index % self.num_shard == self.shard_id

    def is_valid(self) -> bool:
        """num_shard must be a positive power of two and shard_id below it."""
        return (
            self.num_shard > 0
            and self.num_shard & (self.num_shard - 1) == 0
            and self.shard_id < self.num_shard
        )

    def to_dict(self) -> dict:
        return {"shardId": self.shard_id, "numShard": self.num_shard}

    @classmethod
    def from_dict(cls, data: dict) -> "ShardConfig":
        return cls(shard_id=int(data.get("shardId", 0)), num_shard=int(data.get("numShard", 0)))


@dataclass
class ShardedNode:
    """A storage node URL with its shard configuration."""

    url: str = ""
    config: ShardConfig = field(default_factory=ShardConfig)

    def to_dict(self) -> dict:
        return {"URL": self.url, "Config": self.config.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "ShardedNode":
        return cls(url=data.get("URL", ""), config=ShardConfig.from_dict(data.get("Config") or {}))


class _SegmentTreeNode:
    __slots__ = ("children", "num_shard", "lazy_tags", "replica")

    def __init__(self, num_shard: int):
        self.children: Optional[tuple[_SegmentTreeNode, _SegmentTreeNode]] = None
        self.num_shard = num_shard
        self.lazy_tags = 0
        self.replica = 0

    def _push_down(self) -> None:
        if self.children is None:
            self.children = (
                _SegmentTreeNode(self.num_shard << 1),
                _SegmentTreeNode(self.num_shard << 1),
            )
        for child in self.children:
            child.replica += self.lazy_tags
            child.lazy_tags += self.lazy_tags
        self.lazy_tags = 0

    def insert(self, num_shard: int, shard_id: int, expected_replica: int) -> bool:
        """Insert a shard if it adds to the replica count of the range it covers."""
        if self.replica >= expected_replica:
            return False
        if self.num_shard == num_shard:
            self.replica += 1
            self.lazy_tags += 1
            return True
        if self.num_shard > num_shard:
            raise ValueError(f"invalid number of shards {num_shard}")
        self._push_down()
        inserted = self.children[shard_id % 2].insert(num_shard, shard_id >> 1, expected_replica)
        self.replica = min(self.children[0].replica, self.children[1].replica)
        return inserted


def select(nodes: Iterable[ShardedNode], expected_replica: int) -> Optional[list[ShardedNode]]:
    """Pick nodes so every segment is stored at least expected_replica times.

    Returns the selected nodes, or None when the nodes cannot provide enough
    replicas.
    """
    if expected_replica == 0:
        return []
    ordered = sorted(nodes, key=lambda n: (n.config.num_shard, n.config.shard_id))
    root = _SegmentTreeNode(1)
    selected: list[ShardedNode] = []
    for node in ordered:
        if root.insert(node.config.num_shard, node.config.shard_id, expected_replica):
            selected.append(node)
        if root.replica >= expected_replica:
            return selected
    return None


def check_replica(shard_configs: Iterable[ShardConfig], expected_replica: int) -> bool:
    """Whether the given shard configs can reach the expected replica count."""
    nodes = [
        ShardedNode(config=ShardConfig(shard_id=c.shard_id, num_shard=c.num_shard))
        for c in shard_configs
    ]
    return select(nodes, expected_replica) is not None