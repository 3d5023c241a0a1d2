"""Flow submissions: the on-chain description of data to store, and its fee."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .data import DEFAULT_CHUNK_SIZE, DEFAULT_SEGMENT_MAX_CHUNKS, IterableData, _segment_tree, compute_padded_size
from .hashes import HASH_LENGTH, keccak256
from .logs import LogOption, new_logger

LIFETIME_MONTHS = 3
BYTES_PER_SECTOR = 256
ANNUAL_ZGS_TOKENS_PER_GB = 10
GB = 1024 * 1024 * 1024
MONTH_PER_YEAR = 12

PRICE_PER_SECTOR = (
    (LIFETIME_MONTHS * BYTES_PER_SECTOR * ANNUAL_ZGS_TOKENS_PER_GB // MONTH_PER_YEAR) * 10**18
) // GB


@dataclass
class SubmissionNode:
    """Merkle root of a power-of-two run of chunks and the run's height."""

    root: bytes
    height: int


@dataclass
class Submission:
    """Data length, tags and the nodes that make up the flow padded data."""

    length: int
    tags: bytes = b""
    nodes: list[SubmissionNode] = field(default_factory=list)

    def __str__(self) -> str:
        heights = " ".join(str(node.height) for node in self.nodes)
        return f"{{ Size: {self.length}, Heights: [{heights}] }}"

    def root(self) -> bytes:
        """Merkle root over all nodes, combined from the last node backwards."""
        if not self.nodes:
            return bytes(HASH_LENGTH)
        root = self.nodes[-1].root
        for left in reversed(self.nodes[:-1]):
            root = keccak256(left.root, root)
        return root

    def fee(self) -> int:
        """Storage fee for all sectors of the submission."""
        sectors = sum(1 << node.height for node in self.nodes)
        return sectors * PRICE_PER_SECTOR


class Flow:
    """Turns iterable data into a submission."""

    def __init__(self, data: IterableData, tags: bytes = b"", option: Optional[LogOption] = None):
        self._data = data
        self._tags = bytes(tags)
        self._logger = new_logger(option)

    def create_submission(self) -> Submission:
        submission = Submission(length=self._data.size(), tags=self._tags)
        offset = 0
        for chunks in self._split_nodes():
            submission.nodes.append(self._create_node(offset, chunks))
            offset += chunks * DEFAULT_CHUNK_SIZE
        return submission

    def _split_nodes(self) -> list[int]:
        nodes: list[int] = []
        chunks = self._data.num_chunks()
        padded_chunks, next_chunk_size = compute_padded_size(chunks)
        while padded_chunks > 0:
            if padded_chunks >= next_chunk_size:
                padded_chunks -= next_chunk_size
                nodes.append(next_chunk_size)
            next_chunk_size //= 2
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug("SplitNodes chunks=%s nodeSize=%s", chunks, nodes)
        return nodes

    def _create_node(self, offset: int, chunks: int) -> SubmissionNode:
        batch = min(chunks, DEFAULT_SEGMENT_MAX_CHUNKS)
        return self._create_segment_node(
            offset, DEFAULT_CHUNK_SIZE * batch, DEFAULT_CHUNK_SIZE * chunks
        )

    def _create_segment_node(self, offset: int, batch: int, size: int) -> SubmissionNode:
        tree = _segment_tree(self._data, offset, batch, (size - 1) // batch + 1)
        num_chunks = size // DEFAULT_CHUNK_SIZE
        return SubmissionNode(root=tree.root(), height=num_chunks.bit_length() - 1)