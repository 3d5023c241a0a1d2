"""Binary merkle trees over keccak hashes, with proofs of leaf membership."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from .hashes import HASH_LENGTH, decode_hex, encode_hex, keccak256


class ProofError(ValueError):
    """Raised when a merkle proof fails validation."""


@dataclass(eq=False)
class _Node:
    hash: bytes
    parent: Optional["_Node"] = None
    left: Optional["_Node"] = None
    right: Optional["_Node"] = None

    def is_left_side(self) -> bool:
        return self.parent is not None and self.parent.left is self


def _interior(left: _Node, right: _Node) -> _Node:
    node = _Node(keccak256(left.hash, right.hash), left=left, right=right)
    left.parent = node
    right.parent = node
    return node


def _parse_hash(value: str) -> bytes:
    data = decode_hex(value)
    if len(data) != HASH_LENGTH:
        raise ValueError(f"hash must be {HASH_LENGTH} bytes, got {len(data)}")
    return data


@dataclass
class Proof:
    """Merkle proof: leaf hash, sibling hashes bottom-up, root hash; and side flags."""

    lemma: list[bytes] = field(default_factory=list)
    path: list[bool] = field(default_factory=list)

    def _validate_format(self) -> None:
        if not self.path:
            if len(self.lemma) != 1:
                raise ProofError("invalid merkle proof format")
            return
        if len(self.path) + 2 != len(self.lemma):
            raise ProofError("invalid merkle proof format")

    def validate(self, root: bytes, content: bytes, position: int, num_leaf_nodes: int) -> None:
        """Validate the proof for the given leaf content."""
        self.validate_hash(root, keccak256(content), position, num_leaf_nodes)

    def validate_hash(
        self, root: bytes, content_hash: bytes, position: int, num_leaf_nodes: int
    ) -> None:
        """Validate the proof for the given leaf hash; raise ProofError on failure."""
        self._validate_format()
        if content_hash != self.lemma[0]:
            raise ProofError("merkle proof content mismatch")
        if len(self.lemma) > 1 and root != self.lemma[-1]:
            raise ProofError("merkle proof root mismatch")
        if self._proof_position(num_leaf_nodes) != position:
            raise ProofError("merkle proof position mismatch")
        if not self._validate_root():
            raise ProofError("failed to validate merkle proof")

    def _proof_position(self, num_leaf_nodes: int) -> int:
        position = 0
        for is_left in reversed(self.path):
            depth = (num_leaf_nodes - 1).bit_length() if num_leaf_nodes > 0 else 0
            left_leaves = (1 << depth) // 2
            if is_left:
                num_leaf_nodes = left_leaves
            else:
                position += left_leaves
                num_leaf_nodes -= left_leaves
        return position

    def _validate_root(self) -> bool:
        current = self.lemma[0]
        for sibling, is_left in zip(self.lemma[1:], self.path):
            if is_left:
                current = keccak256(current, sibling)
            else:
                current = keccak256(sibling, current)
        return current == self.lemma[-1]

    def to_dict(self) -> dict:
        return {"lemma": [encode_hex(h) for h in self.lemma], "path": list(self.path)}

    @classmethod
    def from_dict(cls, data: dict) -> "Proof":
        lemma = [_parse_hash(h) for h in data.get("lemma") or []]
        path = [bool(p) for p in data.get("path") or []]
        return cls(lemma=lemma, path=path)


class Tree:
    """A built binary merkle tree."""

    def __init__(self, root: _Node, leaf_nodes: list[_Node]):
        self._root = root
        self._leaf_nodes = leaf_nodes

    def root(self) -> bytes:
        return self._root.hash

    def proof_at(self, i: int) -> Proof:
        """Return the proof for the leaf at index i."""
        if i < 0 or i >= len(self._leaf_nodes):
            raise IndexError("index out of bound")
        if len(self._leaf_nodes) == 1:
            return Proof(lemma=[self._root.hash], path=[])

        leaf = self._leaf_nodes[i]
        proof = Proof(lemma=[leaf.hash], path=[])
        current = leaf
        while current is not self._root:
            parent = current.parent
            if current.is_left_side():
                proof.lemma.append(parent.right.hash)
                proof.path.append(True)
            else:
                proof.lemma.append(parent.left.hash)
                proof.path.append(False)
            current = parent
        proof.lemma.append(self._root.hash)
        return proof


class TreeBuilder:
    """Collects leaves and builds a complete binary merkle tree."""

    def __init__(self) -> None:
        self._leaf_nodes: list[_Node] = []

    def append(self, content: bytes) -> None:
        self._leaf_nodes.append(_Node(keccak256(content)))

    def append_hash(self, hash_: bytes) -> None:
        self._leaf_nodes.append(_Node(bytes(hash_)))

    def build(self) -> Optional[Tree]:
        """Build the tree, or return None when there are no leaves."""
        leaves = self._leaf_nodes
        if not leaves:
            return None

        queue: deque[_Node] = deque()
        for i in range(0, len(leaves), 2):
            if i == len(leaves) - 1:
                queue.append(leaves[i])
            else:
                queue.append(_interior(leaves[i], leaves[i + 1]))

        while len(queue) > 1:
            count = len(queue)
            for _ in range(count // 2):
                left = queue.popleft()
                right = queue.popleft()
                queue.append(_interior(left, right))
            if count % 2:
                queue.append(queue.popleft())

        return Tree(queue[0], list(leaves))