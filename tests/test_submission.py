import random

import pytest

from zgstorage.data import DataInMemory, compute_padded_size, merkle_tree
from zgstorage.hashes import keccak256
from zgstorage.submission import (
    PRICE_PER_SECTOR,
    Flow,
    Submission,
    SubmissionNode,
)


def _data(size, seed=0):
    return DataInMemory(random.Random(seed).randbytes(size))


@pytest.mark.parametrize("size", [1, 300, 17 * 256 - 10, 26 * 256, 1025 * 256])
def test_submission_covers_padded_chunks(size):
    data = _data(size, seed=size)
    submission = Flow(data, b"").create_submission()
    padded_chunks, _ = compute_padded_size(data.num_chunks())
    assert sum(1 << node.height for node in submission.nodes) == padded_chunks
    assert submission.length == size
    heights = [node.height for node in submission.nodes]
    assert heights == sorted(heights, reverse=True)


@pytest.mark.parametrize("size", [1, 300, 17 * 256 - 10, 26 * 256, 1025 * 256])
def test_submission_root_matches_merkle_tree(size):
    data = _data(size, seed=size + 1)
    submission = Flow(data).create_submission()
    assert submission.root() == merkle_tree(data).root()


def test_tags_are_kept():
    submission = Flow(_data(10), b"\x01\x02").create_submission()
    assert submission.tags == b"\x01\x02"


def test_single_chunk_node():
    data = DataInMemory(b"abc")
    submission = Flow(data).create_submission()
    assert len(submission.nodes) == 1
    assert submission.nodes[0].height == 0
    assert submission.nodes[0].root == keccak256(b"abc" + bytes(253))


def test_root_of_empty_submission():
    assert Submission(length=0).root() == bytes(32)


def test_root_combines_from_the_right():
    a, b, c = keccak256(b"a"), keccak256(b"b"), keccak256(b"c")
    nodes = [SubmissionNode(a, 2), SubmissionNode(b, 1), SubmissionNode(c, 0)]
    assert Submission(length=1, nodes=nodes).root() == keccak256(a, keccak256(b, c))
    assert Submission(length=1, nodes=nodes[:1]).root() == a


def test_fee():
    nodes = [SubmissionNode(bytes(32), 4), SubmissionNode(bytes(32), 1)]
    assert Submission(length=1, nodes=nodes).fee() == 18 * PRICE_PER_SECTOR
    assert Submission(length=1, nodes=[SubmissionNode(bytes(32), 0)]).fee() == PRICE_PER_SECTOR
    assert Submission(length=0).fee() == 0


def test_str():
    nodes = [SubmissionNode(bytes(32), 4), SubmissionNode(bytes(32), 1)]
    assert str(Submission(length=5, nodes=nodes)) == "{ Size: 5, Heights: [4 1] }"
    assert str(Submission(length=0)) == "{ Size: 0, Heights: [] }"