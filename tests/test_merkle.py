import pytest

from zgstorage.hashes import encode_hex, keccak256
from zgstorage.merkle import Proof, ProofError, TreeBuilder


def chunk_data(i):
    return f"chunk data - {i}".encode()


def tree_by_chunks(chunks):
    builder = TreeBuilder()
    for i in range(chunks):
        builder.append(chunk_data(i))
    return builder.build()


def root_by_segments(chunks, chunks_per_segment):
    file_builder = TreeBuilder()
    for start in range(0, chunks, chunks_per_segment):
        seg = TreeBuilder()
        for index in range(start, min(start + chunks_per_segment, chunks)):
            seg.append(chunk_data(index))
        file_builder.append_hash(seg.build().root())
    return file_builder.build().root()


def test_tree_root():
    assert encode_hex(tree_by_chunks(5).root()) == (
        "0x2dea03c693750777940bcd0cc3f5d93543c075fa3b9a07b9fd86ec8fbaf6a8b2"
    )
    assert encode_hex(tree_by_chunks(6).root()) == (
        "0x318c92000aefba6ebf570a8a6daa57aa643f04350ffbe583999ddd9e24ceb147"
    )
    assert encode_hex(tree_by_chunks(7).root()) == (
        "0xca80116fb7fb8d6ef4a47e322f22e94ae8beb03e6fcbf8ab59c4d6f54fe42c4d"
    )


def test_tree_proof():
    for num_chunks in range(1, 33):
        tree = tree_by_chunks(num_chunks)
        for i in range(num_chunks):
            proof = tree.proof_at(i)
            assert proof.validate(tree.root(), chunk_data(i), i, num_chunks) is None


def test_root_by_segment():
    for chunks in range(1, 257):
        root1 = tree_by_chunks(chunks).root()
        assert root1 == root_by_segments(chunks, 4)
        assert root1 == root_by_segments(chunks, 16)


def test_empty_builder_returns_none():
    assert TreeBuilder().build() is None


def test_single_leaf_proof():
    tree = tree_by_chunks(1)
    assert tree.root() == keccak256(chunk_data(0))
    assert tree.proof_at(0) == Proof(lemma=[tree.root()], path=[])


def test_proof_index_out_of_bound():
    tree = tree_by_chunks(3)
    with pytest.raises(IndexError):
        tree.proof_at(3)
    with pytest.raises(IndexError):
        tree.proof_at(-1)


def test_proof_content_mismatch():
    tree = tree_by_chunks(8)
    with pytest.raises(ProofError, match="content mismatch"):
        tree.proof_at(2).validate(tree.root(), chunk_data(3), 2, 8)


def test_proof_root_mismatch():
    tree = tree_by_chunks(8)
    other = tree_by_chunks(9)
    with pytest.raises(ProofError, match="root mismatch"):
        tree.proof_at(2).validate(other.root(), chunk_data(2), 2, 8)


def test_proof_position_mismatch():
    tree = tree_by_chunks(8)
    with pytest.raises(ProofError, match="position mismatch"):
        tree.proof_at(2).validate(tree.root(), chunk_data(2), 3, 8)


def test_proof_wrong_format():
    tree = tree_by_chunks(4)
    proof = tree.proof_at(1)
    broken = Proof(lemma=proof.lemma[:-1], path=proof.path)
    with pytest.raises(ProofError, match="format"):
        broken.validate(tree.root(), chunk_data(1), 1, 4)


def test_proof_tampered_sibling():
    tree = tree_by_chunks(4)
    proof = tree.proof_at(1)
    proof.lemma[1] = keccak256(b"other")
    with pytest.raises(ProofError, match="failed to validate"):
        proof.validate(tree.root(), chunk_data(1), 1, 4)


def test_proof_dict_round_trip():
    tree = tree_by_chunks(6)
    proof = tree.proof_at(4)
    data = proof.to_dict()
    assert data["path"] == proof.path
    assert Proof.from_dict(data) == proof


def test_proof_from_dict_rejects_short_hash():
    with pytest.raises(ValueError):
        Proof.from_dict({"lemma": ["0x01"], "path": []})