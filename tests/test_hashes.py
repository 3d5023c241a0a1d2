import pytest

from zgstorage.hashes import (
    decode_hex,
    encode_hex,
    hex_to_address,
    hex_to_hash,
    keccak256,
)


def test_keccak256_of_empty_input():
    assert keccak256().hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_keccak256_concatenates_parts():
    assert keccak256(b"ab", b"cd") == keccak256(b"abcd")
    assert len(keccak256(b"x")) == 32


def test_hex_to_hash_left_pads():
    assert hex_to_hash("0x01") == b"\x00" * 31 + b"\x01"


def test_hex_to_hash_odd_length_and_no_prefix():
    assert hex_to_hash("f2bd") == hex_to_hash("0xf2bd")
    assert hex_to_hash("0x1") == hex_to_hash("0x01")


def test_hex_to_hash_keeps_rightmost_bytes():
    long_value = "0x" + "aa" * 4 + "bb" * 32
    assert hex_to_hash(long_value) == b"\xbb" * 32


def test_hex_to_address_length():
    address = hex_to_address("0x578dd2bfc41bb66e9f0ae0802c613996440c9597")
    assert len(address) == 20
    assert encode_hex(address) == "0x578dd2bfc41bb66e9f0ae0802c613996440c9597"


def test_decode_encode_round_trip():
    data = bytes(range(40))
    assert decode_hex(encode_hex(data)) == data
    assert decode_hex("0x") == b""


@pytest.mark.parametrize("bad", ["", "abcd", "0x123", "0xzz"])
def test_decode_hex_rejects_invalid(bad):
    with pytest.raises(ValueError):
        decode_hex(bad)