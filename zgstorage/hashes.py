"""Keccak hashing and hex helpers for 32-byte hashes and 20-byte addresses."""

from __future__ import annotations

from Crypto.Hash import keccak

HASH_LENGTH = 32
ADDRESS_LENGTH = 20


def keccak256(*args: bytes) -> bytes:
    """Return the Keccak-256 digest of the concatenation of all arguments."""
    hasher = keccak.new(digest_bits=256)
    for part in args:
        hasher.update(bytes(part))
    return hasher.digest()


def _loose_hex_bytes(value: str) -> bytes:
    text = value[2:] if value[:2] in ("0x", "0X") else value
    if len(text) % 2:
        text = "0" + text
    return bytes.fromhex(text)


def _fit(data: bytes, length: int) -> bytes:
    if len(data) > length:
        data = data[-length:]
    return data.rjust(length, b"\x00")


def hex_to_hash(value: str) -> bytes:
    """Convert a hex string to a 32-byte hash, keeping the rightmost bytes."""
    return _fit(_loose_hex_bytes(value), HASH_LENGTH)


def hex_to_address(value: str) -> bytes:
    """Convert a hex string to a 20-byte address, keeping the rightmost bytes."""
    return _fit(_loose_hex_bytes(value), ADDRESS_LENGTH)


def decode_hex(value: str) -> bytes:
    """Decode a strict 0x-prefixed hex string."""
    if not value:
        raise ValueError("empty hex string")
    if value[:2] not in ("0x", "0X"):
        raise ValueError("hex string without 0x prefix")
    text = value[2:]
    if len(text) % 2:
        raise ValueError("hex string of odd length")
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ValueError("invalid hex string") from exc


def encode_hex(data: bytes) -> str:
    """Encode bytes as a 0x-prefixed lower-case hex string."""
    return "0x" + bytes(data).hex()