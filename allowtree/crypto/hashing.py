"""
Hashing Utilities
Pluggable hash functions and the pair-hashing policy for Merkle nodes.

This module provides:
- HashFunction: the one-method hash capability the engine depends on
- Keccak256 (default), Sha256 and CallableHash implementations
- hash_pair: parent hashing with optional sorted pairs
- Hex encoding/decoding with 0x prefix and raw item coercion

Security/Determinism Notes:
- Hash functions are pure: same bytes in, same digest out
- The engine never hardcodes an algorithm; it always goes through a HashFunction
- Sorted pairs compare raw bytes as unsigned integers, left to right
"""
from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Callable, Union

from eth_utils import keccak

from allowtree.schemas.errors import UnsupportedHashError


RawItem = Union[bytes, bytearray, str]


class HashFunction(ABC):
    """
    A deterministic, fixed-width, collision-resistant hash.

    Subclasses implement digest(); everything else in the engine
    is written against this interface.
    """

    name: str = ""
    digest_size: int = 0

    @abstractmethod
    def digest(self, data: bytes) -> bytes:
        """Hash raw bytes to a digest of exactly digest_size bytes."""
        ...

    def __call__(self, data: bytes) -> bytes:
        return self.digest(data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, digest_size={self.digest_size})"


class Keccak256(HashFunction):
    """Ethereum Keccak-256 (pre-standard SHA-3 padding)."""

    name = "keccak256"
    digest_size = 32

    def digest(self, data: bytes) -> bytes:
        return keccak(bytes(data))


class Sha256(HashFunction):
    """SHA-256 from hashlib."""

    name = "sha256"
    digest_size = 32

    def digest(self, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()


class CallableHash(HashFunction):
    """
    Adapts a plain function bytes -> bytes to the HashFunction interface.

    The digest width is discovered by hashing empty input once, so the
    wrapped function must already be fixed-width.

    Example:
        >>> toy = CallableHash(lambda d: hashlib.md5(d).digest(), name="md5")
        >>> toy.digest_size
        16
    """

    def __init__(self, func: Callable[[bytes], bytes], name: str = "custom") -> None:
        self._func = func
        self.name = name
        self.digest_size = len(func(b""))

    def digest(self, data: bytes) -> bytes:
        return bytes(self._func(data))


_REGISTRY: dict[str, type[HashFunction]] = {
    Keccak256.name: Keccak256,
    Sha256.name: Sha256,
}

DEFAULT_HASH = Keccak256.name


def get_hash_function(name: str = DEFAULT_HASH) -> HashFunction:
    """
    Resolve a hash function by algorithm name.

    Args:
        name: "keccak256" or "sha256" (case-insensitive)

    Returns:
        A fresh HashFunction instance

    Raises:
        UnsupportedHashError: If the name is not registered
    """
    key = name.strip().lower().replace("-", "").replace("_", "")
    hash_class = _REGISTRY.get(key)
    if hash_class is None:
        raise UnsupportedHashError(
            f"Unsupported hash algorithm: {name!r} "
            f"(available: {', '.join(sorted(_REGISTRY))})",
            algorithm=name,
        )
    return hash_class()


def hash_pair(hasher: HashFunction, left: bytes, right: bytes, sort_pairs: bool) -> bytes:
    """
    Compute the parent hash of two child nodes.

    With sort_pairs the children are concatenated smaller-first (unsigned
    lexicographic byte order), making the parent independent of which
    child sat on which side. Without it the concatenation is left || right.

    Args:
        hasher: Hash function to apply
        left: Structurally left child
        right: Structurally right child
        sort_pairs: Whether to order the pair before concatenation

    Returns:
        Parent digest
    """
    if sort_pairs and right < left:
        left, right = right, left
    return hasher.digest(left + right)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def to_bytes(value: RawItem) -> bytes:
    """
    Coerce a raw item to bytes.

    - bytes / bytearray are used as-is
    - strings with a 0x prefix are hex-decoded
    - any other string is UTF-8 encoded

    Raises:
        TypeError: For any other value type
        ValueError: For a 0x string that is not valid hex
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if value.startswith("0x"):
            return from_hex(value)
        return value.encode("utf-8")
    raise TypeError(f"Expected bytes or str, got {type(value).__name__}")


__all__ = [
    "RawItem",
    "HashFunction",
    "Keccak256",
    "Sha256",
    "CallableHash",
    "DEFAULT_HASH",
    "get_hash_function",
    "hash_pair",
    "to_hex",
    "from_hex",
    "to_bytes",
]
