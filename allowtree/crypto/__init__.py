"""
Cryptographic utilities: pluggable hash functions and hex codecs.
"""
from .hashing import (
    DEFAULT_HASH,
    CallableHash,
    HashFunction,
    Keccak256,
    RawItem,
    Sha256,
    from_hex,
    get_hash_function,
    hash_pair,
    to_bytes,
    to_hex,
)

__all__ = [
    "DEFAULT_HASH",
    "CallableHash",
    "HashFunction",
    "Keccak256",
    "RawItem",
    "Sha256",
    "from_hex",
    "get_hash_function",
    "hash_pair",
    "to_bytes",
    "to_hex",
]
