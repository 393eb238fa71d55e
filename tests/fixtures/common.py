"""
Base factories shared by all test modules.
"""

from allowtree.crypto.hashing import HashFunction, Sha256, hash_pair


ALICE = "0x5dad7600c5d89fe3824ffa99ec1c3eb8bf3b0501"
BOB = "0x3440326f551b8a7ee198cee35cb5d517f2d296a2"
CAROL = "0xacfb09713f4f9cc14aa498cbf844b94a27da64ff"
DAN = "0x8e0614adcffe0315af614f414ab60c6230bdc988"

ALLOWLIST = [ALICE, BOB, CAROL, DAN]


def make_leaves(count: int, hasher: HashFunction | None = None) -> list[bytes]:
    """Distinct digests of b"leaf0".. b"leafN-1" (SHA-256 unless given)."""
    hasher = hasher or Sha256()
    return [hasher(f"leaf{i}".encode()) for i in range(count)]


def make_letter_leaves(letters: str, hasher: HashFunction | None = None) -> list[bytes]:
    """[H("A"), H("B"), ...] for each character of letters."""
    hasher = hasher or Sha256()
    return [hasher(ch.encode()) for ch in letters]


def parent(hasher: HashFunction, left: bytes, right: bytes, sort_pairs: bool = False) -> bytes:
    """Hand-computed parent for expected-root calculations."""
    return hash_pair(hasher, left, right, sort_pairs)


def flip_byte(data: bytes, index: int = 0) -> bytes:
    """Copy of data with one byte inverted."""
    mutable = bytearray(data)
    mutable[index] ^= 0xFF
    return bytes(mutable)
