"""
Merkle Tree Construction
Deterministic tree building over a pluggable hash function.

This module provides:
- OddNodePolicy: what happens to the unpaired last node of a level
- MerkleTree: immutable tree holding every level as a tuple of digests
- build_merkle_tree: hash/sort leaves and build levels bottom-up
- compute_tree_depth: number of levels above the leaves

Canonical Build Rules (Hard Contracts):
1. Leaf hashing: leaf = H(item) when hash_leaves, else item used as-is
   (pre-hashed items must be exactly H.digest_size bytes)
2. Leaf sorting: optional, unsigned byte order, applied after hashing
3. Parent hashing: parent = H(left || right), or smaller-first when sort_pairs
4. Odd node: PROMOTE carries it up unchanged (default),
   DUPLICATE pairs it with itself
5. Single leaf: root = leaf
6. Empty input: rejected with EmptyInputError

Determinism Notes:
- Same items + same flags + same hash always yield the same root
- Without sort_leaves the tree trusts input order and keeps positional meaning
- Levels are never padded in storage: level k+1 has ceil(len(level k) / 2) nodes
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Sequence

from allowtree.crypto.hashing import (
    HashFunction,
    Keccak256,
    RawItem,
    get_hash_function,
    hash_pair,
    to_bytes,
    to_hex,
)
from allowtree.schemas.errors import (
    EmptyInputError,
    InvalidLeafWidthError,
    RootMismatchError,
)
from allowtree.schemas.proof import TreeSnapshot

if TYPE_CHECKING:
    from allowtree.merkle.merkle_proofs import MerkleProof, ProofInput


logger = logging.getLogger(__name__)


class OddNodePolicy(str, Enum):
    """
    Rule for the last node of a level with odd length.

    PROMOTE leaves the node unpaired and copies it to the next level,
    so the proof for that branch has no entry at that level.
    DUPLICATE hashes the node with itself, so every level emits an entry.
    """
    PROMOTE = "promote"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class MerkleTree:
    """
    An immutable Merkle tree.

    Levels are stored as an arena: levels[0] holds the leaves in build
    order, levels[-1] holds the single root. Nothing is mutated after
    construction, so one tree can serve any number of concurrent readers.

    Build trees with build_merkle_tree() rather than calling this directly.
    """
    levels: tuple[tuple[bytes, ...], ...]
    hasher: HashFunction = field(repr=False, compare=False)
    sort_pairs: bool
    sort_leaves: bool
    odd_node: OddNodePolicy
    _positions: dict[bytes, int] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        if not self.levels or len(self.levels[-1]) != 1:
            raise ValueError("A tree needs at least one level ending in a single root")
        positions: dict[bytes, int] = {}
        for i, leaf in enumerate(self.levels[0]):
            positions.setdefault(leaf, i)
        object.__setattr__(self, "_positions", positions)

    # -- accessors -----------------------------------------------------------

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def hex_root(self) -> str:
        """Root as a 0x-prefixed hex string."""
        return to_hex(self.root)

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self.levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0])

    @property
    def depth(self) -> int:
        """Number of levels above the leaves (0 for a single-leaf tree)."""
        return len(self.levels) - 1

    @property
    def hex_levels(self) -> list[list[str]]:
        return [[to_hex(node) for node in level] for level in self.levels]

    def get_leaf(self, index: int) -> bytes:
        if index < 0 or index >= self.leaf_count:
            raise IndexError(
                f"Leaf index {index} out of range for {self.leaf_count} leaves"
            )
        return self.levels[0][index]

    def index_of(self, leaf: bytes | str) -> int | None:
        """
        Position of a leaf in level 0, or None if absent.

        Accepts raw bytes or a 0x-hex string. When the same digest occurs
        more than once, the first occurrence wins.
        """
        return self._positions.get(to_bytes(leaf))

    def contains(self, leaf: bytes | str) -> bool:
        return self.index_of(leaf) is not None

    # -- proofs --------------------------------------------------------------

    def get_proof(self, leaf: bytes | str) -> "MerkleProof":
        """Inclusion proof for a leaf digest (see build_merkle_proof)."""
        from allowtree.merkle.merkle_proofs import build_merkle_proof
        return build_merkle_proof(self, leaf)

    def get_proof_by_index(self, index: int) -> "MerkleProof":
        return self.get_proof(self.get_leaf(index))

    def get_hex_proof(self, leaf: bytes | str) -> list[str]:
        """Sibling digests of the proof as 0x-hex strings, bottom-up."""
        return self.get_proof(leaf).hex_siblings()

    def verify(self, leaf: bytes | str, proof: "ProofInput") -> bool:
        """Check a proof for leaf against this tree's root and pairing policy."""
        from allowtree.merkle.merkle_proofs import verify_merkle_proof
        return verify_merkle_proof(
            to_bytes(leaf), proof, self.root, self.sort_pairs, hasher=self.hasher
        )

    # -- presentation --------------------------------------------------------

    def render(self) -> str:
        """
        Text drawing of the tree, root first.

        Example (two leaves):
            └─ 0x3a...
               ├─ 0x5f...
               └─ 0x9c...
        """
        lines: list[str] = []

        def walk(level: int, pos: int, prefix: str, last: bool) -> None:
            lines.append(prefix + ("└─ " if last else "├─ ") + to_hex(self.levels[level][pos]))
            if level == 0:
                return
            below = self.levels[level - 1]
            children = [c for c in (2 * pos, 2 * pos + 1) if c < len(below)]
            child_prefix = prefix + ("   " if last else "│  ")
            for i, child in enumerate(children):
                walk(level - 1, child, child_prefix, i == len(children) - 1)

        walk(self.depth, 0, "", True)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    # -- serialisation -------------------------------------------------------

    def to_snapshot(self) -> TreeSnapshot:
        return TreeSnapshot(
            hash_algorithm=self.hasher.name,
            sort_pairs=self.sort_pairs,
            sort_leaves=self.sort_leaves,
            odd_node=self.odd_node.value,
            leaves=[to_hex(leaf) for leaf in self.leaves],
            root=self.hex_root,
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: TreeSnapshot,
        hasher: HashFunction | None = None,
    ) -> "MerkleTree":
        """
        Rebuild a tree from a snapshot and check it reproduces the recorded root.

        Args:
            snapshot: Snapshot produced by to_snapshot()
            hasher: Hash function to use; resolved from
                    snapshot.hash_algorithm when omitted

        Raises:
            RootMismatchError: If the rebuilt root differs from snapshot.root
            UnsupportedHashError: If the snapshot names an unknown algorithm
        """
        tree = build_merkle_tree(
            snapshot.leaves,
            hash_leaves=False,
            sort_pairs=snapshot.sort_pairs,
            hasher=hasher or get_hash_function(snapshot.hash_algorithm),
            sort_leaves=snapshot.sort_leaves,
            odd_node=OddNodePolicy(snapshot.odd_node),
        )
        if tree.hex_root != snapshot.root:
            raise RootMismatchError(
                "Snapshot leaves do not reproduce the recorded root",
                expected=snapshot.root,
                actual=tree.hex_root,
            )
        return tree


def _prepare_leaves(
    items: Sequence[RawItem],
    hasher: HashFunction,
    hash_leaves: bool,
) -> list[bytes]:
    if hash_leaves:
        return [hasher.digest(to_bytes(item)) for item in items]

    leaves: list[bytes] = []
    for i, item in enumerate(items):
        leaf = to_bytes(item)
        if len(leaf) != hasher.digest_size:
            raise InvalidLeafWidthError(
                f"Leaf {i} is {len(leaf)} bytes, expected {hasher.digest_size} "
                f"for {hasher.name or 'hash'} digests",
                leaf_index=i,
                expected=hasher.digest_size,
                actual=len(leaf),
            )
        leaves.append(leaf)
    return leaves


def _next_level(
    current: Sequence[bytes],
    hasher: HashFunction,
    sort_pairs: bool,
    odd_node: OddNodePolicy,
) -> list[bytes]:
    next_level: list[bytes] = []
    for i in range(0, len(current), 2):
        if i + 1 < len(current):
            next_level.append(hash_pair(hasher, current[i], current[i + 1], sort_pairs))
        elif odd_node is OddNodePolicy.DUPLICATE:
            next_level.append(hash_pair(hasher, current[i], current[i], sort_pairs))
        else:
            next_level.append(current[i])
    return next_level


def build_merkle_tree(
    items: Iterable[RawItem],
    hash_leaves: bool = True,
    sort_pairs: bool = True,
    *,
    hasher: HashFunction | None = None,
    sort_leaves: bool = False,
    odd_node: OddNodePolicy | str = OddNodePolicy.PROMOTE,
) -> MerkleTree:
    """
    Build a Merkle tree from raw items.

    Algorithm:
    1. Level 0: hash each item (hash_leaves) or take it as a digest
    2. Optionally sort level 0 by unsigned byte order (sort_leaves)
    3. Pair adjacent nodes and hash each pair; the odd last node is
       promoted or duplicated according to odd_node
    4. Repeat until a single root remains

    Example: [a, b, c] with PROMOTE -> [[a, b, c], [H(a,b), c], [H(H(a,b), c)]]

    Args:
        items: Raw values (bytes, 0x-hex strings or text)
        hash_leaves: Hash each item to form its leaf
        sort_pairs: Order each pair smaller-first before hashing
        hasher: Hash function (Keccak-256 when omitted)
        sort_leaves: Sort level 0 so the root ignores insertion order
        odd_node: OddNodePolicy member or its string value (case-insensitive)

    Returns:
        Immutable MerkleTree

    Raises:
        EmptyInputError: If items is empty
        InvalidLeafWidthError: If hash_leaves is False and an item is not
                               exactly hasher.digest_size bytes
    """
    hasher = hasher or Keccak256()
    if isinstance(odd_node, str) and not isinstance(odd_node, OddNodePolicy):
        odd_node = odd_node.lower()
    odd_node = OddNodePolicy(odd_node)
    items = list(items)

    if len(items) == 0:
        raise EmptyInputError()

    leaves = _prepare_leaves(items, hasher, hash_leaves)
    if sort_leaves:
        leaves.sort()

    levels: list[tuple[bytes, ...]] = [tuple(leaves)]
    current: Sequence[bytes] = leaves
    while len(current) > 1:
        current = _next_level(current, hasher, sort_pairs, odd_node)
        levels.append(tuple(current))

    tree = MerkleTree(
        levels=tuple(levels),
        hasher=hasher,
        sort_pairs=sort_pairs,
        sort_leaves=sort_leaves,
        odd_node=odd_node,
    )
    logger.debug(
        f"Built Merkle tree: {tree.leaf_count} leaves, depth {tree.depth}, "
        f"hash={hasher.name}, sort_pairs={sort_pairs}, sort_leaves={sort_leaves}, "
        f"odd_node={odd_node.value}"
    )
    return tree


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of levels above the leaves for a tree of num_leaves.

    Both odd-node policies give the same count, since every level
    has ceil(n / 2) nodes.

    Returns:
        0 for zero or one leaf, otherwise ceil(log2(num_leaves))
    """
    if num_leaves < 0:
        raise ValueError(f"num_leaves must be non-negative, got {num_leaves}")
    depth = 0
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


__all__ = [
    "OddNodePolicy",
    "MerkleTree",
    "build_merkle_tree",
    "compute_tree_depth",
]
