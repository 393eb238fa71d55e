"""
Merkle Proof Generation and Verification

This module provides:
- Position / ProofStep / MerkleProof: the inclusion proof types
- build_merkle_proof: walk a built tree from a leaf to the root
- verify_merkle_proof: recompute a root from a leaf and its proof
- MerkleProver / MerkleVerifier: class-based convenience wrappers

Proof Rules:
1. A proof is one (sibling, position) step per level, bottom-up
2. position is the side the SIBLING occupies relative to the current node
3. PROMOTE trees emit no step at a level where the node was carried up
4. DUPLICATE trees emit the node itself as a RIGHT sibling at such a level
5. With sort_pairs the position does not change the hash; it is still recorded

A failed verification returns False. Only structurally invalid proof data
(unknown position tag, wrong-width sibling, undecodable hex) raises
MalformedProofError.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Sequence, Union

from allowtree.crypto.hashing import (
    DEFAULT_HASH,
    HashFunction,
    Keccak256,
    RawItem,
    get_hash_function,
    hash_pair,
    to_bytes,
    to_hex,
)
from allowtree.merkle.merkle_tree import MerkleTree, OddNodePolicy, build_merkle_tree
from allowtree.schemas.errors import LeafNotFoundError, MalformedProofError
from allowtree.schemas.proof import ProofDocument, ProofStepModel


logger = logging.getLogger(__name__)


class Position(str, Enum):
    """Side of the sibling relative to the node being proven."""
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class ProofStep:
    """One level of an inclusion proof."""
    sibling: bytes
    position: Position


@dataclass(frozen=True)
class MerkleProof:
    """
    An inclusion proof for a single leaf.

    Attributes:
        leaf: The leaf digest being proven
        index: Position of the leaf in level 0 of the tree it came from
        steps: Sibling entries from the leaf level upwards
        root: The root this proof was generated against
        sort_pairs: Pairing policy of that tree
        hash_algorithm: Name of the hash function of that tree
    """
    leaf: bytes
    index: int
    steps: tuple[ProofStep, ...]
    root: bytes
    sort_pairs: bool = True
    hash_algorithm: str = DEFAULT_HASH

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")

    def __iter__(self) -> Iterator[ProofStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def siblings(self) -> list[bytes]:
        return [step.sibling for step in self.steps]

    def hex_siblings(self) -> list[str]:
        return [to_hex(step.sibling) for step in self.steps]

    def to_document(self) -> ProofDocument:
        return ProofDocument(
            leaf=to_hex(self.leaf),
            index=self.index,
            root=to_hex(self.root),
            hash_algorithm=self.hash_algorithm,
            sort_pairs=self.sort_pairs,
            proof=[
                ProofStepModel(position=step.position.value, data=to_hex(step.sibling))
                for step in self.steps
            ],
        )

    @classmethod
    def from_document(cls, document: ProofDocument) -> "MerkleProof":
        return cls(
            leaf=to_bytes(document.leaf),
            index=document.index,
            steps=tuple(
                ProofStep(sibling=to_bytes(step.data), position=Position(step.position))
                for step in document.proof
            ),
            root=to_bytes(document.root),
            sort_pairs=document.sort_pairs,
            hash_algorithm=document.hash_algorithm,
        )


ProofInput = Union[MerkleProof, ProofDocument, Sequence[Union[ProofStep, Sequence[Any]]]]


def build_merkle_proof(tree: MerkleTree, leaf: bytes | str) -> MerkleProof:
    """
    Generate the inclusion proof for a leaf digest.

    Algorithm:
    1. Locate the leaf in level 0 by exact byte match
    2. At each level below the root:
       - odd position: sibling is on the LEFT (pos - 1)
       - even position with a right neighbour: sibling is on the RIGHT (pos + 1)
       - unpaired last node: no step (PROMOTE) or itself on the RIGHT (DUPLICATE)
       - move up: pos = pos // 2

    Args:
        tree: A built MerkleTree
        leaf: Leaf digest as bytes or 0x-hex

    Returns:
        MerkleProof against tree.root

    Raises:
        LeafNotFoundError: If the leaf is not in level 0
    """
    leaf_bytes = to_bytes(leaf)
    index = tree.index_of(leaf_bytes)
    if index is None:
        raise LeafNotFoundError(
            f"Leaf {to_hex(leaf_bytes)} is not a member of the tree",
            leaf=to_hex(leaf_bytes),
        )

    steps: list[ProofStep] = []
    pos = index
    for level in tree.levels[:-1]:
        if pos % 2 == 1:
            steps.append(ProofStep(sibling=level[pos - 1], position=Position.LEFT))
        elif pos + 1 < len(level):
            steps.append(ProofStep(sibling=level[pos + 1], position=Position.RIGHT))
        elif tree.odd_node is OddNodePolicy.DUPLICATE:
            steps.append(ProofStep(sibling=level[pos], position=Position.RIGHT))
        pos //= 2

    logger.debug(f"Proof for leaf {index}: {len(steps)} steps over depth {tree.depth}")

    return MerkleProof(
        leaf=leaf_bytes,
        index=index,
        steps=tuple(steps),
        root=tree.root,
        sort_pairs=tree.sort_pairs,
        hash_algorithm=tree.hasher.name,
    )


def _coerce_position(value: Any, step_index: int) -> Position:
    if isinstance(value, Position):
        return value
    if isinstance(value, str):
        try:
            return Position(value.lower())
        except ValueError:
            pass
    raise MalformedProofError(
        f"Proof step {step_index} has invalid position tag {value!r}",
        step_index=step_index,
    )


def _coerce_step(step: Any, step_index: int, hasher: HashFunction) -> tuple[bytes, Position]:
    if isinstance(step, ProofStep):
        sibling, position = step.sibling, step.position
    elif isinstance(step, ProofStepModel):
        sibling, position = step.data, step.position
    elif isinstance(step, dict) and "data" in step and "position" in step:
        sibling, position = step["data"], step["position"]
    elif isinstance(step, Sequence) and not isinstance(step, (str, bytes)) and len(step) == 2:
        sibling, position = step
    else:
        raise MalformedProofError(
            f"Proof step {step_index} is not a (sibling, position) pair",
            step_index=step_index,
        )

    try:
        sibling_bytes = to_bytes(sibling)
    except (TypeError, ValueError) as e:
        raise MalformedProofError(
            f"Proof step {step_index} has an undecodable sibling: {e}",
            step_index=step_index,
        ) from e

    if len(sibling_bytes) != hasher.digest_size:
        raise MalformedProofError(
            f"Proof step {step_index} sibling is {len(sibling_bytes)} bytes, "
            f"expected {hasher.digest_size}",
            step_index=step_index,
            details={"expected": hasher.digest_size, "actual": len(sibling_bytes)},
        )

    return sibling_bytes, _coerce_position(position, step_index)


def _decode_digest(value: bytes | str, label: str) -> bytes:
    try:
        return to_bytes(value)
    except (TypeError, ValueError) as e:
        raise MalformedProofError(
            f"Proof {label} is undecodable: {e}",
            details={"field": label},
        ) from e


def verify_merkle_proof(
    leaf: bytes | str,
    proof: ProofInput,
    root: bytes | str,
    sort_pairs: bool = True,
    *,
    hasher: HashFunction | None = None,
) -> bool:
    """
    Verify that leaf is included under root.

    Starting from the leaf, each step combines the running hash with the
    sibling: sibling on the left when position is LEFT, on the right
    otherwise (with sort_pairs the pair is ordered by value instead).
    The proof holds if the final hash equals root exactly.

    Args:
        leaf: Leaf digest as bytes or 0x-hex
        proof: MerkleProof, ProofDocument, or a sequence of ProofStep /
               (sibling, position) pairs / {"data", "position"} dicts
        root: Expected root as bytes or 0x-hex
        sort_pairs: Pairing policy the tree was built with
        hasher: Hash function (Keccak-256 when omitted)

    Returns:
        True if the recomputed root equals root, False otherwise

    Raises:
        MalformedProofError: If a step has an invalid position tag or a
                             sibling of the wrong width, or if leaf or
                             root cannot be decoded
    """
    hasher = hasher or Keccak256()
    if isinstance(proof, MerkleProof):
        steps = proof.steps
    elif isinstance(proof, ProofDocument):
        steps = proof.proof
    else:
        steps = proof

    try:
        parsed = [_coerce_step(step, i, hasher) for i, step in enumerate(steps)]
        current = _decode_digest(leaf, "leaf")
        expected_root = _decode_digest(root, "root")
    except MalformedProofError as e:
        logger.warning(f"Rejected malformed proof: {e.message}")
        raise

    for sibling, position in parsed:
        if position is Position.LEFT:
            current = hash_pair(hasher, sibling, current, sort_pairs)
        else:
            current = hash_pair(hasher, current, sibling, sort_pairs)

    return current == expected_root


class MerkleProver:
    """
    Convenience class for generating proofs and roots.

    Example:
        >>> tree = build_merkle_tree([b"alice", b"bob"])
        >>> proof = MerkleProver.prove_item(tree, b"bob")
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def prove(tree: MerkleTree, leaf: bytes | str) -> MerkleProof:
        """Proof for an existing leaf digest."""
        return build_merkle_proof(tree, leaf)

    @staticmethod
    def prove_item(tree: MerkleTree, item: RawItem) -> MerkleProof:
        """
        Proof for a raw item of a tree built with hash_leaves.

        The item is hashed with the tree's own hash function first.

        Raises:
            LeafNotFoundError: If the hashed item is not a leaf
        """
        return build_merkle_proof(tree, tree.hasher.digest(to_bytes(item)))

    @staticmethod
    def compute_root(items: Sequence[RawItem], **options: Any) -> bytes:
        """Root for items; options are passed to build_merkle_tree."""
        return build_merkle_tree(items, **options).root


class MerkleVerifier:
    """
    Convenience class for verifying proofs.

    Example:
        >>> MerkleVerifier.verify_hex_proof(leaf_hex, tree.get_hex_proof(leaf_hex), tree.hex_root)
        True
    """

    @staticmethod
    def verify(proof: MerkleProof, hasher: HashFunction | None = None) -> bool:
        """
        Verify a self-describing proof against its own recorded root.

        The hash function is resolved from proof.hash_algorithm unless given.
        Proofs from a tree built with a CallableHash carry a name that is not
        registered, so hasher must be passed for them.

        Raises:
            UnsupportedHashError: If hasher is omitted and proof.hash_algorithm
                                  is not a registered name
        """
        return verify_merkle_proof(
            proof.leaf,
            proof,
            proof.root,
            proof.sort_pairs,
            hasher=hasher or get_hash_function(proof.hash_algorithm),
        )

    @staticmethod
    def verify_document(document: ProofDocument, hasher: HashFunction | None = None) -> bool:
        """Verify a serialised ProofDocument."""
        return MerkleVerifier.verify(MerkleProof.from_document(document), hasher=hasher)

    @staticmethod
    def verify_hex_proof(
        leaf: str,
        hex_proof: Sequence[str],
        root: str,
        hasher: HashFunction | None = None,
    ) -> bool:
        """
        Verify a bare list of 0x-hex siblings from a sorted-pairs tree.

        With sorted pairs the side of each sibling does not affect the
        parent hash, so positions are not needed.
        """
        steps = [(sibling, Position.RIGHT) for sibling in hex_proof]
        return verify_merkle_proof(leaf, steps, root, sort_pairs=True, hasher=hasher)

    @staticmethod
    def verify_item(
        item: RawItem,
        proof: ProofInput,
        root: bytes | str,
        sort_pairs: bool = True,
        hasher: HashFunction | None = None,
    ) -> bool:
        """Hash a raw item to its leaf, then verify it under root."""
        hasher = hasher or Keccak256()
        leaf = hasher.digest(to_bytes(item))
        return verify_merkle_proof(leaf, proof, root, sort_pairs, hasher=hasher)


__all__ = [
    "Position",
    "ProofStep",
    "MerkleProof",
    "ProofInput",
    "build_merkle_proof",
    "verify_merkle_proof",
    "MerkleProver",
    "MerkleVerifier",
]
