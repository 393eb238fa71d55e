"""
Merkle Tree Construction and Proofs
Deterministic tree building + inclusion proof generation/verification.

This module provides:
- MerkleTree / build_merkle_tree: immutable tree over a pluggable hash
- OddNodePolicy: promote (default) or duplicate the unpaired last node
- MerkleProof / ProofStep / Position: inclusion proof types
- build_merkle_proof / verify_merkle_proof: prove and verify membership

Canonical Commitment Rules:
1. Leaf hashing: H(item) when hash_leaves, otherwise items are digests
2. Parent hashing: H(left || right), smaller-first when sort_pairs
3. Odd node: carried up unchanged unless OddNodePolicy.DUPLICATE
4. Single leaf: root = leaf
5. Empty input: EmptyInputError

Usage:
    from allowtree.merkle import build_merkle_tree, verify_merkle_proof

    tree = build_merkle_tree(addresses, hash_leaves=True, sort_pairs=True)
    leaf = tree.hasher(address_bytes)
    proof = tree.get_proof(leaf)

    assert verify_merkle_proof(leaf, proof, tree.root, sort_pairs=True)
"""
from .merkle_tree import (
    MerkleTree,
    OddNodePolicy,
    build_merkle_tree,
    compute_tree_depth,
)

from .merkle_proofs import (
    MerkleProof,
    MerkleProver,
    MerkleVerifier,
    Position,
    ProofInput,
    ProofStep,
    build_merkle_proof,
    verify_merkle_proof,
)


__all__ = [
    # Tree
    "MerkleTree",
    "OddNodePolicy",
    "build_merkle_tree",
    "compute_tree_depth",
    # Proofs
    "MerkleProof",
    "Position",
    "ProofInput",
    "ProofStep",
    "build_merkle_proof",
    "verify_merkle_proof",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
