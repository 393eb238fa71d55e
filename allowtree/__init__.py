"""
allowtree - Merkle tree construction and inclusion proofs.

Build a tree over an allowlist, publish its root, and hand each member
a proof that any verifier using the same hash and pairing policy can check.

Usage:
    from allowtree import build_merkle_tree, verify_merkle_proof, Keccak256

    tree = build_merkle_tree(["0x5dad...", "0x3440..."], hash_leaves=True, sort_pairs=True)
    leaf = Keccak256()(bytes.fromhex("5dad..."))
    proof = tree.get_proof(leaf)
    verify_merkle_proof(leaf, proof, tree.root, sort_pairs=True)
"""

__version__ = "0.1.0"

from allowtree.schemas.errors import (
    AllowtreeException,
    EmptyInputError,
    ErrorCodes,
    InvalidLeafWidthError,
    LeafNotFoundError,
    MalformedProofError,
    MerkleError,
    RootMismatchError,
    UnsupportedHashError,
)
from allowtree.schemas.proof import ProofDocument, ProofStepModel, TreeSnapshot
from allowtree.crypto.hashing import (
    CallableHash,
    HashFunction,
    Keccak256,
    Sha256,
    from_hex,
    get_hash_function,
    hash_pair,
    to_hex,
)
from allowtree.merkle import (
    MerkleProof,
    MerkleProver,
    MerkleTree,
    MerkleVerifier,
    OddNodePolicy,
    Position,
    ProofStep,
    build_merkle_proof,
    build_merkle_tree,
    compute_tree_depth,
    verify_merkle_proof,
)
from allowtree.config import TreeConfig, get_default_config, set_default_config

__all__ = [
    "AllowtreeException",
    "CallableHash",
    "EmptyInputError",
    "ErrorCodes",
    "HashFunction",
    "InvalidLeafWidthError",
    "Keccak256",
    "LeafNotFoundError",
    "MalformedProofError",
    "MerkleError",
    "MerkleProof",
    "MerkleProver",
    "MerkleTree",
    "MerkleVerifier",
    "OddNodePolicy",
    "Position",
    "ProofDocument",
    "ProofStep",
    "ProofStepModel",
    "RootMismatchError",
    "Sha256",
    "TreeConfig",
    "TreeSnapshot",
    "UnsupportedHashError",
    "build_merkle_proof",
    "build_merkle_tree",
    "compute_tree_depth",
    "from_hex",
    "get_default_config",
    "get_hash_function",
    "hash_pair",
    "set_default_config",
    "to_hex",
    "verify_merkle_proof",
]
