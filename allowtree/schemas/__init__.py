"""
Schemas: error taxonomy and serialisable proof/tree models.
"""
from .errors import (
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
from .proof import (
    ProofDocument,
    ProofStepModel,
    TreeSnapshot,
)

__all__ = [
    # Errors
    "AllowtreeException",
    "EmptyInputError",
    "ErrorCodes",
    "InvalidLeafWidthError",
    "LeafNotFoundError",
    "MalformedProofError",
    "MerkleError",
    "RootMismatchError",
    "UnsupportedHashError",
    # Models
    "ProofDocument",
    "ProofStepModel",
    "TreeSnapshot",
]
