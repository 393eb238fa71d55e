"""
Error taxonomy for the Merkle engine.

Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

None of these errors are retryable: every operation is a pure,
deterministic computation over its inputs.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the engine."""

    # Build-time errors (caller misuse)
    EMPTY_INPUT = "EMPTY_INPUT"
    INVALID_LEAF_WIDTH = "INVALID_LEAF_WIDTH"

    # Proof generation
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"

    # Proof verification
    MALFORMED_PROOF = "MALFORMED_PROOF"

    # Snapshot restore
    ROOT_MISMATCH = "ROOT_MISMATCH"

    # Configuration
    UNSUPPORTED_HASH = "UNSUPPORTED_HASH"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class MerkleError(BaseModel):
    """
    Structured error for passing failures across process boundaries
    without raising.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.LEAF_NOT_FOUND],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "AllowtreeException":
        """Convert this error model to the matching exception."""
        exc_class = _EXCEPTIONS_BY_CODE.get(self.code, AllowtreeException)
        exc = AllowtreeException.__new__(exc_class)
        AllowtreeException.__init__(
            exc,
            message=self.message,
            code=self.code,
            details=dict(self.details),
            retryable=self.retryable,
        )
        return exc


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class AllowtreeException(Exception):
    """
    Base exception for all engine errors.

    Carries structured error information and can be converted
    to/from MerkleError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "ALLOWTREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> MerkleError:
        """Convert this exception to a MerkleError model."""
        return MerkleError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyInputError(AllowtreeException):
    """Raised when a tree is built from zero items."""

    def __init__(
        self,
        message: str = "Cannot build a Merkle tree from an empty item list",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_INPUT,
            details=details,
        )


class InvalidLeafWidthError(AllowtreeException):
    """Raised when a pre-hashed leaf does not match the digest width."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        expected: int | None = None,
        actual: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        if expected is not None:
            full_details["expected"] = expected
        if actual is not None:
            full_details["actual"] = actual
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_LEAF_WIDTH,
            details=full_details,
        )


class LeafNotFoundError(AllowtreeException):
    """
    Raised when a proof is requested for a leaf that is not in the tree.

    This is an expected outcome (the item is not a member), not a defect.
    """

    def __init__(
        self,
        message: str,
        leaf: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf:
            full_details["leaf"] = leaf
        super().__init__(
            message=message,
            code=ErrorCodes.LEAF_NOT_FOUND,
            details=full_details,
        )


class MalformedProofError(AllowtreeException):
    """Raised when a proof entry has an invalid position tag or sibling width."""

    def __init__(
        self,
        message: str,
        step_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if step_index is not None:
            full_details["step_index"] = step_index
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_PROOF,
            details=full_details,
        )


class RootMismatchError(AllowtreeException):
    """Raised when a restored tree does not reproduce its recorded root."""

    def __init__(
        self,
        message: str,
        expected: str | None = None,
        actual: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if expected:
            full_details["expected"] = expected
        if actual:
            full_details["actual"] = actual
        super().__init__(
            message=message,
            code=ErrorCodes.ROOT_MISMATCH,
            details=full_details,
        )


class UnsupportedHashError(AllowtreeException):
    """Raised when a hash algorithm name cannot be resolved."""

    def __init__(
        self,
        message: str,
        algorithm: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if algorithm:
            full_details["algorithm"] = algorithm
        super().__init__(
            message=message,
            code=ErrorCodes.UNSUPPORTED_HASH,
            details=full_details,
        )


_EXCEPTIONS_BY_CODE: dict[str, type[AllowtreeException]] = {
    ErrorCodes.EMPTY_INPUT: EmptyInputError,
    ErrorCodes.INVALID_LEAF_WIDTH: InvalidLeafWidthError,
    ErrorCodes.LEAF_NOT_FOUND: LeafNotFoundError,
    ErrorCodes.MALFORMED_PROOF: MalformedProofError,
    ErrorCodes.ROOT_MISMATCH: RootMismatchError,
    ErrorCodes.UNSUPPORTED_HASH: UnsupportedHashError,
}


__all__ = [
    "ErrorCodes",
    "MerkleError",
    "AllowtreeException",
    "EmptyInputError",
    "InvalidLeafWidthError",
    "LeafNotFoundError",
    "MalformedProofError",
    "RootMismatchError",
    "UnsupportedHashError",
]
