"""
Serialisable proof and tree snapshot schemas.

These are the presentation-layer shapes: every digest is a 0x-prefixed
lowercase hex string. The engine itself works on raw bytes; conversion
lives next to the engine types (see allowtree.merkle).
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


_HEX_PATTERN = re.compile(r"^0x(?:[0-9a-f]{2})*$")


def _normalize_hex(value: str) -> str:
    lowered = value.lower()
    if not _HEX_PATTERN.match(lowered):
        raise ValueError(f"Expected 0x-prefixed even-length hex string, got {value[:18]!r}")
    return lowered


class ProofStepModel(BaseModel):
    """One sibling entry of a proof."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    position: Literal["left", "right"] = Field(
        ...,
        description="Side the sibling occupies relative to the current node",
    )
    data: str = Field(..., description="Sibling digest as 0x-hex")

    @field_validator("data")
    @classmethod
    def _check_data(cls, v: str) -> str:
        return _normalize_hex(v)


class ProofDocument(BaseModel):
    """
    A self-describing inclusion proof.

    Carries the hash algorithm and pairing policy so a third party can
    re-verify without access to the tree.
    """

    model_config = ConfigDict(extra="forbid")

    leaf: str = Field(..., description="Leaf digest as 0x-hex")
    index: int = Field(..., ge=0, description="Position of the leaf in level 0")
    root: str = Field(..., description="Root digest as 0x-hex")
    hash_algorithm: str = Field(default="keccak256", min_length=1)
    sort_pairs: bool = Field(default=True)
    proof: list[ProofStepModel] = Field(default_factory=list)

    @field_validator("leaf", "root")
    @classmethod
    def _check_digest(cls, v: str) -> str:
        return _normalize_hex(v)

    @property
    def hex_proof(self) -> list[str]:
        """Sibling digests only, in order (the classic getHexProof shape)."""
        return [step.data for step in self.proof]


class TreeSnapshot(BaseModel):
    """
    Everything needed to rebuild a tree exactly: level-0 nodes in build
    order, the policy flags, and the root they must reproduce.
    """

    model_config = ConfigDict(extra="forbid")

    hash_algorithm: str = Field(default="keccak256", min_length=1)
    sort_pairs: bool = Field(default=True)
    sort_leaves: bool = Field(default=False)
    odd_node: Literal["promote", "duplicate"] = Field(default="promote")
    leaves: list[str] = Field(..., min_length=1)
    root: str = Field(...)

    @field_validator("leaves")
    @classmethod
    def _check_leaves(cls, v: list[str]) -> list[str]:
        return [_normalize_hex(leaf) for leaf in v]

    @field_validator("root")
    @classmethod
    def _check_root(cls, v: str) -> str:
        return _normalize_hex(v)


__all__ = [
    "ProofStepModel",
    "ProofDocument",
    "TreeSnapshot",
]
