"""
Test fixtures package for allowtree tests.

Usage:
    from fixtures.common import make_leaves, ALLOWLIST

    def test_something():
        leaves = make_leaves(5)
"""

from .common import (
    ALICE,
    ALLOWLIST,
    BOB,
    CAROL,
    DAN,
    flip_byte,
    make_leaves,
    make_letter_leaves,
    parent,
)

__all__ = [
    "ALICE",
    "ALLOWLIST",
    "BOB",
    "CAROL",
    "DAN",
    "flip_byte",
    "make_leaves",
    "make_letter_leaves",
    "parent",
]
