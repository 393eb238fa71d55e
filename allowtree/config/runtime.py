"""
Runtime Configuration

Default tree-building policy: hash algorithm, leaf hashing, pair and leaf
sorting, and odd-node handling.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from dotenv import load_dotenv

from allowtree.crypto.hashing import DEFAULT_HASH, HashFunction, RawItem, get_hash_function
from allowtree.merkle.merkle_tree import MerkleTree, OddNodePolicy, build_merkle_tree

load_dotenv()


ENV_PREFIX = "ALLOWTREE_"


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


def _parse_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass
class TreeConfig:
    """
    Policy used to build trees.

    Defaults match an allowlist tree consumed by a sorted-pair verifier:
    Keccak-256, hashed leaves, sorted pairs, insertion-ordered leaves,
    odd nodes promoted.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    hash_algorithm: str = DEFAULT_HASH
    hash_leaves: bool = True
    sort_pairs: bool = True
    sort_leaves: bool = False
    odd_node: str = OddNodePolicy.PROMOTE.value

    def __post_init__(self):
        for name in ("hash_leaves", "sort_pairs", "sort_leaves"):
            setattr(self, name, _parse_flag(name, getattr(self, name)))
        if isinstance(self.odd_node, OddNodePolicy):
            self.odd_node = self.odd_node.value
        self.odd_node = OddNodePolicy(str(self.odd_node).lower()).value
        # Raises UnsupportedHashError for unknown names
        get_hash_function(self.hash_algorithm)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - ALLOWTREE_HASH_ALGORITHM: keccak256 or sha256
        - ALLOWTREE_HASH_LEAVES: hash raw items into leaves (true/false)
        - ALLOWTREE_SORT_PAIRS: sort each pair before hashing (true/false)
        - ALLOWTREE_SORT_LEAVES: sort level 0 (true/false)
        - ALLOWTREE_ODD_NODE: promote or duplicate
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides["hash_algorithm"] = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}HASH_LEAVES"):
            overrides["hash_leaves"] = _env_flag(f"{ENV_PREFIX}HASH_LEAVES", "true")
        if os.getenv(f"{ENV_PREFIX}SORT_PAIRS"):
            overrides["sort_pairs"] = _env_flag(f"{ENV_PREFIX}SORT_PAIRS", "true")
        if os.getenv(f"{ENV_PREFIX}SORT_LEAVES"):
            overrides["sort_leaves"] = _env_flag(f"{ENV_PREFIX}SORT_LEAVES", "false")
        if os.getenv(f"{ENV_PREFIX}ODD_NODE"):
            overrides["odd_node"] = os.getenv(f"{ENV_PREFIX}ODD_NODE")

        return overrides

    @classmethod
    def from_env(cls) -> "TreeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TreeConfig":
        """Load configuration from a YAML file (optionally under a 'tree' key)."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data.get("tree", data))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TreeConfig":
        """Load configuration from a dictionary (supports partial data, ignores unknown keys)."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def with_env_overrides(self) -> "TreeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.items():
            setattr(new_config, key, value)
        new_config.__post_init__()
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash_algorithm": self.hash_algorithm,
            "hash_leaves": self.hash_leaves,
            "sort_pairs": self.sort_pairs,
            "sort_leaves": self.sort_leaves,
            "odd_node": self.odd_node,
        }

    def hasher(self) -> HashFunction:
        return get_hash_function(self.hash_algorithm)

    def build(self, items: Iterable[RawItem]) -> MerkleTree:
        """Build a tree from items using this policy."""
        return build_merkle_tree(
            items,
            hash_leaves=self.hash_leaves,
            sort_pairs=self.sort_pairs,
            hasher=self.hasher(),
            sort_leaves=self.sort_leaves,
            odd_node=self.odd_node,
        )


# Global default configuration
_default_config: Optional[TreeConfig] = None


def get_default_config() -> TreeConfig:
    """Get the default tree configuration."""
    global _default_config
    if _default_config is None:
        _default_config = TreeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[TreeConfig]) -> None:
    """Set the default tree configuration (None resets to environment defaults)."""
    global _default_config
    _default_config = config
