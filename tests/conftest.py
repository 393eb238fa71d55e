"""
Pytest configuration and shared fixtures for allowtree tests.

This conftest.py:
1. Adds project root and tests root to sys.path for imports
2. Provides commonly-used hashers and trees via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

ALLOWLIST = _common.ALLOWLIST

from allowtree.config import set_default_config
from allowtree.crypto.hashing import Keccak256, Sha256
from allowtree.merkle import build_merkle_tree


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def keccak():
    """Provide the default Keccak-256 hasher."""
    return Keccak256()


@pytest.fixture
def sha():
    """Provide a SHA-256 hasher."""
    return Sha256()


@pytest.fixture
def allowlist():
    """The four sample allowlist addresses as 0x-hex strings."""
    return list(ALLOWLIST)


@pytest.fixture
def allowlist_tree(allowlist):
    """Keccak-256 allowlist tree with hashed leaves and sorted pairs."""
    return build_merkle_tree(allowlist, hash_leaves=True, sort_pairs=True)


@pytest.fixture(autouse=True)
def _reset_default_config():
    """Isolate the module-level default config between tests."""
    set_default_config(None)
    yield
    set_default_config(None)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
