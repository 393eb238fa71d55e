"""
Configuration for tree building policy.
"""
from .runtime import (
    ENV_PREFIX,
    TreeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ENV_PREFIX",
    "TreeConfig",
    "get_default_config",
    "set_default_config",
]
