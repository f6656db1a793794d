"""
Plugin system for the node configuration reconciler.

This package provides the plugin architecture for resource kinds.
"""

from plugins.base import ResourcePhase, ResourceResult
from plugins.resources.base import ResourcePlugin
from plugins.registry import ResourceRegistry, get_registry

__all__ = [
    "ResourcePhase",
    "ResourceResult",
    "ResourcePlugin",
    "ResourceRegistry",
    "get_registry",
]
