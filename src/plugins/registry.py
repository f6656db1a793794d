"""
Plugin Registry - Discovery and registration of resource plugins.

This module provides the central registry mapping resource kinds to the
plugins that reconcile them.
"""

from importlib.metadata import entry_points
from typing import Any, Dict, Optional, Type

from plugins.base import logger
from plugins.resources.base import ResourcePlugin

ENTRY_POINT_GROUP = "nodeconf.resources"


class ResourceRegistry:
    """
    Central registry for resource plugins.

    Plugin classes are registered once; instances are created per client,
    because each plugin is bound to the API client it is constructed with.
    """

    def __init__(self):
        # Registered plugin classes (not instantiated)
        self._resource_plugins: Dict[str, Type[ResourcePlugin]] = {}

    def register_resource_plugin(self, plugin_class: Type[ResourcePlugin]) -> None:
        """
        Register a resource plugin class.

        Args:
            plugin_class: The ResourcePlugin subclass to register
        """
        # Kind is read from a throwaway instance with no client
        kind = plugin_class(client=None).kind

        if kind in self._resource_plugins:
            logger.warning(f"Overwriting existing resource plugin: {kind}")

        self._resource_plugins[kind] = plugin_class
        logger.info(f"Registered resource plugin: {kind}")

    def get_resource_plugin(self, kind: str, client: Any) -> ResourcePlugin:
        """
        Get a resource plugin instance bound to ``client``.

        Args:
            kind: The resource kind to retrieve
            client: API client injected into the plugin

        Returns:
            A ResourcePlugin instance

        Raises:
            ValueError: If the kind is not registered
        """
        if kind not in self._resource_plugins:
            available = ", ".join(self._resource_plugins.keys()) or "none"
            raise ValueError(
                f"Unknown resource kind: {kind}. Available kinds: {available}"
            )
        return self._resource_plugins[kind](client=client)

    def list_resource_plugins(self) -> list[str]:
        """List all registered resource kinds."""
        return list(self._resource_plugins.keys())

    def has_resource_plugin(self, kind: str) -> bool:
        """Check if a resource kind is registered."""
        return kind in self._resource_plugins


# Global registry instance
_registry: Optional[ResourceRegistry] = None


def get_registry() -> ResourceRegistry:
    """Get the global resource registry singleton."""
    global _registry
    if _registry is None:
        _registry = ResourceRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None


def register_builtin_resources() -> None:
    """
    Register the built-in resource plugins and discover third-party ones
    via entry points.
    """
    registry = get_registry()

    from plugins.resources.node_configuration import NodeConfigurationReconciler

    registry.register_resource_plugin(NodeConfigurationReconciler)

    discovered = entry_points(group=ENTRY_POINT_GROUP)
    for ep in discovered:
        try:
            plugin_class = ep.load()
            registry.register_resource_plugin(plugin_class)
        except Exception as e:
            logger.warning(f"Could not load resource plugin {ep.name}: {e}")
