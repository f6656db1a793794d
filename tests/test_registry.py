"""Unit tests for the resource plugin registry."""

import pytest
from unittest.mock import MagicMock, patch

from plugins.registry import (
    ENTRY_POINT_GROUP,
    ResourceRegistry,
    get_registry,
    register_builtin_resources,
    reset_registry,
)
from plugins.resources.base import ResourcePlugin
from plugins.resources.node_configuration import NodeConfigurationReconciler


class WidgetPlugin(ResourcePlugin):
    """Minimal plugin used to exercise the registry."""

    @property
    def kind(self):
        return "widget"

    def parse_declared(self, document):
        return dict(document)

    def to_document(self, state):
        return dict(state)

    def load_state(self, document):
        return dict(document)

    async def create(self, declared):
        raise NotImplementedError

    async def read(self, state, is_new_resource=False):
        raise NotImplementedError

    async def update(self, prior, declared):
        raise NotImplementedError

    async def delete(self, state):
        raise NotImplementedError

    async def import_state(self, key):
        raise NotImplementedError


@pytest.fixture(autouse=True)
def clean_registry():
    reset_registry()
    yield
    reset_registry()


class TestResourceRegistry:
    """Tests for ResourceRegistry."""

    def test_register_and_get(self, mock_client):
        registry = ResourceRegistry()
        registry.register_resource_plugin(WidgetPlugin)

        plugin = registry.get_resource_plugin("widget", mock_client)

        assert isinstance(plugin, WidgetPlugin)
        assert plugin.client is mock_client

    def test_each_get_returns_new_instance(self, mock_client):
        registry = ResourceRegistry()
        registry.register_resource_plugin(WidgetPlugin)

        first = registry.get_resource_plugin("widget", mock_client)
        second = registry.get_resource_plugin("widget", mock_client)

        assert first is not second

    def test_unknown_kind(self, mock_client):
        registry = ResourceRegistry()
        registry.register_resource_plugin(WidgetPlugin)

        with pytest.raises(ValueError, match="Unknown resource kind: gadget"):
            registry.get_resource_plugin("gadget", mock_client)

    def test_unknown_kind_empty_registry(self, mock_client):
        with pytest.raises(ValueError, match="Available kinds: none"):
            ResourceRegistry().get_resource_plugin("widget", mock_client)

    def test_list_and_has(self):
        registry = ResourceRegistry()
        assert registry.list_resource_plugins() == []
        assert registry.has_resource_plugin("widget") is False

        registry.register_resource_plugin(WidgetPlugin)

        assert registry.list_resource_plugins() == ["widget"]
        assert registry.has_resource_plugin("widget") is True

    def test_overwrite_warns(self):
        registry = ResourceRegistry()
        registry.register_resource_plugin(WidgetPlugin)

        with patch("plugins.registry.logger") as mock_logger:
            registry.register_resource_plugin(WidgetPlugin)

        mock_logger.warning.assert_called_once()
        assert registry.list_resource_plugins() == ["widget"]


class TestGlobalRegistry:
    """Tests for the registry singleton and built-in registration."""

    def test_singleton(self):
        assert get_registry() is get_registry()

    def test_reset(self):
        first = get_registry()
        reset_registry()
        assert get_registry() is not first

    def test_builtin_registration(self, mock_client):
        with patch("plugins.registry.entry_points", return_value=[]) as mock_eps:
            register_builtin_resources()

        mock_eps.assert_called_once_with(group=ENTRY_POINT_GROUP)
        plugin = get_registry().get_resource_plugin("node_configuration", mock_client)
        assert isinstance(plugin, NodeConfigurationReconciler)

    def test_entry_point_plugins_loaded(self):
        ep = MagicMock()
        ep.name = "widget"
        ep.load.return_value = WidgetPlugin

        with patch("plugins.registry.entry_points", return_value=[ep]):
            register_builtin_resources()

        assert get_registry().has_resource_plugin("widget")

    def test_broken_entry_point_is_skipped(self):
        ep = MagicMock()
        ep.name = "broken"
        ep.load.side_effect = ImportError("no module named broken")

        with patch("plugins.registry.entry_points", return_value=[ep]):
            register_builtin_resources()

        assert get_registry().list_resource_plugins() == ["node_configuration"]
