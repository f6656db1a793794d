"""
Resource Plugin Base - Abstract interface for resource kinds.

A resource plugin converges one kind of remote object towards its declared
state. The host orchestrator calls the lifecycle methods; the plugin keeps no
state between calls beyond what it is handed.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from plugins.base import ResourceResult


class ResourcePlugin(ABC):
    """
    Abstract base class for resource plugins.

    Plugins are constructed with an API client and are discovered via Python
    entry points in the 'nodeconf.resources' group.
    """

    def __init__(self, client: Any):
        self.client = client

    @property
    @abstractmethod
    def kind(self) -> str:
        """Unique resource kind handled by this plugin."""
        pass

    @abstractmethod
    def parse_declared(self, document: Dict[str, Any]) -> Any:
        """
        Convert a declared document into the plugin's typed state.

        Args:
            document: The declared resource document

        Returns:
            The typed declared state.
        """
        pass

    @abstractmethod
    def to_document(self, state: Any) -> Dict[str, Any]:
        """Render typed state as a plain mapping for persistence."""
        pass

    @abstractmethod
    def load_state(self, document: Dict[str, Any]) -> Any:
        """Rebuild typed state from a persisted mapping, without validation."""
        pass

    @abstractmethod
    async def create(self, declared: Any) -> ResourceResult:
        """
        Create the remote object and return its normalized state.

        Args:
            declared: The typed declared state
        """
        pass

    @abstractmethod
    async def read(self, state: Any, is_new_resource: bool = False) -> ResourceResult:
        """
        Refresh state from the remote system.

        Args:
            state: Last-known state carrying the remote identifier
            is_new_resource: Whether the identifier was assigned in this invocation

        Returns:
            ResourceResult; ``removed`` is set when the object is gone.
        """
        pass

    @abstractmethod
    async def update(self, prior: Any, declared: Any) -> ResourceResult:
        """
        Converge an existing object towards the declared state.

        Args:
            prior: Last-known state
            declared: The typed declared state
        """
        pass

    @abstractmethod
    async def delete(self, state: Any) -> ResourceResult:
        """Destroy the remote object."""
        pass

    @abstractmethod
    async def import_state(self, key: str) -> ResourceResult:
        """
        Adopt an existing remote object.

        Args:
            key: Plugin-specific import key
        """
        pass
