"""
Core plugin types and dataclasses.

This module contains shared types used across the plugin system.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)


class ResourcePhase(Enum):
    """Lifecycle phase of a managed resource."""

    ABSENT = "absent"
    CREATING = "creating"
    PRESENT = "present"
    READING = "reading"
    UPDATING = "updating"
    DELETING = "deleting"
    MISSING_REMOTELY = "missing_remotely"

    @property
    def terminal(self) -> bool:
        """Whether an operation may return this phase."""
        return self in (
            ResourcePhase.ABSENT,
            ResourcePhase.PRESENT,
            ResourcePhase.MISSING_REMOTELY,
        )


# Phase a resource is in while each lifecycle operation runs
OPERATION_PHASES = {
    "create": ResourcePhase.CREATING,
    "read": ResourcePhase.READING,
    "import": ResourcePhase.READING,
    "update": ResourcePhase.UPDATING,
    "delete": ResourcePhase.DELETING,
}


@dataclass
class ResourceResult:
    """Standard result from a resource lifecycle operation."""

    phase: ResourcePhase = ResourcePhase.ABSENT
    state: Optional[Any] = None
    message: str = ""
    changed: bool = False  # True when the remote object was written

    @property
    def removed(self) -> bool:
        """True when the caller should drop its local record."""
        return self.phase in (ResourcePhase.ABSENT, ResourcePhase.MISSING_REMOTELY)
