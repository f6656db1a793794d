"""
State file for the CLI host.

Persists the last-known state of each managed resource, keyed by resource
address, as a JSON document.
"""

import json
import logging
import os
from typing import Any, Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class StateStore:
    """JSON-backed map of resource address -> {kind, state}."""

    def __init__(self, path: str):
        self.path = path
        self._resources: Dict[str, Dict[str, Any]] = {}

    def load(self) -> "StateStore":
        if not os.path.exists(self.path):
            logger.debug(f"No state file at {self.path}, starting empty")
            self._resources = {}
            return self

        with open(self.path, "r") as f:
            data = json.load(f)

        version = data.get("version")
        if version != STATE_VERSION:
            raise ValueError(
                f"Unsupported state file version {version!r} in {self.path}"
            )
        self._resources = data.get("resources", {})
        return self

    def save(self) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w") as f:
            json.dump(
                {"version": STATE_VERSION, "resources": self._resources},
                f,
                indent=2,
                sort_keys=True,
            )
        os.replace(tmp_path, self.path)

    def get(self, address: str) -> Optional[Tuple[str, Dict[str, Any]]]:
        entry = self._resources.get(address)
        if entry is None:
            return None
        return entry["kind"], entry["state"]

    def put(self, address: str, kind: str, state: Dict[str, Any]) -> None:
        self._resources[address] = {"kind": kind, "state": state}

    def remove(self, address: str) -> None:
        self._resources.pop(address, None)

    def addresses(self) -> Iterator[str]:
        return iter(sorted(self._resources))

    def __contains__(self, address: str) -> bool:
        return address in self._resources

    def __len__(self) -> int:
        return len(self._resources)
