"""
Identity resolution for imported node configurations.

Import keys have the form ``<clusterID>/<nameOrID>``. A UUID-shaped second
segment is used as the configuration id directly; anything else is looked up
by exact name among the cluster's configurations.
"""

import logging
import uuid

from client import FleetAPIClient, check_ok_response
from errors import NotFoundError, ValidationError
from plugins.resources.node_configuration.models import ImportKey
from plugins.resources.node_configuration.wire import NodeConfigurationList

logger = logging.getLogger(__name__)


def parse_import_key(key: str) -> ImportKey:
    """Split an import key into cluster id and name-or-id."""
    ids = key.split("/")
    if len(ids) != 2 or not ids[0] or not ids[1]:
        raise ValidationError(
            f"expected import id with format: "
            f"<cluster_id>/<node_configuration name or id>, got: {key!r}"
        )
    return ImportKey(cluster_id=ids[0], name_or_id=ids[1])


def is_uuid(token: str) -> bool:
    try:
        uuid.UUID(token)
    except ValueError:
        return False
    return True


class IdentityResolver:
    """Resolves a name-or-id token into a node configuration id."""

    def __init__(self, client: FleetAPIClient):
        self.client = client

    async def resolve(self, cluster_id: str, token: str) -> str:
        """
        Resolve ``token`` within ``cluster_id``.

        If several configurations share the name, the first one listed wins.

        Raises:
            NotFoundError: If no configuration has the given name.
            RemoteAPIError: If listing configurations fails.
        """
        if is_uuid(token):
            return token

        logger.debug(f"Resolving node configuration {token!r} in cluster {cluster_id}")
        response = check_ok_response(await self.client.list_configurations(cluster_id))
        listing = NodeConfigurationList.model_validate(response.data or {})

        for cfg in listing.items or []:
            if cfg.name == token and cfg.id:
                logger.info(f"Resolved node configuration {token!r} to {cfg.id}")
                return cfg.id

        raise NotFoundError(token)
