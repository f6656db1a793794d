"""
Node configuration reconciler.

Implements create/read/update/delete/import for node configurations against
the fleet API. Each call is self-contained; the client is injected and every
remote call is awaited directly, so caller-side cancellation and timeouts
apply to all of them. Nothing is retried here.
"""

import dataclasses
import logging
from typing import Any, Dict

from client import APIResponse, FleetAPIClient, check_ok_response
from errors import ConsistencyError, NodeConfigError, ValidationError
from plugins.base import ResourcePhase, ResourceResult
from plugins.resources.base import ResourcePlugin
from plugins.resources.node_configuration import translator
from plugins.resources.node_configuration.importer import (
    IdentityResolver,
    parse_import_key,
)
from plugins.resources.node_configuration.models import NodeConfiguration
from plugins.resources.node_configuration.wire import (
    NodeConfiguration as NodeConfigurationResponse,
)

logger = logging.getLogger(__name__)


def _parse_configuration(response: APIResponse) -> NodeConfigurationResponse:
    return NodeConfigurationResponse.model_validate(response.data or {})


class NodeConfigurationReconciler(ResourcePlugin):
    """Resource plugin for the ``node_configuration`` kind."""

    def __init__(self, client: FleetAPIClient):
        super().__init__(client)
        self.resolver = IdentityResolver(client)

    @property
    def kind(self) -> str:
        return "node_configuration"

    def parse_declared(self, document: Dict[str, Any]) -> NodeConfiguration:
        return translator.parse_declared(document)

    def to_document(self, state: NodeConfiguration) -> Dict[str, Any]:
        return translator.to_document(state)

    def load_state(self, document: Dict[str, Any]) -> NodeConfiguration:
        return translator.from_document(document)

    async def create(self, declared: NodeConfiguration) -> ResourceResult:
        """
        Create the configuration, then read it back.

        The follow-up read normalizes the state to the server's canonical
        form, including any server-side defaults.
        """
        request = translator.to_create_request(declared)

        logger.info(
            f"Creating node configuration {declared.name!r} "
            f"in cluster {declared.cluster_id}"
        )
        response = check_ok_response(
            await self.client.create_configuration(declared.cluster_id, request)
        )
        created = _parse_configuration(response)
        if not created.id:
            raise ConsistencyError(
                f"create of node configuration {declared.name!r} "
                f"returned no identifier"
            )

        logger.info(f"Created node configuration {declared.name!r} with id {created.id}")
        state = dataclasses.replace(declared, id=created.id)
        try:
            result = await self.read(state, is_new_resource=True)
        except NodeConfigError as e:
            # The object exists remotely; hand back its id with the error.
            e.state = state
            raise
        result.changed = True
        return result

    async def read(
        self, state: NodeConfiguration, is_new_resource: bool = False
    ) -> ResourceResult:
        """
        Fetch the configuration and map it back into declared shape.

        A configuration that disappeared out-of-band is reported as removed
        so the host can re-create it. A configuration created in this same
        invocation must be readable.
        """
        response = await self.client.get_configuration(state.cluster_id, state.id)

        if response.not_found:
            if is_new_resource:
                raise ConsistencyError(
                    f"node configuration ({state.id}) not found right after creation"
                )
            logger.warning(
                f"Node configuration ({state.id}) not found, removing from state"
            )
            return ResourceResult(
                phase=ResourcePhase.MISSING_REMOTELY,
                message=f"node configuration {state.id} no longer exists",
            )

        check_ok_response(response)
        current = translator.from_wire(_parse_configuration(response), state.cluster_id)
        if current.id is None:
            current.id = state.id
        return ResourceResult(phase=ResourcePhase.PRESENT, state=current)

    async def update(
        self, prior: NodeConfiguration, declared: NodeConfiguration
    ) -> ResourceResult:
        """
        Apply changed mutable fields; skip the remote call when nothing changed.

        Raises:
            ValidationError: If an immutable field (name, cluster) changed.
        """
        for name in translator.IMMUTABLE_FIELDS:
            if getattr(prior, name) != getattr(declared, name):
                raise ValidationError(
                    f"{name} cannot be changed in place "
                    f"({getattr(prior, name)!r} -> {getattr(declared, name)!r})"
                )

        changed = translator.changed_fields(prior, declared)
        if not changed:
            logger.info("Nothing to update in node configuration")
            return ResourceResult(
                phase=ResourcePhase.PRESENT, state=prior, message="no changes"
            )

        request = translator.to_update_request(declared)

        logger.info(
            f"Updating node configuration ({prior.id}), "
            f"changed fields: {', '.join(changed)}"
        )
        check_ok_response(
            await self.client.update_configuration(prior.cluster_id, prior.id, request)
        )
        result = await self.read(dataclasses.replace(declared, id=prior.id))
        result.changed = True
        return result

    async def delete(self, state: NodeConfiguration) -> ResourceResult:
        """
        Delete the configuration unless it is gone or is the cluster default.

        The remote system refuses to delete the default configuration, so that
        case is skipped with a warning instead of surfacing an API error.
        """
        response = await self.client.get_configuration(state.cluster_id, state.id)

        if response.not_found:
            logger.debug(f"Node configuration ({state.id}) not found, skipping delete")
            return ResourceResult(phase=ResourcePhase.ABSENT, message="not found")

        check_ok_response(response)
        current = _parse_configuration(response)
        if current.is_default:
            logger.warning(
                f"Default node configuration ({state.id}) can't be deleted, "
                f"removing from state"
            )
            return ResourceResult(
                phase=ResourcePhase.ABSENT, message="default configuration kept"
            )

        logger.info(f"Deleting node configuration ({state.id})")
        check_ok_response(
            await self.client.delete_configuration(state.cluster_id, state.id)
        )
        return ResourceResult(
            phase=ResourcePhase.ABSENT, message="deleted", changed=True
        )

    async def import_state(self, key: str) -> ResourceResult:
        """
        Import a configuration from ``<clusterID>/<nameOrID>``.

        Raises:
            ValidationError: If the key is malformed.
            NotFoundError: If no configuration matches the name.
        """
        import_key = parse_import_key(key)
        config_id = await self.resolver.resolve(
            import_key.cluster_id, import_key.name_or_id
        )

        logger.info(f"Importing node configuration ({config_id})")
        stub = NodeConfiguration(
            cluster_id=import_key.cluster_id, name=import_key.name_or_id, id=config_id
        )
        return await self.read(stub)
