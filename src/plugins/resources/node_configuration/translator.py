"""
Configuration translator for node configurations.

Maps declared NodeConfiguration values to create/update request bodies and
read responses back into declared shape. Validation runs before any request
body is built, so local errors never reach the network.
"""

import json
import logging
from dataclasses import asdict, fields
from typing import Any, Dict, List, Optional

from errors import ConfigParseError, ValidationError
from plugins.resources.node_configuration.models import (
    VARIANT_TYPES,
    NodeConfiguration,
)
from plugins.resources.node_configuration.schema import (
    NODE_CONFIGURATION_SCHEMA,
    SERVER_DEFAULTED_FIELDS,
    SERVER_DEFAULTED_VARIANT_FIELDS,
    VARIANT_DEFAULTS,
)
from plugins.resources.node_configuration.variants import (
    decode_variant,
    encode_variant,
)
from plugins.resources.node_configuration.wire import (
    NewNodeConfiguration,
    NodeConfigurationUpdate,
    Tags,
)
from plugins.resources.node_configuration.wire import (
    NodeConfiguration as NodeConfigurationResponse,
)
from validation import validate_document

logger = logging.getLogger(__name__)

JSON_CONFIG_FIELDS = ("docker_config", "kubelet_config")

# Fields an update may change. Everything else is identity.
MUTABLE_FIELDS = (
    "disk_cpu_ratio",
    "min_disk_size",
    "subnets",
    "ssh_public_key",
    "image",
    "init_script",
    "container_runtime",
    "docker_config",
    "kubelet_config",
    "tags",
    "variant",
)

IMMUTABLE_FIELDS = ("cluster_id", "name")


def _strip_none(document: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in document.items() if v is not None}


def to_document(declared: NodeConfiguration) -> Dict[str, Any]:
    """
    Render declared state as a plain mapping.

    Unset fields are left out; the variant appears under its kind key.
    """
    document: Dict[str, Any] = {}
    for f in fields(declared):
        if f.name == "variant":
            continue
        value = getattr(declared, f.name)
        if value is None:
            continue
        if isinstance(value, (list, dict)):
            value = type(value)(value)
        document[f.name] = value
    if declared.variant is not None:
        document[declared.variant.kind] = _strip_none(asdict(declared.variant))
    return document


def _variant_kinds(document: Dict[str, Any]) -> List[str]:
    return [kind for kind in VARIANT_TYPES if document.get(kind) is not None]


def from_document(document: Dict[str, Any]) -> NodeConfiguration:
    """
    Rebuild a NodeConfiguration from a document produced by to_document().

    No validation or defaulting happens here; use parse_declared() for
    user-supplied input.
    """
    present = _variant_kinds(document)
    if len(present) > 1:
        raise ValidationError(
            f"only one provider variant may be set, got: {', '.join(present)}"
        )

    variant = None
    if present:
        kind = present[0]
        variant = VARIANT_TYPES[kind](**_strip_none(document[kind]))

    scalars = {
        f.name: document[f.name]
        for f in fields(NodeConfiguration)
        if f.name != "variant" and document.get(f.name) is not None
    }
    return NodeConfiguration(variant=variant, **scalars)


def parse_declared(
    document: Dict[str, Any], cluster_id: Optional[str] = None
) -> NodeConfiguration:
    """
    Build a NodeConfiguration from a declared document.

    Args:
        document: Mapping with snake_case keys and at most one variant block.
        cluster_id: Cluster to use when the document does not name one.

    Raises:
        ValidationError: On schema violations, a declared id, or more than one
            variant block.
        ConfigParseError: If docker_config or kubelet_config is not a JSON object.
    """
    if not isinstance(document, dict):
        raise ValidationError("node configuration document must be a mapping")

    document = _strip_none(document)
    if "id" in document:
        raise ValidationError("id is assigned by the remote API and cannot be declared")
    if cluster_id and "cluster_id" not in document:
        document["cluster_id"] = cluster_id

    present = _variant_kinds(document)
    if len(present) > 1:
        raise ValidationError(
            f"only one provider variant may be set, got: {', '.join(present)}"
        )

    is_valid, error = validate_document(document, NODE_CONFIGURATION_SCHEMA)
    if not is_valid:
        raise ValidationError(error)

    for field_name in JSON_CONFIG_FIELDS:
        if document.get(field_name):
            string_to_map(field_name, document[field_name])

    for kind in present:
        block = dict(VARIANT_DEFAULTS[kind])
        block.update(_strip_none(document[kind]))
        document[kind] = block

    return from_document(document)


def validate_declared(declared: NodeConfiguration) -> None:
    """Raise ValidationError unless the declared state satisfies the schema."""
    if declared.variant is not None and not isinstance(
        declared.variant, tuple(VARIANT_TYPES.values())
    ):
        raise ValidationError(
            f"unsupported provider variant: {type(declared.variant).__name__}"
        )
    is_valid, error = validate_document(to_document(declared), NODE_CONFIGURATION_SCHEMA)
    if not is_valid:
        raise ValidationError(error)


def string_to_map(field_name: str, value: str) -> Dict[str, Any]:
    """Parse a JSON object sub-configuration."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigParseError(field_name, str(e)) from e
    if not isinstance(parsed, dict):
        raise ConfigParseError(field_name, f"expected an object, got {type(parsed).__name__}")
    return parsed


def map_to_string(value: Dict[str, Any]) -> str:
    """Serialize a JSON sub-configuration to canonical text."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def _request_fields(declared: NodeConfiguration) -> Dict[str, Any]:
    """Shared body fields for create and update requests."""
    validate_declared(declared)

    body: Dict[str, Any] = {
        "disk_cpu_ratio": declared.disk_cpu_ratio,
        "min_disk_size": declared.min_disk_size,
        "subnets": list(declared.subnets) if declared.subnets else None,
        "ssh_public_key": declared.ssh_public_key or None,
        "image": declared.image or None,
        "init_script": declared.init_script or None,
        "container_runtime": declared.container_runtime or None,
    }

    for field_name in JSON_CONFIG_FIELDS:
        value = getattr(declared, field_name)
        if value:
            body[field_name] = string_to_map(field_name, value)

    # Empty maps are left out so they never show up as an update diff.
    if declared.tags:
        body["tags"] = Tags(**declared.tags)

    body.update(encode_variant(declared.variant))
    return body


def to_create_request(declared: NodeConfiguration) -> NewNodeConfiguration:
    """Build the create request body for a declared configuration."""
    return NewNodeConfiguration(name=declared.name, **_request_fields(declared))


def to_update_request(declared: NodeConfiguration) -> NodeConfigurationUpdate:
    """Build the update request body. Identity fields are never included."""
    return NodeConfigurationUpdate(**_request_fields(declared))


def from_wire(
    response: NodeConfigurationResponse, cluster_id: str
) -> NodeConfiguration:
    """
    Map a read response back into declared shape.

    Raises:
        InvariantViolation: If the response carries more than one variant.
    """
    docker_config = None
    if response.docker_config is not None:
        docker_config = map_to_string(response.docker_config)
    kubelet_config = None
    if response.kubelet_config is not None:
        kubelet_config = map_to_string(response.kubelet_config)

    tags: Dict[str, str] = {}
    if response.tags is not None:
        tags = response.tags.additional_properties

    return NodeConfiguration(
        cluster_id=cluster_id,
        id=response.id,
        name=response.name,
        subnets=list(response.subnets or []),
        disk_cpu_ratio=response.disk_cpu_ratio,
        min_disk_size=response.min_disk_size,
        ssh_public_key=response.ssh_public_key,
        image=response.image,
        init_script=response.init_script,
        container_runtime=response.container_runtime,
        docker_config=docker_config,
        kubelet_config=kubelet_config,
        tags=tags,
        variant=decode_variant(response),
    )


def _json_equal(field_name: str, old: Optional[str], new: Optional[str]) -> bool:
    if not old or not new:
        return not old and not new
    return string_to_map(field_name, old) == string_to_map(field_name, new)


def _empty_as_none(value):
    if isinstance(value, (str, list)) and not value:
        return None
    return value


def _variant_changed(old, new) -> bool:
    if old is None or new is None:
        return old is not new
    if old.kind != new.kind:
        return True
    for f in fields(new):
        new_value = getattr(new, f.name)
        if new_value is None and f.name in SERVER_DEFAULTED_VARIANT_FIELDS:
            continue
        if _empty_as_none(getattr(old, f.name)) != _empty_as_none(new_value):
            return True
    return False


def changed_fields(prior: NodeConfiguration, declared: NodeConfiguration) -> List[str]:
    """
    List mutable fields whose declared value differs from the prior state.

    Raises:
        ConfigParseError: If a declared JSON sub-configuration is malformed.
    """
    changed = []
    for name in MUTABLE_FIELDS:
        old = getattr(prior, name)
        new = getattr(declared, name)
        if name == "variant":
            differs = _variant_changed(old, new)
        elif name in JSON_CONFIG_FIELDS:
            differs = not _json_equal(name, old, new)
        elif name == "container_runtime":
            differs = (old or "").lower() != (new or "").lower()
        elif name in SERVER_DEFAULTED_FIELDS and new is None:
            differs = False
        elif name in ("subnets", "tags"):
            differs = (old or None) != (new or None)
        else:
            differs = old != new
        if differs:
            changed.append(name)
    return changed
