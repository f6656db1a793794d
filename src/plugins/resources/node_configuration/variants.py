"""
Variant codec: provider-specific sub-configurations to and from the wire.

Encoding omits absent values so the remote defaults apply. Decoding copies
wire-present fields verbatim and leaves wire-absent fields as None.
"""

import logging
from typing import Dict, Optional

from errors import InvariantViolation, ValidationError
from plugins.resources.node_configuration.models import (
    UNSET_OS_DISK_TYPE,
    AKSConfig,
    EKSConfig,
    GKEConfig,
    KOPSConfig,
    Variant,
)
from plugins.resources.node_configuration.wire import (
    OS_DISK_TYPE_PREMIUM_SSD,
    OS_DISK_TYPE_STANDARD,
    OS_DISK_TYPE_STANDARD_SSD,
    AKSConfigPayload,
    EKSConfigPayload,
    GKEConfigPayload,
    KOPSConfigPayload,
    NodeConfigurationFields,
    WireModel,
)

logger = logging.getLogger(__name__)

AKS_OS_DISK_TYPES = {
    "standard": OS_DISK_TYPE_STANDARD,
    "standard-ssd": OS_DISK_TYPE_STANDARD_SSD,
    "premium-ssd": OS_DISK_TYPE_PREMIUM_SSD,
}
AKS_OS_DISK_TYPES_FROM_WIRE = {v: k for k, v in AKS_OS_DISK_TYPES.items()}


def _non_empty(value):
    """Drop empty strings and zero values, which mean "not set" in declarations."""
    if value in ("", 0):
        return None
    return value


def to_eks_payload(config: EKSConfig) -> EKSConfigPayload:
    return EKSConfigPayload(
        security_groups=list(config.security_groups) or None,
        instance_profile_arn=config.instance_profile_arn,
        dns_cluster_ip=_non_empty(config.dns_cluster_ip),
        key_pair_id=_non_empty(config.key_pair_id),
        volume_type=_non_empty(config.volume_type),
        volume_iops=_non_empty(config.volume_iops),
        volume_throughput=_non_empty(config.volume_throughput),
        imds_v1=config.imds_v1,
        imds_hop_limit=config.imds_hop_limit,
        volume_kms_key_arn=_non_empty(config.volume_kms_key_arn),
    )


def from_eks_payload(payload: EKSConfigPayload) -> EKSConfig:
    return EKSConfig(
        security_groups=list(payload.security_groups or []),
        instance_profile_arn=payload.instance_profile_arn,
        dns_cluster_ip=payload.dns_cluster_ip,
        key_pair_id=payload.key_pair_id,
        volume_type=payload.volume_type,
        volume_iops=payload.volume_iops,
        volume_throughput=payload.volume_throughput,
        imds_v1=payload.imds_v1,
        imds_hop_limit=payload.imds_hop_limit,
        volume_kms_key_arn=payload.volume_kms_key_arn,
    )


def to_aks_os_disk_type(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return AKS_OS_DISK_TYPES.get(value)


def from_aks_os_disk_type(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if value not in AKS_OS_DISK_TYPES_FROM_WIRE:
        # Unknown values are erased rather than rejected.
        logger.debug(f"Unrecognized AKS os disk type {value!r}, leaving unset")
        return UNSET_OS_DISK_TYPE
    return AKS_OS_DISK_TYPES_FROM_WIRE[value]


def to_aks_payload(config: AKSConfig) -> AKSConfigPayload:
    return AKSConfigPayload(
        max_pods_per_node=config.max_pods_per_node,
        os_disk_type=to_aks_os_disk_type(config.os_disk_type),
    )


def from_aks_payload(payload: AKSConfigPayload) -> AKSConfig:
    return AKSConfig(
        max_pods_per_node=payload.max_pods_per_node,
        os_disk_type=from_aks_os_disk_type(payload.os_disk_type),
    )


def to_kops_payload(config: KOPSConfig) -> KOPSConfigPayload:
    return KOPSConfigPayload(key_pair_id=_non_empty(config.key_pair_id))


def from_kops_payload(payload: KOPSConfigPayload) -> KOPSConfig:
    return KOPSConfig(key_pair_id=payload.key_pair_id)


def to_gke_payload(config: GKEConfig) -> GKEConfigPayload:
    network_tags = None
    if config.network_tags is not None:
        network_tags = list(config.network_tags)
    return GKEConfigPayload(
        max_pods_per_node=config.max_pods_per_node,
        network_tags=network_tags,
        disk_type=_non_empty(config.disk_type),
    )


def from_gke_payload(payload: GKEConfigPayload) -> GKEConfig:
    network_tags = None
    if payload.network_tags is not None:
        network_tags = list(payload.network_tags)
    return GKEConfig(
        max_pods_per_node=payload.max_pods_per_node,
        network_tags=network_tags,
        disk_type=payload.disk_type,
    )


_ENCODERS = {
    EKSConfig: to_eks_payload,
    AKSConfig: to_aks_payload,
    KOPSConfig: to_kops_payload,
    GKEConfig: to_gke_payload,
}

_DECODERS = {
    "eks": from_eks_payload,
    "aks": from_aks_payload,
    "kops": from_kops_payload,
    "gke": from_gke_payload,
}


def encode_variant(variant: Optional[Variant]) -> Dict[str, WireModel]:
    """
    Encode the active variant as wire keyword arguments.

    Returns:
        ``{kind: payload}`` for the active variant, or an empty dict.

    Raises:
        ValidationError: If ``variant`` is not one of the known variant types.
    """
    if variant is None:
        return {}
    encoder = _ENCODERS.get(type(variant))
    if encoder is None:
        raise ValidationError(
            f"unsupported provider variant: {type(variant).__name__}"
        )
    return {variant.kind: encoder(variant)}


def decode_variant(response: NodeConfigurationFields) -> Optional[Variant]:
    """
    Decode whichever variant sub-object the response carries.

    Raises:
        InvariantViolation: If more than one variant sub-object is non-null.
    """
    present = [kind for kind in _DECODERS if getattr(response, kind) is not None]
    if not present:
        return None
    if len(present) > 1:
        raise InvariantViolation(
            f"node configuration response has multiple provider variants: "
            f"{', '.join(present)}"
        )
    kind = present[0]
    return _DECODERS[kind](getattr(response, kind))
