"""
Declared-state types for the node configuration resource.

The provider variant is a sum type: a NodeConfiguration carries at most one
of EKSConfig, AKSConfig, KOPSConfig or GKEConfig in its ``variant`` field.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Union

# Decoded value for an AKS OS disk type the client does not recognize.
UNSET_OS_DISK_TYPE = ""


@dataclass
class EKSConfig:
    """AWS EKS specific settings."""

    kind: ClassVar[str] = "eks"

    security_groups: List[str]
    instance_profile_arn: str
    dns_cluster_ip: Optional[str] = None
    key_pair_id: Optional[str] = None
    volume_type: Optional[str] = None
    volume_iops: Optional[int] = None
    volume_throughput: Optional[int] = None
    imds_v1: Optional[bool] = None
    imds_hop_limit: Optional[int] = None
    volume_kms_key_arn: Optional[str] = None


@dataclass
class AKSConfig:
    """Azure AKS specific settings."""

    kind: ClassVar[str] = "aks"

    max_pods_per_node: Optional[int] = None
    os_disk_type: Optional[str] = None


@dataclass
class KOPSConfig:
    """kOps specific settings."""

    kind: ClassVar[str] = "kops"

    key_pair_id: Optional[str] = None


@dataclass
class GKEConfig:
    """Google GKE specific settings."""

    kind: ClassVar[str] = "gke"

    max_pods_per_node: Optional[int] = None
    network_tags: Optional[List[str]] = None
    disk_type: Optional[str] = None


Variant = Union[EKSConfig, AKSConfig, KOPSConfig, GKEConfig]

VARIANT_TYPES = {cls.kind: cls for cls in (EKSConfig, AKSConfig, KOPSConfig, GKEConfig)}


@dataclass
class NodeConfiguration:
    """Declared (or last-known) state of a node configuration."""

    cluster_id: str
    name: str
    subnets: List[str] = field(default_factory=list)
    id: Optional[str] = None
    disk_cpu_ratio: Optional[int] = None
    min_disk_size: Optional[int] = None
    ssh_public_key: Optional[str] = None
    image: Optional[str] = None
    init_script: Optional[str] = None
    container_runtime: Optional[str] = None
    docker_config: Optional[str] = None
    kubelet_config: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)
    variant: Optional[Variant] = None

    @property
    def variant_kind(self) -> Optional[str]:
        return self.variant.kind if self.variant is not None else None


@dataclass(frozen=True)
class ImportKey:
    """Transient import key: cluster plus configuration name or id."""

    cluster_id: str
    name_or_id: str
