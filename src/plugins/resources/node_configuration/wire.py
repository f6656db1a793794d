"""
Wire models for the node configuration API.

Request and response bodies exchanged with the remote fleet-management API.
Field names follow the API's camelCase; absent values are omitted on
serialization instead of being sent as null.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

OS_DISK_TYPE_STANDARD = "OS_DISK_TYPE_STANDARD"
OS_DISK_TYPE_STANDARD_SSD = "OS_DISK_TYPE_STANDARD_SSD"
OS_DISK_TYPE_PREMIUM_SSD = "OS_DISK_TYPE_PREMIUM_SSD"


class WireModel(BaseModel):
    """Base for all wire payloads."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready dict, dropping absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Tags(BaseModel):
    """Tag map; every entry lives in the additional properties bag."""

    model_config = ConfigDict(extra="allow")

    @property
    def additional_properties(self) -> Dict[str, str]:
        return dict(self.model_extra or {})


class EKSConfigPayload(WireModel):
    security_groups: Optional[List[str]] = Field(None, alias="securityGroups")
    instance_profile_arn: str = Field(..., alias="instanceProfileArn")
    dns_cluster_ip: Optional[str] = Field(None, alias="dnsClusterIp")
    key_pair_id: Optional[str] = Field(None, alias="keyPairId")
    volume_type: Optional[str] = Field(None, alias="volumeType")
    volume_iops: Optional[int] = Field(None, alias="volumeIops")
    volume_throughput: Optional[int] = Field(None, alias="volumeThroughput")
    imds_v1: Optional[bool] = Field(None, alias="imdsV1")
    imds_hop_limit: Optional[int] = Field(None, alias="imdsHopLimit")
    volume_kms_key_arn: Optional[str] = Field(None, alias="volumeKmsKeyArn")


class AKSConfigPayload(WireModel):
    max_pods_per_node: Optional[int] = Field(None, alias="maxPodsPerNode")
    # Kept as a plain string so unknown server values survive parsing.
    os_disk_type: Optional[str] = Field(None, alias="osDiskType")


class KOPSConfigPayload(WireModel):
    key_pair_id: Optional[str] = Field(None, alias="keyPairId")


class GKEConfigPayload(WireModel):
    max_pods_per_node: Optional[int] = Field(None, alias="maxPodsPerNode")
    network_tags: Optional[List[str]] = Field(None, alias="networkTags")
    disk_type: Optional[str] = Field(None, alias="diskType")


class NodeConfigurationFields(WireModel):
    """Fields shared by create, update and read payloads."""

    disk_cpu_ratio: Optional[int] = Field(None, alias="diskCpuRatio")
    min_disk_size: Optional[int] = Field(None, alias="minDiskSize")
    subnets: Optional[List[str]] = None
    ssh_public_key: Optional[str] = Field(None, alias="sshPublicKey")
    image: Optional[str] = None
    init_script: Optional[str] = Field(None, alias="initScript")
    container_runtime: Optional[str] = Field(None, alias="containerRuntime")
    docker_config: Optional[Dict[str, Any]] = Field(None, alias="dockerConfig")
    kubelet_config: Optional[Dict[str, Any]] = Field(None, alias="kubeletConfig")
    tags: Optional[Tags] = None
    eks: Optional[EKSConfigPayload] = None
    aks: Optional[AKSConfigPayload] = None
    kops: Optional[KOPSConfigPayload] = None
    gke: Optional[GKEConfigPayload] = None


class NewNodeConfiguration(NodeConfigurationFields):
    """Create request body."""

    name: str


class NodeConfigurationUpdate(NodeConfigurationFields):
    """Update request body. Name and cluster are immutable and never sent."""


class NodeConfiguration(NodeConfigurationFields):
    """Read response body."""

    id: Optional[str] = None
    name: Optional[str] = None
    version: Optional[int] = None
    is_default: Optional[bool] = Field(None, alias="default")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")


class NodeConfigurationList(WireModel):
    """List response body."""

    items: Optional[List[NodeConfiguration]] = None
