"""
JSON Schema for declared node configuration documents.

Documents use snake_case keys; provider variants are nested objects keyed by
``eks``, ``aks``, ``kops`` and ``gke``. Defaults listed here are applied when a
document is parsed, never when a wire response is decoded.
"""

NOT_BLANK = r"\S"
KEY_PAIR_ID_PATTERN = r"^key-[0-9a-f]{8}([0-9a-f]{9})?$"

EKS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["security_groups", "instance_profile_arn"],
    "properties": {
        "security_groups": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string"},
        },
        "instance_profile_arn": {"type": "string", "pattern": NOT_BLANK},
        "dns_cluster_ip": {"type": "string", "format": "ipv4"},
        "key_pair_id": {"type": "string", "pattern": KEY_PAIR_ID_PATTERN},
        "volume_type": {"type": "string", "pattern": "(?i)^(gp3|io1|io2)$"},
        "volume_iops": {"type": "integer", "minimum": 100, "maximum": 100000},
        "volume_throughput": {"type": "integer", "minimum": 125, "maximum": 1000},
        "imds_v1": {"type": "boolean", "default": True},
        "imds_hop_limit": {"type": "integer", "minimum": 2, "default": 2},
        "volume_kms_key_arn": {"type": "string", "pattern": "arn:aws:kms:.*"},
    },
}

AKS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "max_pods_per_node": {
            "type": "integer",
            "minimum": 10,
            "maximum": 250,
            "default": 30,
        },
        "os_disk_type": {
            "type": "string",
            "enum": ["standard", "standard-ssd", "premium-ssd"],
        },
    },
}

KOPS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "key_pair_id": {"type": "string", "pattern": KEY_PAIR_ID_PATTERN},
    },
}

GKE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "max_pods_per_node": {
            "type": "integer",
            "minimum": 10,
            "maximum": 256,
            "default": 110,
        },
        "network_tags": {
            "type": "array",
            "maxItems": 64,
            "items": {"type": "string"},
        },
        "disk_type": {
            "type": "string",
            "enum": ["pd-standard", "pd-balanced", "pd-ssd", "pd-extreme"],
        },
    },
}

VARIANT_SCHEMAS = {
    "eks": EKS_SCHEMA,
    "aks": AKS_SCHEMA,
    "kops": KOPS_SCHEMA,
    "gke": GKE_SCHEMA,
}

NODE_CONFIGURATION_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["cluster_id", "name", "subnets"],
    "properties": {
        "cluster_id": {"type": "string", "pattern": NOT_BLANK},
        "id": {"type": ["string", "null"]},
        "name": {"type": "string", "pattern": NOT_BLANK},
        "disk_cpu_ratio": {"type": "integer", "minimum": 0},
        "min_disk_size": {"type": "integer", "minimum": 30, "maximum": 1000},
        "subnets": {"type": "array", "items": {"type": "string"}},
        "ssh_public_key": {"type": "string", "format": "base64"},
        "image": {"type": "string", "pattern": NOT_BLANK},
        "init_script": {"type": "string", "format": "base64"},
        "container_runtime": {
            "type": "string",
            "pattern": "(?i)^(dockerd|containerd)$",
        },
        "docker_config": {"type": "string"},
        "kubelet_config": {"type": "string"},
        "tags": {"type": "object", "additionalProperties": {"type": "string"}},
        **VARIANT_SCHEMAS,
    },
}

# Defaults filled in when a declared document omits them.
VARIANT_DEFAULTS = {
    kind: {
        key: prop["default"]
        for key, prop in schema["properties"].items()
        if "default" in prop
    }
    for kind, schema in VARIANT_SCHEMAS.items()
}

# Fields the server fills in when omitted; leaving them unset is not a change.
SERVER_DEFAULTED_FIELDS = frozenset({"disk_cpu_ratio", "min_disk_size"})
SERVER_DEFAULTED_VARIANT_FIELDS = frozenset(
    {"imds_v1", "imds_hop_limit", "max_pods_per_node"}
)
