"""
Node configuration resource.

Declared node provisioning settings for a cluster, including at most one
provider-specific variant (EKS, AKS, KOPS or GKE).
"""

from plugins.resources.node_configuration.models import (
    AKSConfig,
    EKSConfig,
    GKEConfig,
    ImportKey,
    KOPSConfig,
    NodeConfiguration,
)
from plugins.resources.node_configuration.reconciler import (
    NodeConfigurationReconciler,
)

__all__ = [
    "AKSConfig",
    "EKSConfig",
    "GKEConfig",
    "ImportKey",
    "KOPSConfig",
    "NodeConfiguration",
    "NodeConfigurationReconciler",
]
