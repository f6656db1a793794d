"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import AsyncMock

from client import APIResponse

CLUSTER_ID = "b6bfc074-a267-400f-b8f1-db0850c369b1"
CONFIG_ID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.fixture
def mock_client():
    """Create a mock fleet API client."""
    client = AsyncMock()
    client.create_configuration = AsyncMock()
    client.get_configuration = AsyncMock()
    client.update_configuration = AsyncMock()
    client.delete_configuration = AsyncMock()
    client.list_configurations = AsyncMock()
    return client


@pytest.fixture
def eks_document():
    """Declared document for an EKS node configuration."""
    return {
        "cluster_id": CLUSTER_ID,
        "name": "pool-a",
        "min_disk_size": 50,
        "subnets": ["subnet-1"],
        "eks": {
            "instance_profile_arn": "arn:aws:iam::1:instance-profile/x",
            "security_groups": ["sg-1"],
        },
    }


@pytest.fixture
def eks_wire_response():
    """Server view of the EKS node configuration after creation."""
    return {
        "id": CONFIG_ID,
        "name": "pool-a",
        "version": 1,
        "default": False,
        "diskCpuRatio": 0,
        "minDiskSize": 50,
        "subnets": ["subnet-1"],
        "tags": {},
        "eks": {
            "instanceProfileArn": "arn:aws:iam::1:instance-profile/x",
            "securityGroups": ["sg-1"],
            "imdsV1": True,
            "imdsHopLimit": 2,
        },
    }


def ok(data=None, status=200):
    """Build a successful APIResponse."""
    return APIResponse(status=status, body="", data=data)


def error(status, body="error"):
    """Build a failed APIResponse."""
    return APIResponse(status=status, body=body, data=None)
