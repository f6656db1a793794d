"""Unit tests for the node configuration translator."""

import dataclasses

import pytest

from conftest import CLUSTER_ID, CONFIG_ID
from errors import ConfigParseError, InvariantViolation, ValidationError
from plugins.resources.node_configuration import translator
from plugins.resources.node_configuration.models import (
    AKSConfig,
    EKSConfig,
    GKEConfig,
    KOPSConfig,
    NodeConfiguration,
)
from plugins.resources.node_configuration.wire import (
    NodeConfiguration as NodeConfigurationResponse,
)


def base_config(**overrides):
    values = dict(cluster_id=CLUSTER_ID, name="pool-a", subnets=["subnet-1"])
    values.update(overrides)
    return NodeConfiguration(**values)


class TestParseDeclared:
    """Tests for parse_declared()."""

    def test_parses_eks_document(self, eks_document):
        declared = translator.parse_declared(eks_document)
        assert declared.cluster_id == CLUSTER_ID
        assert declared.name == "pool-a"
        assert declared.min_disk_size == 50
        assert declared.disk_cpu_ratio is None
        assert isinstance(declared.variant, EKSConfig)
        assert declared.variant.security_groups == ["sg-1"]

    def test_applies_variant_defaults(self, eks_document):
        declared = translator.parse_declared(eks_document)
        assert declared.variant.imds_v1 is True
        assert declared.variant.imds_hop_limit == 2

    def test_applies_aks_and_gke_defaults(self):
        aks = translator.parse_declared(
            {"cluster_id": CLUSTER_ID, "name": "a", "subnets": [], "aks": {}}
        )
        assert aks.variant == AKSConfig(max_pods_per_node=30)

        gke = translator.parse_declared(
            {"cluster_id": CLUSTER_ID, "name": "g", "subnets": [], "gke": {}}
        )
        assert gke.variant == GKEConfig(max_pods_per_node=110)

    def test_cluster_id_argument_used_when_missing(self, eks_document):
        del eks_document["cluster_id"]
        declared = translator.parse_declared(eks_document, cluster_id="c1")
        assert declared.cluster_id == "c1"

    def test_null_values_are_ignored(self, eks_document):
        eks_document["image"] = None
        eks_document["gke"] = None
        declared = translator.parse_declared(eks_document)
        assert declared.image is None
        assert isinstance(declared.variant, EKSConfig)

    def test_two_variants_rejected(self, eks_document):
        eks_document["aks"] = {"max_pods_per_node": 30}
        with pytest.raises(ValidationError, match="only one provider variant"):
            translator.parse_declared(eks_document)

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError):
            translator.parse_declared(["not", "a", "mapping"])

    def test_missing_subnets_rejected(self, eks_document):
        del eks_document["subnets"]
        with pytest.raises(ValidationError, match="subnets"):
            translator.parse_declared(eks_document)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("min_disk_size", 29),
            ("min_disk_size", 1001),
            ("disk_cpu_ratio", -1),
            ("container_runtime", "podman"),
            ("ssh_public_key", "not base64!"),
            ("init_script", "@@@"),
            ("name", "   "),
            ("image", " "),
        ],
    )
    def test_scalar_validation(self, eks_document, field, value):
        eks_document[field] = value
        with pytest.raises(ValidationError, match=field):
            translator.parse_declared(eks_document)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("security_groups", []),
            ("instance_profile_arn", ""),
            ("dns_cluster_ip", "10.0.0"),
            ("key_pair_id", "kp-123"),
            ("volume_type", "gp2"),
            ("volume_iops", 99),
            ("volume_throughput", 1001),
            ("imds_hop_limit", 1),
            ("volume_kms_key_arn", "arn:aws:iam::1:key/x"),
        ],
    )
    def test_eks_validation(self, eks_document, field, value):
        eks_document["eks"][field] = value
        with pytest.raises(ValidationError, match=field):
            translator.parse_declared(eks_document)

    def test_case_insensitive_enums_accepted(self, eks_document):
        eks_document["container_runtime"] = "CONTAINERD"
        eks_document["eks"]["volume_type"] = "GP3"
        declared = translator.parse_declared(eks_document)
        assert declared.container_runtime == "CONTAINERD"
        assert declared.variant.volume_type == "GP3"

    def test_aks_validation(self):
        document = {
            "cluster_id": CLUSTER_ID,
            "name": "a",
            "subnets": [],
            "aks": {"max_pods_per_node": 251, "os_disk_type": "ultra"},
        }
        with pytest.raises(ValidationError) as exc_info:
            translator.parse_declared(document)
        assert "aks.max_pods_per_node" in str(exc_info.value)
        assert "aks.os_disk_type" in str(exc_info.value)

    def test_gke_network_tags_limit(self):
        document = {
            "cluster_id": CLUSTER_ID,
            "name": "g",
            "subnets": [],
            "gke": {"network_tags": [f"tag-{i}" for i in range(65)]},
        }
        with pytest.raises(ValidationError, match="network_tags"):
            translator.parse_declared(document)

    def test_malformed_json_config(self, eks_document):
        eks_document["kubelet_config"] = "{not json"
        with pytest.raises(ConfigParseError) as exc_info:
            translator.parse_declared(eks_document)
        assert exc_info.value.field == "kubelet_config"

    def test_unknown_field_rejected(self, eks_document):
        eks_document["disk_size"] = 100
        with pytest.raises(ValidationError):
            translator.parse_declared(eks_document)

    def test_declared_id_rejected(self, eks_document):
        eks_document["id"] = CONFIG_ID
        with pytest.raises(ValidationError, match="id is assigned by the remote API"):
            translator.parse_declared(eks_document)

    def test_persisted_id_kept(self, eks_document):
        state = translator.from_document({**eks_document, "id": CONFIG_ID})
        assert state.id == CONFIG_ID


class TestRequests:
    """Tests for to_create_request() and to_update_request()."""

    def test_end_to_end_create_payload(self, eks_document):
        declared = translator.parse_declared(eks_document)
        payload = translator.to_create_request(declared).to_payload()

        assert payload["name"] == "pool-a"
        assert payload["minDiskSize"] == 50
        assert "diskCpuRatio" not in payload
        assert payload["subnets"] == ["subnet-1"]
        assert payload["eks"] == {
            "instanceProfileArn": "arn:aws:iam::1:instance-profile/x",
            "securityGroups": ["sg-1"],
            "imdsV1": True,
            "imdsHopLimit": 2,
        }
        for kind in ("aks", "kops", "gke"):
            assert kind not in payload

    def test_update_payload_has_no_identity(self, eks_document):
        declared = translator.parse_declared(eks_document)
        payload = translator.to_update_request(declared).to_payload()
        assert "name" not in payload
        assert "clusterId" not in payload
        assert "cluster_id" not in payload
        assert payload["minDiskSize"] == 50

    def test_create_and_update_cover_same_fields(self, eks_document):
        eks_document.update(
            {
                "image": "ami-1",
                "tags": {"env": "prod"},
                "docker_config": '{"debug": true}',
            }
        )
        declared = translator.parse_declared(eks_document)
        create = translator.to_create_request(declared).to_payload()
        update = translator.to_update_request(declared).to_payload()
        create.pop("name")
        assert create == update

    def test_empty_tags_omitted(self):
        payload = translator.to_create_request(base_config(tags={})).to_payload()
        assert "tags" not in payload

    def test_tags_sent_as_object(self):
        payload = translator.to_create_request(
            base_config(tags={"env": "prod", "team": "core"})
        ).to_payload()
        assert payload["tags"] == {"env": "prod", "team": "core"}

    def test_json_configs_parsed(self):
        declared = base_config(
            docker_config='{"insecure-registries": ["r"]}',
            kubelet_config='{"eventRecordQPS": 5}',
        )
        payload = translator.to_create_request(declared).to_payload()
        assert payload["dockerConfig"] == {"insecure-registries": ["r"]}
        assert payload["kubeletConfig"] == {"eventRecordQPS": 5}

    def test_malformed_json_names_field(self):
        with pytest.raises(ConfigParseError) as exc_info:
            translator.to_create_request(base_config(docker_config="{oops"))
        assert exc_info.value.field == "docker_config"
        assert "docker_config" in str(exc_info.value)

    def test_json_array_is_not_a_config(self):
        with pytest.raises(ConfigParseError):
            translator.to_update_request(base_config(kubelet_config="[1, 2]"))

    def test_validation_applies_to_hand_built_state(self):
        with pytest.raises(ValidationError, match="min_disk_size"):
            translator.to_create_request(base_config(min_disk_size=5))

    def test_unknown_variant_type_rejected(self):
        with pytest.raises(ValidationError, match="unsupported provider variant"):
            translator.to_create_request(base_config(variant=object()))

    def test_absent_optional_fields_omitted(self):
        payload = translator.to_create_request(base_config()).to_payload()
        assert payload == {"name": "pool-a", "subnets": ["subnet-1"]}


class TestFromWire:
    """Tests for from_wire()."""

    def test_maps_response(self, eks_wire_response):
        response = NodeConfigurationResponse.model_validate(eks_wire_response)
        state = translator.from_wire(response, CLUSTER_ID)

        assert state.id == CONFIG_ID
        assert state.cluster_id == CLUSTER_ID
        assert state.disk_cpu_ratio == 0
        assert state.min_disk_size == 50
        assert state.tags == {}
        assert state.variant == EKSConfig(
            security_groups=["sg-1"],
            instance_profile_arn="arn:aws:iam::1:instance-profile/x",
            imds_v1=True,
            imds_hop_limit=2,
        )

    def test_json_configs_serialized_canonically(self, eks_wire_response):
        eks_wire_response["dockerConfig"] = {"b": 1, "a": {"y": 2, "x": 1}}
        response = NodeConfigurationResponse.model_validate(eks_wire_response)
        state = translator.from_wire(response, CLUSTER_ID)
        assert state.docker_config == '{"a":{"x":1,"y":2},"b":1}'
        assert state.kubelet_config is None

    def test_missing_tags_become_empty(self, eks_wire_response):
        del eks_wire_response["tags"]
        response = NodeConfigurationResponse.model_validate(eks_wire_response)
        assert translator.from_wire(response, CLUSTER_ID).tags == {}

    def test_two_variants_raise(self, eks_wire_response):
        eks_wire_response["gke"] = {"maxPodsPerNode": 110}
        response = NodeConfigurationResponse.model_validate(eks_wire_response)
        with pytest.raises(InvariantViolation):
            translator.from_wire(response, CLUSTER_ID)

    def test_no_variant(self, eks_wire_response):
        del eks_wire_response["eks"]
        response = NodeConfigurationResponse.model_validate(eks_wire_response)
        assert translator.from_wire(response, CLUSTER_ID).variant is None


class TestRoundTrip:
    """fromWire(toWire(x)) reproduces x."""

    @pytest.mark.parametrize(
        "variant",
        [
            None,
            EKSConfig(
                security_groups=["sg-1", "sg-2"],
                instance_profile_arn="arn:aws:iam::1:instance-profile/x",
                dns_cluster_ip="10.100.0.10",
                key_pair_id="key-0123456789abcdef0",
                volume_type="io2",
                volume_iops=3000,
                volume_throughput=250,
                imds_v1=False,
                imds_hop_limit=3,
                volume_kms_key_arn="arn:aws:kms:eu-central-1:1:key/abc",
            ),
            AKSConfig(max_pods_per_node=60, os_disk_type="premium-ssd"),
            KOPSConfig(key_pair_id="key-0123abcd"),
            GKEConfig(max_pods_per_node=64, network_tags=["a", "b"], disk_type="pd-ssd"),
        ],
    )
    def test_round_trip(self, variant):
        declared = base_config(
            disk_cpu_ratio=2,
            min_disk_size=120,
            subnets=["subnet-2", "subnet-1"],
            ssh_public_key="c3NoLXJzYSBBQUFB",
            image="ami-123",
            init_script="IyEvYmluL2Jhc2g=",
            container_runtime="containerd",
            docker_config='{"debug":true}',
            kubelet_config='{"maxPods":30}',
            tags={"env": "prod"},
            variant=variant,
        )
        payload = translator.to_create_request(declared).to_payload()
        response = NodeConfigurationResponse.model_validate({**payload, "id": CONFIG_ID})

        assert translator.from_wire(response, CLUSTER_ID) == dataclasses.replace(
            declared, id=CONFIG_ID
        )


class TestDocuments:
    """Tests for to_document() and from_document()."""

    def test_document_round_trip(self, eks_document):
        declared = translator.parse_declared(eks_document)
        document = translator.to_document(declared)
        assert document["eks"]["imds_v1"] is True
        assert "aks" not in document
        assert translator.from_document(document) == declared

    def test_from_document_skips_validation(self):
        state = translator.from_document(
            {"cluster_id": "c1", "name": "a", "aks": {"os_disk_type": ""}}
        )
        assert state.variant == AKSConfig(os_disk_type="")


class TestChangedFields:
    """Tests for changed_fields()."""

    @pytest.fixture
    def prior(self, eks_wire_response):
        response = NodeConfigurationResponse.model_validate(eks_wire_response)
        return translator.from_wire(response, CLUSTER_ID)

    def test_normalized_state_has_no_changes(self, prior, eks_document):
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == []

    def test_scalar_change(self, prior, eks_document):
        eks_document["min_disk_size"] = 60
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == ["min_disk_size"]

    def test_explicit_server_default_is_not_a_change(self, prior, eks_document):
        eks_document["disk_cpu_ratio"] = 0
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == []

    def test_container_runtime_case_insensitive(self, prior, eks_document):
        prior.container_runtime = "CONTAINERD"
        eks_document["container_runtime"] = "containerd"
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == []

    def test_json_compared_semantically(self, prior, eks_document):
        prior.kubelet_config = '{"a":1,"b":2}'
        eks_document["kubelet_config"] = '{ "b": 2, "a": 1 }'
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == []

    def test_subnet_order_matters(self, prior, eks_document):
        prior.subnets = ["subnet-1", "subnet-2"]
        eks_document["subnets"] = ["subnet-2", "subnet-1"]
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == ["subnets"]

    def test_variant_field_change(self, prior, eks_document):
        eks_document["eks"]["volume_type"] = "gp3"
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == ["variant"]

    def test_variant_kind_change(self, prior):
        declared = dataclasses.replace(prior, variant=KOPSConfig())
        assert translator.changed_fields(prior, declared) == ["variant"]

    def test_variant_removed(self, prior):
        declared = dataclasses.replace(prior, variant=None)
        assert translator.changed_fields(prior, declared) == ["variant"]

    def test_tags_added(self, prior, eks_document):
        eks_document["tags"] = {"env": "prod"}
        declared = translator.parse_declared(eks_document)
        assert translator.changed_fields(prior, declared) == ["tags"]

    @pytest.mark.parametrize(
        "wire_variant,declared_variant",
        [
            ({"aks": {"maxPodsPerNode": 30, "osDiskType": "OS_DISK_TYPE_ULTRA"}}, {"aks": {}}),
            ({"gke": {"maxPodsPerNode": 110, "networkTags": []}}, {"gke": {}}),
        ],
    )
    def test_empty_server_value_matches_unset(
        self, eks_wire_response, wire_variant, declared_variant
    ):
        del eks_wire_response["eks"]
        eks_wire_response.update(wire_variant)
        prior = translator.from_wire(
            NodeConfigurationResponse.model_validate(eks_wire_response), CLUSTER_ID
        )
        declared = translator.parse_declared(
            {
                "cluster_id": CLUSTER_ID,
                "name": "pool-a",
                "min_disk_size": 50,
                "subnets": ["subnet-1"],
                **declared_variant,
            }
        )
        assert translator.changed_fields(prior, declared) == []

    def test_value_over_erased_disk_type_is_a_change(self, prior):
        prior.variant = AKSConfig(max_pods_per_node=30, os_disk_type="")
        declared = dataclasses.replace(
            prior, variant=AKSConfig(max_pods_per_node=30, os_disk_type="standard")
        )
        assert translator.changed_fields(prior, declared) == ["variant"]

    def test_imds_v1_false_is_a_change(self, prior):
        declared = dataclasses.replace(
            prior, variant=dataclasses.replace(prior.variant, imds_v1=False)
        )
        assert translator.changed_fields(prior, declared) == ["variant"]
