# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the kubeconfig-backed cluster clients."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from shipyard import conditions
from shipyard.apis import ConditionStatus, LabelSelectorRequirement
from shipyard.clusterclient.kube import (
    ClusterConfig,
    ClustersConfig,
    KubernetesClusterClientStore,
    KubernetesPodClient,
    KubernetesWorkloadClient,
    deployment_to_workload,
    load_clusters_config,
    pod_to_model,
    selector_string,
)
from shipyard.common.exceptions import (
    ClusterError,
    PodListFetchError,
    UnknownClusterError,
    WorkloadFetchError,
    WorkloadWriteError,
)

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.capacity,
]

NS = "reviewsapi"
RELEASE = "reviewsapi-deadbeef-0"
LABELS = {"shipper-release": RELEASE}


def _deployment(name="nginx", replicas=3, available=2):
    return client.V1Deployment(
        metadata=client.V1ObjectMeta(name=name, namespace=NS, labels=dict(LABELS)),
        spec=client.V1DeploymentSpec(
            replicas=replicas,
            selector=client.V1LabelSelector(match_labels=dict(LABELS)),
            template=client.V1PodTemplateSpec(),
        ),
        status=client.V1DeploymentStatus(available_replicas=available),
    )


def _pod(name, ready="True", phase="Running"):
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name=name, namespace=NS, labels=dict(LABELS)),
        status=client.V1PodStatus(
            phase=phase,
            conditions=[
                client.V1PodCondition(
                    type="Ready",
                    status=ready,
                    last_transition_time=datetime(2026, 1, 1, tzinfo=timezone.utc),
                )
            ],
        ),
    )


@pytest.fixture
def apps_api():
    return MagicMock()


@pytest.fixture
def core_api():
    return MagicMock()


# ── Converters ──────────────────────────────────────────────────────


def test_selector_string_is_sorted():
    assert selector_string({"b": "2", "a": "1"}) == "a=1,b=2"


def test_selector_string_empty():
    assert selector_string({}) is None


def test_deployment_to_workload():
    workload = deployment_to_workload(_deployment(replicas=3, available=2))

    assert workload.name == "nginx"
    assert workload.namespace == NS
    assert workload.replicas == 3
    assert workload.available_replicas == 2
    assert workload.selector == LABELS


def test_deployment_defaults():
    """Unset replicas default to 1; missing availability counts as 0."""
    deployment = _deployment(replicas=None, available=None)
    deployment.status = None

    workload = deployment_to_workload(deployment)

    assert workload.replicas == 1
    assert workload.available_replicas == 0


def test_deployment_keeps_match_expressions():
    deployment = _deployment()
    deployment.spec.selector.match_expressions = [
        client.V1LabelSelectorRequirement(key="tier", operator="In", values=["web", "api"]),
        client.V1LabelSelectorRequirement(key="canary", operator="DoesNotExist"),
    ]

    workload = deployment_to_workload(deployment)

    assert workload.selector == LABELS
    assert [(r.key, r.operator, r.values) for r in workload.match_expressions] == [
        ("tier", "In", ["web", "api"]),
        ("canary", "DoesNotExist", []),
    ]
    assert (
        selector_string(workload.selector, workload.match_expressions)
        == f"shipper-release={RELEASE},tier in (web,api),!canary"
    )


def test_pod_to_model():
    pod = pod_to_model(_pod("nginx-a", ready="False", phase="Pending"))

    assert pod.name == "nginx-a"
    assert pod.phase == "Pending"
    ready = pod.get_condition("Ready")
    assert ready.status == ConditionStatus.FALSE
    assert ready.last_transition_time == "2026-01-01T00:00:00+00:00"


def test_pod_without_status():
    pod = pod_to_model(
        client.V1Pod(metadata=client.V1ObjectMeta(name="nginx-a", namespace=NS))
    )
    assert pod.phase is None
    assert pod.conditions == []


# ── Workloads ───────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_workload_filters_by_release(apps_api):
    apps_api.list_namespaced_deployment.return_value = client.V1DeploymentList(
        items=[_deployment()]
    )
    workload_client = KubernetesWorkloadClient("minikube", apps_api)

    workload = await workload_client.get_workload(NS, RELEASE)

    assert workload.name == "nginx"
    apps_api.list_namespaced_deployment.assert_called_once_with(
        namespace=NS, label_selector=f"shipper-release={RELEASE}"
    )


@pytest.mark.asyncio
async def test_get_workload_missing(apps_api):
    apps_api.list_namespaced_deployment.return_value = client.V1DeploymentList(
        items=[]
    )
    workload_client = KubernetesWorkloadClient("minikube", apps_api)

    with pytest.raises(WorkloadFetchError) as exc_info:
        await workload_client.get_workload(NS, RELEASE)
    assert exc_info.value.reason == conditions.MISSING_DEPLOYMENT
    assert exc_info.value.cluster == "minikube"


@pytest.mark.asyncio
async def test_get_workload_ambiguous(apps_api):
    apps_api.list_namespaced_deployment.return_value = client.V1DeploymentList(
        items=[_deployment("nginx-b"), _deployment("nginx-a")]
    )
    workload_client = KubernetesWorkloadClient("minikube", apps_api)

    with pytest.raises(WorkloadFetchError) as exc_info:
        await workload_client.get_workload(NS, RELEASE)
    assert exc_info.value.reason == conditions.TOO_MANY_DEPLOYMENTS
    assert "['nginx-a', 'nginx-b']" in str(exc_info.value)


@pytest.mark.asyncio
async def test_get_workload_api_error(apps_api):
    apps_api.list_namespaced_deployment.side_effect = ApiException(
        status=500, reason="Internal Server Error"
    )
    workload_client = KubernetesWorkloadClient("minikube", apps_api)

    with pytest.raises(WorkloadFetchError) as exc_info:
        await workload_client.get_workload(NS, RELEASE)
    assert exc_info.value.reason == conditions.SERVER_ERROR


@pytest.mark.asyncio
async def test_patch_replicas_only_touches_replicas(apps_api):
    workload_client = KubernetesWorkloadClient("minikube", apps_api)

    await workload_client.patch_replicas(NS, "nginx", 5)

    apps_api.patch_namespaced_deployment.assert_called_once_with(
        name="nginx", namespace=NS, body={"spec": {"replicas": 5}}
    )


@pytest.mark.asyncio
async def test_patch_replicas_error(apps_api):
    apps_api.patch_namespaced_deployment.side_effect = ApiException(
        status=403, reason="Forbidden"
    )
    workload_client = KubernetesWorkloadClient("minikube", apps_api)

    with pytest.raises(WorkloadWriteError) as exc_info:
        await workload_client.patch_replicas(NS, "nginx", 5)
    assert exc_info.value.reason == conditions.PATCH_FAILED


# ── Pods ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_pods(core_api):
    core_api.list_namespaced_pod.return_value = client.V1PodList(
        items=[_pod("nginx-a"), _pod("nginx-b", ready="False")]
    )
    pod_client = KubernetesPodClient("minikube", core_api)

    pods = await pod_client.list_pods(NS, LABELS)

    assert [p.name for p in pods] == ["nginx-a", "nginx-b"]
    core_api.list_namespaced_pod.assert_called_once_with(
        namespace=NS, label_selector=f"shipper-release={RELEASE}"
    )


@pytest.mark.asyncio
async def test_list_pods_with_match_expressions(core_api):
    core_api.list_namespaced_pod.return_value = client.V1PodList(items=[])
    pod_client = KubernetesPodClient("minikube", core_api)
    expressions = [
        LabelSelectorRequirement(key="tier", operator="NotIn", values=["batch"]),
        LabelSelectorRequirement(key="app", operator="Exists"),
    ]

    await pod_client.list_pods(NS, LABELS, expressions)

    core_api.list_namespaced_pod.assert_called_once_with(
        namespace=NS,
        label_selector=f"shipper-release={RELEASE},tier notin (batch),app",
    )


@pytest.mark.asyncio
async def test_list_pods_connection_error(core_api):
    core_api.list_namespaced_pod.side_effect = ConnectionRefusedError("refused")
    pod_client = KubernetesPodClient("minikube", core_api)

    with pytest.raises(PodListFetchError) as exc_info:
        await pod_client.list_pods(NS, LABELS)
    assert exc_info.value.reason == conditions.POD_LIST_FAILED


# ── Client store ────────────────────────────────────────────────────


@pytest.fixture
def clusters():
    return ClustersConfig(
        clusters=[ClusterConfig(name="minikube", context="minikube-admin")]
    )


@pytest.mark.asyncio
async def test_client_store_unknown_cluster(clusters):
    store = KubernetesClusterClientStore(clusters)
    with pytest.raises(UnknownClusterError) as exc_info:
        await store.get_client("ghost")
    assert exc_info.value.reason == conditions.UNKNOWN_CLUSTER


@pytest.mark.asyncio
async def test_client_store_caches_clients(clusters):
    store = KubernetesClusterClientStore(clusters)
    with patch(
        "shipyard.clusterclient.kube.config.new_client_from_config"
    ) as mock_new_client:
        mock_new_client.return_value = MagicMock()
        first = await store.get_client("minikube")
        second = await store.get_client("minikube")

    assert first is second
    mock_new_client.assert_called_once_with(
        config_file=None, context="minikube-admin"
    )
    assert store.cluster_names() == ["minikube"]


@pytest.mark.asyncio
async def test_client_store_bad_kubeconfig(clusters):
    store = KubernetesClusterClientStore(clusters)
    with patch(
        "shipyard.clusterclient.kube.config.new_client_from_config",
        side_effect=config.ConfigException("context not found"),
    ):
        with pytest.raises(ClusterError) as exc_info:
            await store.get_client("minikube")
    assert exc_info.value.reason == conditions.SERVER_ERROR
    assert "minikube-admin" in str(exc_info.value)


# ── Clusters config file ────────────────────────────────────────────


def test_load_clusters_config(tmp_path):
    path = tmp_path / "clusters.yaml"
    path.write_text(
        "clusters:\n"
        "  - name: eu-west\n"
        "    context: eu-west-admin\n"
        "  - name: us-east\n"
        "    context: us-east-admin\n"
        "    kubeconfig: /etc/shipyard/us-east.kubeconfig\n"
    )

    parsed = load_clusters_config(str(path))

    assert [c.name for c in parsed.clusters] == ["eu-west", "us-east"]
    assert parsed.clusters[0].kubeconfig is None
    assert parsed.clusters[1].kubeconfig == "/etc/shipyard/us-east.kubeconfig"


def test_load_empty_clusters_config(tmp_path):
    path = tmp_path / "clusters.yaml"
    path.write_text("")
    assert load_clusters_config(str(path)).clusters == []


def test_load_clusters_config_duplicates(tmp_path):
    path = tmp_path / "clusters.yaml"
    path.write_text(
        "clusters:\n"
        "  - {name: eu-west, context: a}\n"
        "  - {name: eu-west, context: b}\n"
    )
    with pytest.raises(ValueError, match="Duplicate cluster names"):
        load_clusters_config(str(path))


def test_load_clusters_config_missing_context(tmp_path):
    path = tmp_path / "clusters.yaml"
    path.write_text("clusters:\n  - name: eu-west\n")
    with pytest.raises(ValueError, match="Invalid clusters config"):
        load_clusters_config(str(path))
