# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Kubeconfig-backed cluster client registry."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import urllib3
import yaml
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from pydantic import BaseModel, Field, ValidationError

from shipyard import conditions
from shipyard.apis import (
    RELEASE_LABEL,
    LabelSelectorRequirement,
    Pod,
    PodCondition,
    Workload,
)
from shipyard.clusterclient.interface import ClusterClientStore, PodClient, WorkloadClient
from shipyard.common.exceptions import (
    ClusterError,
    PodListFetchError,
    UnknownClusterError,
    WorkloadFetchError,
    WorkloadWriteError,
)
from shipyard.runtime.logging import configure_shipyard_logging

configure_shipyard_logging()
logger = logging.getLogger(__name__)

# Errors the kubernetes client raises for failed or unreachable API calls
API_ERRORS = (ApiException, urllib3.exceptions.HTTPError, OSError)


class ClusterConfig(BaseModel):
    name: str
    context: str
    kubeconfig: Optional[str] = None


class ClustersConfig(BaseModel):
    clusters: List[ClusterConfig] = Field(default_factory=list)


def load_clusters_config(path: str) -> ClustersConfig:
    """Read the cluster registry file.

    Example::

        clusters:
          - name: eu-west
            context: eu-west-admin
          - name: us-east
            context: us-east-admin
            kubeconfig: /etc/shipyard/us-east.kubeconfig
    """
    with open(Path(path).expanduser()) as f:
        raw = yaml.safe_load(f) or {}
    try:
        parsed = ClustersConfig.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid clusters config {path}: {e}") from e

    names = [c.name for c in parsed.clusters]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate cluster names in {path}: {duplicates}")
    return parsed


def selector_string(
    selector: Dict[str, str],
    expressions: Sequence[LabelSelectorRequirement] = (),
) -> Optional[str]:
    parts = [f"{k}={v}" for k, v in sorted(selector.items())]
    parts.extend(r.to_selector() for r in expressions)
    if not parts:
        return None
    return ",".join(parts)


def _timestamp(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def deployment_to_workload(deployment: Any) -> Workload:
    meta = deployment.metadata
    spec = deployment.spec
    status = deployment.status
    match_labels = spec.selector.match_labels if spec.selector else None
    match_expressions = spec.selector.match_expressions if spec.selector else None
    return Workload(
        name=meta.name,
        namespace=meta.namespace,
        labels=meta.labels or {},
        replicas=spec.replicas if spec.replicas is not None else 1,
        available_replicas=(status.available_replicas or 0) if status else 0,
        selector=match_labels or {},
        match_expressions=[
            LabelSelectorRequirement(key=e.key, operator=e.operator, values=e.values)
            for e in match_expressions or []
        ],
    )


def pod_to_model(pod: Any) -> Pod:
    status = pod.status
    pod_conditions = []
    for c in (status.conditions if status else None) or []:
        pod_conditions.append(
            PodCondition(
                type=c.type,
                status=c.status,
                reason=c.reason,
                message=c.message,
                last_probe_time=_timestamp(c.last_probe_time),
                last_transition_time=_timestamp(c.last_transition_time),
            )
        )
    return Pod(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        labels=pod.metadata.labels or {},
        phase=status.phase if status else None,
        conditions=pod_conditions,
    )


class KubernetesWorkloadClient(WorkloadClient):
    def __init__(self, cluster: str, apps: client.AppsV1Api):
        self.cluster = cluster
        self.apps = apps

    async def get_workload(self, namespace: str, release_name: str) -> Workload:
        label_selector = f"{RELEASE_LABEL}={release_name}"
        try:
            deployments = await asyncio.to_thread(
                self.apps.list_namespaced_deployment,
                namespace=namespace,
                label_selector=label_selector,
            )
        except API_ERRORS as e:
            raise WorkloadFetchError(
                self.cluster,
                f"failed to list deployments in {namespace} on {self.cluster}: {e}",
            ) from e

        items = deployments.items or []
        if not items:
            raise WorkloadFetchError(
                self.cluster,
                f"no deployment with {label_selector} in {namespace}",
                reason=conditions.MISSING_DEPLOYMENT,
            )
        if len(items) > 1:
            names = sorted(d.metadata.name for d in items)
            raise WorkloadFetchError(
                self.cluster,
                f"expected one deployment with {label_selector} in {namespace}, found {names}",
                reason=conditions.TOO_MANY_DEPLOYMENTS,
            )
        return deployment_to_workload(items[0])

    async def patch_replicas(self, namespace: str, name: str, replicas: int) -> None:
        body = {"spec": {"replicas": replicas}}
        try:
            await asyncio.to_thread(
                self.apps.patch_namespaced_deployment,
                name=name,
                namespace=namespace,
                body=body,
            )
        except API_ERRORS as e:
            raise WorkloadWriteError(
                self.cluster,
                f"failed to patch deployment {namespace}/{name} on {self.cluster}: {e}",
            ) from e


class KubernetesPodClient(PodClient):
    def __init__(self, cluster: str, core: client.CoreV1Api):
        self.cluster = cluster
        self.core = core

    async def list_pods(
        self,
        namespace: str,
        selector: Dict[str, str],
        expressions: Sequence[LabelSelectorRequirement] = (),
    ) -> List[Pod]:
        try:
            pods = await asyncio.to_thread(
                self.core.list_namespaced_pod,
                namespace=namespace,
                label_selector=selector_string(selector, expressions),
            )
        except API_ERRORS as e:
            raise PodListFetchError(
                self.cluster,
                f"failed to list pods in {namespace} on {self.cluster}: {e}",
            ) from e
        return [pod_to_model(p) for p in pods.items or []]


class KubernetesClusterClientStore(ClusterClientStore):
    """Builds one API client per configured cluster on first use and caches it."""

    def __init__(self, clusters: ClustersConfig):
        self._configs = {c.name: c for c in clusters.clusters}
        self._clients: Dict[str, Tuple[WorkloadClient, PodClient]] = {}
        logger.info(
            f"Cluster client store initialized for clusters: {sorted(self._configs)}"
        )

    def cluster_names(self) -> List[str]:
        return sorted(self._configs)

    async def get_client(self, cluster_name: str) -> Tuple[WorkloadClient, PodClient]:
        cached = self._clients.get(cluster_name)
        if cached is not None:
            return cached

        cluster_config = self._configs.get(cluster_name)
        if cluster_config is None:
            raise UnknownClusterError(cluster_name)

        # kubeconfig loading reads files; keep it off the event loop
        try:
            api_client = await asyncio.to_thread(
                config.new_client_from_config,
                config_file=cluster_config.kubeconfig,
                context=cluster_config.context,
            )
        except (config.ConfigException, OSError) as e:
            raise ClusterError(
                cluster_name,
                f"failed to load kubeconfig context {cluster_config.context!r}: {e}",
            ) from e

        clients = (
            KubernetesWorkloadClient(cluster_name, client.AppsV1Api(api_client)),
            KubernetesPodClient(cluster_name, client.CoreV1Api(api_client)),
        )
        self._clients[cluster_name] = clients
        logger.debug(f"Created API client for cluster {cluster_name}")
        return clients
