# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Capacity target reconciliation.

For every cluster declared on a CapacityTarget the controller:
1. Converts the cluster's percentage of the release budget into replicas
2. Patches the cluster's workload when its declared replicas differ
3. Derives Operational/Ready conditions and sad pods from live state
4. Writes the assembled status back only when it changed
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from shipyard import conditions
from shipyard.apis import (
    RELEASE_KIND,
    RELEASE_LABEL,
    CapacityTarget,
    CapacityTargetStatus,
    ClusterCapacityStatus,
    ClusterCapacityTarget,
    ClusterConditionType,
    ConditionStatus,
    Pod,
    PodCondition,
    PodStatus,
    Workload,
)
from shipyard.capacity.events import (
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
    EventRecorder,
    NullEventRecorder,
)
from shipyard.capacity.metrics import METRICS, CapacityControllerMetrics
from shipyard.capacity.replicas import (
    calculate_achieved_percent,
    calculate_desired_replicas,
    read_release_budget,
)
from shipyard.capacity.stores import CapacityTargetStore, ReleaseStore
from shipyard.clusterclient import ClusterClientStore, WorkloadClient
from shipyard.common.exceptions import (
    ClusterError,
    InvalidBudgetError,
    InvalidCapacityTargetError,
    StatusWriteConflict,
)
from shipyard.conditions import StatusNormalizer, strip_condition_timestamps
from shipyard.runtime.logging import configure_shipyard_logging

configure_shipyard_logging()
logger = logging.getLogger(__name__)

POD_READY = "Ready"
POD_FAILED = "Failed"

REPLICA_COUNT_CHANGED = "ReplicaCountChanged"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ClusterResult:
    """Outcome of one cluster's reconcile + aggregate step."""

    status: ClusterCapacityStatus
    error: Optional[ClusterError] = None


def resolve_release_name(capacity_target: CapacityTarget) -> Optional[str]:
    """Name of the release owning ``capacity_target``.

    The release label wins; the first Release owner reference is the fallback.
    """
    name = capacity_target.metadata.labels.get(RELEASE_LABEL)
    if name:
        return name
    for ref in capacity_target.metadata.owner_references:
        if ref.kind == RELEASE_KIND:
            return ref.name
    return None


def is_sad_pod(pod: Pod) -> bool:
    if pod.phase == POD_FAILED:
        return True
    ready = pod.get_condition(POD_READY)
    return ready is None or ready.status != ConditionStatus.TRUE


def sad_pod_status(pod: Pod) -> PodStatus:
    condition = pod.get_condition(POD_READY)
    if condition is None:
        condition = PodCondition(type=POD_READY, status=ConditionStatus.UNKNOWN)
    return PodStatus(name=pod.name, condition=condition)


def build_cluster_status(
    cluster_name: str, workload: Workload, pods: List[Pod], total_replicas: int
) -> ClusterCapacityStatus:
    """Derive the status of a cluster whose workload and pods were fetched.

    The pod count is checked against the workload's declared replicas as
    observed, not against the target being patched in this cycle. A count
    mismatch takes priority over sad pods.
    """
    operational = conditions.new_cluster_condition(
        ClusterConditionType.OPERATIONAL, ConditionStatus.TRUE
    )

    sad_pods: List[PodStatus] = []
    if len(pods) != workload.replicas:
        ready = conditions.new_cluster_condition(
            ClusterConditionType.READY,
            ConditionStatus.FALSE,
            conditions.WRONG_POD_COUNT,
            f"expected {workload.replicas} replicas but have {len(pods)}",
        )
    else:
        sad = sorted((p for p in pods if is_sad_pod(p)), key=lambda p: p.name)
        if sad:
            ready = conditions.new_cluster_condition(
                ClusterConditionType.READY,
                ConditionStatus.FALSE,
                conditions.PODS_NOT_READY,
                f"there are {len(sad)} sad pods",
            )
            sad_pods = [sad_pod_status(p) for p in sad]
        else:
            ready = conditions.new_cluster_condition(
                ClusterConditionType.READY, ConditionStatus.TRUE
            )

    return ClusterCapacityStatus(
        name=cluster_name,
        available_replicas=workload.available_replicas,
        achieved_percent=calculate_achieved_percent(
            workload.available_replicas, total_replicas
        ),
        conditions=[operational, ready],
        sad_pods=sad_pods,
    )


def failed_cluster_status(
    cluster_name: str, reason: str, message: str
) -> ClusterCapacityStatus:
    """Status of a cluster that could not be observed at all."""
    return ClusterCapacityStatus(
        name=cluster_name,
        conditions=[
            conditions.new_cluster_condition(
                ClusterConditionType.OPERATIONAL,
                ConditionStatus.FALSE,
                reason,
                message,
            ),
            conditions.new_cluster_condition(
                ClusterConditionType.READY, ConditionStatus.UNKNOWN
            ),
        ],
    )


class CapacityController:
    """Drives each declared cluster's workload to its share of the release budget.

    Args:
        capacity_targets: management-cluster CapacityTarget access
        releases: management-cluster Release access
        cluster_clients: registry of target-cluster clients
        recorder: optional event sink for human-readable notices
        status_normalizer: applied to stored and computed status before
            comparing them; defaults to dropping condition timestamps
        clock: source of condition transition times; None disables timestamps
        metrics: Prometheus collectors
    """

    def __init__(
        self,
        capacity_targets: CapacityTargetStore,
        releases: ReleaseStore,
        cluster_clients: ClusterClientStore,
        recorder: Optional[EventRecorder] = None,
        status_normalizer: StatusNormalizer = strip_condition_timestamps,
        clock: Optional[Callable[[], datetime]] = utc_now,
        metrics: CapacityControllerMetrics = METRICS,
    ):
        self.capacity_targets = capacity_targets
        self.releases = releases
        self.cluster_clients = cluster_clients
        self.recorder = recorder or NullEventRecorder()
        self.status_normalizer = status_normalizer
        self.clock = clock
        self.metrics = metrics

    async def sync(self, key: str) -> bool:
        """Reconcile the capacity target identified by a ``namespace/name`` key."""
        namespace, sep, name = key.partition("/")
        if not sep or not namespace or not name or "/" in name:
            logger.error(f"Invalid capacity target key {key!r}, dropping it")
            return False
        return await self.reconcile(namespace, name)

    async def reconcile(self, namespace: str, name: str) -> bool:
        """Reconcile one capacity target.

        Returns:
            True if the caller should retry this capacity target later
        """
        retry = await self._reconcile(namespace, name)
        self.metrics.reconciliations.labels(result="retry" if retry else "ok").inc()
        return retry

    async def _reconcile(self, namespace: str, name: str) -> bool:
        key = f"{namespace}/{name}"
        try:
            capacity_target = await self.capacity_targets.get(namespace, name)
        except InvalidCapacityTargetError as e:
            logger.error(f"Not reconciling: {e}")
            return False
        except Exception as e:
            logger.exception(f"Error fetching capacity target {key}: {e}")
            return True

        if capacity_target is None:
            logger.info(f"Capacity target {key} no longer exists, nothing to do")
            self.metrics.forget_clusters(namespace, name)
            return False

        release_name = resolve_release_name(capacity_target)
        if release_name is None:
            logger.error(
                f"Capacity target {key} has neither a {RELEASE_LABEL} label "
                f"nor a {RELEASE_KIND} owner reference"
            )
            return False

        try:
            release = await self.releases.get(namespace, release_name)
        except Exception as e:
            logger.exception(f"Error fetching release {namespace}/{release_name}: {e}")
            return True

        if release is None:
            logger.info(
                f"Release {namespace}/{release_name} for capacity target {key} "
                "no longer exists, nothing to do"
            )
            return False

        try:
            total_replicas = read_release_budget(release)
        except InvalidBudgetError as e:
            logger.error(f"Cannot reconcile capacity target {key}: {e}")
            await self._record(
                capacity_target,
                EVENT_TYPE_WARNING,
                conditions.INVALID_RELEASE_BUDGET,
                str(e),
            )
            statuses = [
                self._stamp(
                    capacity_target,
                    failed_cluster_status(
                        c.name, conditions.INVALID_RELEASE_BUDGET, str(e)
                    ),
                )
                for c in capacity_target.spec.clusters
            ]
            await self.assemble_status(capacity_target, statuses)
            return True

        logger.debug(
            f"Reconciling {key}: release {release_name} budget={total_replicas}, "
            f"clusters={[(c.name, c.percent) for c in capacity_target.spec.clusters]}"
        )

        # gather keeps argument order, so results follow spec.clusters
        results = await asyncio.gather(
            *(
                self._reconcile_cluster(
                    capacity_target, release_name, total_replicas, cluster
                )
                for cluster in capacity_target.spec.clusters
            )
        )

        # clusters dropped from the spec stop exporting gauges
        self.metrics.forget_clusters(
            namespace, name, keep={c.name for c in capacity_target.spec.clusters}
        )

        cluster_failed = any(r.error is not None for r in results)
        written = await self.assemble_status(
            capacity_target, [r.status for r in results]
        )
        return cluster_failed or not written

    async def _reconcile_cluster(
        self,
        capacity_target: CapacityTarget,
        release_name: str,
        total_replicas: int,
        spec_cluster: ClusterCapacityTarget,
    ) -> ClusterResult:
        cluster_name = spec_cluster.name
        namespace = capacity_target.metadata.namespace
        labels = self.metrics.observe_cluster(
            namespace, capacity_target.metadata.name, cluster_name
        )

        try:
            workload_client, pod_client = await self.cluster_clients.get_client(
                cluster_name
            )
            workload = await workload_client.get_workload(namespace, release_name)
        except Exception as e:
            return await self._cluster_failure(capacity_target, cluster_name, e)

        desired_replicas = calculate_desired_replicas(
            total_replicas, spec_cluster.percent
        )
        self.metrics.desired_replicas.labels(**labels).set(desired_replicas)

        write_error: Optional[ClusterError] = None
        patched = False
        try:
            patched = await self.reconcile_workload(
                cluster_name, workload_client, workload, desired_replicas
            )
        except Exception as e:
            write_error = self._as_cluster_error(cluster_name, e)

        if patched:
            await self._record(
                capacity_target,
                EVENT_TYPE_NORMAL,
                REPLICA_COUNT_CHANGED,
                f"Scaled deployment {workload.namespace}/{workload.name} on cluster "
                f"{cluster_name} from {workload.replicas} to {desired_replicas} replicas",
            )

        selector = workload.selector
        if not selector and not workload.match_expressions:
            selector = {RELEASE_LABEL: release_name}
        try:
            pods = await pod_client.list_pods(
                workload.namespace, selector, workload.match_expressions
            )
        except Exception as e:
            return await self._cluster_failure(capacity_target, cluster_name, e)

        status = build_cluster_status(cluster_name, workload, pods, total_replicas)
        self.metrics.achieved_percent.labels(**labels).set(status.achieved_percent)

        if write_error is not None:
            self._report_cluster_error(write_error)
            await self._record(
                capacity_target, EVENT_TYPE_WARNING, write_error.reason, str(write_error)
            )
            status.conditions[0] = conditions.new_cluster_condition(
                ClusterConditionType.OPERATIONAL,
                ConditionStatus.FALSE,
                write_error.reason,
                str(write_error),
            )

        return ClusterResult(
            status=self._stamp(capacity_target, status), error=write_error
        )

    async def reconcile_workload(
        self,
        cluster_name: str,
        workload_client: WorkloadClient,
        workload: Workload,
        desired_replicas: int,
    ) -> bool:
        """Patch the workload's replica count if it differs from ``desired_replicas``.

        Returns:
            True if a patch was issued
        """
        if workload.replicas == desired_replicas:
            logger.debug(
                f"Deployment {workload.namespace}/{workload.name} on {cluster_name} "
                f"already has {desired_replicas} replicas"
            )
            return False

        logger.info(
            f"Scaling deployment {workload.namespace}/{workload.name} on {cluster_name} "
            f"from {workload.replicas} to {desired_replicas} replicas"
        )
        await workload_client.patch_replicas(
            workload.namespace, workload.name, desired_replicas
        )
        self.metrics.replica_patches.labels(cluster=cluster_name).inc()
        return True

    async def assemble_status(
        self, capacity_target: CapacityTarget, cluster_statuses: List[ClusterCapacityStatus]
    ) -> bool:
        """Write ``cluster_statuses`` as the capacity target status if it changed.

        Returns:
            False if a required write failed
        """
        key = capacity_target.metadata.key
        new_status = CapacityTargetStatus(clusters=cluster_statuses)

        if self.status_normalizer(new_status) == self.status_normalizer(
            capacity_target.status
        ):
            logger.debug(f"Status of {key} is unchanged, skipping update")
            return True

        updated = capacity_target.model_copy(update={"status": new_status})
        try:
            await self.capacity_targets.update(updated)
        except StatusWriteConflict as e:
            logger.warning(f"Status update conflict: {e}")
            self.metrics.status_writes.labels(result="conflict").inc()
            return False
        except Exception as e:
            logger.exception(f"Error updating status of capacity target {key}: {e}")
            self.metrics.status_writes.labels(result="error").inc()
            return False

        logger.info(f"Updated status of capacity target {key}")
        self.metrics.status_writes.labels(result="ok").inc()
        return True

    async def _cluster_failure(
        self, capacity_target: CapacityTarget, cluster_name: str, error: Exception
    ) -> ClusterResult:
        cluster_error = self._as_cluster_error(cluster_name, error)
        self._report_cluster_error(cluster_error)
        await self._record(
            capacity_target, EVENT_TYPE_WARNING, cluster_error.reason, str(cluster_error)
        )
        status = failed_cluster_status(
            cluster_name, cluster_error.reason, str(cluster_error)
        )
        return ClusterResult(
            status=self._stamp(capacity_target, status), error=cluster_error
        )

    async def _record(
        self, capacity_target: CapacityTarget, event_type: str, reason: str, message: str
    ) -> None:
        # events are informational and never change the reconcile outcome
        try:
            await self.recorder.event(capacity_target, event_type, reason, message)
        except Exception as e:
            logger.warning(
                f"Failed to record {reason} event for {capacity_target.metadata.key}: {e}"
            )

    @staticmethod
    def _as_cluster_error(cluster_name: str, error: Exception) -> ClusterError:
        if isinstance(error, ClusterError):
            return error
        logger.exception(f"Unexpected error on cluster {cluster_name}: {error}")
        return ClusterError(cluster_name, f"unexpected error: {error}")

    def _report_cluster_error(self, error: ClusterError) -> None:
        logger.warning(f"Cluster {error.cluster} is not operational: {error}")
        self.metrics.cluster_errors.labels(
            cluster=error.cluster, reason=error.reason
        ).inc()

    def _stamp(
        self, capacity_target: CapacityTarget, status: ClusterCapacityStatus
    ) -> ClusterCapacityStatus:
        previous = next(
            (c for c in capacity_target.status.clusters if c.name == status.name), None
        )
        now = self.clock().isoformat() if self.clock is not None else None
        return status.model_copy(
            update={
                "conditions": conditions.merge_transition_times(
                    previous, status.conditions, now
                )
            }
        )
