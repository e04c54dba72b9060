# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Callable, List, Optional

from shipyard.apis import (
    CapacityTargetStatus,
    ClusterCapacityCondition,
    ClusterCapacityStatus,
    ClusterConditionType,
    ConditionStatus,
)

# Operational=False reasons
UNKNOWN_CLUSTER = "UnknownCluster"
SERVER_ERROR = "ServerError"
MISSING_DEPLOYMENT = "MissingDeployment"
TOO_MANY_DEPLOYMENTS = "TooManyDeployments"
POD_LIST_FAILED = "PodListFailed"
PATCH_FAILED = "PatchFailed"
INVALID_RELEASE_BUDGET = "InvalidReleaseBudget"

# Ready=False reasons
WRONG_POD_COUNT = "WrongPodCount"
PODS_NOT_READY = "PodsNotReady"

StatusNormalizer = Callable[[CapacityTargetStatus], CapacityTargetStatus]


def new_cluster_condition(
    condition_type: ClusterConditionType,
    status: ConditionStatus,
    reason: Optional[str] = None,
    message: Optional[str] = None,
    transition_time: Optional[str] = None,
) -> ClusterCapacityCondition:
    return ClusterCapacityCondition(
        type=condition_type,
        status=status,
        reason=reason,
        message=message,
        last_transition_time=transition_time,
    )


def merge_transition_times(
    previous: Optional[ClusterCapacityStatus],
    conditions: List[ClusterCapacityCondition],
    now: Optional[str],
) -> List[ClusterCapacityCondition]:
    """Stamp freshly derived conditions with their last transition time.

    A condition whose status is unchanged from the previously stored one keeps
    the stored timestamp; any other condition transitions at ``now``. Passing
    ``now=None`` leaves every condition without a timestamp.
    """
    if now is None:
        return [c.model_copy(update={"last_transition_time": None}) for c in conditions]

    old_by_type = {}
    if previous is not None:
        old_by_type = {c.type: c for c in previous.conditions}

    merged = []
    for condition in conditions:
        old = old_by_type.get(condition.type)
        if (
            old is not None
            and old.status == condition.status
            and old.last_transition_time
        ):
            stamp = old.last_transition_time
        else:
            stamp = now
        merged.append(condition.model_copy(update={"last_transition_time": stamp}))
    return merged


def strip_condition_timestamps(status: CapacityTargetStatus) -> CapacityTargetStatus:
    """Return a copy of ``status`` with every condition timestamp removed.

    Used before structural comparison so that a status differing only in
    transition times is treated as unchanged.
    """
    clusters = []
    for cluster in status.clusters:
        conditions = [
            c.model_copy(update={"last_transition_time": None})
            for c in cluster.conditions
        ]
        sad_pods = [
            p.model_copy(
                update={
                    "condition": p.condition.model_copy(
                        update={"last_transition_time": None, "last_probe_time": None}
                    )
                }
            )
            for p in cluster.sad_pods
        ]
        clusters.append(
            cluster.model_copy(update={"conditions": conditions, "sad_pods": sad_pods})
        )
    return CapacityTargetStatus(clusters=clusters)
