# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for cluster condition helpers and status normalization."""

import pytest

from shipyard import conditions
from shipyard.apis import (
    CapacityTargetStatus,
    ClusterCapacityStatus,
    ClusterConditionType,
    ConditionStatus,
    PodCondition,
    PodStatus,
)

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.capacity,
]

T1 = "2026-01-01T00:00:00+00:00"
T2 = "2026-01-01T00:05:00+00:00"


def _status(operational, ready, stamp=None):
    return ClusterCapacityStatus(
        name="minikube",
        conditions=[
            conditions.new_cluster_condition(
                ClusterConditionType.OPERATIONAL, operational, transition_time=stamp
            ),
            conditions.new_cluster_condition(
                ClusterConditionType.READY, ready, transition_time=stamp
            ),
        ],
    )


def test_new_cluster_condition_drops_empty_reason():
    condition = conditions.new_cluster_condition(
        ClusterConditionType.READY, ConditionStatus.TRUE, reason="", message=""
    )
    assert condition.reason is None
    assert condition.message is None
    assert condition.to_dict() == {"type": "Ready", "status": "True"}


def test_merge_transition_times_keeps_unchanged_stamp():
    previous = _status(ConditionStatus.TRUE, ConditionStatus.TRUE, stamp=T1)
    fresh = _status(ConditionStatus.TRUE, ConditionStatus.FALSE).conditions

    merged = conditions.merge_transition_times(previous, fresh, T2)

    assert merged[0].last_transition_time == T1
    assert merged[1].last_transition_time == T2


def test_merge_transition_times_without_previous():
    fresh = _status(ConditionStatus.TRUE, ConditionStatus.TRUE).conditions
    merged = conditions.merge_transition_times(None, fresh, T1)
    assert [c.last_transition_time for c in merged] == [T1, T1]


def test_merge_transition_times_disabled():
    previous = _status(ConditionStatus.TRUE, ConditionStatus.TRUE, stamp=T1)
    fresh = _status(ConditionStatus.TRUE, ConditionStatus.TRUE, stamp=T2).conditions
    merged = conditions.merge_transition_times(previous, fresh, None)
    assert all(c.last_transition_time is None for c in merged)


def test_strip_condition_timestamps():
    status = _status(ConditionStatus.TRUE, ConditionStatus.FALSE, stamp=T1)
    status.sad_pods = [
        PodStatus(
            name="nginx-sad",
            condition=PodCondition(
                type="Ready",
                status=ConditionStatus.FALSE,
                last_probe_time=T1,
                last_transition_time=T1,
            ),
        )
    ]
    stripped = conditions.strip_condition_timestamps(
        CapacityTargetStatus(clusters=[status])
    )

    cluster = stripped.clusters[0]
    assert all(c.last_transition_time is None for c in cluster.conditions)
    assert cluster.sad_pods[0].condition.last_probe_time is None
    assert cluster.sad_pods[0].condition.last_transition_time is None
    # the input is left untouched
    assert status.conditions[0].last_transition_time == T1


def test_statuses_differing_only_in_timestamps_normalize_equal():
    a = CapacityTargetStatus(
        clusters=[_status(ConditionStatus.TRUE, ConditionStatus.TRUE, stamp=T1)]
    )
    b = CapacityTargetStatus(
        clusters=[_status(ConditionStatus.TRUE, ConditionStatus.TRUE, stamp=T2)]
    )
    assert a != b
    assert conditions.strip_condition_timestamps(
        a
    ) == conditions.strip_condition_timestamps(b)


def test_status_round_trips_through_camel_case():
    status = CapacityTargetStatus(
        clusters=[_status(ConditionStatus.TRUE, ConditionStatus.TRUE, stamp=T1)]
    )
    raw = status.to_dict()
    assert raw["clusters"][0]["availableReplicas"] == 0
    assert raw["clusters"][0]["conditions"][0]["lastTransitionTime"] == T1
    assert CapacityTargetStatus.model_validate(raw) == status
