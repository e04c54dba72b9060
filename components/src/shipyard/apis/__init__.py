# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Object models for releases, capacity targets and target-cluster workloads."""

__all__ = [
    "API_GROUP",
    "API_VERSION",
    "RELEASE_KIND",
    "RELEASE_LABEL",
    "RELEASE_REPLICAS_ANNOTATION",
    "CapacityTarget",
    "CapacityTargetSpec",
    "CapacityTargetStatus",
    "ClusterCapacityCondition",
    "ClusterCapacityStatus",
    "ClusterCapacityTarget",
    "ClusterConditionType",
    "ConditionStatus",
    "LabelSelectorRequirement",
    "ObjectMeta",
    "OwnerReference",
    "Pod",
    "PodCondition",
    "PodStatus",
    "Release",
    "Workload",
]

from shipyard.apis.types import (
    API_GROUP,
    API_VERSION,
    RELEASE_KIND,
    RELEASE_LABEL,
    RELEASE_REPLICAS_ANNOTATION,
    CapacityTarget,
    CapacityTargetSpec,
    CapacityTargetStatus,
    ClusterCapacityCondition,
    ClusterCapacityStatus,
    ClusterCapacityTarget,
    ClusterConditionType,
    ConditionStatus,
    LabelSelectorRequirement,
    ObjectMeta,
    OwnerReference,
    Pod,
    PodCondition,
    PodStatus,
    Release,
    Workload,
)
