# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Capacity controller: spreads a release's replica budget across clusters."""

__all__ = [
    "CapacityController",
    "CapacityTargetStore",
    "EventRecorder",
    "KubernetesCapacityTargetStore",
    "KubernetesEventRecorder",
    "KubernetesReleaseStore",
    "NullEventRecorder",
    "ReleaseStore",
    "build_cluster_status",
    "calculate_achieved_percent",
    "calculate_desired_replicas",
    "read_release_budget",
    "resolve_release_name",
]

from shipyard.capacity.controller import (
    CapacityController,
    build_cluster_status,
    resolve_release_name,
)
from shipyard.capacity.events import (
    EventRecorder,
    KubernetesEventRecorder,
    NullEventRecorder,
)
from shipyard.capacity.replicas import (
    calculate_achieved_percent,
    calculate_desired_replicas,
    read_release_budget,
)
from shipyard.capacity.stores import (
    CapacityTargetStore,
    KubernetesCapacityTargetStore,
    KubernetesReleaseStore,
    ReleaseStore,
)
