# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Cluster capacity condition reasons and helpers."""

__all__ = [
    "INVALID_RELEASE_BUDGET",
    "MISSING_DEPLOYMENT",
    "PATCH_FAILED",
    "POD_LIST_FAILED",
    "PODS_NOT_READY",
    "SERVER_ERROR",
    "TOO_MANY_DEPLOYMENTS",
    "UNKNOWN_CLUSTER",
    "WRONG_POD_COUNT",
    "StatusNormalizer",
    "merge_transition_times",
    "new_cluster_condition",
    "strip_condition_timestamps",
]

from shipyard.conditions.capacity import (
    INVALID_RELEASE_BUDGET,
    MISSING_DEPLOYMENT,
    PATCH_FAILED,
    POD_LIST_FAILED,
    PODS_NOT_READY,
    SERVER_ERROR,
    TOO_MANY_DEPLOYMENTS,
    UNKNOWN_CLUSTER,
    WRONG_POD_COUNT,
    StatusNormalizer,
    merge_transition_times,
    new_cluster_condition,
    strip_condition_timestamps,
)
