# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Errors raised while reconciling capacity targets."""

from typing import Optional

from shipyard import conditions


class CapacityError(Exception):
    """Base class for all capacity controller errors."""


class InvalidBudgetError(CapacityError):
    """The release replica budget annotation is missing or malformed."""

    def __init__(self, release_key: str, value: Optional[str]):
        self.release_key = release_key
        self.value = value
        if value is None:
            message = f"release {release_key} has no replica budget annotation"
        else:
            message = (
                f"release {release_key} has invalid replica budget {value!r}: "
                "expected a non-negative integer"
            )
        super().__init__(message)


class InvalidCapacityTargetError(CapacityError):
    """A stored capacity target could not be decoded."""

    def __init__(self, key: str, detail: str):
        self.key = key
        super().__init__(f"capacity target {key} is invalid: {detail}")


class StatusWriteConflict(CapacityError):
    """The capacity target changed since it was read; the update was rejected."""

    def __init__(self, key: str, resource_version: Optional[str] = None):
        self.key = key
        self.resource_version = resource_version
        super().__init__(
            f"capacity target {key} was modified concurrently "
            f"(read at resourceVersion {resource_version})"
        )


class ClusterError(CapacityError):
    """Failure scoped to a single target cluster.

    ``reason`` is the Operational condition reason reported for the cluster.
    """

    reason = conditions.SERVER_ERROR

    def __init__(self, cluster: str, message: str, reason: Optional[str] = None):
        self.cluster = cluster
        if reason is not None:
            self.reason = reason
        super().__init__(message)


class UnknownClusterError(ClusterError):
    reason = conditions.UNKNOWN_CLUSTER

    def __init__(self, cluster: str):
        super().__init__(cluster, f"no client registered for cluster {cluster!r}")


class WorkloadFetchError(ClusterError):
    pass


class PodListFetchError(ClusterError):
    reason = conditions.POD_LIST_FAILED


class WorkloadWriteError(ClusterError):
    reason = conditions.PATCH_FAILED
