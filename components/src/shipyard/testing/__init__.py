# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from shipyard.testing.builders import (
    new_capacity_target,
    new_pod,
    new_release,
    new_workload,
)
from shipyard.testing.fake import (
    FakeCapacityTargetStore,
    FakeClusterClientStore,
    FakeEventRecorder,
    FakePodClient,
    FakeReleaseStore,
    FakeWorkloadClient,
)

__all__ = [
    "FakeCapacityTargetStore",
    "FakeClusterClientStore",
    "FakeEventRecorder",
    "FakePodClient",
    "FakeReleaseStore",
    "FakeWorkloadClient",
    "new_capacity_target",
    "new_pod",
    "new_release",
    "new_workload",
]
