# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Access to workload and pod resources on target clusters, keyed by cluster name."""

__all__ = [
    "ClusterClientStore",
    "ClusterConfig",
    "ClustersConfig",
    "KubernetesClusterClientStore",
    "PodClient",
    "WorkloadClient",
    "load_clusters_config",
]

from shipyard.clusterclient.interface import ClusterClientStore, PodClient, WorkloadClient
from shipyard.clusterclient.kube import (
    ClusterConfig,
    ClustersConfig,
    KubernetesClusterClientStore,
    load_clusters_config,
)
