# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Prometheus metrics exported by the capacity controller."""

from typing import Dict, Optional, Set, Tuple

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge

PREFIX = "shipyard_capacity"


class CapacityControllerMetrics:
    """Container for all capacity controller Prometheus metrics."""

    def __init__(self, prefix: str = PREFIX, registry: Optional[CollectorRegistry] = None):
        registry = registry if registry is not None else REGISTRY
        self.reconciliations = Counter(
            f"{prefix}_reconciliations",
            "Capacity target reconciliations by outcome",
            ["result"],
            registry=registry,
        )
        self.replica_patches = Counter(
            f"{prefix}_replica_patches",
            "Workload replica patches issued",
            ["cluster"],
            registry=registry,
        )
        self.status_writes = Counter(
            f"{prefix}_status_writes",
            "Capacity target status updates by outcome",
            ["result"],
            registry=registry,
        )
        self.cluster_errors = Counter(
            f"{prefix}_cluster_errors",
            "Per-cluster errors folded into the Operational condition",
            ["cluster", "reason"],
            registry=registry,
        )

        # Observed state, one series per (namespace, capacity target, cluster)
        self.achieved_percent = Gauge(
            f"{prefix}_achieved_percent",
            "Available replicas as a percentage of the release budget",
            ["namespace", "capacity_target", "cluster"],
            registry=registry,
        )
        self.desired_replicas = Gauge(
            f"{prefix}_desired_replicas",
            "Replica count the workload is driven towards",
            ["namespace", "capacity_target", "cluster"],
            registry=registry,
        )
        self._clusters: Dict[Tuple[str, str], Set[str]] = {}

    def observe_cluster(self, namespace: str, name: str, cluster: str) -> Dict[str, str]:
        """Track a per-cluster series and return its gauge labels."""
        self._clusters.setdefault((namespace, name), set()).add(cluster)
        return {"namespace": namespace, "capacity_target": name, "cluster": cluster}

    def forget_clusters(self, namespace: str, name: str, keep: Set[str] = frozenset()) -> None:
        """Drop gauge series of a capacity target for clusters not in ``keep``."""
        clusters = self._clusters.get((namespace, name), set())
        for cluster in sorted(clusters - set(keep)):
            for gauge in (self.achieved_percent, self.desired_replicas):
                try:
                    gauge.remove(namespace, name, cluster)
                except KeyError:
                    # a cluster that failed early never set this gauge
                    continue
        remaining = clusters & set(keep)
        if remaining:
            self._clusters[(namespace, name)] = remaining
        else:
            self._clusters.pop((namespace, name), None)


# Collectors register globally, so the controller shares a single instance.
METRICS = CapacityControllerMetrics()
