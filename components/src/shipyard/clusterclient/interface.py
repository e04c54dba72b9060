# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Interfaces the capacity controller uses to reach target clusters."""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple

from shipyard.apis import LabelSelectorRequirement, Pod, Workload


class WorkloadClient(ABC):
    @abstractmethod
    async def get_workload(self, namespace: str, release_name: str) -> Workload:
        """Return the single workload labelled with ``release_name``.

        Raises:
            WorkloadFetchError: the workload is missing, ambiguous, or the
                cluster could not be queried
        """
        ...

    @abstractmethod
    async def patch_replicas(self, namespace: str, name: str, replicas: int) -> None:
        """Set only the declared replica count of the named workload.

        Raises:
            WorkloadWriteError: the patch was rejected or the cluster could
                not be reached
        """
        ...


class PodClient(ABC):
    @abstractmethod
    async def list_pods(
        self,
        namespace: str,
        selector: Dict[str, str],
        expressions: Sequence[LabelSelectorRequirement] = (),
    ) -> List[Pod]:
        """List pods matching every label in ``selector`` and every requirement
        in ``expressions``.

        Raises:
            PodListFetchError: the cluster could not be queried
        """
        ...


class ClusterClientStore(ABC):
    """Registry handing out connected clients for named clusters."""

    @abstractmethod
    async def get_client(self, cluster_name: str) -> Tuple[WorkloadClient, PodClient]:
        """
        Raises:
            UnknownClusterError: no client is registered for ``cluster_name``
            ClusterError: the cluster is registered but its client cannot be built
        """
        ...

    @abstractmethod
    def cluster_names(self) -> List[str]:
        ...
