# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Read/write access to Release and CapacityTarget objects on the management cluster."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from pydantic import ValidationError

from shipyard.apis import API_GROUP, API_VERSION, CapacityTarget, Release
from shipyard.common.exceptions import InvalidCapacityTargetError, StatusWriteConflict
from shipyard.runtime.logging import configure_shipyard_logging

configure_shipyard_logging()
logger = logging.getLogger(__name__)

RELEASES_PLURAL = "releases"
CAPACITY_TARGETS_PLURAL = "capacitytargets"


class ReleaseStore(ABC):
    @abstractmethod
    async def get(self, namespace: str, name: str) -> Optional[Release]:
        """Return the release, or None if it does not exist."""
        ...


class CapacityTargetStore(ABC):
    @abstractmethod
    async def get(self, namespace: str, name: str) -> Optional[CapacityTarget]:
        """Return the capacity target, or None if it does not exist.

        Raises:
            InvalidCapacityTargetError: the stored object cannot be decoded
        """
        ...

    @abstractmethod
    async def list(self, namespace: str) -> List[CapacityTarget]:
        ...

    @abstractmethod
    async def update(self, capacity_target: CapacityTarget) -> CapacityTarget:
        """Write ``capacity_target`` if its resourceVersion is still current.

        Raises:
            StatusWriteConflict: the stored object changed since it was read
        """
        ...


class KubernetesReleaseStore(ReleaseStore):
    def __init__(self, custom_api: client.CustomObjectsApi):
        self.custom_api = custom_api

    async def get(self, namespace: str, name: str) -> Optional[Release]:
        try:
            raw = await asyncio.to_thread(
                self.custom_api.get_namespaced_custom_object,
                API_GROUP,
                API_VERSION,
                namespace,
                RELEASES_PLURAL,
                name,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return Release.model_validate(raw)


class KubernetesCapacityTargetStore(CapacityTargetStore):
    """CapacityTarget access through the custom objects API.

    With ``status_subresource`` set, updates go to the ``/status`` endpoint,
    which is required once the CRD enables the status subresource.
    """

    def __init__(
        self, custom_api: client.CustomObjectsApi, status_subresource: bool = False
    ):
        self.custom_api = custom_api
        self.status_subresource = status_subresource

    @staticmethod
    def _decode(raw: dict) -> CapacityTarget:
        meta = raw.get("metadata", {})
        key = f"{meta.get('namespace')}/{meta.get('name')}"
        try:
            return CapacityTarget.model_validate(raw)
        except ValidationError as e:
            raise InvalidCapacityTargetError(key, str(e)) from e

    async def get(self, namespace: str, name: str) -> Optional[CapacityTarget]:
        try:
            raw = await asyncio.to_thread(
                self.custom_api.get_namespaced_custom_object,
                API_GROUP,
                API_VERSION,
                namespace,
                CAPACITY_TARGETS_PLURAL,
                name,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return self._decode(raw)

    async def list(self, namespace: str) -> List[CapacityTarget]:
        raw = await asyncio.to_thread(
            self.custom_api.list_namespaced_custom_object,
            API_GROUP,
            API_VERSION,
            namespace,
            CAPACITY_TARGETS_PLURAL,
        )
        targets = []
        for item in raw.get("items", []):
            try:
                targets.append(self._decode(item))
            except InvalidCapacityTargetError as e:
                logger.error(f"Skipping capacity target: {e}")
        return targets

    async def update(self, capacity_target: CapacityTarget) -> CapacityTarget:
        meta = capacity_target.metadata
        replace = (
            self.custom_api.replace_namespaced_custom_object_status
            if self.status_subresource
            else self.custom_api.replace_namespaced_custom_object
        )
        try:
            raw = await asyncio.to_thread(
                replace,
                API_GROUP,
                API_VERSION,
                meta.namespace,
                CAPACITY_TARGETS_PLURAL,
                meta.name,
                capacity_target.to_dict(),
            )
        except ApiException as e:
            if e.status == 409:
                raise StatusWriteConflict(meta.key, meta.resource_version) from e
            raise
        return self._decode(raw)
