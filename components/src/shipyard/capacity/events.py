# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Human-readable notices about capacity target reconciliation."""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from kubernetes import client

from shipyard.apis import CapacityTarget
from shipyard.clusterclient.kube import API_ERRORS
from shipyard.runtime.logging import configure_shipyard_logging

configure_shipyard_logging()
logger = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

COMPONENT_NAME = "capacity-controller"


class EventRecorder(ABC):
    @abstractmethod
    async def event(
        self, obj: CapacityTarget, event_type: str, reason: str, message: str
    ) -> None:
        ...


class NullEventRecorder(EventRecorder):
    async def event(
        self, obj: CapacityTarget, event_type: str, reason: str, message: str
    ) -> None:
        logger.debug(f"[{obj.metadata.key}] {event_type} {reason}: {message}")


class KubernetesEventRecorder(EventRecorder):
    """Posts core/v1 Events against the capacity target.

    Events are informational; failing to post one is logged and otherwise ignored.
    """

    def __init__(self, core_api: client.CoreV1Api, component: str = COMPONENT_NAME):
        self.core_api = core_api
        self.component = component

    async def event(
        self, obj: CapacityTarget, event_type: str, reason: str, message: str
    ) -> None:
        meta = obj.metadata
        now = datetime.now(timezone.utc)
        body = client.CoreV1Event(
            metadata=client.V1ObjectMeta(
                generate_name=f"{meta.name}.", namespace=meta.namespace
            ),
            involved_object=client.V1ObjectReference(
                api_version=obj.api_version,
                kind=obj.kind,
                name=meta.name,
                namespace=meta.namespace,
                uid=meta.uid,
                resource_version=meta.resource_version,
            ),
            type=event_type,
            reason=reason,
            message=message,
            source=client.V1EventSource(component=self.component),
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )
        try:
            await asyncio.to_thread(
                self.core_api.create_namespaced_event, meta.namespace, body
            )
        except API_ERRORS as e:
            logger.warning(f"Failed to record {reason} event for {meta.key}: {e}")
