# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Periodic resync driver for the capacity controller."""

import asyncio
import logging
from typing import List

from shipyard.capacity.controller import CapacityController
from shipyard.capacity.stores import CapacityTargetStore
from shipyard.runtime.logging import configure_shipyard_logging

configure_shipyard_logging()
logger = logging.getLogger(__name__)


async def resync_once(
    controller: CapacityController,
    capacity_targets: CapacityTargetStore,
    namespaces: List[str],
) -> List[str]:
    """Reconcile every capacity target in ``namespaces`` one after another.

    Returns:
        Keys of capacity targets that asked to be retried
    """
    retry_keys = []
    for namespace in namespaces:
        try:
            targets = await capacity_targets.list(namespace)
        except Exception as e:
            logger.exception(f"Failed to list capacity targets in {namespace}: {e}")
            continue

        for target in targets:
            key = target.metadata.key
            try:
                retry = await controller.sync(key)
            except Exception as e:
                logger.exception(f"Unexpected error syncing {key}: {e}")
                retry = True
            if retry:
                retry_keys.append(key)

    if retry_keys:
        logger.info(f"Will retry on next pass: {retry_keys}")
    return retry_keys


async def run_resync_loop(
    controller: CapacityController,
    capacity_targets: CapacityTargetStore,
    namespaces: List[str],
    interval: float,
    once: bool = False,
) -> None:
    while True:
        logger.debug(f"Starting resync pass over namespaces {namespaces}")
        await resync_once(controller, capacity_targets, namespaces)
        if once:
            return
        await asyncio.sleep(interval)
