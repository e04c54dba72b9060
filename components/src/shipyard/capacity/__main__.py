# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Capacity controller

Entry point for the capacity controller.

Usage:
    python -m shipyard.capacity --namespace reviewsapi \\
        --clusters-config /etc/shipyard/clusters.yaml
"""

import asyncio
import logging

from kubernetes import client, config
from prometheus_client import start_http_server

from shipyard.capacity.argparse_config import (
    create_capacity_controller_parser,
    validate_capacity_controller_args,
)
from shipyard.capacity.controller import CapacityController
from shipyard.capacity.events import KubernetesEventRecorder, NullEventRecorder
from shipyard.capacity.runner import run_resync_loop
from shipyard.capacity.stores import (
    KubernetesCapacityTargetStore,
    KubernetesReleaseStore,
)
from shipyard.clusterclient import KubernetesClusterClientStore, load_clusters_config
from shipyard.runtime.logging import configure_shipyard_logging

configure_shipyard_logging()
logger = logging.getLogger(__name__)


def build_management_client(context=None) -> client.ApiClient:
    """API client for the cluster holding releases and capacity targets.

    Without an explicit context, falls back to in-cluster config when no
    kubeconfig is available.
    """
    try:
        return config.new_client_from_config(context=context)
    except config.ConfigException:
        if context is not None:
            raise
        logger.info("No kubeconfig found, using in-cluster configuration")
        config.load_incluster_config()
        return client.ApiClient()


async def main(args):
    """Initialize and run the capacity controller.

    Args:
        args: Parsed command-line arguments
    """
    logger.info("=" * 60)
    logger.info("Starting capacity controller")
    logger.info("=" * 60)
    logger.info(f"Namespaces: {args.namespaces}")
    logger.info(f"Clusters config: {args.clusters_config}")
    logger.info(f"Resync interval: {args.resync_interval}s")

    clusters = load_clusters_config(args.clusters_config)
    logger.info(f"Target clusters: {[c.name for c in clusters.clusters]}")

    api_client = build_management_client(args.management_context)
    custom_api = client.CustomObjectsApi(api_client)

    capacity_targets = KubernetesCapacityTargetStore(
        custom_api, status_subresource=args.status_subresource
    )
    if args.record_events:
        recorder = KubernetesEventRecorder(client.CoreV1Api(api_client))
    else:
        recorder = NullEventRecorder()

    controller = CapacityController(
        capacity_targets=capacity_targets,
        releases=KubernetesReleaseStore(custom_api),
        cluster_clients=KubernetesClusterClientStore(clusters),
        recorder=recorder,
    )

    if args.metrics_port:
        start_http_server(args.metrics_port)
        logger.info(f"Serving Prometheus metrics on port {args.metrics_port}")

    logger.info("=" * 60)
    await run_resync_loop(
        controller,
        capacity_targets,
        args.namespaces,
        args.resync_interval,
        once=args.once,
    )


def cli():
    parser = create_capacity_controller_parser()
    args = parser.parse_args()
    validate_capacity_controller_args(args)
    asyncio.run(main(args))


if __name__ == "__main__":
    cli()
