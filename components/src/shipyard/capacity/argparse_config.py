# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Argument parsing for the capacity controller."""

import argparse

from shipyard.capacity.defaults import CapacityControllerDefaults
from shipyard.common.configuration.utils import (
    add_argument,
    add_negatable_bool_argument,
)


def create_capacity_controller_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the capacity controller.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="Capacity controller - spreads release replicas across clusters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Reconcile capacity targets in two namespaces every 30s
  python -m shipyard.capacity --namespace reviewsapi checkout \\
    --clusters-config clusters.yaml

  # Single pass, useful from a cron job
  python -m shipyard.capacity --namespace reviewsapi --once
        """,
    )

    add_argument(
        parser,
        flag_name="--namespace",
        env_var="SHIPYARD_NAMESPACE",
        default=CapacityControllerDefaults.namespaces,
        help="Namespaces whose capacity targets are reconciled",
        dest="namespaces",
        nargs="+",
    )
    add_argument(
        parser,
        flag_name="--clusters-config",
        env_var="SHIPYARD_CLUSTERS_CONFIG",
        default=CapacityControllerDefaults.clusters_config,
        help="YAML file mapping cluster names to kubeconfig contexts",
    )
    add_argument(
        parser,
        flag_name="--management-context",
        env_var="SHIPYARD_MANAGEMENT_CONTEXT",
        default=CapacityControllerDefaults.management_context,
        help="Kubeconfig context of the management cluster (in-cluster config if unset and no kubeconfig)",
    )
    add_argument(
        parser,
        flag_name="--resync-interval",
        env_var="SHIPYARD_RESYNC_INTERVAL",
        default=CapacityControllerDefaults.resync_interval,
        help="Seconds between full passes over all capacity targets",
        arg_type=float,
    )
    add_argument(
        parser,
        flag_name="--metrics-port",
        env_var="SHIPYARD_METRICS_PORT",
        default=CapacityControllerDefaults.metrics_port,
        help="Port for the Prometheus metrics endpoint (0 disables it)",
        arg_type=int,
    )
    add_negatable_bool_argument(
        parser,
        flag_name="--record-events",
        env_var="SHIPYARD_RECORD_EVENTS",
        default=CapacityControllerDefaults.record_events,
        help="Post Kubernetes events against capacity targets",
    )
    add_negatable_bool_argument(
        parser,
        flag_name="--status-subresource",
        env_var="SHIPYARD_STATUS_SUBRESOURCE",
        default=CapacityControllerDefaults.status_subresource,
        help="Write capacity target status through the /status subresource",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Run a single reconciliation pass and exit",
    )

    return parser


def validate_capacity_controller_args(args: argparse.Namespace) -> None:
    """Validate capacity controller arguments.

    Raises:
        ValueError: If argument constraints are violated
    """
    if not args.namespaces:
        raise ValueError("At least one --namespace must be given")

    if args.resync_interval <= 0:
        raise ValueError(
            f"--resync-interval must be positive, got {args.resync_interval}"
        )

    if not 0 <= args.metrics_port <= 65535:
        raise ValueError(
            f"--metrics-port must be within [0, 65535], got {args.metrics_port}"
        )

    if not args.clusters_config:
        raise ValueError("--clusters-config is required")
