# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from shipyard.common.utils.namespace import get_namespace


class CapacityControllerDefaults:
    namespaces = [get_namespace()]
    clusters_config = "/etc/shipyard/clusters.yaml"
    management_context = None  # current kubeconfig context / in-cluster
    resync_interval = 30.0  # in seconds
    metrics_port = 0  # 0 disables the metrics endpoint
    record_events = True
    status_subresource = False
