# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import os


def get_namespace(default="default"):
    """Get the Kubernetes namespace the controller runs in.

    POD_NAMESPACE is injected by the downward API when running in-cluster;
    outside a cluster the given default is used.
    """
    return os.environ.get("POD_NAMESPACE", default)
