# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Conversions between a release replica budget, percentages and replica counts."""

from shipyard.apis import RELEASE_REPLICAS_ANNOTATION, Release
from shipyard.common.exceptions import InvalidBudgetError


def read_release_budget(release: Release) -> int:
    """Return the total replica budget declared on ``release``.

    Raises:
        InvalidBudgetError: annotation missing, not an integer, or negative
    """
    raw = release.metadata.annotations.get(RELEASE_REPLICAS_ANNOTATION)
    if raw is None:
        raise InvalidBudgetError(release.metadata.key, None)
    try:
        budget = int(raw.strip())
    except ValueError:
        raise InvalidBudgetError(release.metadata.key, raw) from None
    if budget < 0:
        raise InvalidBudgetError(release.metadata.key, raw)
    return budget


def calculate_desired_replicas(total_replicas: int, percent: int) -> int:
    """ceil(total_replicas * percent / 100), so a cluster never gets less than its share."""
    if total_replicas < 0:
        raise ValueError(f"total_replicas must be non-negative, got {total_replicas}")
    if not 0 <= percent <= 100:
        raise ValueError(f"percent must be within [0, 100], got {percent}")
    return -(-total_replicas * percent // 100)


def calculate_achieved_percent(available_replicas: int, total_replicas: int) -> int:
    """floor(available_replicas * 100 / total_replicas); 0 for an empty budget."""
    if total_replicas <= 0:
        return 0
    return available_replicas * 100 // total_replicas
