# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Process-wide logging setup for shipyard components.

Environment Variables:
    SHIPYARD_LOG: Log level name (default: INFO).
    SHIPYARD_LOGGING_JSONL: When true, emit one JSON object per line.
"""

import json
import logging
from datetime import datetime, timezone

from shipyard.common.configuration.utils import env_or_default

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


class JsonlFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "target": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_shipyard_logging(level=None, jsonl=None) -> None:
    """Attach a single stream handler to the root logger.

    Safe to call from every module; only the first call has an effect.
    """
    global _configured
    if _configured:
        return
    _configured = True

    if level is None:
        level = env_or_default("SHIPYARD_LOG", "INFO").upper()
    if jsonl is None:
        jsonl = env_or_default("SHIPYARD_LOGGING_JSONL", False)

    handler = logging.StreamHandler()
    if jsonl:
        handler.setFormatter(JsonlFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)

    # the kubernetes client logs every request body at DEBUG
    logging.getLogger("kubernetes").setLevel(max(root.level, logging.INFO))
    logging.getLogger("urllib3").setLevel(logging.WARNING)
