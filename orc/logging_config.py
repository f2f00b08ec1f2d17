"""Logging setup for the orc CLI.

Records go through `instrukt_ai_logging` under the "orc" app name, so they land
in the shared InstruktAI log tree. The log directory is created at install
time, not here. Query with `instruktai-python-logs orc --since 10m`.
"""

from __future__ import annotations

import os
from typing import Optional

from instrukt_ai_logging import configure_logging

from orc.constants import ENV_LOG_LEVEL


def setup_logging(level: Optional[str] = None) -> None:
    """Configure logging for the "orc" app; level overrides ORC_LOG_LEVEL."""
    if level:
        os.environ[ENV_LOG_LEVEL] = level

    configure_logging("orc")
