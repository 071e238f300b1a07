"""
Logging configuration.

The packaged `config/logging.yaml` is applied with `dictConfig`. The root level comes
from `app.log_level` (`LOCATIONKIT_LOG_LEVEL`) unless a caller such as the CLI's
`--log-level` passes one explicitly. Third-party HTTP loggers keep their YAML levels.
"""

from __future__ import annotations

import copy
import logging.config

from locationkit.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> str:
    """Apply the packaged logging config; returns the effective root level name."""
    effective = (level or get_settings().app.log_level).upper()
    config = copy.deepcopy(get_logging_config())

    config.setdefault("root", {})["level"] = effective
    console = config.get("handlers", {}).get("console")
    if isinstance(console, dict):
        console["level"] = effective

    logging.config.dictConfig(config)
    return effective
