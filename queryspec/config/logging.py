"""Logging configuration for processes embedding the planner."""

from __future__ import annotations

import logging

from queryspec.config.settings import QuerySettings, load_settings


def configure_logging(settings: QuerySettings | None = None) -> None:
    """Configure Python logging for the process at `settings.log_level`.

    Settings are loaded from the environment when not given. Rejected parameters are logged at INFO
    without their values; full plans only at DEBUG.
    """

    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
