"""Logging setup for hosts embedding the engine."""

import logging

from lsf_errors.config import Settings, settings as default_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Install a root handler using the configured level and format."""
    settings = settings or default_settings
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if not settings.dev_mode:
        logging.basicConfig(
            level=level,
            format='{"time":"%(asctime)s","level":"%(levelname)s","name":"%(name)s","message":"%(message)s"}',
        )
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        )
