"""Logging setup shared by the suite and ad-hoc runs."""
from __future__ import annotations

import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the root logger at LOG_LEVEL (default INFO).

    Calling it again only updates the level.
    """
    level_name = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not any(getattr(h, '_cognito_wrapper', False) for h in root_logger.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        stream_handler._cognito_wrapper = True
        root_logger.addHandler(stream_handler)

    for handler in root_logger.handlers:
        if getattr(handler, '_cognito_wrapper', False):
            handler.setLevel(log_level)

    return root_logger
