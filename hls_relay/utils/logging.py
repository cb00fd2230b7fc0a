"""
Logging configuration for hls-relay.

The relay logs one line per cache miss, fetch failure and resolution, so the
root level is usually INFO. Chatty third-party loggers are pinned separately
through ``logging.loggers`` in the config file.

Example config:

    logging:
      level: INFO
      file: /var/log/hls-relay.log
      loggers:
        httpx: WARNING
        hls_relay.fetch: DEBUG
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from ..config import RelayConfig


def _level(name: str) -> int:
    return logging.getLevelName(name.upper())


def _handlers(config: RelayConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        handlers.append(
            RotatingFileHandler(
                config.log_file,
                maxBytes=config.log_max_bytes,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )
        )
    return handlers


def setup_logging(config: Optional[RelayConfig] = None) -> None:
    """
    Configure the root logger and per-logger levels from RelayConfig.

    Replaces any handlers already on the root logger, so calling it twice
    (CLI then server) does not duplicate output.
    """
    config = config or RelayConfig()
    level = _level(config.log_level)
    formatter = logging.Formatter(config.log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in _handlers(config):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name, name_level in config.logger_levels.items():
        logging.getLogger(name).setLevel(_level(name_level))
