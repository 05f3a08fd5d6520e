"""Central logging configuration for the census service.

All module loggers propagate to one stdout console handler. Uvicorn's
loggers are routed to the same handler so access lines share the format.
"""
from __future__ import annotations

import copy
import logging
from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"

_DICT_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"default": {"format": LOG_FORMAT}},
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"handlers": ["console"]},
    "loggers": {
        name: {"handlers": ["console"], "propagate": False}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
    },
}


def configure_logging(level: str = "INFO") -> None:
    """Install the console handler at `level` unless the root logger already has handlers.

    The early return keeps reloaders and pytest's log capture from getting
    duplicate output.
    """
    if logging.getLogger().handlers:
        return
    cfg = copy.deepcopy(_DICT_CONFIG)
    cfg["handlers"]["console"]["level"] = level
    cfg["root"]["level"] = level
    for logger_cfg in cfg["loggers"].values():
        logger_cfg["level"] = level
    # Engine echo is noisy below WARNING
    cfg["loggers"]["sqlalchemy.engine"] = {"level": "WARNING"}
    dictConfig(cfg)


__all__ = ["LOG_FORMAT", "configure_logging"]
