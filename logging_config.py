"""Logging setup for the hipchat command line tool.

Usage:
    from logging_config import configure_logging
    configure_logging(debug=args.debug)
"""

from __future__ import annotations

import copy
import logging
import logging.config
from typing import Any, Dict

LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
            "stream": "ext://sys.stderr",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def configure_logging(debug: bool = False) -> None:
    """Apply the logging configuration; call once at startup.

    ``debug`` lowers the root level to DEBUG, which is what makes the sender
    dump the response headers of a successful post.
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    if debug:
        config["root"]["level"] = "DEBUG"
    logging.config.dictConfig(config)
