import logging.config
import os

from .consts import DEFAULT_LOG_FILE
from .utils import canonicalify, ensure_path

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s [%(levelname)s] [%(name)s] - %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": logging.WARNING,
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": logging.DEBUG,
            "formatter": "default",
            "filename": DEFAULT_LOG_FILE,
            "maxBytes": 5 * 1024 * 1024,  # 5MB
            "backupCount": 5,
            "delay": True,
        },
    },
    "loggers": {
        "schemaui": {
            "handlers": ["console", "file"],
            "level": logging.DEBUG,
            "propagate": True,
        }
    },
}


def setup(logfile=None, verbose=False):
    if not logfile:
        logfile = os.environ.get("SCHEMAUI_LOG_FILE") or DEFAULT_LOG_FILE

    p = canonicalify(logfile)
    if len(p.parts) > 1:
        ensure_path(p.parent)

    config = {
        **LOGGING_CONFIG,
        "handlers": {
            "console": {
                **LOGGING_CONFIG["handlers"]["console"],
                "level": logging.DEBUG if verbose else logging.WARNING,
            },
            "file": {**LOGGING_CONFIG["handlers"]["file"], "filename": str(p)},
        },
    }
    logging.config.dictConfig(config)


logger = logging.getLogger("schemaui")
