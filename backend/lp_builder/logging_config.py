import logging
from logging.config import dictConfig


def setup_logging(level="INFO"):
    """Route the app logger, werkzeug and our own modules to one console handler."""
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(levelname)s [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "default",
            },
        },
        "loggers": {
            "lp_builder": {"level": level, "handlers": ["console"], "propagate": False},
            "werkzeug": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    })
    return logging.getLogger("lp_builder")
