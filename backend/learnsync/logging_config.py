import logging
import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
TELEMETRY_LOG_FORMAT = "%(asctime)s %(message)s"


def configure_logging() -> None:
    """Configure process logging based on environment flags.

    ``LEARNSYNC_LOG_LEVEL`` sets the root and ``learnsync`` level.
    ``LEARNSYNC_TELEMETRY_LOG_LEVEL`` controls the ``TELEMETRY {json}`` lines
    separately (set it to ``WARNING`` to silence them), and those lines go to
    their own handler so log shippers can pick them out without the
    ``[logger]`` prefix.
    """
    level = os.getenv("LEARNSYNC_LOG_LEVEL", "INFO").upper()
    telemetry_level = os.getenv("LEARNSYNC_TELEMETRY_LOG_LEVEL", level).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": DEFAULT_LOG_FORMAT},
                "telemetry": {"format": TELEMETRY_LOG_FORMAT},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
                "telemetry": {
                    "class": "logging.StreamHandler",
                    "formatter": "telemetry",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
            "loggers": {
                "learnsync": {"level": level},
                "learnsync.telemetry": {
                    "handlers": ["telemetry"],
                    "level": telemetry_level,
                    "propagate": False,
                },
            },
        }
    )

    if os.getenv("LEARNSYNC_DEBUG_HTTP", "0") == "1":
        logging.getLogger("httpx").setLevel(logging.DEBUG)
        logging.getLogger("httpcore").setLevel(logging.DEBUG)
