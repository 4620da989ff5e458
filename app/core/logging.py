import sys
from logging.config import dictConfig
from app.core.config import APP_ENV, DB_ECHO_POOL

LOG_LEVEL = "DEBUG" if APP_ENV == "development" else "INFO"

# DB_ECHO_POOL turns on checkout/checkin tracing from the pool itself
POOL_LOG_LEVEL = "DEBUG" if DB_ECHO_POOL else "WARNING"


def setup_logging():
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,

            # -----------------
            # FORMATTERS
            # -----------------
            "formatters": {
                "default": {
                    "format": (
                        "%(asctime)s | %(levelname)s | "
                        "%(name)s | %(message)s"
                    ),
                },
                "access": {
                    "format": (
                        "%(asctime)s | ACCESS | "
                        "%(client_addr)s | %(method)s | "
                        "%(path)s | %(status_code)s | "
                        "%(process_time_ms)sms"
                    ),
                },
                "store": {
                    "format": (
                        "%(asctime)s | %(levelname)s | STORE | "
                        "%(name)s | %(message)s"
                    ),
                },
            },

            # -----------------
            # HANDLERS
            # -----------------
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
                "access_console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "access",
                },
                "store_console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "store",
                },
            },

            # -----------------
            # LOGGERS
            # -----------------
            "loggers": {
                # Used by request_logging_middleware
                "access": {
                    "handlers": ["access_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                # pool manager and transaction handles
                "app.core.db": {
                    "handlers": ["store_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                "app.core.transaction": {
                    "handlers": ["store_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                "sqlalchemy.pool": {
                    "handlers": ["store_console"],
                    "level": POOL_LOG_LEVEL,
                    "propagate": False,
                },
                "aiosqlite": {
                    "level": "WARNING",
                },
            },

            # -----------------
            # ROOT LOGGER
            # -----------------
            "root": {
                "level": LOG_LEVEL,
                "handlers": ["console"],
            },
        }
    )
