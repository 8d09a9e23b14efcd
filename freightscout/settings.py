import copy
import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Braspress credentials and environment
BRASPRESS_USERNAME = os.getenv("BRASPRESS_USERNAME", "")
BRASPRESS_PASSWORD = os.getenv("BRASPRESS_PASSWORD", "")
BRASPRESS_ENVIRONMENT = os.getenv("BRASPRESS_ENVIRONMENT", "production").strip().lower()

logger = logging.getLogger(__name__)


def is_production(environment):
    """Everything except "homologacao" targets the production host."""
    return (environment or "production").strip().lower() != "homologacao"


BRASPRESS_PRODUCTION = is_production(BRASPRESS_ENVIRONMENT)


def parse_timeout(value):
    """Seconds as float; unset or unparseable means the transport default (no timeout)."""
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid BRASPRESS_TIMEOUT {value!r}; using no timeout")
        return None


BRASPRESS_TIMEOUT = parse_timeout(os.getenv("BRASPRESS_TIMEOUT"))

LOG_LEVEL = os.getenv("FREIGHTSCOUT_LOG_LEVEL", "INFO").upper()

# Logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
        "json": {
            "()": "json_log_formatter.JSONFormatter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "freightscout": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "urllib3.connectionpool": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}


def get_logging_config(formatter: str = "verbose") -> dict:
    """Return LOGGING with the console handler switched to ``formatter``."""
    config = copy.deepcopy(LOGGING)
    config["handlers"]["console"]["formatter"] = formatter
    return config
