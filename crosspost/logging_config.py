"""
Centralized logging configuration.

Keeps cross-poster logs at the configured level while quieting the HTTP
client and dev-server loggers.
"""

import logging
import os


def configure_logging(level: str = None):
    """
    Configure the root logger.

    Args:
        level: Log level name; defaults to the LOG_LEVEL environment variable (INFO)
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # Quiet noisy HTTP client loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logging.getLogger("crosspost").setLevel(getattr(logging, log_level, logging.INFO))
