"""
Logging configuration for the hotel booking API.
Console logging through logging.config.dictConfig.
"""

import logging
import logging.config
from typing import Any, Dict

from infrastructure.config import get_settings

APP_LOGGER = "hotel"


def build_logging_config(level: str) -> Dict[str, Any]:
    """Create logging config dictionary"""
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
        },
        'handlers': {
            'console': {
                'level': 'DEBUG',
                'class': 'logging.StreamHandler',
                'formatter': 'standard'
            },
        },
        'loggers': {
            '': {  # Root logger
                'handlers': ['console'],
                'level': 'WARNING',
            },
            APP_LOGGER: {
                'handlers': ['console'],
                'level': level,
                'propagate': False
            },
            'uvicorn': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False
            },
            'uvicorn.access': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False
            }
        }
    }


def setup_logging() -> logging.Logger:
    """Configure application logging"""
    settings = get_settings()
    level = 'DEBUG' if settings.DEBUG else settings.LOG_LEVEL.upper()
    logging.config.dictConfig(build_logging_config(level))
    logger = logging.getLogger(APP_LOGGER)
    logger.info("Logging initialized with level: %s", level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child of the application logger"""
    return logging.getLogger(f"{APP_LOGGER}.{name}")
