"""
Logging utilities

Configures stdlib logging (dictConfig, optionally from a YAML file) and
structlog on top of it.
"""

import copy
import logging
import logging.config
import os
from typing import Any, Dict, Optional

import structlog
import yaml

# Default logging configuration
DEFAULT_LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(message)s'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'plain',
            'stream': 'ext://sys.stdout'
        }
    },
    'root': {
        'level': 'INFO',
        'handlers': ['console']
    },
    'loggers': {
        'uvicorn.access': {
            'level': 'WARNING',
            'handlers': ['console'],
            'propagate': False
        }
    }
}


def load_logging_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load a dictConfig mapping from a YAML file, or return the default"""
    if config_path and os.path.exists(config_path):
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        if config:
            return config
    return copy.deepcopy(DEFAULT_LOGGING_CONFIG)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    config_path: Optional[str] = None
) -> None:
    """
    Setup logging configuration

    Args:
        log_level: Root log level
        log_format: 'json' for machine-readable output, 'console' for development
        config_path: Optional YAML dictConfig file
    """
    config = load_logging_config(config_path)

    level = log_level.upper()
    if 'root' in config:
        config['root']['level'] = level
    for handler_config in config.get('handlers', {}).values():
        handler_config['level'] = level

    logging.config.dictConfig(config)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """Get a structlog logger bound to a module name"""
    return structlog.get_logger(name)
