import logging
import os
from logging.handlers import RotatingFileHandler

# Default log level - can be overridden by environment variable
LOG_LEVEL_STR = os.environ.get('LOG_LEVEL', 'INFO').upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_STR, logging.INFO)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Project root is two levels above this file
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
WORKSPACE_PATH = os.path.join(PROJECT_ROOT, 'workspace')
DEFAULT_LOGS_DIR_NAME = 'logs'
LOGS_DIR = os.path.join(WORKSPACE_PATH, DEFAULT_LOGS_DIR_NAME)

ROOT_LOGGER_NAME = 'NovelHarvester'


def setup_logger(logger_name, log_file, level=logging.INFO, add_console_handler=True):
    """Generic function to set up a logger."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    log_dir = os.path.dirname(log_file)
    os.makedirs(log_dir, exist_ok=True)

    # Remove existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    file_handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5, encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)

    if add_console_handler:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(console_handler)

    return logger


main_log_file = os.path.join(LOGS_DIR, 'harvester.log')
logger = setup_logger(ROOT_LOGGER_NAME, main_log_file, LOG_LEVEL)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Returns a logger under the application's logger hierarchy.

    Module names such as 'novel_harvester.core.orchestrator' are mapped to
    'NovelHarvester.core.orchestrator' so their records reach the handlers
    configured above.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        return logging.getLogger(name)
    if name.startswith('novel_harvester'):
        name = ROOT_LOGGER_NAME + name[len('novel_harvester'):]
    else:
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
