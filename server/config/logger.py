"""Logging configuration with colors"""
import logging
import sys

import colorlog
from config.settings import LOG_LEVEL

LOG_FORMAT = "%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s%(reset)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

handler = colorlog.StreamHandler(sys.stdout)
handler.setFormatter(colorlog.ColoredFormatter(
    LOG_FORMAT,
    datefmt=DATE_FORMAT,
    log_colors=LOG_COLORS
))

logging.basicConfig(
    level=LOG_LEVEL,
    handlers=[handler]
)

logger = logging.getLogger("device_bridge")
logger.setLevel(LOG_LEVEL)
