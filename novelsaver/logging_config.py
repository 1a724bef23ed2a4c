"""
Logging for the scraping core.

One named logger, ``novel_saver``, with two extra verbosity levels:

    TRACE      per-anchor resolver decisions, strategy attempts, raw GETs
    COMPONENT  session transitions and batch boundaries

Verbosity comes from NOVEL_SAVER_DEBUG_LEVEL and can be changed at runtime:

    from novelsaver.logging import set_debug_level
    set_debug_level('component')
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

TRACE_LEVEL = 5
COMPONENT_LEVEL = 15

LOG_DIR = os.getenv('NOVEL_SAVER_LOG_DIR', 'logs')
LOG_FILE = 'app.log'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s'

DEBUG_LEVELS = {
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'COMPONENT': COMPONENT_LEVEL,
    'DEBUG': logging.DEBUG,
    'TRACE': TRACE_LEVEL,
}

logging.addLevelName(TRACE_LEVEL, 'TRACE')
logging.addLevelName(COMPONENT_LEVEL, 'COMPONENT')


class ScrapeLogger(logging.Logger):
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, message, args, **kwargs)

    def component(self, message, *args, **kwargs):
        if self.isEnabledFor(COMPONENT_LEVEL):
            self._log(COMPONENT_LEVEL, message, args, **kwargs)


def _build_logger():
    # Only this logger gets the subclass; third-party loggers keep the default class
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(ScrapeLogger)
    try:
        scrape_logger = logging.getLogger('novel_saver')
    finally:
        logging.setLoggerClass(previous_class)

    if not scrape_logger.handlers:
        os.makedirs(LOG_DIR, exist_ok=True)
        formatter = logging.Formatter(LOG_FORMAT)
        handlers = [
            RotatingFileHandler(os.path.join(LOG_DIR, LOG_FILE), maxBytes=128 * 1024,
                                backupCount=5, encoding='utf-8', delay=True),
            logging.StreamHandler(sys.stdout),
        ]
        for handler in handlers:
            handler.setFormatter(formatter)
            scrape_logger.addHandler(handler)
    return scrape_logger


logger = _build_logger()


def set_debug_level(level='INFO'):
    """Set verbosity by name (case-insensitive); unknown names fall back to INFO."""
    name = str(level).upper()
    if name not in DEBUG_LEVELS:
        logger.warning(f"[LOGGING] Unknown debug level '{level}', using INFO")
        name = 'INFO'
    numeric_level = DEBUG_LEVELS[name]
    logger.setLevel(numeric_level)
    for handler in logger.handlers:
        handler.setLevel(numeric_level)
    logger.debug(f"[LOGGING] Debug level set to {name} ({numeric_level})")
    return numeric_level


set_debug_level(os.getenv('NOVEL_SAVER_DEBUG_LEVEL', 'INFO'))
