"""
logging_config.py — Loguru setup for the Pipeline Tracker

Loguru is the only logging backend. The services log through stdlib
loggers named "pipeline.*"; an intercept handler forwards those records
to Loguru so API and analytics logs share one sink and one format.

Business Rules:
- Production (https, non-localhost APP_URL) writes JSON lines to stdout
- Development writes a colored, human-readable line
- LOG_FILE, when set, adds a rotating file sink (20 MB, 14 days)
- Analytics functions log counts at DEBUG only, never per record

Called by: app/main.py (lifespan startup)
Depends on: app/config.py (log_level, app_url, log_file)
"""

import logging
import sys

from loguru import logger

from .config import settings

DEV_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)

QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "alembic.runtime.migration")


def _is_production(app_url: str) -> bool:
    return app_url.startswith("https://") and "localhost" not in app_url


def setup_logging(level: str | None = None, app_url: str | None = None, log_file: str | None = None) -> None:
    """Replace Loguru's default handler and bridge stdlib logging into it.

    Arguments left as None fall back to the application settings.
    """
    level = (level or settings.log_level).upper()
    production = _is_production(settings.app_url if app_url is None else app_url)
    log_file = settings.log_file if log_file is None else log_file

    logger.remove()
    if production:
        logger.add(sys.stdout, level=level, format="{message}", serialize=True)
    else:
        logger.add(sys.stdout, level=level, format=DEV_FORMAT, colorize=True)

    if log_file:
        logger.add(log_file, level=level, rotation="20 MB", retention="14 days", serialize=production)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging configured", level=level, production=production, log_file=log_file or None)


class _InterceptHandler(logging.Handler):
    """Forward a stdlib LogRecord to Loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so Loguru reports the real caller
        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())
