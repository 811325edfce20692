"""Logging configuration"""
import logging
import sys

# Библиотеки, которые шумят на INFO: их видно только в режиме DEBUG
LIBRARY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "httpx", "uvicorn.access")


def setup_logging(level="INFO", debug=False):
    """Root level comes from LOG_LEVEL; DEBUG also lets library loggers through"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    library_level = logging.NOTSET if debug else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
