# count_comparisons/core/logging.py
import logging
import sys

from count_comparisons.core.config import settings


def setup_logging() -> None:
    """
    Configure logging with:
    - root logger = INFO
    - package logs (count_comparisons.*) = LOG_LEVEL
    - SQLAlchemy reduced unless echo_sql is set
    """

    app_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.INFO)
    root.addHandler(handler)

    logging.getLogger("count_comparisons").setLevel(app_level)

    if not settings.echo_sql:
        logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
