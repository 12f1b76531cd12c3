# count_comparisons/cli/utils.py
from __future__ import annotations

import logging

from count_comparisons.core.config import settings


def setup_cli_logging(verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("count_comparisons").setLevel(level)
    if not verbose and not settings.echo_sql:
        logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
