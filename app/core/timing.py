"""Timing helper for profiling article queries."""

import time
from collections.abc import Generator
from contextlib import contextmanager

from app.core.logging import get_logger

logger = get_logger(__name__)

SLOW_QUERY_MS = 50
VERY_SLOW_QUERY_MS = 200


@contextmanager
def timed(operation: str) -> Generator[None]:
    """Log how long the wrapped block took, escalating the level when slow.

    Usage:
        with timed("list_articles"):
            articles = article_repository.list_articles(db)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        extra = {"component": "timing", "operation": operation, "duration_ms": duration_ms}
        if duration_ms >= VERY_SLOW_QUERY_MS:
            logger.warning(f"[{duration_ms:.2f}ms] {operation} (very slow)", extra=extra)
        elif duration_ms >= SLOW_QUERY_MS:
            logger.info(f"[{duration_ms:.2f}ms] {operation} (slow)", extra=extra)
        else:
            logger.debug(f"[{duration_ms:.2f}ms] {operation}")
