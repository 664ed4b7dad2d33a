"""Ordered "first success wins" combinator for load fallbacks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def first_available(providers: Iterable[tuple[str, Callable[[], T | None]]]) -> tuple[str, T] | None:
    """Call each named provider in turn and return the first non-None result.

    A provider that raises is logged and treated as having no result, so
    the next one runs.  Returns ``(name, value)`` or None if every
    provider came up empty.
    """
    for name, provider in providers:
        try:
            result = provider()
        except Exception:
            logger.warning("Content source %r failed, trying next", name, exc_info=True)
            continue
        if result is not None:
            logger.debug("Content source %r produced a document", name)
            return name, result
        logger.debug("Content source %r had nothing", name)
    return None
