"""Helper for side effects whose failure must never reach the caller."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

_default_logger = logging.getLogger(__name__)


async def attempt(
    description: str,
    operation: Callable[[], Awaitable[Any]],
    *,
    logger: logging.Logger | None = None,
    level: int = logging.WARNING,
    **context: Any,
) -> bool:
    """Run ``operation``, log any failure and report whether it succeeded.

    The exception is logged with its traceback and then discarded.
    """
    log = logger or _default_logger
    try:
        await operation()
    except Exception as exc:
        log.log(
            level,
            "%s failed: %s",
            description,
            exc,
            extra={**context, "error": str(exc)},
            exc_info=True,
        )
        return False
    return True
