"""Rate-limited warning helpers."""

from __future__ import annotations

import logging
import time

_LAST: dict[str, float] = {}
_MAX_CODES = 1024


def warn_once(logger: logging.Logger, code: str, message: str, *args, window: float = 60) -> bool:
    """Log a warning for ``code`` at most once per ``window`` seconds.

    The cache of codes is capped; the oldest entry is evicted first.
    Returns ``True`` when the warning was emitted.
    """
    now = time.monotonic()
    last = _LAST.get(code)
    if last is not None and now - last <= window:
        logger.debug(message, *args)
        return False
    if len(_LAST) >= _MAX_CODES:
        oldest = min(_LAST, key=_LAST.get)
        _LAST.pop(oldest, None)
    _LAST[code] = now
    logger.warning(message, *args)
    return True


def reset_warnings() -> None:
    _LAST.clear()
