"""Timing helpers for the dispatch and render paths."""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass
from typing import Iterator, Optional

from .logging import get_logger

logger = get_logger(__name__)


@dataclass
class Timing:
    label: str
    seconds: float = 0.0

    @property
    def millis(self) -> float:
        return self.seconds * 1000


@contextlib.contextmanager
def profile(label: str, *, slow_after: Optional[float] = None) -> Iterator[Timing]:
    """Time the enclosed block.

    The measurement is logged at debug level, so it only reaches the session
    log under ``--debug``. Blocks slower than ``slow_after`` seconds are logged
    as warnings instead. The yielded :class:`Timing` is filled in on exit.
    """

    timing = Timing(label)
    started = time.perf_counter()
    try:
        yield timing
    finally:
        timing.seconds = time.perf_counter() - started
        details = {"event": label, "duration": timing.seconds}
        if slow_after is not None and timing.seconds > slow_after:
            logger.warning("%s took %.1f ms", label, timing.millis, extra=details)
        else:
            logger.debug("%s took %.1f ms", label, timing.millis, extra=details)


__all__ = ["Timing", "profile"]
