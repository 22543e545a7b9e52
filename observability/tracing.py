"""Timing helper for operations that cross an I/O boundary."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Dict, Iterator


@contextmanager
def timed(fields: Dict[str, object]) -> Iterator[Dict[str, object]]:
    """Record elapsed milliseconds into ``fields['ms']`` when the block exits."""
    start = time.time()
    try:
        yield fields
    finally:
        fields["ms"] = int((time.time() - start) * 1000)


__all__ = ["timed"]
