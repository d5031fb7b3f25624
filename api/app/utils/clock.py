"""Wall-clock helpers. Timestamps are integer milliseconds since the Unix epoch."""

import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current UTC time in epoch milliseconds."""
    return int(time.time() * 1000)
