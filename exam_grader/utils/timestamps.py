"""Epoch-millisecond timestamps, the unit stored on exam and submission documents."""
import time


def now_ms() -> int:
    return int(time.time() * 1000)
