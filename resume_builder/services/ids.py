from __future__ import annotations
from typing import Callable, Iterable, Optional
import time


def _millis() -> int:
	return time.time_ns() // 1_000_000


def make_id(prefix: str, taken: Iterable[str], clock: Optional[Callable[[], int]] = None) -> str:
	"""Return "<prefix>-<millis>" unique among `taken`.

	Two adds within the same millisecond get a numeric suffix ("-1", "-2", ...).
	Uniqueness is only guaranteed among the given siblings.
	"""
	existing = set(taken)
	base = f"{prefix}-{(clock or _millis)()}"
	candidate = base
	n = 0
	while candidate in existing:
		n += 1
		candidate = f"{base}-{n}"
	return candidate
