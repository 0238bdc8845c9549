"""Time source used by every timer in the navigation waiters.

Waiters never sleep or read the wall clock directly; they go through a Clock so tests
can drive quiet periods and the overall load timeout without real elapsed time.
"""

import asyncio
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
	def cancel(self) -> None: ...


class Clock(Protocol):
	def now_ms(self) -> float: ...

	def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopClock:
	"""Clock backed by the running asyncio event loop."""

	def now_ms(self) -> float:
		return asyncio.get_running_loop().time() * 1000

	def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
		return asyncio.get_running_loop().call_later(max(delay_ms, 0) / 1000, callback)
