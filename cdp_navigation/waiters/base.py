"""Single-resolution waiter primitives shared by every navigation signal."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import ClassVar

from cdp_navigation.clock import Clock, TimerHandle
from cdp_navigation.session import EventListener, ProtocolSession
from cdp_navigation.waiters.views import WaitState

logger = logging.getLogger(__name__)


class Waiter:
	"""State machine PENDING -> RESOLVED | DISPOSED backed by an asyncio future.

	Subclasses subscribe through `_listen` and schedule timers through `_call_later`, so that
	`dispose()` can always remove every listener and cancel every timer it created, whatever
	state the waiter is in.
	"""

	name: ClassVar[str] = 'Waiter'

	def __init__(self, session: ProtocolSession, clock: Clock):
		self.session = session
		self.clock = clock
		self.state = WaitState.PENDING
		self._future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
		self._listeners: list[tuple[str, EventListener]] = []
		self._timers: list[TimerHandle] = []

	def __repr__(self) -> str:
		return f'{self.name}(state={self.state.value})'

	@property
	def done(self) -> bool:
		return self.state is not WaitState.PENDING

	def attach(self) -> None:
		"""Subscribe to the protocol events this waiter needs. Must run before the navigation command."""

	def wait(self) -> asyncio.Future[None]:
		return self._future

	def dispose(self) -> None:
		"""Remove listeners and cancel timers. Idempotent and safe in any state."""
		if self.state is WaitState.PENDING:
			self.state = WaitState.DISPOSED
			if not self._future.done():
				self._future.cancel()
		self._unlisten_all()
		self._cancel_timers()

	def _listen(self, event_name: str, listener: EventListener) -> None:
		self.session.on(event_name, listener)
		self._listeners.append((event_name, listener))

	def _unlisten_all(self) -> None:
		listeners, self._listeners = self._listeners, []
		for event_name, listener in listeners:
			try:
				self.session.remove_listener(event_name, listener)
			except Exception as e:
				logger.warning(f'[{self.name}] Failed to remove {event_name} listener: {type(e).__name__}: {e}')

	def _call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
		handle = self.clock.call_later(delay_ms, callback)
		self._timers.append(handle)
		return handle

	def _cancel_timer(self, handle: TimerHandle | None) -> None:
		if handle is None:
			return
		handle.cancel()
		if handle in self._timers:
			self._timers.remove(handle)

	def _cancel_timers(self) -> None:
		timers, self._timers = self._timers, []
		for handle in timers:
			handle.cancel()

	def _resolve(self, unsubscribe: bool = True) -> None:
		if self.state is not WaitState.PENDING:
			return
		self.state = WaitState.RESOLVED
		logger.debug(f'[{self.name}] Resolved')
		if unsubscribe:
			self._unlisten_all()
		self._cancel_timers()
		if not self._future.done():
			self._future.set_result(None)


def wait_for_all(waiters: Iterable[Waiter]) -> asyncio.Future[list[None]]:
	"""Conjunction of waiters: completes once every one of them has resolved."""
	return asyncio.gather(*(waiter.wait() for waiter in waiters))


def dispose_all(waiters: Iterable[Waiter]) -> None:
	"""Dispose every waiter, logging (never raising) individual failures."""
	for waiter in waiters:
		try:
			waiter.dispose()
		except Exception as e:
			logger.warning(f'[{waiter.name}] Cleanup failed: {type(e).__name__}: {e}')
