"""Shared fixtures: a scripted protocol session and a manually advanced clock."""

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

MAIN_FRAME_ID = 'ABC'


@dataclass
class ManualTimer:
	due_ms: float
	seq: int
	callback: Callable[[], None]
	cancelled: bool = False
	fired: bool = False

	def cancel(self) -> None:
		self.cancelled = True


class ManualClock:
	"""Clock whose timers only fire when the test calls advance()."""

	def __init__(self) -> None:
		self._now = 0.0
		self._seq = 0
		self._timers: list[ManualTimer] = []

	def now_ms(self) -> float:
		return self._now

	def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
		self._seq += 1
		timer = ManualTimer(due_ms=self._now + max(delay_ms, 0), seq=self._seq, callback=callback)
		self._timers.append(timer)
		return timer

	@property
	def pending_timers(self) -> list[ManualTimer]:
		return [t for t in self._timers if not t.cancelled and not t.fired]

	def advance(self, ms: float) -> None:
		target = self._now + ms
		while True:
			due = [t for t in self.pending_timers if t.due_ms <= target]
			if not due:
				break
			timer = min(due, key=lambda t: (t.due_ms, t.seq))
			self._now = timer.due_ms
			timer.fired = True
			timer.callback()
		self._now = target


@dataclass
class FakeSession:
	"""ProtocolSession double: records commands, returns scripted responses, emits events on demand."""

	responses: dict[str, Any] = field(default_factory=dict)
	errors: dict[str, Exception] = field(default_factory=dict)
	command_hooks: dict[str, Callable[[dict[str, Any] | None], Any]] = field(default_factory=dict)
	commands: list[tuple[str, dict[str, Any] | None]] = field(default_factory=list)
	_listeners: dict[str, list[tuple[Callable[[dict[str, Any]], None], bool]]] = field(default_factory=dict)

	def __post_init__(self) -> None:
		self.responses.setdefault('Page.getResourceTree', {'frameTree': {'frame': {'id': MAIN_FRAME_ID, 'url': 'about:blank'}}})

	@property
	def command_names(self) -> list[str]:
		return [method for method, _ in self.commands]

	async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
		self.commands.append((method, params))
		hook = self.command_hooks.get(method)
		if hook is not None:
			result = hook(params)
			if inspect.isawaitable(result):
				await result
		if method in self.errors:
			raise self.errors[method]
		response = self.responses.get(method, {})
		return response(params) if callable(response) else response

	def on(self, event_name: str, listener: Callable[[dict[str, Any]], None]) -> None:
		self._listeners.setdefault(event_name, []).append((listener, False))

	def once(self, event_name: str, listener: Callable[[dict[str, Any]], None]) -> None:
		self._listeners.setdefault(event_name, []).append((listener, True))

	def remove_listener(self, event_name: str, listener: Callable[[dict[str, Any]], None]) -> None:
		entries = self._listeners.get(event_name, [])
		for index, (existing, _) in enumerate(entries):
			if existing == listener:
				del entries[index]
				return

	def listener_count(self, event_name: str | None = None) -> int:
		if event_name is not None:
			return len(self._listeners.get(event_name, []))
		return sum(len(entries) for entries in self._listeners.values())

	def emit(self, event_name: str, params: dict[str, Any] | None = None) -> None:
		for listener, once in list(self._listeners.get(event_name, [])):
			if once:
				self.remove_listener(event_name, listener)
			listener(params or {})

	def navigate_frame(self, url: str, frame_id: str = MAIN_FRAME_ID, parent_id: str | None = None) -> None:
		frame: dict[str, Any] = {'id': frame_id, 'url': url, 'loaderId': '', 'mimeType': 'text/html'}
		if parent_id is not None:
			frame['parentId'] = parent_id
		self.emit('Page.frameNavigated', {'frame': frame})

	def fire_load(self) -> None:
		self.emit('Page.domContentEventFired', {'timestamp': 1.0})
		self.emit('Page.loadEventFired', {'timestamp': 2.0})

	async def wait_for_command(self, method: str, attempts: int = 500) -> None:
		"""Poll until `method` has been sent; for code driven through the event bus."""
		for _ in range(attempts):
			if method in self.command_names:
				return
			await asyncio.sleep(0.01)
		raise AssertionError(f'{method} was never sent')

	async def wait_for_listener(self, event_name: str, attempts: int = 500) -> None:
		for _ in range(attempts):
			if self.listener_count(event_name):
				return
			await asyncio.sleep(0.01)
		raise AssertionError(f'No listener registered for {event_name}')


async def settle(iterations: int = 50) -> None:
	"""Let every ready callback and task on the loop run."""
	for _ in range(iterations):
		await asyncio.sleep(0)


@pytest.fixture
def session() -> FakeSession:
	return FakeSession()


@pytest.fixture
def clock() -> ManualClock:
	return ManualClock()
