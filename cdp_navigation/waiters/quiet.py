"""Quiet-period waiters: resolve once activity stays low for a continuous threshold."""

import asyncio
import logging
from typing import Any, ClassVar

from cdp_navigation.clock import Clock, TimerHandle
from cdp_navigation.session import ProtocolSession
from cdp_navigation.waiters.base import Waiter

logger = logging.getLogger(__name__)


class QuietPeriodWaiter(Waiter):
	"""Activity counter plus a resettable quiet timer.

	Whenever the counter is at or below `idle_bound` the timer is armed (if it is not already);
	whenever it rises above the bound the timer is disarmed. The first uninterrupted expiry
	resolves the waiter. Nothing is armed until `_start_tracking` is called.
	"""

	name = 'QuietPeriodWaiter'

	def __init__(self, session: ProtocolSession, clock: Clock, threshold_ms: float, idle_bound: int = 0):
		super().__init__(session, clock)
		self.threshold_ms = threshold_ms
		self.idle_bound = idle_bound
		self.active = 0
		self._tracking = False
		self._quiet_timer: TimerHandle | None = None

	@property
	def is_idle(self) -> bool:
		return self.active <= self.idle_bound

	@property
	def timer_armed(self) -> bool:
		return self._quiet_timer is not None

	def _start_tracking(self) -> None:
		if self._tracking:
			return
		self._tracking = True
		self._evaluate()

	def _set_activity(self, count: int) -> None:
		self.active = max(0, count)
		self._evaluate()

	def _evaluate(self) -> None:
		if self.done or not self._tracking:
			return
		if self.is_idle:
			if self._quiet_timer is None:
				self._arm(self.threshold_ms)
		else:
			self._disarm()

	def _arm(self, delay_ms: float) -> None:
		self._disarm()
		self._quiet_timer = self._call_later(delay_ms, self._on_quiet_timer)

	def _disarm(self) -> None:
		if self._quiet_timer is not None:
			self._cancel_timer(self._quiet_timer)
			self._quiet_timer = None

	def _on_quiet_timer(self) -> None:
		self._quiet_timer = None
		logger.debug(f'[{self.name}] Quiet for {self.threshold_ms:.0f}ms')
		self._resolve()


class NetworkQuietWaiter(QuietPeriodWaiter):
	"""Counts in-flight requests by request id; quiet once at most `idle_bound` remain.

	The quiet timer is only armed after DOMContentLoaded: before the document has been
	parsed the page has not had a chance to request its subresources yet.
	"""

	name = 'NetworkQuietWaiter'

	IGNORED_URL_SCHEMES: ClassVar[tuple[str, ...]] = ('data:', 'blob:')

	def __init__(self, session: ProtocolSession, clock: Clock, threshold_ms: float, idle_bound: int = 2):
		super().__init__(session, clock, threshold_ms, idle_bound)
		self._inflight: dict[str, str] = {}

	@property
	def inflight_urls(self) -> list[str]:
		return list(self._inflight.values())

	def attach(self) -> None:
		self._listen('Network.requestWillBeSent', self._on_request_will_be_sent)
		self._listen('Network.loadingFinished', self._on_request_done)
		self._listen('Network.loadingFailed', self._on_request_done)
		self._listen('Page.domContentEventFired', self._on_dom_content_event_fired)

	def _should_track_request(self, url: str) -> bool:
		return not url.lower().startswith(self.IGNORED_URL_SCHEMES)

	def _on_request_will_be_sent(self, event: dict[str, Any]) -> None:
		request_id = event.get('requestId', '')
		url = (event.get('request') or {}).get('url', '')
		if not request_id or not self._should_track_request(url):
			return

		# redirects re-use the request id of the hop that was redirected
		if request_id in self._inflight:
			self._inflight[request_id] = url
			return

		self._inflight[request_id] = url
		self._set_activity(len(self._inflight))

	def _on_request_done(self, event: dict[str, Any]) -> None:
		request_id = event.get('requestId', '')
		if request_id not in self._inflight:
			return
		del self._inflight[request_id]
		self._set_activity(len(self._inflight))

	def _on_dom_content_event_fired(self, event: dict[str, Any]) -> None:
		logger.debug(f'[{self.name}] DOMContentLoaded with {len(self._inflight)} request(s) in flight')
		self._start_tracking()


# Installed before navigation so long tasks from the very first script are observed.
LONG_TASK_OBSERVER_SCRIPT = """(() => {
	window.____lastLongTask = performance.now();
	const observer = new window.PerformanceObserver(entryList => {
		for (const entry of entryList.getEntries()) {
			if (entry.entryType === 'longtask') {
				const taskEnd = entry.startTime + entry.duration;
				window.____lastLongTask = Math.max(window.____lastLongTask || 0, taskEnd);
			}
		}
	});
	observer.observe({entryTypes: ['longtask']});
})()"""

TIME_SINCE_LAST_LONG_TASK_EXPRESSION = '(() => performance.now() - (window.____lastLongTask || 0))()'


class CpuQuietWaiter(QuietPeriodWaiter):
	"""Resolves once the page has gone `threshold_ms` without a long task.

	The page records the end of its most recent long task; each check evaluates how long ago
	that was. A recent long task counts as activity and re-arms the timer for the remaining
	part of the threshold, after which the page is checked again.
	"""

	name = 'CpuQuietWaiter'

	def __init__(self, session: ProtocolSession, clock: Clock, threshold_ms: float):
		super().__init__(session, clock, threshold_ms, idle_bound=0)
		self._script_identifier: str | None = None
		self._check_task: asyncio.Task[None] | None = None
		self.checks = 0

	async def install(self) -> None:
		result = await self.session.send_command(
			'Page.addScriptToEvaluateOnNewDocument', {'source': LONG_TASK_OBSERVER_SCRIPT}
		)
		self._script_identifier = result.get('identifier')
		logger.debug(f'[{self.name}] Long task observer installed ({self._script_identifier})')

	async def uninstall(self) -> None:
		identifier, self._script_identifier = self._script_identifier, None
		if identifier is None:
			return
		try:
			await self.session.send_command('Page.removeScriptToEvaluateOnNewDocument', {'identifier': identifier})
		except Exception as e:
			logger.debug(f'[{self.name}] Failed to remove long task observer: {type(e).__name__}: {e}')

	def start(self) -> None:
		"""Begin checking; only meaningful once load and network quiet have resolved."""
		if self.done or self._tracking:
			return
		self._tracking = True
		self._schedule_check()

	def dispose(self) -> None:
		if self._check_task is not None and not self._check_task.done():
			self._check_task.cancel()
		super().dispose()

	def _schedule_check(self) -> None:
		self._quiet_timer = None
		if self.done:
			return
		self._check_task = asyncio.ensure_future(self._check())

	async def _check(self) -> None:
		self.checks += 1
		try:
			result = await self.session.send_command(
				'Runtime.evaluate', {'expression': TIME_SINCE_LAST_LONG_TASK_EXPRESSION, 'returnByValue': True}
			)
			value = (result.get('result') or {}).get('value')
			time_since_long_task = float(value) if value is not None else None
		except Exception as e:
			logger.debug(f'[{self.name}] Long task check failed, treating CPU as quiet: {type(e).__name__}: {e}')
			self._resolve()
			return

		if self.done:
			return
		if time_since_long_task is None or time_since_long_task >= self.threshold_ms:
			self.active = 0
			logger.debug(f'[{self.name}] CPU quiet after {self.checks} check(s)')
			self._resolve()
			return

		self.active = 1
		remaining_ms = self.threshold_ms - time_since_long_task
		logger.debug(f'[{self.name}] Long task {time_since_long_task:.0f}ms ago, re-checking in {remaining_ms:.0f}ms')
		self._quiet_timer = self._call_later(remaining_ms, self._schedule_check)
