"""Navigation orchestrator: navigate a page and decide when it has finished loading."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from cdp_navigation.clock import Clock, LoopClock
from cdp_navigation.config import CONFIG
from cdp_navigation.exceptions import ProtocolError
from cdp_navigation.navigation.views import NavigationOptions, NavigationRecord, WaitCondition
from cdp_navigation.navigation.warnings import get_navigation_warnings
from cdp_navigation.session import ProtocolSession
from cdp_navigation.waiters.base import Waiter, dispose_all, wait_for_all
from cdp_navigation.waiters.frames import FrameNavigationTracker
from cdp_navigation.waiters.lifecycle import FcpWaiter, LoadWaiter
from cdp_navigation.waiters.quiet import CpuQuietWaiter, NetworkQuietWaiter

logger = logging.getLogger(__name__)


async def goto_url(
	session: ProtocolSession,
	url: str,
	options: NavigationOptions | Mapping[str, Any] | None = None,
	*,
	clock: Clock | None = None,
) -> NavigationRecord:
	"""Navigate the page to `url` and wait for every requested completion signal.

	All listeners are registered before Page.navigate is sent, so a navigation that completes
	before the command is even acknowledged is still observed. The overall timer starts before
	the first command; when `max_wait_for_load_ms` elapses first (even while Page.navigate is
	still unacknowledged), the navigation resolves with `timed_out=True` instead of raising.

	Args:
	    session: protocol session for the page; borrowed, one goto_url at a time
	    url: URL to navigate to
	    options: NavigationOptions (or a mapping of its fields); defaults to waiting for load
	    clock: time source for every timer; defaults to the running event loop

	Returns:
	    NavigationRecord with the final URL, redirect chain and navigation warnings

	Raises:
	    NavigationValidationError: wait_until is empty or asks for FCP without load
	    ProtocolError: the session rejected one of the navigation commands
	"""
	if options is None:
		options = NavigationOptions()
	elif not isinstance(options, NavigationOptions):
		options = NavigationOptions.model_validate(options)
	options.validate_wait_conditions()

	clock = clock or LoopClock()
	wait_until = options.wait_until

	tracker = FrameNavigationTracker(session, clock)
	load_waiter: LoadWaiter | None = None
	fcp_waiter: FcpWaiter | None = None
	network_waiter: NetworkQuietWaiter | None = None
	cpu_waiter: CpuQuietWaiter | None = None

	if WaitCondition.LOAD in wait_until:
		load_waiter = LoadWaiter(session, clock, pause_after_load_ms=options.pause_after_load_ms)
		if options.waits_for_network_quiet:
			network_waiter = NetworkQuietWaiter(
				session,
				clock,
				threshold_ms=options.network_quiet_threshold_ms or 0,
				idle_bound=options.network_idle_bound,
			)
		if options.waits_for_cpu_quiet:
			cpu_waiter = CpuQuietWaiter(session, clock, threshold_ms=options.cpu_quiet_threshold_ms or 0)
	if WaitCondition.FCP in wait_until:
		fcp_waiter = FcpWaiter(
			session,
			clock,
			pause_after_fcp_ms=options.pause_after_fcp_ms,
			main_frame=tracker,
		)

	# navigation-phase waiters; CPU quiet is only checked once these have all resolved
	waiters: list[Waiter] = [w for w in (tracker, load_waiter, fcp_waiter, network_waiter) if w is not None]
	all_waiters: list[Waiter] = waiters + ([cpu_waiter] if cpu_waiter else [])

	logger.debug(
		f'[goto_url] Loading {url} (wait_until={sorted(c.value for c in wait_until)}, '
		f'max_wait={options.max_wait_for_load_ms:.0f}ms, waiters={[w.name for w in all_waiters]})'
	)
	start_ms = clock.now_ms()

	navigation: asyncio.Future[None] | None = None
	timed_out = False
	try:
		for waiter in all_waiters:
			waiter.attach()

		# the overall timer covers Page.navigate too: Chrome only acknowledges it once the response commits
		navigation = asyncio.ensure_future(_navigate_and_wait(session, url, tracker, waiters, cpu_waiter))
		timed_out = await _race_with_timeout(navigation, clock, options.max_wait_for_load_ms)

		if timed_out:
			logger.warning(
				f'[goto_url] Timed out after {options.max_wait_for_load_ms:.0f}ms waiting for '
				f'{[w.name for w in all_waiters if not w.done]} on {url}'
			)
			await _cancel(navigation)
			await _stop_hung_page(session, clock)
	finally:
		if navigation is not None and not navigation.done():
			navigation.cancel()
		dispose_all(all_waiters)
		if cpu_waiter is not None:
			await cpu_waiter.uninstall()

	record = NavigationRecord(
		requested_url=url,
		final_url=tracker.final_url(default=url),
		timed_out=timed_out,
		redirect_chain=tracker.redirect_chain,
	)
	record.warnings = get_navigation_warnings(record)

	logger.debug(
		f'[goto_url] Finished {url} -> {record.final_url} in {clock.now_ms() - start_ms:.0f}ms '
		f'(timed_out={timed_out}, hops={len(record.redirect_chain)}, warnings={len(record.warnings)})'
	)
	return record


async def _navigate_and_wait(
	session: ProtocolSession,
	url: str,
	tracker: FrameNavigationTracker,
	waiters: list[Waiter],
	cpu_waiter: CpuQuietWaiter | None,
) -> None:
	await session.send_command('Page.enable')
	await session.send_command('Network.enable')
	await session.send_command('Page.setLifecycleEventsEnabled', {'enabled': True})
	if cpu_waiter is not None:
		await cpu_waiter.install()

	navigate_result = await session.send_command('Page.navigate', {'url': url})
	if navigate_result.get('errorText'):
		# the browser still commits its error page, which shows up as a url-mismatch warning
		logger.warning(f'[goto_url] Navigation to {url} reported {navigate_result["errorText"]}')

	await _resolve_main_frame(session, tracker)

	await wait_for_all(waiters)
	if cpu_waiter is not None:
		cpu_waiter.start()
		await cpu_waiter.wait()


async def _resolve_main_frame(session: ProtocolSession, tracker: FrameNavigationTracker) -> None:
	try:
		resource_tree = await session.send_command('Page.getResourceTree')
	except ProtocolError as e:
		logger.warning(f'[goto_url] Could not query the frame tree ({e.message}), using the first top-level frame')
		tracker.use_first_top_level_frame()
		return

	frame_id = ((resource_tree.get('frameTree') or {}).get('frame') or {}).get('id')
	if frame_id:
		tracker.set_main_frame_id(frame_id)
	else:
		logger.warning('[goto_url] Frame tree has no root frame id, using the first top-level frame')
		tracker.use_first_top_level_frame()


async def _race_with_timeout(operation: asyncio.Future[Any], clock: Clock, timeout_ms: float) -> bool:
	"""Wait for `operation` or a `clock` timer, whichever first. Returns True on timeout.

	Errors raised by `operation` before the timer fires propagate.
	"""
	timer: asyncio.Future[None] = asyncio.get_running_loop().create_future()

	def _expire() -> None:
		if not timer.done():
			timer.set_result(None)

	handle = clock.call_later(timeout_ms, _expire)
	try:
		done, _ = await asyncio.wait({operation, timer}, return_when=asyncio.FIRST_COMPLETED)
	finally:
		handle.cancel()
		if not timer.done():
			timer.cancel()

	if operation in done:
		operation.result()
		return False
	return True


async def _cancel(operation: asyncio.Future[Any]) -> None:
	"""Cancel `operation` and wait until it has unwound."""
	operation.cancel()
	await asyncio.wait({operation})
	error = None if operation.cancelled() else operation.exception()
	if error is not None:
		logger.debug(f'[goto_url] {type(error).__name__} while cancelling: {error}')


async def _stop_hung_page(session: ProtocolSession, clock: Clock) -> None:
	"""If the page no longer answers a trivial evaluation, stop its JavaScript so later commands can run."""
	ping_timeout_ms = CONFIG.CDP_NAVIGATION_HUNG_PAGE_PING_TIMEOUT_S * 1000
	ping = asyncio.ensure_future(session.send_command('Runtime.evaluate', {'expression': '"ping"', 'returnByValue': True}))
	try:
		if not await _race_with_timeout(ping, clock, ping_timeout_ms):
			return
	except ProtocolError as e:
		logger.debug(f'[goto_url] Hung page ping failed: {e.message}')
		return
	finally:
		if not ping.done():
			ping.cancel()

	logger.warning(f'[goto_url] Page did not respond within {ping_timeout_ms:.0f}ms, killing JavaScript')
	try:
		await session.send_command('Emulation.setScriptExecutionDisabled', {'value': True})
		await session.send_command('Runtime.terminateExecution')
	except ProtocolError as e:
		logger.warning(f'[goto_url] Failed to stop hung page: {e.message}')
