"""Test load and first-contentful-paint waiters, and the waiter primitives they share."""

import asyncio

from cdp_navigation.waiters.base import dispose_all, wait_for_all
from cdp_navigation.waiters.frames import FrameNavigationTracker
from cdp_navigation.waiters.lifecycle import FIRST_CONTENTFUL_PAINT, FcpWaiter, LoadWaiter
from cdp_navigation.waiters.views import WaitState
from tests.conftest import MAIN_FRAME_ID, settle


def fcp_event(frame_id: str = MAIN_FRAME_ID) -> dict:
	return {'frameId': frame_id, 'loaderId': '', 'name': FIRST_CONTENTFUL_PAINT, 'timestamp': 1.5}


class TestLoadWaiter:
	async def test_requires_both_dom_content_loaded_and_load(self, session, clock):
		waiter = LoadWaiter(session, clock)
		waiter.attach()

		session.emit('Page.domContentEventFired', {'timestamp': 1.0})
		assert not waiter.done
		session.emit('Page.loadEventFired', {'timestamp': 2.0})
		assert waiter.state is WaitState.RESOLVED
		assert session.listener_count() == 0

	async def test_event_order_does_not_matter(self, session, clock):
		waiter = LoadWaiter(session, clock)
		waiter.attach()

		session.emit('Page.loadEventFired', {'timestamp': 2.0})
		session.emit('Page.domContentEventFired', {'timestamp': 1.0})
		assert waiter.done

	async def test_duplicate_events_are_harmless(self, session, clock):
		waiter = LoadWaiter(session, clock)
		waiter.attach()
		session.fire_load()
		session.fire_load()

		assert waiter.state is WaitState.RESOLVED
		await asyncio.wait_for(waiter.wait(), timeout=1)

	async def test_pause_after_load(self, session, clock):
		waiter = LoadWaiter(session, clock, pause_after_load_ms=250)
		waiter.attach()
		session.fire_load()

		assert not waiter.done
		assert session.listener_count() == 0
		assert len(clock.pending_timers) == 1

		clock.advance(250)
		assert waiter.done
		assert clock.pending_timers == []

	async def test_dispose_during_pause_cancels_timer(self, session, clock):
		waiter = LoadWaiter(session, clock, pause_after_load_ms=250)
		waiter.attach()
		session.fire_load()
		waiter.dispose()

		assert waiter.state is WaitState.DISPOSED
		assert clock.pending_timers == []
		clock.advance(1000)
		assert waiter.state is WaitState.DISPOSED


class TestFcpWaiter:
	async def test_resolves_on_first_contentful_paint(self, session, clock):
		waiter = FcpWaiter(session, clock)
		waiter.attach()

		session.emit('Page.lifecycleEvent', {**fcp_event(), 'name': 'firstPaint'})
		assert not waiter.done
		session.emit('Page.lifecycleEvent', fcp_event())
		assert waiter.done

	async def test_ignores_sub_frames(self, session, clock):
		tracker = FrameNavigationTracker(session, clock)
		tracker.set_main_frame_id(MAIN_FRAME_ID)
		waiter = FcpWaiter(session, clock, main_frame=tracker)
		waiter.attach()

		session.emit('Page.lifecycleEvent', fcp_event('ad1'))
		assert not waiter.done
		session.emit('Page.lifecycleEvent', fcp_event())
		assert waiter.done

	async def test_paint_before_main_frame_is_known_waits_for_it(self, session, clock):
		tracker = FrameNavigationTracker(session, clock)
		waiter = FcpWaiter(session, clock, main_frame=tracker)
		waiter.attach()

		session.emit('Page.lifecycleEvent', fcp_event('ad1'))
		session.emit('Page.lifecycleEvent', fcp_event())
		assert not waiter.done

		tracker.set_main_frame_id(MAIN_FRAME_ID)
		assert waiter.done

	async def test_sub_frame_paint_before_main_frame_is_known_is_dropped(self, session, clock):
		tracker = FrameNavigationTracker(session, clock)
		waiter = FcpWaiter(session, clock, main_frame=tracker)
		waiter.attach()

		session.emit('Page.lifecycleEvent', fcp_event('ad1'))
		tracker.set_main_frame_id(MAIN_FRAME_ID)
		assert not waiter.done

		session.emit('Page.lifecycleEvent', fcp_event('ad1'))
		assert not waiter.done
		session.emit('Page.lifecycleEvent', fcp_event())
		assert waiter.done

	async def test_held_paint_is_not_counted_after_dispose(self, session, clock):
		tracker = FrameNavigationTracker(session, clock)
		waiter = FcpWaiter(session, clock, main_frame=tracker)
		waiter.attach()
		session.emit('Page.lifecycleEvent', fcp_event())
		waiter.dispose()

		tracker.set_main_frame_id(MAIN_FRAME_ID)
		assert waiter.state is WaitState.DISPOSED

	async def test_pause_after_fcp(self, session, clock):
		waiter = FcpWaiter(session, clock, pause_after_fcp_ms=100)
		waiter.attach()
		session.emit('Page.lifecycleEvent', fcp_event())

		clock.advance(99)
		assert not waiter.done
		clock.advance(1)
		assert waiter.done


class TestWaiterComposition:
	async def test_wait_for_all_needs_every_waiter(self, session, clock):
		load = LoadWaiter(session, clock)
		fcp = FcpWaiter(session, clock)
		load.attach()
		fcp.attach()
		both = wait_for_all([load, fcp])

		session.emit('Page.lifecycleEvent', fcp_event())
		await settle()
		assert not both.done()

		session.fire_load()
		await settle()
		assert both.done()

	async def test_dispose_all_cancels_pending_waiters(self, session, clock):
		load = LoadWaiter(session, clock)
		fcp = FcpWaiter(session, clock)
		load.attach()
		fcp.attach()
		session.fire_load()

		dispose_all([load, fcp])
		assert load.state is WaitState.RESOLVED
		assert fcp.state is WaitState.DISPOSED
		assert fcp.wait().cancelled()
		assert session.listener_count() == 0

	async def test_dispose_all_keeps_going_when_one_fails(self, session, clock):
		class BrokenWaiter(LoadWaiter):
			name = 'BrokenWaiter'

			def dispose(self):
				raise RuntimeError('boom')

		broken = BrokenWaiter(session, clock)
		fcp = FcpWaiter(session, clock)
		fcp.attach()

		dispose_all([broken, fcp])
		assert fcp.state is WaitState.DISPOSED
		assert session.listener_count() == 0
