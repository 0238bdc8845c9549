"""Waiters for discrete page lifecycle milestones: load and first contentful paint."""

import logging
from typing import Any

from cdp_navigation.clock import Clock
from cdp_navigation.session import ProtocolSession
from cdp_navigation.waiters.base import Waiter
from cdp_navigation.waiters.frames import FrameNavigationTracker

logger = logging.getLogger(__name__)

FIRST_CONTENTFUL_PAINT = 'firstContentfulPaint'


class LoadWaiter(Waiter):
	"""Resolves once both DOMContentLoaded and the load event fired for the page.

	Page.domContentEventFired and Page.loadEventFired are only emitted for the main frame,
	so sub-frame loads cannot satisfy this waiter.
	"""

	name = 'LoadWaiter'

	def __init__(self, session: ProtocolSession, clock: Clock, pause_after_load_ms: float = 0):
		super().__init__(session, clock)
		self.pause_after_load_ms = pause_after_load_ms
		self.dom_content_loaded = False
		self.load_fired = False
		self._settling = False

	def attach(self) -> None:
		self._listen('Page.domContentEventFired', self._on_dom_content_event_fired)
		self._listen('Page.loadEventFired', self._on_load_event_fired)

	def _on_dom_content_event_fired(self, event: dict[str, Any]) -> None:
		self.dom_content_loaded = True
		self._check()

	def _on_load_event_fired(self, event: dict[str, Any]) -> None:
		self.load_fired = True
		self._check()

	def _check(self) -> None:
		if self.done or self._settling or not (self.dom_content_loaded and self.load_fired):
			return
		if self.pause_after_load_ms <= 0:
			self._resolve()
			return
		self._settling = True
		self._unlisten_all()
		logger.debug(f'[{self.name}] Load fired, settling for {self.pause_after_load_ms:.0f}ms')
		self._call_later(self.pause_after_load_ms, self._resolve)


class FcpWaiter(Waiter):
	"""Resolves on the firstContentfulPaint lifecycle event of the main frame.

	With a `main_frame` tracker, paints reported before the main frame id is known are held
	back and only counted once the tracker confirms they came from the main frame.
	"""

	name = 'FcpWaiter'

	def __init__(
		self,
		session: ProtocolSession,
		clock: Clock,
		pause_after_fcp_ms: float = 0,
		main_frame: FrameNavigationTracker | None = None,
	):
		super().__init__(session, clock)
		self.pause_after_fcp_ms = pause_after_fcp_ms
		self._main_frame = main_frame
		self._early_paint_frame_ids: list[str] = []
		self._settling = False

	def attach(self) -> None:
		self._listen('Page.lifecycleEvent', self._on_lifecycle_event)
		if self._main_frame is not None:
			self._main_frame.on_main_frame_known(self._on_main_frame_known)

	def _on_lifecycle_event(self, event: dict[str, Any]) -> None:
		if self.done or self._settling or event.get('name') != FIRST_CONTENTFUL_PAINT:
			return

		frame_id = event.get('frameId')
		if self._main_frame is not None and frame_id is not None:
			main_frame_id = self._main_frame.main_frame_id
			if main_frame_id is None:
				logger.debug(f'[{self.name}] Holding FCP from {frame_id} until the main frame is known')
				self._early_paint_frame_ids.append(frame_id)
				return
			if frame_id != main_frame_id:
				logger.debug(f'[{self.name}] Ignoring FCP from sub-frame {frame_id}')
				return

		self._on_first_contentful_paint()

	def _on_main_frame_known(self, frame_id: str) -> None:
		early, self._early_paint_frame_ids = self._early_paint_frame_ids, []
		if not self.done and not self._settling and frame_id in early:
			self._on_first_contentful_paint()

	def _on_first_contentful_paint(self) -> None:
		if self.pause_after_fcp_ms <= 0:
			self._resolve()
			return
		self._settling = True
		self._unlisten_all()
		self._call_later(self.pause_after_fcp_ms, self._resolve)
