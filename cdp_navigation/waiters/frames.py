"""Main-frame identification and redirect-chain tracking."""

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from cdp_navigation.clock import Clock
from cdp_navigation.session import ProtocolSession
from cdp_navigation.waiters.base import Waiter
from cdp_navigation.waiters.views import FrameRecord

logger = logging.getLogger(__name__)


class FrameNavigationTracker(Waiter):
	"""Records Page.frameNavigated and resolves on the first main-frame navigation.

	Frames live in a flat arena keyed by frame id. The main frame id is usually only known
	once Page.navigate has been acknowledged, so navigations seen before that are kept in
	arrival order and replayed when `set_main_frame_id` is called.

	After resolving, the tracker keeps listening so later redirects still extend the chain.
	"""

	name = 'FrameNavigationTracker'

	def __init__(self, session: ProtocolSession, clock: Clock):
		super().__init__(session, clock)
		self._frames: dict[str, FrameRecord] = {}
		self._navigations: list[FrameRecord] = []
		self._redirect_chain: list[str] = []
		self._main_frame_id: str | None = None
		self._adopt_first_top_level_frame = False
		self._main_frame_callbacks: list[Callable[[str], None]] = []

	def attach(self) -> None:
		self._listen('Page.frameNavigated', self._on_frame_navigated)

	@property
	def main_frame_id(self) -> str | None:
		return self._main_frame_id

	@property
	def frames(self) -> Mapping[str, FrameRecord]:
		return MappingProxyType(self._frames)

	@property
	def redirect_chain(self) -> list[str]:
		return list(self._redirect_chain)

	def final_url(self, default: str) -> str:
		return self._redirect_chain[-1] if self._redirect_chain else default

	def frame_history(self, frame_id: str) -> list[str]:
		return [record.url for record in self._navigations if record.id == frame_id]

	def on_main_frame_known(self, callback: Callable[[str], None]) -> None:
		"""Call `callback(frame_id)` once the main frame id is set, or right away if it already is."""
		if self._main_frame_id is not None:
			callback(self._main_frame_id)
			return
		self._main_frame_callbacks.append(callback)

	def dispose(self) -> None:
		self._main_frame_callbacks.clear()
		super().dispose()

	def set_main_frame_id(self, frame_id: str) -> None:
		if self._main_frame_id is not None:
			if frame_id != self._main_frame_id:
				logger.debug(f'[{self.name}] Ignoring main frame {frame_id}, already tracking {self._main_frame_id}')
			return

		self._main_frame_id = frame_id
		logger.debug(f'[{self.name}] Main frame is {frame_id}')
		for record in self._navigations:
			if record.id == frame_id:
				self._on_main_frame_navigated(record)

		callbacks, self._main_frame_callbacks = self._main_frame_callbacks, []
		for callback in callbacks:
			callback(frame_id)

	def use_first_top_level_frame(self) -> None:
		"""Fallback when the main frame id could not be queried."""
		if self._main_frame_id is not None:
			return
		for record in self._navigations:
			if record.is_top_level:
				self.set_main_frame_id(record.id)
				return
		self._adopt_first_top_level_frame = True

	def _on_frame_navigated(self, event: dict[str, Any]) -> None:
		frame = event.get('frame') or {}
		frame_id = frame.get('id')
		if not frame_id:
			logger.debug(f'[{self.name}] Ignoring frameNavigated without a frame id: {frame.get("url", "")}')
			return

		record = FrameRecord(id=frame_id, url=frame.get('url', ''), parent_id=frame.get('parentId'))
		self._frames[frame_id] = record
		self._navigations.append(record)

		if self._main_frame_id is None:
			if self._adopt_first_top_level_frame and record.is_top_level:
				self._adopt_first_top_level_frame = False
				self.set_main_frame_id(frame_id)
			return

		if frame_id == self._main_frame_id:
			self._on_main_frame_navigated(record)

	def _on_main_frame_navigated(self, record: FrameRecord) -> None:
		self._redirect_chain.append(record.url)
		logger.debug(f'[{self.name}] Main frame navigated to {record.url} (hop {len(self._redirect_chain)})')
		self._resolve(unsubscribe=False)
