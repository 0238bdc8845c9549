"""
Navigation Watchdog - runs goto_url for NavigateToUrlEvent and reports the outcome on the bus.
"""

from typing import Any, ClassVar

from bubus import BaseEvent
from pydantic import Field

from cdp_navigation.exceptions import NavigationError
from cdp_navigation.navigation.service import goto_url
from cdp_navigation.navigation.views import NavigationRecord
from cdp_navigation.watchdogs.events import NavigateToUrlEvent, NavigationCompleteEvent, NavigationStartedEvent
from cdp_navigation.watchdogs.watchdog_base import BaseWatchdog


class NavigationWatchdog(BaseWatchdog):
	"""Serializes navigations requested over the event bus onto a single protocol session."""

	# Event contracts
	LISTENS_TO: ClassVar[list[type[BaseEvent[Any]]]] = [NavigateToUrlEvent]
	EMITS: ClassVar[list[type[BaseEvent[Any]]]] = [NavigationStartedEvent, NavigationCompleteEvent]

	# injected time source for goto_url; None uses the event loop
	clock: Any = Field(default=None)

	async def on_NavigateToUrlEvent(self, event: NavigateToUrlEvent) -> NavigationRecord:
		"""Navigate, then dispatch NavigationCompleteEvent whatever the outcome."""
		self.logger.debug(f'🧭 Navigating to {event.url}')
		await self.event_bus.dispatch(NavigationStartedEvent(url=event.url))

		try:
			record = await goto_url(self.session, event.url, event.options, clock=self.clock)
		except NavigationError as e:
			self.logger.warning(f'❌ Navigation to {event.url} failed: {e}')
			await self.event_bus.dispatch(
				NavigationCompleteEvent(url=event.url, requested_url=event.url, error_message=str(e))
			)
			raise

		if record.warnings:
			for warning in record.warnings:
				self.logger.warning(f'⚠️ {warning.message}')
		else:
			self.logger.debug(f'✅ Loaded {record.final_url}')

		await self.event_bus.dispatch(
			NavigationCompleteEvent(
				url=record.final_url,
				requested_url=record.requested_url,
				timed_out=record.timed_out,
				redirect_chain=record.redirect_chain,
				warnings=[warning.message for warning in record.warnings],
			)
		)
		return record
