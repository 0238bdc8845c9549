"""Event definitions for driving navigations through a bubus EventBus."""

from typing import Self

from bubus import BaseEvent
from pydantic import Field, model_validator

from cdp_navigation.config import CONFIG
from cdp_navigation.navigation.views import NavigationOptions, NavigationRecord

# headroom for the enable commands and cleanup around the overall wait
NAVIGATION_EVENT_TIMEOUT_MARGIN_S = 30.0


class NavigateToUrlEvent(BaseEvent[NavigationRecord]):
	"""Navigate the page and wait until it has loaded.

	`event_timeout` is raised when needed so the handler always outlasts `max_wait_for_load_ms`
	plus the hung-page ping.
	"""

	url: str
	options: NavigationOptions | None = None

	event_timeout: float | None = 120.0

	@model_validator(mode='after')
	def outlast_navigation_timeout(self) -> Self:
		if self.event_timeout is None:
			return self
		max_wait_ms = self.options.max_wait_for_load_ms if self.options is not None else CONFIG.CDP_NAVIGATION_MAX_WAIT_FOR_LOAD_MS
		needed = max_wait_ms / 1000 + CONFIG.CDP_NAVIGATION_HUNG_PAGE_PING_TIMEOUT_S + NAVIGATION_EVENT_TIMEOUT_MARGIN_S
		if self.event_timeout < needed:
			self.event_timeout = needed
		return self


class NavigationStartedEvent(BaseEvent[None]):
	"""Navigation was requested; listeners are registered and the command is about to be sent."""

	url: str

	event_timeout: float | None = 10.0


class NavigationCompleteEvent(BaseEvent[None]):
	"""Navigation finished, timed out, or failed with a protocol or validation error."""

	url: str
	requested_url: str
	timed_out: bool = False
	redirect_chain: list[str] = Field(default_factory=list)
	warnings: list[str] = Field(default_factory=list)
	error_message: str | None = None

	event_timeout: float | None = 10.0
