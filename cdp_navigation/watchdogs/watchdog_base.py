"""Base class for watchdogs that react to events on a bubus EventBus."""

import logging
from typing import Any, ClassVar

from bubus import BaseEvent, EventBus
from pydantic import BaseModel, ConfigDict, Field


class BaseWatchdog(BaseModel):
	"""Subscribes `on_<EventName>` methods to the bus for every class in LISTENS_TO."""

	model_config = ConfigDict(
		arbitrary_types_allowed=True,
		extra='forbid',
		validate_assignment=False,
		revalidate_instances='never',
	)

	# Event contracts
	LISTENS_TO: ClassVar[list[type[BaseEvent[Any]]]] = []
	EMITS: ClassVar[list[type[BaseEvent[Any]]]] = []

	event_bus: EventBus = Field()
	# any ProtocolSession implementation (CDPSession in production)
	session: Any = Field()

	@property
	def logger(self) -> logging.Logger:
		return logging.getLogger(f'cdp_navigation.watchdogs.{type(self).__name__}')

	def attach_to_bus(self) -> None:
		"""Register a handler for each event in LISTENS_TO.

		Raises:
		    TypeError: an event in LISTENS_TO has no matching on_<EventName> method
		"""
		for event_class in self.LISTENS_TO:
			handler = getattr(self, f'on_{event_class.__name__}', None)
			if handler is None or not callable(handler):
				raise TypeError(f'{type(self).__name__} listens to {event_class.__name__} but has no on_{event_class.__name__}()')

			registered = self.event_bus.handlers.get(event_class.__name__, [])
			if any(getattr(existing, '__self__', None) is self for existing in registered):
				continue
			self.event_bus.on(event_class, handler)
			self.logger.debug(f'[{type(self).__name__}] Listening to {event_class.__name__}')
