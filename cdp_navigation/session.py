"""Protocol session capability consumed by the navigation waiters."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from cdp_navigation.exceptions import ProtocolError

if TYPE_CHECKING:
	from cdp_use.client import CDPClient

logger = logging.getLogger(__name__)

EventListener = Callable[[dict[str, Any]], None]


class ProtocolSession(Protocol):
	"""Command dispatch plus event subscription for a single page target."""

	async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]: ...

	def on(self, event_name: str, listener: EventListener) -> None: ...

	def once(self, event_name: str, listener: EventListener) -> None: ...

	def remove_listener(self, event_name: str, listener: EventListener) -> None: ...


@dataclass
class _Subscription:
	listener: EventListener
	once: bool = False


class CDPSession:
	"""ProtocolSession backed by a cdp-use CDPClient.

	cdp-use keeps a single handler per event method, so this adapter installs one fan-out
	dispatcher per event and keeps its own listener lists on top of it. Only events for
	`session_id` are delivered (root-client events when `session_id` is None).
	"""

	def __init__(self, cdp_client: 'CDPClient', session_id: str | None = None):
		self.cdp_client = cdp_client
		self.session_id = session_id
		self._subscriptions: dict[str, list[_Subscription]] = {}
		self._dispatchers_registered: set[str] = set()

	def __repr__(self) -> str:
		session = self.session_id[-4:] if self.session_id else 'root'
		return f'CDPSession(session={session}, listeners={sum(len(subs) for subs in self._subscriptions.values())})'

	async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
		try:
			result = await self.cdp_client.send_raw(method, params=params, session_id=self.session_id)
		except ProtocolError:
			raise
		except Exception as e:
			raise ProtocolError(method, str(e)) from e
		return result or {}

	def on(self, event_name: str, listener: EventListener) -> None:
		self._ensure_dispatcher(event_name)
		self._subscriptions.setdefault(event_name, []).append(_Subscription(listener))

	def once(self, event_name: str, listener: EventListener) -> None:
		self._ensure_dispatcher(event_name)
		self._subscriptions.setdefault(event_name, []).append(_Subscription(listener, once=True))

	def remove_listener(self, event_name: str, listener: EventListener) -> None:
		subscriptions = self._subscriptions.get(event_name)
		if not subscriptions:
			return
		for index, subscription in enumerate(subscriptions):
			if subscription.listener == listener:
				del subscriptions[index]
				return

	def listener_count(self, event_name: str | None = None) -> int:
		if event_name is not None:
			return len(self._subscriptions.get(event_name, []))
		return sum(len(subs) for subs in self._subscriptions.values())

	def emit(self, event_name: str, params: dict[str, Any]) -> None:
		"""Deliver an event to the current listeners.

		Iterates over a snapshot, so a listener may remove itself (or others) while running.
		"""
		for subscription in list(self._subscriptions.get(event_name, [])):
			if subscription.once:
				self.remove_listener(event_name, subscription.listener)
			try:
				subscription.listener(params)
			except Exception as e:
				logger.warning(f'[CDPSession] Listener for {event_name} raised {type(e).__name__}: {e}')

	def _ensure_dispatcher(self, event_name: str) -> None:
		if event_name in self._dispatchers_registered:
			return

		domain, _, method = event_name.partition('.')
		if not domain or not method:
			raise ValueError(f'Invalid protocol event name: {event_name!r}')

		async def _dispatch(event: dict[str, Any], session_id: str | None = None) -> None:
			if session_id != self.session_id:
				return
			self.emit(event_name, event or {})

		register = getattr(getattr(self.cdp_client.register, domain), method)
		register(_dispatch)
		self._dispatchers_registered.add(event_name)
		logger.debug(f'[CDPSession] Registered dispatcher for {event_name}')
