"""
Drive navigations through a bubus EventBus with NavigationWatchdog.

Setup: same as navigate.py (CDP_URL must point at a running Chrome).
"""

import asyncio
import os

from bubus import EventBus
from cdp_use import CDPClient
from dotenv import load_dotenv

from cdp_navigation import CDPSession, NavigateToUrlEvent, NavigationCompleteEvent, NavigationWatchdog, setup_logging

load_dotenv()


async def main():
	setup_logging()

	client = CDPClient(os.environ['CDP_URL'])
	await client.start()

	event_bus = EventBus()
	try:
		target = await client.send.Target.createTarget(params={'url': 'about:blank'})
		attached = await client.send.Target.attachToTarget(params={'targetId': target['targetId'], 'flatten': True})

		watchdog = NavigationWatchdog(event_bus=event_bus, session=CDPSession(client, session_id=attached['sessionId']))
		watchdog.attach_to_bus()
		event_bus.on(NavigationCompleteEvent, lambda event: print(f'✅ {event.requested_url} -> {event.url}'))

		for url in ('https://example.com', 'http://github.com'):
			event = event_bus.dispatch(NavigateToUrlEvent(url=url))
			await event
			record = await event.event_result(raise_if_any=True, raise_if_none=False)
			print(f'{len(record.warnings)} warning(s) for {url}')
	finally:
		await event_bus.stop(clear=True, timeout=5)
		await client.stop()


if __name__ == '__main__':
	asyncio.run(main())
