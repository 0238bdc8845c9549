"""
Setup:
1. Start Chrome with remote debugging: google-chrome --headless=new --remote-debugging-port=9222
2. Set environment variable: export CDP_URL="ws://127.0.0.1:9222/devtools/browser/<id>"
"""

import asyncio
import os

from cdp_use import CDPClient
from dotenv import load_dotenv

from cdp_navigation import CDPSession, NavigationOptions, goto_url, setup_logging

load_dotenv()


async def main():
	setup_logging('debug')

	client = CDPClient(os.environ['CDP_URL'])
	await client.start()
	try:
		target = await client.send.Target.createTarget(params={'url': 'about:blank'})
		attached = await client.send.Target.attachToTarget(params={'targetId': target['targetId'], 'flatten': True})
		session = CDPSession(client, session_id=attached['sessionId'])

		record = await goto_url(
			session,
			'http://example.com',
			NavigationOptions(wait_until=['navigated', 'load', 'fcp'], network_quiet_threshold_ms=1000),
		)
		print(f'Loaded {record.final_url} (timed out: {record.timed_out})')
		for hop in record.redirect_chain:
			print(f'  -> {hop}')
		for warning in record.warnings:
			print(f'⚠️ {warning.message}')
	finally:
		await client.stop()


if __name__ == '__main__':
	asyncio.run(main())
