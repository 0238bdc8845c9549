"""Environment-driven defaults for cdp-navigation.

Every value is read from the environment on access, so changing an env var at runtime
(or monkeypatching it in a test) is picked up without re-importing anything.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
	raw = os.getenv(name)
	if raw is None or raw.strip() == '':
		return default
	try:
		return float(raw)
	except ValueError:
		logger.warning(f'Ignoring invalid value for {name}={raw!r}, using default {default}')
		return default


def _env_optional_float(name: str) -> float | None:
	raw = os.getenv(name)
	if raw is None or raw.strip() == '':
		return None
	try:
		return float(raw)
	except ValueError:
		logger.warning(f'Ignoring invalid value for {name}={raw!r}')
		return None


def _env_int(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or raw.strip() == '':
		return default
	try:
		return int(raw)
	except ValueError:
		logger.warning(f'Ignoring invalid value for {name}={raw!r}, using default {default}')
		return default


class Config:
	"""Lazily evaluated configuration, one property per environment variable."""

	@property
	def CDP_NAVIGATION_LOGGING_LEVEL(self) -> str:
		return os.getenv('CDP_NAVIGATION_LOGGING_LEVEL', 'info').lower()

	@property
	def CDP_NAVIGATION_MAX_WAIT_FOR_LOAD_MS(self) -> float:
		return _env_float('CDP_NAVIGATION_MAX_WAIT_FOR_LOAD_MS', 45_000)

	# quiet-period thresholds are opt-in: unset means the waiter is not created at all

	@property
	def CDP_NAVIGATION_NETWORK_QUIET_THRESHOLD_MS(self) -> float | None:
		return _env_optional_float('CDP_NAVIGATION_NETWORK_QUIET_THRESHOLD_MS')

	@property
	def CDP_NAVIGATION_CPU_QUIET_THRESHOLD_MS(self) -> float | None:
		return _env_optional_float('CDP_NAVIGATION_CPU_QUIET_THRESHOLD_MS')

	@property
	def CDP_NAVIGATION_NETWORK_IDLE_BOUND(self) -> int:
		# "network-2-idle": a page holding two long-lived connections open still counts as quiet
		return _env_int('CDP_NAVIGATION_NETWORK_IDLE_BOUND', 2)

	@property
	def CDP_NAVIGATION_HUNG_PAGE_PING_TIMEOUT_S(self) -> float:
		return _env_float('CDP_NAVIGATION_HUNG_PAGE_PING_TIMEOUT_S', 1.0)


CONFIG = Config()
