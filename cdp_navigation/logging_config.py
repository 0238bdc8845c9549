import logging
import sys

from cdp_navigation.config import CONFIG

_HANDLER_NAME = 'cdp_navigation_stream'

# third-party loggers that are far too chatty at debug level
_NOISY_LOGGERS = ('cdp_use', 'cdp_use.client', 'websockets', 'websockets.client', 'bubus', 'asyncio')


def setup_logging(level: str | int | None = None) -> logging.Logger:
	"""Configure the cdp_navigation logger hierarchy.

	Safe to call more than once: the stream handler is only installed the first time.

	Args:
	    level: a logging level name or number; defaults to CDP_NAVIGATION_LOGGING_LEVEL

	Returns:
	    The root 'cdp_navigation' logger
	"""
	if level is None:
		level = CONFIG.CDP_NAVIGATION_LOGGING_LEVEL
	if isinstance(level, str):
		level = logging.getLevelName(level.upper())
		if not isinstance(level, int):
			level = logging.INFO

	logger = logging.getLogger('cdp_navigation')
	logger.setLevel(level)
	logger.propagate = False

	if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
		handler = logging.StreamHandler(sys.stdout)
		handler.set_name(_HANDLER_NAME)
		handler.setFormatter(logging.Formatter('%(levelname)-8s [%(name)s] %(message)s'))
		logger.addHandler(handler)

	for name in _NOISY_LOGGERS:
		third_party = logging.getLogger(name)
		third_party.setLevel(logging.WARNING if level <= logging.INFO else level)
		third_party.propagate = False

	return logger
