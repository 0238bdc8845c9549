from cdp_navigation.clock import Clock, LoopClock
from cdp_navigation.config import CONFIG
from cdp_navigation.exceptions import NavigationError, NavigationValidationError, ProtocolError
from cdp_navigation.logging_config import setup_logging
from cdp_navigation.navigation import (
	NavigationOptions,
	NavigationRecord,
	NavigationWarning,
	NavigationWarningKind,
	WaitCondition,
	get_navigation_warnings,
	goto_url,
)
from cdp_navigation.session import CDPSession, ProtocolSession
from cdp_navigation.watchdogs import NavigateToUrlEvent, NavigationCompleteEvent, NavigationStartedEvent, NavigationWatchdog

__all__ = [
	'goto_url',
	'get_navigation_warnings',
	'NavigationOptions',
	'NavigationRecord',
	'NavigationWarning',
	'NavigationWarningKind',
	'WaitCondition',
	'ProtocolSession',
	'CDPSession',
	'Clock',
	'LoopClock',
	'NavigationError',
	'NavigationValidationError',
	'ProtocolError',
	'NavigationWatchdog',
	'NavigateToUrlEvent',
	'NavigationStartedEvent',
	'NavigationCompleteEvent',
	'CONFIG',
	'setup_logging',
]
