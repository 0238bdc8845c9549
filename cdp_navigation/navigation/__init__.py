"""Navigation orchestration: goto_url plus the warnings derived from its result."""

from cdp_navigation.navigation.service import goto_url
from cdp_navigation.navigation.views import (
	NavigationOptions,
	NavigationRecord,
	NavigationWarning,
	NavigationWarningKind,
	WaitCondition,
)
from cdp_navigation.navigation.warnings import get_navigation_warnings

__all__ = [
	'goto_url',
	'get_navigation_warnings',
	'NavigationOptions',
	'NavigationRecord',
	'NavigationWarning',
	'NavigationWarningKind',
	'WaitCondition',
]
