from cdp_navigation.watchdogs.events import NavigateToUrlEvent, NavigationCompleteEvent, NavigationStartedEvent
from cdp_navigation.watchdogs.navigation_watchdog import NavigationWatchdog
from cdp_navigation.watchdogs.watchdog_base import BaseWatchdog

__all__ = ['BaseWatchdog', 'NavigationWatchdog', 'NavigateToUrlEvent', 'NavigationStartedEvent', 'NavigationCompleteEvent']
