"""Single-resolution waiters for frame navigation, lifecycle milestones and quiet periods."""

from cdp_navigation.waiters.base import Waiter, dispose_all, wait_for_all
from cdp_navigation.waiters.frames import FrameNavigationTracker
from cdp_navigation.waiters.lifecycle import FcpWaiter, LoadWaiter
from cdp_navigation.waiters.quiet import CpuQuietWaiter, NetworkQuietWaiter, QuietPeriodWaiter
from cdp_navigation.waiters.views import FrameRecord, WaitState

__all__ = [
	'Waiter',
	'WaitState',
	'FrameRecord',
	'FrameNavigationTracker',
	'LoadWaiter',
	'FcpWaiter',
	'QuietPeriodWaiter',
	'NetworkQuietWaiter',
	'CpuQuietWaiter',
	'wait_for_all',
	'dispose_all',
]
