"""Pydantic models for navigation requests and results."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cdp_navigation.config import CONFIG
from cdp_navigation.exceptions import NavigationValidationError


class WaitCondition(str, Enum):
	"""Signal that must be observed before a navigation counts as finished."""

	NAVIGATED = 'navigated'
	LOAD = 'load'
	FCP = 'fcp'


class NavigationOptions(BaseModel):
	"""Which completion signals to wait for, and for how long."""

	model_config = ConfigDict(extra='forbid')

	wait_until: set[WaitCondition] = Field(
		default_factory=lambda: {WaitCondition.LOAD},
		description='Signals that must all be observed before the navigation is complete',
	)
	max_wait_for_load_ms: float = Field(
		default_factory=lambda: CONFIG.CDP_NAVIGATION_MAX_WAIT_FOR_LOAD_MS,
		gt=0,
		description='Overall timeout; when it fires the navigation resolves with timed_out=True',
	)
	cpu_quiet_threshold_ms: float | None = Field(
		default_factory=lambda: CONFIG.CDP_NAVIGATION_CPU_QUIET_THRESHOLD_MS,
		ge=0,
		description='Required period without long tasks; None or 0 disables the check',
	)
	network_quiet_threshold_ms: float | None = Field(
		default_factory=lambda: CONFIG.CDP_NAVIGATION_NETWORK_QUIET_THRESHOLD_MS,
		ge=0,
		description='Required period at or below network_idle_bound in-flight requests; None or 0 disables the check',
	)
	network_idle_bound: int = Field(
		default_factory=lambda: CONFIG.CDP_NAVIGATION_NETWORK_IDLE_BOUND,
		ge=0,
		description='Number of in-flight requests that still counts as network-quiet',
	)
	pause_after_load_ms: float = Field(default=0, ge=0, description='Settle time after the load event')
	pause_after_fcp_ms: float = Field(default=0, ge=0, description='Settle time after first contentful paint')

	@field_validator('wait_until', mode='before')
	@classmethod
	def _coerce_wait_until(cls, value: Any) -> Any:
		if isinstance(value, str):
			return {value}
		return value

	@property
	def waits_for_network_quiet(self) -> bool:
		return WaitCondition.LOAD in self.wait_until and bool(self.network_quiet_threshold_ms)

	@property
	def waits_for_cpu_quiet(self) -> bool:
		return WaitCondition.LOAD in self.wait_until and bool(self.cpu_quiet_threshold_ms)

	def validate_wait_conditions(self) -> None:
		"""Reject wait_until combinations that can never complete.

		Raises:
		    NavigationValidationError: wait_until is empty, or asks for FCP without load
		"""
		if not self.wait_until:
			raise NavigationValidationError('At least one wait condition is required')
		if WaitCondition.FCP in self.wait_until and WaitCondition.LOAD not in self.wait_until:
			raise NavigationValidationError('Cannot wait for FCP without waiting for page load')


class NavigationWarningKind(str, Enum):
	TIMEOUT = 'timeout'
	URL_MISMATCH = 'url-mismatch'


class NavigationWarning(BaseModel):
	"""Diagnostic attached to an otherwise successful navigation."""

	model_config = ConfigDict(frozen=True)

	kind: NavigationWarningKind
	values: dict[str, str] = Field(default_factory=dict)
	message: str


class NavigationRecord(BaseModel):
	"""Outcome of a single goto_url call."""

	requested_url: str
	final_url: str
	timed_out: bool = False
	redirect_chain: list[str] = Field(default_factory=list, description='Main-frame URLs in the order they were visited')
	warnings: list[NavigationWarning] = Field(default_factory=list)
