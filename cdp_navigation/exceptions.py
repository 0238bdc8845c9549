class NavigationError(Exception):
	"""Base class for errors raised by cdp_navigation."""


class NavigationValidationError(NavigationError, ValueError):
	"""The requested wait conditions cannot be satisfied together.

	Raised before any protocol command is sent.
	"""


class ProtocolError(NavigationError):
	"""A protocol command was rejected by the browser or the transport."""

	def __init__(self, method: str, message: str):
		self.method = method
		self.message = message
		super().__init__(f'Protocol error ({method}): {message}')
