"""Diagnostic warnings derived from a finished navigation."""

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from cdp_navigation.navigation.views import NavigationRecord, NavigationWarning, NavigationWarningKind

TIMEOUT_MESSAGE = 'The page loaded too slowly to finish within the time limit. Results may be incomplete.'
URL_MISMATCH_MESSAGE = (
	'The page may not be loading as expected because your test URL ({requested}) was redirected to {final}. '
	'Try testing the second URL directly.'
)

# The browser shows its own error page (chrome-error://chromewebdata/) when a load fails
ERROR_PAGE_SCHEMES = frozenset({'chrome-error'})

_DEFAULT_PORTS = {'http': 80, 'https': 443, 'ws': 80, 'wss': 443, 'ftp': 21}
_SPECIAL_SCHEMES = frozenset(_DEFAULT_PORTS) | {'file'}
_SINGLE_DOT = frozenset({'.', '%2e'})
_DOUBLE_DOT = frozenset({'..', '.%2e', '%2e.', '%2e%2e'})


def _remove_dot_segments(path: str) -> str:
	"""Resolve `.` and `..` segments (including their percent-encoded forms) in an absolute path."""
	segments = path.split('/')
	resolved: list[str] = []
	for index, segment in enumerate(segments):
		last = index == len(segments) - 1
		lowered = segment.lower()
		if lowered in _SINGLE_DOT:
			if last:
				resolved.append('')
		elif lowered in _DOUBLE_DOT:
			# resolved[0] is the empty segment before the leading slash
			if len(resolved) > 1:
				resolved.pop()
			if last:
				resolved.append('')
		else:
			resolved.append(segment)
	return '/'.join(resolved)


def normalize_url_without_fragment(url: str) -> str | None:
	"""Canonicalize `url` the way a browser would and drop its fragment.

	Returns None when the URL cannot be parsed.
	"""
	try:
		parts = urlsplit(url.strip())
		scheme = parts.scheme.lower()
		if not scheme:
			return None

		netloc = parts.netloc
		if parts.hostname is not None:
			host = parts.hostname.lower()
			if ':' in host:
				host = f'[{host}]'
			port = parts.port
			if port is not None and _DEFAULT_PORTS.get(scheme) == port:
				port = None
			userinfo = netloc.rpartition('@')[0] if '@' in netloc else ''
			netloc = f'{userinfo}@' if userinfo else ''
			netloc += host if port is None else f'{host}:{port}'
	except ValueError:
		return None

	path = parts.path
	if scheme in _SPECIAL_SCHEMES:
		if not path:
			path = '/'
		elif path.startswith('/'):
			path = _remove_dot_segments(path)
	return urlunsplit((scheme, netloc, path, parts.query, ''))


def is_error_page_url(url: str) -> bool:
	scheme, sep, _ = url.partition(':')
	return bool(sep) and scheme.lower() in ERROR_PAGE_SCHEMES


def equal_with_excluded_fragments(url_a: str, url_b: str) -> bool:
	normalized_a = normalize_url_without_fragment(url_a)
	normalized_b = normalize_url_without_fragment(url_b)
	if normalized_a is None or normalized_b is None:
		return False
	return normalized_a == normalized_b


def _read_field(navigation: Any, name: str, default: Any) -> Any:
	if isinstance(navigation, Mapping):
		return navigation.get(name, default)
	return getattr(navigation, name, default)


def get_navigation_warnings(navigation: NavigationRecord | Mapping[str, Any] | Any) -> list[NavigationWarning]:
	"""Warnings for a navigation: timeout first, then requested/final URL mismatch.

	Pure: only `timed_out`, `requested_url` and `final_url` are read, and the same input always
	produces the same list. Never raises.
	"""
	timed_out = bool(_read_field(navigation, 'timed_out', False))
	requested_url = str(_read_field(navigation, 'requested_url', '') or '')
	final_url = str(_read_field(navigation, 'final_url', '') or '')

	warnings: list[NavigationWarning] = []

	if timed_out:
		warnings.append(NavigationWarning(kind=NavigationWarningKind.TIMEOUT, message=TIMEOUT_MESSAGE))

	if is_error_page_url(final_url) or not equal_with_excluded_fragments(requested_url, final_url):
		values = {'requested': requested_url, 'final': final_url}
		warnings.append(
			NavigationWarning(
				kind=NavigationWarningKind.URL_MISMATCH,
				values=values,
				message=URL_MISMATCH_MESSAGE.format(**values),
			)
		)

	return warnings
