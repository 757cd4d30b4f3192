"""
HTTP transport for upstream weather APIs using requests.

Providers call ``get_json(url, params)`` and either receive the decoded JSON
body or one of the structured upstream failures from ``unified_weather.errors``.
"""

import errno
import socket
from collections.abc import Callable, Iterator
from typing import Any

import requests

from unified_weather.errors import (
    HttpStatusError,
    MalformedResponseError,
    NetworkFault,
    NetworkFaultError,
)
from unified_weather.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_S = 30.0

# transport(url, params) -> decoded JSON body
Transport = Callable[[str, dict[str, Any]], Any]

# Module-level singleton (tests can override/reset)
_SESSION: requests.Session | None = None

_SECRET_PARAMS = {"appid", "apikey", "api_key", "key"}

# Fallback matching on the rendered message when the exception chain carries
# no typed socket error
_FAULT_MARKERS = [
    ("connection refused", NetworkFault.CONNECTION_REFUSED),
    ("connection reset", NetworkFault.CONNECTION_RESET),
    ("name or service not known", NetworkFault.DNS_FAILURE),
    ("nodename nor servname", NetworkFault.DNS_FAILURE),
    ("getaddrinfo failed", NetworkFault.DNS_FAILURE),
    ("failed to resolve", NetworkFault.DNS_FAILURE),
    ("temporary failure in name resolution", NetworkFault.DNS_FAILURE),
    ("network is unreachable", NetworkFault.NETWORK_UNREACHABLE),
]


def get_session() -> requests.Session:
    """Get the shared session, creating it on first use."""
    global _SESSION
    if _SESSION is None:
        _SESSION = requests.Session()
        _SESSION.headers.update({"Accept": "application/json"})
    return _SESSION


def reset_session() -> None:
    """Close and clear the module session (for tests)."""
    global _SESSION
    if _SESSION is not None:
        _SESSION.close()
    _SESSION = None


def set_session_for_tests(session: requests.Session) -> None:
    """Force get_session() to return a provided session (for tests)."""
    global _SESSION
    _SESSION = session


def redact_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Copy of ``params`` safe for logging."""
    if not params:
        return {}
    return {
        key: "***" if key.lower() in _SECRET_PARAMS else value
        for key, value in params.items()
    }


def _iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Walk causes, contexts, urllib3 ``reason`` attributes and wrapped args."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        linked = [
            getattr(current, "reason", None),
            current.__cause__,
            current.__context__,
            *current.args,
        ]
        stack.extend(item for item in linked if isinstance(item, BaseException))


def classify_connection_error(exc: requests.ConnectionError) -> NetworkFault:
    """Map a requests connection error onto a ``NetworkFault``."""
    for err in _iter_exception_chain(exc):
        if isinstance(err, ConnectionRefusedError):
            return NetworkFault.CONNECTION_REFUSED
        if isinstance(err, ConnectionResetError):
            return NetworkFault.CONNECTION_RESET
        if isinstance(err, socket.gaierror):
            return NetworkFault.DNS_FAILURE
        if isinstance(err, OSError) and err.errno == errno.ENETUNREACH:
            return NetworkFault.NETWORK_UNREACHABLE

    text = str(exc).lower()
    for marker, fault in _FAULT_MARKERS:
        if marker in text:
            return fault

    return NetworkFault.NO_RESPONSE


def get_json(
    url: str,
    params: dict[str, Any] | None = None,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> Any:
    """
    GET ``url`` and return the decoded JSON body.

    Args:
        url: Request URL
        params: Query parameters
        timeout: Request timeout in seconds

    Returns:
        Decoded JSON body

    Raises:
        HttpStatusError: Upstream responded with a 4xx/5xx status
        NetworkFaultError: No response was received
        MalformedResponseError: Body could not be decoded as JSON
    """
    logger.debug(f"GET {url} with params: {redact_params(params)}")
    session = get_session()

    try:
        response = session.get(url, params=params, timeout=timeout)
    except requests.Timeout as e:
        logger.warning(f"Request to {url} timed out after {timeout}s")
        raise NetworkFaultError(NetworkFault.TIMEOUT, str(e), url) from e
    except requests.ConnectionError as e:
        fault = classify_connection_error(e)
        logger.warning(f"Connection to {url} failed ({fault.value}): {e}")
        raise NetworkFaultError(fault, str(e), url) from e
    except requests.RequestException as e:
        logger.warning(f"Request to {url} failed without a response: {e}")
        raise NetworkFaultError(NetworkFault.NO_RESPONSE, str(e), url) from e

    logger.debug(f"GET {url} -> {response.status_code}")

    if response.status_code >= 400:
        logger.error(f"Upstream request failed: {response.status_code} for {url}")
        logger.debug(f"Response text: {response.text}")
        raise HttpStatusError(response.status_code, url)

    try:
        return response.json()
    except ValueError as e:
        logger.error(f"Upstream returned invalid JSON from {url}")
        raise MalformedResponseError(
            "Upstream returned an invalid JSON body", url
        ) from e
