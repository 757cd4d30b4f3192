"""
Error taxonomy and upstream failure classification.

Every failure that reaches a caller is a ``WeatherError``. Upstream failures
are produced by the transport as one of a small set of exception types and
are classified exactly once, at the service boundary, to decide whether a
fallback provider may be tried.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Caller-facing error categories."""

    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"
    USAGE = "usage"
    UNKNOWN = "unknown"


class FailureClass(str, Enum):
    """Retry eligibility of an upstream failure."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"


class NetworkFault(str, Enum):
    """Transport-level faults where no HTTP response was received."""

    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_RESET = "connection_reset"
    TIMEOUT = "timeout"
    DNS_FAILURE = "dns_failure"
    NETWORK_UNREACHABLE = "network_unreachable"
    NO_RESPONSE = "no_response"


class WeatherError(Exception):
    """
    The single error type surfaced to callers.

    Args:
        message: Human-readable message
        cause: Underlying failure, kept for diagnostics
        kind: Error category
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        kind: ErrorKind = ErrorKind.UNKNOWN,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.kind = kind
        if cause is not None:
            self.__cause__ = cause


class UpstreamError(Exception):
    """Base class for failures raised by the HTTP transport."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class HttpStatusError(UpstreamError):
    """The upstream answered with a non-success status code."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(f"Request failed with status code {status_code}", url)
        self.status_code = status_code


class NetworkFaultError(UpstreamError):
    """No response was received from the upstream."""

    def __init__(
        self, fault: NetworkFault, message: str | None = None, url: str | None = None
    ) -> None:
        super().__init__(message or fault.value.replace("_", " "), url)
        self.fault = fault


class MalformedResponseError(UpstreamError):
    """The upstream answered successfully but the body was unusable."""


_CONNECT_FAULTS = {NetworkFault.CONNECTION_REFUSED, NetworkFault.DNS_FAILURE}


def classify(error: BaseException) -> FailureClass:
    """
    Decide whether an upstream failure is worth retrying elsewhere.

    Rules, in priority order:
        1. HTTP 429 or any 5xx -> transient
        2. Any other HTTP 4xx -> permanent
        3. Transport fault (refused, reset, timeout, DNS, unreachable) -> transient
        4. Request sent but nothing structured came back -> transient
        5. Anything else, including an existing WeatherError -> permanent
    """
    if isinstance(error, HttpStatusError):
        status = error.status_code
        if status == 429 or 500 <= status < 600:
            return FailureClass.TRANSIENT
        # Client errors are attributable to the request itself
        return FailureClass.PERMANENT

    if isinstance(error, NetworkFaultError):
        return FailureClass.TRANSIENT

    return FailureClass.PERMANENT


def is_transient(error: BaseException) -> bool:
    """Return True when ``error`` may succeed against another provider."""
    return classify(error) is FailureClass.TRANSIENT


def wrap_error(
    error: BaseException, context: str, location: str | None = None
) -> WeatherError:
    """
    Translate any failure into a ``WeatherError`` with a canonical message.

    Args:
        error: The original failure
        context: Operation name used as a prefix for unmatched failures
        location: Caller input echoed back in not-found messages

    Returns:
        WeatherError carrying the original failure as its cause
    """
    if isinstance(error, WeatherError):
        return error

    if isinstance(error, HttpStatusError):
        status = error.status_code
        if status == 401:
            return WeatherError("Invalid API key", error, ErrorKind.AUTHENTICATION)
        if status == 404:
            message = f"City not found: {location}" if location else "City not found"
            return WeatherError(message, error, ErrorKind.NOT_FOUND)
        if status == 429:
            return WeatherError("Rate limit exceeded", error, ErrorKind.RATE_LIMIT)
        if status >= 500:
            return WeatherError(
                "Provider service unavailable", error, ErrorKind.SERVER
            )

    if isinstance(error, NetworkFaultError):
        if error.fault in _CONNECT_FAULTS:
            return WeatherError(
                "Unable to connect to weather service", error, ErrorKind.NETWORK
            )
        if error.fault is NetworkFault.TIMEOUT:
            return WeatherError("Request timed out", error, ErrorKind.NETWORK)
        return WeatherError(f"{context}: {error}", error, ErrorKind.NETWORK)

    return WeatherError(f"{context}: {error}", error, ErrorKind.UNKNOWN)


__all__ = [
    "ErrorKind",
    "FailureClass",
    "NetworkFault",
    "WeatherError",
    "UpstreamError",
    "HttpStatusError",
    "NetworkFaultError",
    "MalformedResponseError",
    "classify",
    "is_transient",
    "wrap_error",
]
