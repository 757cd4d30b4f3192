"""Tests for upstream failure classification and error wrapping."""

import pytest

from unified_weather.errors import (
    ErrorKind,
    FailureClass,
    HttpStatusError,
    MalformedResponseError,
    NetworkFault,
    NetworkFaultError,
    WeatherError,
    classify,
    is_transient,
    wrap_error,
)


class TestClassify:
    """Test retry eligibility rules."""

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504, 599])
    def test_rate_limit_and_server_errors_are_transient(self, status):
        assert classify(HttpStatusError(status)) is FailureClass.TRANSIENT

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_errors_are_permanent(self, status):
        assert classify(HttpStatusError(status)) is FailureClass.PERMANENT

    @pytest.mark.parametrize("fault", list(NetworkFault))
    def test_network_faults_are_transient(self, fault):
        assert is_transient(NetworkFaultError(fault))

    def test_weather_error_is_never_reclassified(self):
        error = WeatherError("City not found: Atlantis", kind=ErrorKind.NOT_FOUND)
        assert classify(error) is FailureClass.PERMANENT

    def test_unrelated_exceptions_are_permanent(self):
        assert not is_transient(ValueError("boom"))
        assert not is_transient(MalformedResponseError("bad body"))


class TestWrapError:
    """Test canonical caller-facing messages."""

    def test_invalid_api_key(self):
        error = wrap_error(HttpStatusError(401), "get_current_weather", "London")
        assert error.message == "Invalid API key"
        assert error.kind is ErrorKind.AUTHENTICATION

    def test_not_found_echoes_location(self):
        original = HttpStatusError(404)
        error = wrap_error(original, "get_current_weather", "Atlantis")
        assert str(error) == "City not found: Atlantis"
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.cause is original
        assert error.__cause__ is original

    def test_rate_limit(self):
        error = wrap_error(HttpStatusError(429), "get_forecast")
        assert error.message == "Rate limit exceeded"
        assert error.kind is ErrorKind.RATE_LIMIT

    @pytest.mark.parametrize("status", [500, 503])
    def test_server_errors(self, status):
        error = wrap_error(HttpStatusError(status), "get_forecast")
        assert error.message == "Provider service unavailable"
        assert error.kind is ErrorKind.SERVER

    @pytest.mark.parametrize(
        "fault", [NetworkFault.CONNECTION_REFUSED, NetworkFault.DNS_FAILURE]
    )
    def test_connect_failures(self, fault):
        error = wrap_error(NetworkFaultError(fault), "get_current_weather")
        assert error.message == "Unable to connect to weather service"
        assert error.kind is ErrorKind.NETWORK

    def test_timeout(self):
        error = wrap_error(
            NetworkFaultError(NetworkFault.TIMEOUT), "get_current_weather"
        )
        assert error.message == "Request timed out"

    def test_other_network_faults_use_context_prefix(self):
        error = wrap_error(
            NetworkFaultError(NetworkFault.CONNECTION_RESET, "peer reset"),
            "get_forecast",
        )
        assert error.message == "get_forecast: peer reset"
        assert error.kind is ErrorKind.NETWORK

    def test_unmatched_errors_use_context_prefix(self):
        error = wrap_error(RuntimeError("something odd"), "get_forecast", "Paris")
        assert error.message == "get_forecast: something odd"
        assert error.kind is ErrorKind.UNKNOWN

    def test_unmatched_client_status(self):
        error = wrap_error(HttpStatusError(400), "get_forecast")
        assert error.message == "get_forecast: Request failed with status code 400"

    def test_weather_error_passes_through(self):
        original = WeatherError("Raw mode unsupported", kind=ErrorKind.USAGE)
        assert wrap_error(original, "get_current_weather") is original
