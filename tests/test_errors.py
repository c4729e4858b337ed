"""Tests for tether.errors — exception hierarchy and error messages."""

import pytest

from tether.binding.outcome import ErrorInfo
from tether.errors import (
    BindingNotFoundError,
    ConfigurationError,
    DispatchCancelled,
    HTTPError,
    InvalidBindingError,
    MethodNotAllowed,
    NotFound,
    ResolutionFailure,
    TetherError,
)


class TestHierarchy:
    def test_http_error_is_tether_error(self) -> None:
        assert issubclass(HTTPError, TetherError)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)

    def test_method_not_allowed_is_http_error(self) -> None:
        assert issubclass(MethodNotAllowed, HTTPError)

    def test_binding_errors_are_configuration_errors(self) -> None:
        assert issubclass(InvalidBindingError, ConfigurationError)
        assert issubclass(BindingNotFoundError, ConfigurationError)

    def test_runtime_errors_are_tether_errors(self) -> None:
        assert issubclass(ResolutionFailure, TetherError)
        assert issubclass(DispatchCancelled, TetherError)
        assert not issubclass(ResolutionFailure, ConfigurationError)


class TestBindingNotFoundError:
    def test_carries_name(self) -> None:
        err = BindingNotFoundError("user")
        assert err.name == "user"
        assert str(err) == "No binding registered for path parameter 'user'"


class TestResolutionFailure:
    def test_carries_info(self) -> None:
        info = ErrorInfo(name="user", raw_value="999", message="No user 999", status=404)
        err = ResolutionFailure(info)
        assert err.info is info
        assert err.status == 404
        assert str(err) == "No user 999"


class TestHTTPError:
    def test_status_and_detail(self) -> None:
        err = HTTPError(status=400, detail="Bad request body")
        assert err.status == 400
        assert err.detail == "Bad request body"

    def test_str_with_detail(self) -> None:
        assert str(HTTPError(status=400, detail="Bad request body")) == "400: Bad request body"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_frozen(self) -> None:
        err = HTTPError(status=400)
        with pytest.raises(AttributeError):
            err.status = 500  # type: ignore[misc]

    def test_default_empty_headers(self) -> None:
        assert HTTPError(status=400).headers == ()


class TestNotFound:
    def test_defaults(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"

    def test_custom_detail(self) -> None:
        assert NotFound("No user 999").detail == "No user 999"


class TestMethodNotAllowed:
    def test_allow_header_sorted(self) -> None:
        err = MethodNotAllowed(frozenset({"POST", "GET"}))
        assert err.status == 405
        assert err.headers == (("Allow", "GET, POST"),)
        assert "GET, POST" in err.detail
