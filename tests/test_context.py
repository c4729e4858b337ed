"""Tests for tether.context — request-scoped ContextVars."""

import pytest

from tether.binding.store import RequestContext
from tether.context import bound_var, get_bound, get_bound_value, get_request, request_var
from tether.http.request import Request


class TestRequestVar:
    def test_get_request_raises_outside_context(self) -> None:
        """get_request raises LookupError when no request is active."""
        with pytest.raises(LookupError):
            get_request()

    def test_set_and_get_request(self) -> None:
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/test",
            "headers": [],
            "query_string": b"",
            "http_version": "1.1",
        }

        async def receive():
            return {"type": "http.request", "body": b"", "more_body": False}

        request = Request.from_asgi(scope, receive)
        token = request_var.set(request)
        try:
            assert get_request() is request
            assert get_request().path == "/test"
        finally:
            request_var.reset(token)


class TestBoundVar:
    def test_get_bound_raises_outside_dispatch(self) -> None:
        with pytest.raises(LookupError):
            get_bound()

    def test_get_bound_value_defaults_outside_dispatch(self) -> None:
        assert get_bound_value("user") is None
        assert get_bound_value("user", "anonymous") == "anonymous"

    def test_reads_current_context(self) -> None:
        ctx = RequestContext()
        ctx.set("user", "mirko")
        token = bound_var.set(ctx)
        try:
            assert get_bound() is ctx
            assert get_bound_value("user") == "mirko"
            assert get_bound_value("post", 0) == 0
        finally:
            bound_var.reset(token)
