"""
Tests for the async HTTP client.
"""

import asyncio
import json

import httpx
import pytest

from api.client import ApiClient, ApiResult, encode_body
from errors import HttpError, TransportError, ValidationError
from models import ErrorBody, Movie, MovieDeleteRequest


def make_client(fake_api, session=None) -> ApiClient:
    return ApiClient(session, base_url="http://catalog.test", transport=fake_api.transport())


class TestAuthHeader:
    def test_anonymous_request_has_no_bearer(self, fake_api, session):
        client = make_client(fake_api, session)
        asyncio.run(client.get("/api/movies/movies"))
        assert "authorization" not in fake_api.requests[0].headers

    def test_token_read_on_every_request(self, fake_api, session, admin_user):
        client = make_client(fake_api, session)

        async def scenario():
            await client.get("/api/movies/movies")
            session.login("tok-123", admin_user)
            await client.get("/api/movies/movies")
            session.logout()
            await client.get("/api/movies/movies")

        asyncio.run(scenario())
        first, second, third = fake_api.requests
        assert "authorization" not in first.headers
        assert second.headers["authorization"] == "Bearer tok-123"
        assert "authorization" not in third.headers


class TestBodies:
    def test_encode_body_drops_none(self):
        assert encode_body({"accountId": 3, "note": None}) == {"accountId": 3}
        assert encode_body(None) is None

    def test_encode_model_uses_aliases(self):
        assert encode_body(MovieDeleteRequest(account_id=3)) == {"accountId": 3}

    def test_delete_sends_json_body(self, fake_api):
        fake_api.add("DELETE", "/api/movies/movies/5", json={"success": True})
        client = make_client(fake_api)
        result = asyncio.run(
            client.delete("/api/movies/movies/5", MovieDeleteRequest(account_id=3))
        )
        assert result.ok
        request = fake_api.calls("DELETE")[0]
        assert json.loads(request.content) == {"accountId": 3}

    def test_success_body_parsed(self, fake_api):
        client = make_client(fake_api)
        result = asyncio.run(client.get("/api/movies/movies"))
        assert result.ok and result.status == 200
        movies = result.parse_list(Movie)
        assert [m.id for m in movies] == [1, 2, 5]

    def test_null_list_is_empty(self, fake_api):
        fake_api.add("GET", "/api/movies/movies", json=None)
        client = make_client(fake_api)
        result = asyncio.run(client.get("/api/movies/movies"))
        assert result.parse_list(Movie) == []

    def test_unreadable_success_body(self, fake_api):
        fake_api.add(
            "GET", "/api/movies/movies", handler=lambda r: httpx.Response(200, text="<html>")
        )
        client = make_client(fake_api)
        with pytest.raises(ValidationError):
            asyncio.run(client.get("/api/movies/movies"))


class TestFailures:
    def test_http_error_is_a_result(self, fake_api):
        fake_api.add("POST", "/api/movies/movies", status=400, json={"message": "Bad movie"})
        client = make_client(fake_api)
        result = asyncio.run(client.post("/api/movies/movies", {"title": "x"}))
        assert not result.ok
        assert result.status == 400
        assert result.error_message() == "Bad movie"

    def test_messages_take_precedence(self, fake_api):
        fake_api.add(
            "POST",
            "/api/users/register",
            status=422,
            json={"message": "Invalid", "messages": ["Email taken", "Weak password"]},
        )
        client = make_client(fake_api)
        result = asyncio.run(client.post("/api/users/register", {}))
        assert result.error_message() == "Email taken\nWeak password"

    def test_plain_text_error_body(self, fake_api):
        fake_api.add(
            "GET", "/api/movies/movies", handler=lambda r: httpx.Response(500, text="boom")
        )
        client = make_client(fake_api)
        result = asyncio.run(client.get("/api/movies/movies"))
        assert result.error_message() == "boom"

    def test_empty_error_body_falls_back_to_status(self):
        assert ApiResult(False, 503).error_message() == "HTTP 503"

    def test_raise_for_error(self):
        result = ApiResult(False, 404, error_body=ErrorBody(message="Missing"))
        with pytest.raises(HttpError) as exc_info:
            result.raise_for_error()
        assert exc_info.value.status == 404
        assert exc_info.value.message == "Missing"

    def test_transport_error_raises(self, fake_api):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        fake_api.add("GET", "/api/movies/movies", handler=refuse)
        client = make_client(fake_api)
        with pytest.raises(TransportError, match="Connection refused"):
            asyncio.run(client.get("/api/movies/movies"))

    def test_timeout_raises_transport_error(self, fake_api):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        fake_api.add("GET", "/api/movies/movies", handler=slow)
        client = make_client(fake_api)
        with pytest.raises(TransportError):
            asyncio.run(client.get("/api/movies/movies"))
