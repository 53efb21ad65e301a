"""Tests for API error handling and exception classes."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.error_handlers import (
    ai_service_exception_handler,
    create_error_response,
    http_exception_handler,
    outfitted_exception_handler,
    register_error_handlers,
    store_exception_handler,
    unhandled_exception_handler,
)
from api.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    OutfittedException,
    RateLimitError,
    ValidationError,
)
from wardrobe.ai import AIServiceError
from wardrobe.store import StoreError


def mock_request(request_id="req-123"):
    request = MagicMock()
    request.url.path = "/api/test"
    request.state.request_id = request_id
    return request


def run_handler(handler, exc, request_id="req-123"):
    loop = asyncio.new_event_loop()
    try:
        response = loop.run_until_complete(handler(mock_request(request_id), exc))
    finally:
        loop.close()
    return response, json.loads(response.body)


class TestExceptionClasses:
    """Tests for custom exception classes."""

    def test_outfitted_exception_defaults(self):
        exc = OutfittedException()
        assert exc.message == "An unexpected error occurred"
        assert exc.error_code == "INTERNAL_ERROR"
        assert exc.details == {}
        assert exc.status_code == 500

    def test_custom_code_keeps_status(self):
        exc = ValidationError("No items", error_code="NO_ITEMS", details={"requested": 2})
        assert exc.status_code == 400
        assert exc.error_code == "NO_ITEMS"
        assert exc.to_dict() == {
            "code": "NO_ITEMS",
            "message": "No items",
            "details": {"requested": 2},
        }

    @pytest.mark.parametrize("cls, status, code", [
        (ValidationError, 400, "BAD_REQUEST"),
        (AuthenticationError, 401, "UNAUTHORIZED"),
        (AuthorizationError, 403, "FORBIDDEN"),
        (NotFoundError, 404, "NOT_FOUND"),
        (RateLimitError, 429, "RATE_LIMIT_EXCEEDED"),
    ])
    def test_subclass_defaults(self, cls, status, code):
        exc = cls()
        assert exc.status_code == status
        assert exc.error_code == code

    def test_to_dict_omits_empty_details(self):
        assert "details" not in NotFoundError("gone").to_dict()


class TestErrorHandlerFunctions:
    """Tests for the individual handlers."""

    def test_create_error_response(self):
        assert create_error_response("X", "msg", {"a": 1}, "rid") == {
            "error": {"code": "X", "message": "msg", "details": {"a": 1}, "requestId": "rid"}
        }

    def test_create_error_response_without_details(self):
        body = create_error_response("X", "msg")
        assert "details" not in body["error"]
        assert body["error"]["requestId"] is None

    def test_outfitted_exception_handler(self):
        exc = NotFoundError("Outfit not found", error_code="OUTFIT_NOT_FOUND")
        response, body = run_handler(outfitted_exception_handler, exc)

        assert response.status_code == 404
        assert body["error"]["code"] == "OUTFIT_NOT_FOUND"
        assert body["error"]["requestId"] == "req-123"

    def test_ai_service_handler_includes_raw_snippet(self):
        exc = AIServiceError(
            "AI_JSON_PARSE_ERROR", "AI response was not valid JSON", details={"raw": "oops"}
        )
        response, body = run_handler(ai_service_exception_handler, exc)

        assert response.status_code == 502
        assert body["error"]["details"] == {"raw": "oops"}

    def test_store_handler_hides_details(self):
        exc = StoreError("Record store returned 422", details={"table": "Outfits"})
        response, body = run_handler(store_exception_handler, exc)

        assert response.status_code == 502
        assert body["error"]["code"] == "STORE_ERROR"
        assert "details" not in body["error"]

    def test_http_exception_handler_maps_code(self):
        exc = StarletteHTTPException(status_code=405, detail="Method Not Allowed")
        response, body = run_handler(http_exception_handler, exc)

        assert response.status_code == 405
        assert body["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_unhandled_exception_is_generic(self):
        response, body = run_handler(unhandled_exception_handler, RuntimeError("secret detail"))

        assert response.status_code == 500
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "secret" not in body["error"]["message"]


class Payload(BaseModel):
    name: str


@pytest.fixture
def error_app():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/forbidden")
    async def forbidden():
        raise AuthorizationError("You do not own this outfit")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("kaboom")

    @app.post("/validate")
    async def validate(body: Payload):
        return body

    return app


class TestRegisteredHandlers:
    """End-to-end through a minimal app."""

    def test_custom_exception(self, error_app, sync_client):
        response = sync_client(error_app).get("/forbidden")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_validation_error_is_bad_request(self, error_app, sync_client):
        response = sync_client(error_app).post("/validate", json={})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "BAD_REQUEST"
        assert error["details"]["errors"][0]["field"] == "body.name"

    def test_unknown_route_is_not_found(self, error_app, sync_client):
        response = sync_client(error_app).get("/nope")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_unhandled_exception(self, error_app, sync_client):
        response = sync_client(error_app).get("/crash")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"
