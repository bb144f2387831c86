"""
Tests for error handling: body shape, status mapping and message sanitization.
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel
from redis.exceptions import ConnectionError as RedisConnectionError, RedisError
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from core.exceptions import BadRequestError, NotFoundError, RequestTimeoutError
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    sanitize_error_message,
    setup_error_handlers,
)


class TestSanitization:
    """Credentials never reach a response body."""

    @pytest.mark.parametrize(
        "message",
        [
            'password="secret123"',
            "token=abc.def.ghi",
            "api_key: sk_live_12345",
            "client_secret=xyz",
            "Authorization: Bearer eyJhbGciOi",
        ],
    )
    def test_redacts(self, message):
        sanitized = sanitize_error_message(message)
        assert "[REDACTED]" in sanitized

    def test_safe_message_untouched(self):
        assert sanitize_error_message("Job not found") == "Job not found"


class Body(BaseModel):
    title: str


@pytest.fixture
def app():
    app = FastAPI()
    setup_error_handlers(app)

    @app.get("/service/{kind}")
    async def service_error(kind: str):
        if kind == "bad":
            raise BadRequestError("Secondary regions cannot have more than 4 values")
        if kind == "timeout":
            raise RequestTimeoutError("Could not retrieve test score in time.")
        raise NotFoundError("Job not found")

    @app.get("/http")
    async def http_error():
        raise HTTPException(status_code=403, detail="You do not have access to this resource")

    @app.post("/validate")
    async def validate(body: Body):
        return body

    @app.get("/crash")
    async def crash():
        raise RuntimeError("password=hunter2 leaked")

    return app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


class TestExceptionHandlers:

    def test_service_error_envelope(self, client):
        response = client.get("/service/missing", headers={"x-request-id": "req-1"})
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Job not found",
            "error": {
                "code": "NOT_FOUND",
                "path": "/service/missing",
                "method": "GET",
                "request_id": "req-1",
            },
        }

    @pytest.mark.parametrize("kind,status_code", [("bad", 400), ("timeout", 408)])
    def test_service_error_status(self, client, kind, status_code):
        assert client.get(f"/service/{kind}").status_code == status_code

    def test_http_exception(self, client):
        response = client.get("/http")
        assert response.status_code == 403
        body = response.json()
        assert body["message"] == "You do not have access to this resource"
        assert body["error"]["code"] == "HTTP_EXCEPTION"

    def test_validation_error_details(self, client):
        response = client.post("/validate", json={})
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"][0]["field"] == "body.title"

    def test_unexpected_error_is_generic(self, client):
        response = client.get("/crash")
        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "An unexpected error occurred"
        assert "hunter2" not in response.text


class TestErrorHandlingMiddleware:
    """The outermost net for exceptions escaping the application."""

    @pytest.mark.parametrize(
        "exc,status_code,code",
        [
            (IntegrityError("INSERT", {}, Exception("duplicate key")), 409, "INTEGRITY_ERROR"),
            (OperationalError("SELECT", {}, Exception("down")), 503, "DATABASE_ERROR"),
            (SQLAlchemyError("boom"), 500, "DATABASE_ERROR"),
            (RedisConnectionError("refused"), 503, "CACHE_ERROR"),
            (RedisError("bad"), 500, "CACHE_ERROR"),
            (TimeoutError(), 504, "TIMEOUT"),
            (NotFoundError("Company not found"), 404, "NOT_FOUND"),
        ],
    )
    def test_classification(self, exc, status_code, code):
        async def app(scope, receive, send):
            raise exc

        client = TestClient(ErrorHandlingMiddleware(app), raise_server_exceptions=False)
        response = client.get("/anything")
        assert response.status_code == status_code
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == code
        assert body["error"]["path"] == "/anything"

    def test_database_text_is_not_exposed(self):
        async def app(scope, receive, send):
            raise IntegrityError("INSERT INTO shortlisted", {}, Exception("uq_shortlisted_job_player"))

        client = TestClient(ErrorHandlingMiddleware(app), raise_server_exceptions=False)
        response = client.get("/x")
        assert "uq_shortlisted" not in response.text

    def test_debug_details_for_server_errors(self):
        async def app(scope, receive, send):
            raise RuntimeError("token=abc123 exploded")

        client = TestClient(ErrorHandlingMiddleware(app, debug=True), raise_server_exceptions=False)
        details = client.get("/x").json()["error"]["details"]
        assert details["type"] == "RuntimeError"
        assert "abc123" not in details["message"]
