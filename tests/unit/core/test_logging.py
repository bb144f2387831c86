"""
Tests for structured request logging and masking.
"""

import json
import logging
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    get_client_ip,
    get_logger,
    is_sensitive_field,
    mask_headers,
    mask_sensitive_data,
    performance_marker,
    setup_logging,
    should_log_request,
)


class TestSensitiveFieldDetection:

    @pytest.mark.parametrize(
        "field_name,expected",
        [
            ("password", True),
            ("access_token", True),
            ("apiKey", True),
            ("client_secret", True),
            ("Authorization", True),
            ("cookie", True),
            ("answers", True),
            ("securityQuestion", True),
            ("search", False),
            ("page", False),
            ("workTypes", False),
        ],
    )
    def test_patterns(self, field_name, expected):
        assert is_sensitive_field(field_name) is expected


class TestMasking:

    def test_nested_structures(self):
        data = {
            "name": "Club",
            "answers": [{"q": 1, "a": "yes"}],
            "contact": {"email": "coach@club.com", "phone": "+1 (555) 123-4567"},
            "regions": ["spain"],
        }
        masked = mask_sensitive_data(data)
        assert masked["name"] == "Club"
        assert masked["answers"] == "[REDACTED]"
        assert masked["contact"]["email"] == "[EMAIL]"
        assert masked["contact"]["phone"] == "[PHONE]"
        assert masked["regions"] == ["spain"]

    def test_max_depth(self):
        data: dict = {}
        node = data
        for _ in range(15):
            node["child"] = {}
            node = node["child"]
        masked = mask_sensitive_data(data)
        for _ in range(11):
            masked = masked["child"]
        assert masked == "[MAX_DEPTH_EXCEEDED]"

    def test_non_string_values_untouched(self):
        assert mask_sensitive_data({"page": 2, "active": True, "x": None}) == {
            "page": 2,
            "active": True,
            "x": None,
        }

    def test_headers_keep_auth_scheme(self):
        masked = mask_headers(
            {"Authorization": "Bearer eyJhbGci", "X-Api-Key": "k", "Accept": "application/json"}
        )
        assert masked["Authorization"] == "Bearer [REDACTED]"
        assert masked["X-Api-Key"] == "[REDACTED]"
        assert masked["Accept"] == "application/json"


class TestRequestHelpers:

    @pytest.mark.parametrize(
        "path,expected",
        [("/health", False), ("/ready", False), ("/api/v1/company/profile", True)],
    )
    def test_should_log_request(self, path, expected):
        assert should_log_request(path) is expected

    def test_client_ip_is_truncated(self):
        request = Mock()
        request.headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
        assert get_client_ip(request) == "203.0.113.xxx"

    def test_client_ip_without_client(self):
        request = Mock()
        request.headers = {}
        request.client = None
        assert get_client_ip(request) == "unknown"

    @pytest.mark.parametrize("duration,marker", [(0.2, "fast"), (2, "moderate"), (6, "slow")])
    def test_performance_marker(self, duration, marker):
        assert performance_marker(duration) == marker


@pytest.fixture
def client():
    app = FastAPI()
    app.add_middleware(StructuredLoggingMiddleware, log_request_body=True)

    @app.get("/api/v1/items")
    async def items(request: Request):
        return {"request_id": request.state.request_id}

    @app.post("/api/v1/answer")
    async def answer(payload: dict):
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return TestClient(app)


def logged_events(caplog) -> list[dict]:
    events = []
    for record in caplog.records:
        if record.name != "core.middleware.logging":
            continue
        try:
            events.append(json.loads(record.getMessage()))
        except ValueError:
            continue
    return events


class TestStructuredLoggingMiddleware:

    def test_started_and_completed(self, client, caplog):
        caplog.set_level(logging.INFO, logger="core.middleware.logging")
        response = client.get("/api/v1/items?search=coach&token=abc")

        events = logged_events(caplog)
        started = next(e for e in events if e["event"] == "request_started")
        completed = next(e for e in events if e["event"] == "request_completed")
        assert started["request_id"] == completed["request_id"]
        assert started["query_params"] == {"search": "coach", "token": "[REDACTED]"}
        assert completed["status_code"] == 200
        assert completed["performance"] == "fast"
        assert response.headers["x-request-id"] == completed["request_id"]

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/v1/items", headers={"x-request-id": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"
        assert response.json() == {"request_id": "abc-123"}

    def test_health_not_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger="core.middleware.logging")
        response = client.get("/health")
        assert response.status_code == 200
        assert "x-request-id" in response.headers
        assert logged_events(caplog) == []

    def test_body_is_masked(self, client, caplog):
        caplog.set_level(logging.INFO, logger="core.middleware.logging")
        client.post("/api/v1/answer", json={"answers": [1, 2], "email": "a@b.co"})

        started = next(e for e in logged_events(caplog) if e["event"] == "request_started")
        assert started["body"] == {"answers": "[REDACTED]", "email": "[EMAIL]"}


class TestSetupLogging:

    def test_json_formatter(self, capsys):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        try:
            setup_logging(log_level="INFO", json_logs=True)
            get_logger("tests.setup").info("hello")
        finally:
            root.handlers[:] = handlers
            root.setLevel(level)
        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert record["logger"] == "tests.setup"
