"""
Unit tests for the shared/ utility modules.

Covers:
- shared.validators      (parse_version, exceeds_max_document_size,
                          is_valid_document_id)
- shared.generators      (generate_document_id, generate_request_id)
- shared.datetime_utils  (version_to_datetime, format_version)
- shared.ip_utils        (get_client_ip)
- shared.logging_config  (hash_ip, redact_sensitive_fields)
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from shared import logging_config
from shared.datetime_utils import format_version, version_to_datetime
from shared.generators import (
    DOCUMENT_ID_ALPHABET,
    generate_document_id,
    generate_request_id,
)
from shared.ip_utils import get_client_ip
from shared.logging import hash_ip
from shared.validators import (
    LATEST_VERSION,
    exceeds_max_document_size,
    is_valid_document_id,
    parse_version,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_request(headers: dict, client_host: str = "10.0.0.1") -> MagicMock:
    """Minimal mock of a FastAPI Request."""
    req = MagicMock()
    req.headers = headers
    req.client = MagicMock()
    req.client.host = client_host
    return req


# ---------------------------------------------------------------------------
# shared.validators
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, LATEST_VERSION),
        ("", LATEST_VERSION),
        ("0", 0),
        ("1700000000", 1700000000),
        ("abc", None),
        ("-5", None),
        ("1.5", None),
    ],
    ids=["none", "empty", "zero", "timestamp", "letters", "negative", "float"],
)
def test_parse_version(raw, expected):
    assert parse_version(raw) == expected


@pytest.mark.parametrize(
    "content, max_size, expected",
    [
        ("hello", 0, False),
        ("hello", 5, False),
        ("hello!", 5, True),
        ("ééééé", 5, False),  # characters, not bytes
    ],
    ids=["unlimited", "at_limit", "over_limit", "multibyte"],
)
def test_exceeds_max_document_size(content, max_size, expected):
    assert exceeds_max_document_size(content, max_size) is expected


@pytest.mark.parametrize(
    "document_id, expected",
    [
        ("aB3dE5fG", True),
        ("", False),
        ("has space", False),
        ("../etc", False),
        ("a" * 65, False),
    ],
    ids=["valid", "empty", "space", "path", "too_long"],
)
def test_is_valid_document_id(document_id, expected):
    assert is_valid_document_id(document_id) is expected


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


class TestGenerators:
    def test_document_id_default_length(self):
        assert len(generate_document_id()) == 8

    def test_document_id_custom_length(self):
        assert len(generate_document_id(12)) == 12

    def test_document_id_alphabet(self):
        for _ in range(50):
            assert set(generate_document_id()) <= set(DOCUMENT_ID_ALPHABET)

    def test_document_ids_are_valid(self):
        assert is_valid_document_id(generate_document_id())

    def test_document_ids_differ(self):
        ids = {generate_document_id() for _ in range(100)}
        assert len(ids) == 100

    def test_request_id_format(self):
        assert re.fullmatch(r"req_[0-9a-f]{12}", generate_request_id())


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestFormatVersion:
    def test_version_to_datetime_is_utc(self):
        assert version_to_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=0), "0 seconds ago"),
            (timedelta(seconds=42), "42 seconds ago"),
            (timedelta(minutes=3, seconds=10), "3 minutes ago"),
            (timedelta(hours=5), "5 hours ago"),
            (timedelta(days=2), "2 days ago"),
            (timedelta(days=65), "2 months ago"),
            (timedelta(days=800), "2 years ago"),
        ],
    )
    def test_relative_label(self, delta, expected):
        version = int((NOW - delta).timestamp())
        label, _ = format_version(version, now=NOW)
        assert label == expected

    def test_future_version_clamped(self):
        version = int((NOW + timedelta(minutes=5)).timestamp())
        label, _ = format_version(version, now=NOW)
        assert label == "0 seconds ago"

    def test_absolute_time_format(self):
        _, absolute = format_version(int(NOW.timestamp()), now=NOW)
        assert absolute == "15/01/2024 12:00:00"


# ---------------------------------------------------------------------------
# shared.ip_utils: get_client_ip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "headers, client_host, expected_ip",
    [
        ({"CF-Connecting-IP": "1.1.1.1", "X-Forwarded-For": "2.2.2.2"}, "10.0.0.1", "1.1.1.1"),
        ({"True-Client-IP": "3.3.3.3"}, "10.0.0.1", "3.3.3.3"),
        ({"X-Forwarded-For": "4.4.4.4, 5.5.5.5"}, "10.0.0.1", "4.4.4.4"),
        ({"X-Real-IP": "6.6.6.6"}, "10.0.0.1", "6.6.6.6"),
        ({}, "10.0.0.1", "10.0.0.1"),
    ],
    ids=["cloudflare", "true_client", "forwarded_first", "real_ip", "socket_peer"],
)
def test_get_client_ip(headers, client_host, expected_ip):
    assert get_client_ip(_make_request(headers, client_host)) == expected_ip


def test_get_client_ip_without_client():
    req = _make_request({})
    req.client = None
    assert get_client_ip(req) == ""


# ---------------------------------------------------------------------------
# shared.logging_config
# ---------------------------------------------------------------------------


class TestHashIp:
    def test_passthrough_in_development(self, monkeypatch):
        monkeypatch.setattr(logging_config, "IS_PRODUCTION", False)
        assert hash_ip("1.2.3.4") == "1.2.3.4"

    def test_hashed_in_production(self, monkeypatch):
        monkeypatch.setattr(logging_config, "IS_PRODUCTION", True)
        hashed = hash_ip("1.2.3.4")
        assert hashed != "1.2.3.4"
        assert len(hashed) == 16

    def test_none_safe(self):
        assert hash_ip(None) is None


class TestRedactSensitiveFields:
    def test_sensitive_keys_redacted(self):
        event = {
            "event": "document_shared",
            "token": "eyJ...",
            "jwt_secret": "s3cret",
            "authorization": "Bearer eyJ...",
            "document_id": "abc12345",
        }
        out = logging_config.redact_sensitive_fields(None, "info", event)
        assert out["token"] == "***REDACTED***"
        assert out["jwt_secret"] == "***REDACTED***"
        assert out["authorization"] == "***REDACTED***"
        assert out["document_id"] == "abc12345"
        assert out["event"] == "document_shared"

    def test_structural_keys_preserved(self):
        event = {"event": "x", "request_id": "req_1", "level": "info"}
        out = logging_config.redact_sensitive_fields(None, "info", dict(event))
        assert out == event
