"""Tests for log_context module."""

from app.log_context import (
    bind_request_context,
    generate_request_id,
    get_client_ip,
    get_request_context,
    reset_request_context,
)


def test_generate_request_id_is_16_chars_and_unique():
    ids = {generate_request_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(i) == 16 for i in ids)


class TestGetClientIp:
    def test_forwarded_for_takes_first_address(self):
        headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1, 10.0.0.2"}
        assert get_client_ip(headers) == "203.0.113.7"

    def test_header_preference_order(self):
        headers = {"x-client-ip": "3.3.3.3", "x-real-ip": "2.2.2.2"}
        assert get_client_ip(headers) == "2.2.2.2"

    def test_falls_back_to_peer_address(self):
        assert get_client_ip({}, fallback="127.0.0.1") == "127.0.0.1"
        assert get_client_ip({}) is None


def test_bind_and_reset_request_context():
    assert get_request_context() == {}

    token = bind_request_context(requestId="abc", method="GET", clientIp=None)
    assert get_request_context() == {"requestId": "abc", "method": "GET"}

    reset_request_context(token)
    assert get_request_context() == {}
