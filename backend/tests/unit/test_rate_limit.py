"""
Unit tests for rate-limit keying.
"""

import pytest
from starlette.requests import Request

from api.middleware.rate_limit import RATE_LIMITS, client_ip


def make_request(headers: dict[str, str], peer: str = "10.0.0.5") -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/auth/login",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": (peer, 12345),
    }
    return Request(scope)


class TestClientIp:
    def test_public_forwarded_address(self):
        request = make_request({"X-Forwarded-For": "8.8.8.8, 10.0.0.1"})
        assert client_ip(request) == "8.8.8.8"

    def test_real_ip_header(self):
        assert client_ip(make_request({"X-Real-IP": "1.1.1.1"})) == "1.1.1.1"

    @pytest.mark.parametrize(
        "spoofed",
        ["127.0.0.1", "192.168.1.10", "203.0.113.7", "not-an-ip", ""],
    )
    def test_untrusted_values_fall_back_to_peer(self, spoofed):
        request = make_request({"X-Forwarded-For": spoofed})
        assert client_ip(request) == "10.0.0.5"

    def test_no_headers(self):
        assert client_ip(make_request({}, peer="9.9.9.9")) == "9.9.9.9"


def test_credential_limits():
    assert RATE_LIMITS == {
        "login": "5/minute",
        "register": "3/minute",
        "default": "100/minute",
    }
