import json
from unittest.mock import Mock, patch

import pytest

from freebox_api.models import DeviceDescriptor


def _envelope(result=None, success=True, error_code="", msg=""):
    body = {"success": success}
    if result is not None:
        body["result"] = result
    if not success:
        body["error_code"] = error_code
        body["msg"] = msg
    return json.dumps(body)


@pytest.fixture
def mock_router_responses():
    """Fixture providing mock router response bodies."""
    return {
        "api_version": json.dumps(
            {
                "uid": "23b86ec8091013d668829fe12791fdab",
                "device_name": "Freebox Server",
                "device_type": "FreeboxServer7,1",
                "box_model": "fbxgw7-r1/full",
                "box_model_name": "Freebox v7 (r1)",
                "api_version": "8.0",
                "api_base_url": "/api/",
                "api_domain": "abcdefgh.fbxos.fr",
                "https_available": True,
                "https_port": 11283,
            }
        ),
        "authorize": _envelope({"app_token": "dyNYgfK0Ya6FWGqq83sBHa7TwzWo+pg4fDFUJHShcjVYzTfaRrZzm93p7OTAfH/0", "track_id": 42}),
        "progress_pending": _envelope({"status": "pending", "challenge": "Bj6xMqoe+DCHD44KqBljJ579seOXNWr2"}),
        "progress_granted": _envelope({"status": "granted", "challenge": "Bj6xMqoe+DCHD44KqBljJ579seOXNWr2"}),
        "progress_denied": _envelope({"status": "denied", "challenge": ""}),
        "challenge": _envelope(
            {
                "logged_in": False,
                "challenge": "VzhbtpR4r8CLaJle2QgJBEkyd8JPb0zL",
                "password_salt": "PMsXnLs8nPVuOasSmhKUT2d2xUSjDfYH",
                "password_set": True,
            }
        ),
        "session": _envelope(
            {
                "session_token": "35JYdQSvkcBYK84IFMU7H86clfhS75OzwlQrKlQN1gBch/Dd62RGzDpgC7YB9jB2",
                "challenge": "jdGL6CtuJ3Dm7p9nkcIQ8pjB+eLwr4Ya",
                "password_salt": "PMsXnLs8nPVuOasSmhKUT2d2xUSjDfYH",
                "password_set": True,
                "permissions": {
                    "downloader": True,
                    "settings": True,
                    "explorer": True,
                    "parental": False,
                    "pvr": False,
                    "unknown_future_permission": True,
                },
            }
        ),
        "logout": _envelope(),
        "invalid_token": _envelope(success=False, error_code="invalid_token", msg="bad"),
        "connection": _envelope(
            {
                "type": "ethernet",
                "state": "up",
                "media": "ftth",
                "ipv4": "82.64.1.2",
                "ipv4_port_range": [0, 65535],
                "rate_down": 1550,
                "rate_up": 330,
                "bytes_up": 1234567,
                "bytes_down": 7654321,
                "bandwidth_up": 700000000,
                "bandwidth_down": 1000000000,
            }
        ),
        "connection_logs": _envelope(
            [
                {"id": 1, "date": 1700000000, "state": "up", "type": "link", "conn": "ftth", "link": "ftth", "bw_down": 1000000000, "bw_up": 700000000},
                {"id": 2, "date": 1700000100, "state": "down", "type": "conn", "conn": "ftth", "link": "", "bw_down": 0, "bw_up": 0},
            ]
        ),
    }


@pytest.fixture
def device():
    """A router reachable over HTTPS with API v8."""
    return DeviceDescriptor(
        name="Freebox Server",
        box_model="fbxgw7-r1/full",
        box_model_name="Freebox v7 (r1)",
        host="mafreebox.freebox.fr",
        ip="192.168.1.254",
        port_http=80,
        port_https=11283,
        https_available=True,
        api_version="8.0",
        api_base_url="/api/",
        api_domain="abcdefgh.fbxos.fr",
        uid="23b86ec8091013d668829fe12791fdab",
    )


@pytest.fixture
def base_url(device):
    return device.base_url


@pytest.fixture
def mock_get():
    """Patch HTTP GETs made through requests sessions."""
    with patch("requests.Session.get") as get:
        yield get


@pytest.fixture
def mock_post():
    """Patch HTTP POSTs made through requests sessions."""
    with patch("requests.Session.post") as post:
        yield post


@pytest.fixture
def envelope():
    """Factory for API envelope bodies."""
    return _envelope


@pytest.fixture
def ok():
    """Factory for canned HTTP responses with a status code and body text."""

    def _response(text, status_code=200):
        return Mock(status_code=status_code, text=text)

    return _response
