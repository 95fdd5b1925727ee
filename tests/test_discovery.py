"""Tests for mDNS and HTTP probe discovery."""

import json
import socket
import threading
from unittest.mock import DEFAULT, patch

import pytest
from requests.exceptions import ConnectionError
from zeroconf import ServiceInfo

from freebox_api.discovery import (
    COLLECTOR_THREAD_NAME,
    FALLBACK_HOSTNAME,
    SERVICE_TYPE,
    DiscoveryStrategy,
    HTTPDiscovery,
    MDNSDiscovery,
    create_strategy,
    descriptor_from_service_info,
    discover,
    parse_txt_properties,
)
from freebox_api.exceptions import (
    FreeboxConfigurationError,
    FreeboxConnectionError,
    FreeboxDiscoveryError,
    FreeboxHTTPError,
    FreeboxParsingError,
)
from freebox_api.models import DiscoverProtocol

FREEBOX_TXT = {
    "api_version": "8.0",
    "device_type": "FreeboxServer7,1",
    "box_model": "fbxgw7-r1/full",
    "box_model_name": "Freebox v7 (r1)",
    "api_base_url": "/api/",
    "uid": "23b86ec8091013d668829fe12791fdab",
    "api_domain": "abcdefgh.fbxos.fr",
    "https_available": "1",
    "https_port": "11283",
}


def make_service_info(name="Freebox Server", properties=None):
    return ServiceInfo(
        SERVICE_TYPE,
        f"{name}.{SERVICE_TYPE}",
        addresses=[socket.inet_aton("192.168.1.254"), socket.inet_pton(socket.AF_INET6, "2a01:e0a:1::1")],
        port=80,
        properties=FREEBOX_TXT if properties is None else properties,
        server="Freebox-Server.local.",
    )


def collector_running():
    return any(thread.name == COLLECTOR_THREAD_NAME for thread in threading.enumerate())


@pytest.fixture
def mock_zeroconf():
    """Patch zeroconf so announcements are injected synchronously."""
    announced: list[str] = []

    def browse(zc, type_, listener):
        for name in announced:
            listener.add_service(zc, type_, name)
        return DEFAULT

    with patch("freebox_api.discovery.Zeroconf") as zeroconf_cls, patch(
        "freebox_api.discovery.ServiceBrowser", side_effect=browse
    ) as browser_cls:
        yield zeroconf_cls.return_value, browser_cls, announced


@pytest.mark.unit
@pytest.mark.discovery
class TestTXTParsing:
    """Test best-effort parsing of announcement metadata."""

    def test_all_fields(self):
        fields = parse_txt_properties({k.encode(): v.encode() for k, v in FREEBOX_TXT.items()})

        assert fields["api_domain"] == "abcdefgh.fbxos.fr"
        assert fields["api_version"] == "8.0"
        assert fields["port_https"] == 11283
        assert fields["https_available"] is True
        assert fields["device_type"] == "FreeboxServer7,1"

    def test_malformed_values_degrade_to_defaults(self):
        fields = parse_txt_properties(
            {
                b"https_port": b"not-a-port",
                b"https_available": b"maybe",
                b"uid": b"\xff\xfe",
                b"api_domain": None,
                b"api_version": b"8.0",
            }
        )

        assert fields["port_https"] == 0
        assert fields["https_available"] is False
        assert "uid" not in fields
        assert "api_domain" not in fields
        assert fields["api_version"] == "8.0"

    def test_unknown_keys_ignored(self):
        assert parse_txt_properties({b"txtvers": b"1"}) == {}

    def test_value_containing_equals(self):
        assert parse_txt_properties({b"api_base_url": b"/api/?a=b"})["api_base_url"] == "/api/?a=b"

    def test_descriptor_from_service_info(self):
        device = descriptor_from_service_info(make_service_info())

        assert device.name == "Freebox Server"
        assert device.host == "Freebox-Server.local"
        assert device.ip == "192.168.1.254"
        assert device.ipv6 == "2a01:e0a:1::1"
        assert device.port_http == 80
        assert device.base_url == "https://abcdefgh.fbxos.fr:11283/api/v8/"


@pytest.mark.unit
@pytest.mark.discovery
class TestMDNSDiscovery:
    """Test the multicast browse and its collector thread."""

    def test_no_announcements(self, mock_zeroconf):
        zc, browser_cls, _ = mock_zeroconf

        devices = MDNSDiscovery(timeout=0).discover()

        assert devices == []
        assert not collector_running()
        browser_cls.return_value.cancel.assert_called_once()
        zc.close.assert_called_once()

    def test_browses_freebox_service_type(self, mock_zeroconf):
        _, browser_cls, _ = mock_zeroconf

        MDNSDiscovery(timeout=0).discover()

        assert browser_cls.call_args[0][1] == "_fbx-api._tcp.local."

    def test_announcement_becomes_descriptor(self, mock_zeroconf):
        zc, _, announced = mock_zeroconf
        announced.append(f"Freebox Server.{SERVICE_TYPE}")
        zc.get_service_info.return_value = make_service_info()

        devices = MDNSDiscovery(timeout=0).discover()

        assert len(devices) == 1
        assert devices[0].uid == "23b86ec8091013d668829fe12791fdab"
        assert devices[0].https_available is True
        assert not collector_running()

    def test_every_announcement_is_collected(self, mock_zeroconf):
        zc, _, announced = mock_zeroconf
        names = [f"Freebox {i}.{SERVICE_TYPE}" for i in range(25)]
        announced.extend(names)
        zc.get_service_info.side_effect = lambda type_, name, timeout: make_service_info(name[: -len(SERVICE_TYPE) - 1])

        devices = MDNSDiscovery(timeout=0).discover()

        assert sorted(d.name for d in devices) == sorted(f"Freebox {i}" for i in range(25))

    def test_duplicate_announcements_collapse(self, mock_zeroconf):
        zc, _, announced = mock_zeroconf
        announced.extend([f"Freebox Server.{SERVICE_TYPE}"] * 3)
        zc.get_service_info.return_value = make_service_info()

        devices = MDNSDiscovery(timeout=0).discover()

        assert len(devices) == 1
        assert zc.get_service_info.call_count == 1

    def test_unresolved_announcement_skipped(self, mock_zeroconf):
        zc, _, announced = mock_zeroconf
        announced.extend([f"Gone.{SERVICE_TYPE}", f"Freebox Server.{SERVICE_TYPE}"])
        zc.get_service_info.side_effect = [None, make_service_info()]

        devices = MDNSDiscovery(timeout=0).discover()

        assert [d.name for d in devices] == ["Freebox Server"]

    def test_resolution_error_skipped(self, mock_zeroconf):
        zc, _, announced = mock_zeroconf
        announced.extend([f"Broken.{SERVICE_TYPE}", f"Freebox Server.{SERVICE_TYPE}"])
        zc.get_service_info.side_effect = [OSError("network down"), make_service_info()]

        devices = MDNSDiscovery(timeout=0).discover()

        assert len(devices) == 1

    def test_malformed_metadata_does_not_fail(self, mock_zeroconf):
        zc, _, announced = mock_zeroconf
        announced.append(f"Freebox Server.{SERVICE_TYPE}")
        zc.get_service_info.return_value = make_service_info(properties={"https_port": "x", "api_version": "bogus"})

        devices = MDNSDiscovery(timeout=0).discover()

        assert devices[0].port_https == 0
        assert devices[0].base_url == "http://:80"

    def test_startup_failure_is_fatal(self):
        with patch("freebox_api.discovery.Zeroconf", side_effect=OSError("No multicast interface")):
            with pytest.raises(FreeboxDiscoveryError):
                MDNSDiscovery(timeout=0).discover()

    def test_browse_failure_joins_collector(self, mock_zeroconf):
        zc, browser_cls, _ = mock_zeroconf
        browser_cls.side_effect = OSError("bind failed")

        with pytest.raises(FreeboxDiscoveryError):
            MDNSDiscovery(timeout=0).discover()

        assert not collector_running()
        zc.close.assert_called_once()


@pytest.mark.unit
@pytest.mark.discovery
class TestHTTPDiscovery:
    """Test the well-known hostname probe."""

    def test_probe_returns_single_descriptor(self, mock_get, ok):
        mock_get.return_value = ok(
            json.dumps(
                {
                    "device_name": "X",
                    "api_domain": "d",
                    "api_version": "9.1",
                    "api_base_url": "/api/",
                    "https_available": True,
                    "https_port": 443,
                }
            )
        )

        with patch("socket.gethostbyname", return_value="192.168.1.254"):
            devices = discover(DiscoverProtocol.HTTP)

        assert len(devices) == 1
        device = devices[0]
        assert device.name == "X"
        assert device.api_domain == "d"
        assert device.https_available is True
        assert device.port_https == 443
        assert device.port_http == 80
        assert device.host == FALLBACK_HOSTNAME
        assert device.ip == "192.168.1.254"
        assert device.base_url == "https://d:443/api/v9/"

    def test_probe_url_per_scheme(self, mock_get, mock_router_responses, ok):
        mock_get.return_value = ok(mock_router_responses["api_version"])

        with patch("socket.gethostbyname", return_value="192.168.1.254"):
            discover("https")

        assert mock_get.call_args[0][0] == "https://mafreebox.freebox.fr/api_version"

    def test_full_api_version_document(self, mock_get, mock_router_responses, ok):
        mock_get.return_value = ok(mock_router_responses["api_version"])

        with patch("socket.gethostbyname", return_value="192.168.1.254"):
            device = HTTPDiscovery().discover()[0]

        assert device.box_model == "fbxgw7-r1/full"
        assert device.device_type == "FreeboxServer7,1"
        assert device.uid == "23b86ec8091013d668829fe12791fdab"

    def test_dns_failure(self, mock_get, mock_router_responses, ok):
        mock_get.return_value = ok(mock_router_responses["api_version"])

        with patch("socket.gethostbyname", side_effect=socket.gaierror(-2, "Name or service not known")):
            with pytest.raises(FreeboxConnectionError) as exc_info:
                discover("http")

        assert exc_info.value.details["host"] == FALLBACK_HOSTNAME

    def test_transport_failure(self, mock_get):
        mock_get.side_effect = ConnectionError("unreachable")

        with pytest.raises(FreeboxConnectionError):
            discover("http")

    def test_error_status_with_json_body(self, mock_get, ok):
        mock_get.return_value = ok(json.dumps({"success": False, "error_code": "not_found"}), status_code=404)

        with pytest.raises(FreeboxHTTPError) as exc_info:
            discover("http")

        assert exc_info.value.status_code == 404

    def test_undecodable_body(self, mock_get, ok):
        mock_get.return_value = ok("<html>Freebox OS</html>")

        with pytest.raises(FreeboxParsingError):
            discover("http")

    def test_body_not_an_object(self, mock_get, ok):
        mock_get.return_value = ok("[]")

        with pytest.raises(FreeboxParsingError):
            discover("http")


@pytest.mark.unit
@pytest.mark.discovery
class TestStrategySelection:
    """Test protocol dispatch."""

    def test_mdns_strategy(self):
        strategy = create_strategy("mdns", timeout=2.5)

        assert isinstance(strategy, MDNSDiscovery)
        assert strategy.timeout == 2.5

    def test_http_strategies(self):
        assert create_strategy(DiscoverProtocol.HTTP).protocol is DiscoverProtocol.HTTP
        assert create_strategy("https").protocol is DiscoverProtocol.HTTPS

    def test_unknown_protocol(self):
        with pytest.raises(FreeboxConfigurationError):
            discover("bonjour")

    def test_strategy_interface_is_abstract(self):
        with pytest.raises(TypeError):
            DiscoveryStrategy()

        assert issubclass(MDNSDiscovery, DiscoveryStrategy)
        assert issubclass(HTTPDiscovery, DiscoveryStrategy)

    def test_http_discovery_rejects_mdns(self):
        with pytest.raises(FreeboxConfigurationError):
            HTTPDiscovery(DiscoverProtocol.MDNS)
