"""
Device Discovery for the Freebox API Client
===========================================

Two independent ways of locating the router, both producing
DeviceDescriptor values:

* MDNSDiscovery browses the ``_fbx-api._tcp`` multicast DNS service and
  reads the API parameters from each announcement's TXT record.
* HTTPDiscovery asks the well-known ``mafreebox.freebox.fr`` hostname for its
  ``api_version`` document.

Quick Start:
    >>> from freebox_api import DiscoverProtocol, discover
    >>> devices = discover(DiscoverProtocol.MDNS)
    >>> devices[0].base_url
    'https://abcdef.fbxos.fr:11283/api/v8/'

"""

import logging
import queue
import socket
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from zeroconf import Error as ZeroconfError
from zeroconf import IPVersion, ServiceBrowser, ServiceInfo, ServiceListener, Zeroconf

from freebox_api.client.http import FreeboxRequestHandler
from freebox_api.client.parser import as_bool, descriptor_from_api_version, parse_api_version
from freebox_api.exceptions import FreeboxConfigurationError, FreeboxDiscoveryError, wrap_connection_error
from freebox_api.models import DeviceDescriptor, DiscoverProtocol

logger = logging.getLogger("freebox-api")

SERVICE_TYPE = "_fbx-api._tcp.local."
FALLBACK_HOSTNAME = "mafreebox.freebox.fr"

DEFAULT_MDNS_TIMEOUT = 1.0
DEFAULT_RESOLVE_TIMEOUT_MS = 3000

COLLECTOR_THREAD_NAME = "freebox-mdns-collector"

# Marks the end of the browse window on the announcement queue
_BROWSE_DONE = object()


def _parse_int(value: str, key: str) -> int:
    try:
        return int(value)
    except ValueError:
        logger.debug(f"Ignoring malformed integer {key}={value!r}")
        return 0


def parse_txt_properties(properties: dict[bytes, Optional[bytes]]) -> dict[str, Any]:
    """
    Turn an announcement's TXT record into DeviceDescriptor fields.

    Parsing is best-effort: undecodable, valueless or malformed entries fall
    back to the descriptor defaults instead of failing the announcement.

    Args:
        properties: ServiceInfo.properties mapping

    Returns:
        Keyword arguments for DeviceDescriptor
    """
    fields: dict[str, Any] = {}

    for raw_key, raw_value in (properties or {}).items():
        if raw_value is None:
            continue
        try:
            key = raw_key.decode("utf-8")
            value = raw_value.decode("utf-8")
        except (AttributeError, UnicodeDecodeError):
            logger.debug(f"Ignoring undecodable TXT entry {raw_key!r}")
            continue

        if key == "api_domain":
            fields["api_domain"] = value
        elif key == "api_version":
            fields["api_version"] = value
        elif key == "api_base_url":
            fields["api_base_url"] = value
        elif key == "box_model":
            fields["box_model"] = value
        elif key == "box_model_name":
            fields["box_model_name"] = value
        elif key == "device_type":
            fields["device_type"] = value
        elif key == "https_port":
            fields["port_https"] = _parse_int(value, key)
        elif key == "https_available":
            fields["https_available"] = as_bool(value, key)
        elif key == "uid":
            fields["uid"] = value

    return fields


def descriptor_from_service_info(info: ServiceInfo, service_type: str = SERVICE_TYPE) -> DeviceDescriptor:
    """Build a descriptor from a resolved mDNS announcement."""
    name = info.name or ""
    suffix = f".{service_type}"
    if name.endswith(suffix):
        name = name[: -len(suffix)]

    ipv4 = info.parsed_addresses(IPVersion.V4Only)
    ipv6 = info.parsed_addresses(IPVersion.V6Only)

    return DeviceDescriptor(
        name=name,
        host=(info.server or "").rstrip("."),
        ip=ipv4[0] if ipv4 else "",
        ipv6=ipv6[0] if ipv6 else "",
        port_http=info.port or 0,
        **parse_txt_properties(info.properties),
    )


class DiscoveryStrategy(ABC):
    """A way of finding routers on the local network."""

    protocol: DiscoverProtocol

    @abstractmethod
    def discover(self) -> list[DeviceDescriptor]:
        """Return the routers this strategy can see."""


class _AnnouncementListener(ServiceListener):
    """Forwards announced service names to the collector queue."""

    def __init__(self, announcements: queue.Queue):
        self.announcements = announcements

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        logger.debug(f"Service announced: {name}")
        self.announcements.put((type_, name))

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self.announcements.put((type_, name))

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        logger.debug(f"Service removed: {name}")


class MDNSDiscovery(DiscoveryStrategy):
    """
    Browse multicast DNS for Freebox API announcements.

    The zeroconf browser thread produces service names onto a queue while a
    collector thread resolves and parses them. When the browse window ends
    the browser is cancelled, the queue is closed with a sentinel, and the
    collector is joined before the result is returned, so the list is
    complete and no thread outlives the call.
    """

    protocol = DiscoverProtocol.MDNS

    def __init__(
        self,
        timeout: float = DEFAULT_MDNS_TIMEOUT,
        resolve_timeout_ms: int = DEFAULT_RESOLVE_TIMEOUT_MS,
        service_type: str = SERVICE_TYPE,
    ):
        self.timeout = timeout
        self.resolve_timeout_ms = resolve_timeout_ms
        self.service_type = service_type

    def discover(self) -> list[DeviceDescriptor]:
        try:
            zc = Zeroconf(ip_version=IPVersion.All)
        except OSError as e:
            raise FreeboxDiscoveryError(
                "Could not start multicast DNS discovery",
                details={"service_type": self.service_type, "original_error": str(e)},
            ) from e

        try:
            return self._browse(zc)
        finally:
            zc.close()

    def _browse(self, zc: Zeroconf) -> list[DeviceDescriptor]:
        announcements: queue.Queue = queue.Queue()
        devices: list[DeviceDescriptor] = []

        collector = threading.Thread(
            target=self._collect,
            args=(zc, announcements, devices),
            name=COLLECTOR_THREAD_NAME,
            daemon=True,
        )
        collector.start()

        browser = None
        try:
            logger.debug(f"🔍 Browsing {self.service_type} for {self.timeout}s")
            browser = ServiceBrowser(zc, self.service_type, listener=_AnnouncementListener(announcements))
            time.sleep(self.timeout)
        except (ZeroconfError, OSError) as e:
            raise FreeboxDiscoveryError(
                "Multicast DNS browse failed",
                details={"service_type": self.service_type, "original_error": str(e)},
            ) from e
        finally:
            if browser is not None:
                browser.cancel()
            announcements.put(_BROWSE_DONE)
            collector.join()

        logger.info(f"📡 mDNS discovery found {len(devices)} device(s)")
        return devices

    def _collect(self, zc: Zeroconf, announcements: queue.Queue, devices: list[DeviceDescriptor]) -> None:
        seen: set[str] = set()

        while True:
            item = announcements.get()
            if item is _BROWSE_DONE:
                break

            type_, name = item
            if name in seen:
                continue
            seen.add(name)

            try:
                info = zc.get_service_info(type_, name, timeout=self.resolve_timeout_ms)
            except (ZeroconfError, OSError, ValueError) as e:
                logger.warning(f"Skipping {name}: resolution failed ({e})")
                continue
            if info is None:
                logger.warning(f"Skipping {name}: no answer within {self.resolve_timeout_ms}ms")
                continue

            device = descriptor_from_service_info(info, self.service_type)
            logger.debug(f"Found {device.name} at {device.ip or device.host}")
            devices.append(device)


class HTTPDiscovery(DiscoveryStrategy):
    """Probe the router's well-known hostname over HTTP or HTTPS."""

    def __init__(
        self,
        protocol: Union[DiscoverProtocol, str] = DiscoverProtocol.HTTP,
        hostname: str = FALLBACK_HOSTNAME,
        timeout: tuple = (3, 12),
        verify: Union[bool, str] = True,
    ):
        protocol = DiscoverProtocol(protocol)
        if protocol is DiscoverProtocol.MDNS:
            raise FreeboxConfigurationError(
                "HTTPDiscovery needs an http or https protocol",
                details={"parameter": "protocol", "value": protocol.value},
            )
        self.protocol = protocol
        self.hostname = hostname
        self.handler = FreeboxRequestHandler(f"{protocol.value}://{hostname}/", timeout=timeout, verify=verify)

    def discover(self) -> list[DeviceDescriptor]:
        body = parse_api_version(self.handler.fetch_json("api_version"))
        ip = self._resolve_ipv4()

        device = descriptor_from_api_version(body, host=self.hostname, ip=ip)
        logger.info(f"📡 {self.protocol.value} discovery found {device.name or device.host} at {ip}")
        return [device]

    def _resolve_ipv4(self) -> str:
        try:
            return socket.gethostbyname(self.hostname)
        except OSError as e:
            raise wrap_connection_error(e, self.hostname, None) from e


def create_strategy(protocol: Union[DiscoverProtocol, str], **options: Any) -> DiscoveryStrategy:
    """
    Build the discovery strategy for a protocol.

    Args:
        protocol: DiscoverProtocol or its string value
        **options: Passed to the strategy constructor

    Raises:
        FreeboxConfigurationError: Unknown protocol
    """
    try:
        protocol = DiscoverProtocol(protocol)
    except ValueError as e:
        raise FreeboxConfigurationError(
            f"Unknown discovery protocol: {protocol!r}",
            details={"parameter": "protocol", "value": protocol, "valid_values": [p.value for p in DiscoverProtocol]},
        ) from e

    if protocol is DiscoverProtocol.MDNS:
        return MDNSDiscovery(**options)
    return HTTPDiscovery(protocol, **options)


def discover(protocol: Union[DiscoverProtocol, str] = DiscoverProtocol.MDNS, **options: Any) -> list[DeviceDescriptor]:
    """
    Locate routers on the local network.

    Args:
        protocol: mdns, http or https
        **options: Strategy options (timeout, verify, ...)

    Returns:
        Zero or more descriptors for mdns, exactly one for http/https
    """
    return create_strategy(protocol, **options).discover()


__all__ = [
    "COLLECTOR_THREAD_NAME",
    "FALLBACK_HOSTNAME",
    "SERVICE_TYPE",
    "DiscoveryStrategy",
    "HTTPDiscovery",
    "MDNSDiscovery",
    "create_strategy",
    "descriptor_from_service_info",
    "discover",
    "parse_txt_properties",
]
