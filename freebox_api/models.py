"""
Data Models for the Freebox API Client
======================================

This module contains the dataclasses and enums shared by discovery, the
authorization handshake and the authenticated endpoints.

"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

_API_VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)")


class DiscoverProtocol(str, Enum):
    """How to locate the router on the local network."""

    MDNS = "mdns"
    HTTP = "http"
    HTTPS = "https"


class AuthorizationStatus(str, Enum):
    """Progress of a pairing request, as reported by the router."""

    UNKNOWN = "unknown"
    PENDING = "pending"
    TIMEOUT = "timeout"
    GRANTED = "granted"
    DENIED = "denied"

    @classmethod
    def _missing_(cls, value: object) -> "AuthorizationStatus":
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        """Granted, denied and timeout end the pairing flow."""
        return self in (AuthorizationStatus.GRANTED, AuthorizationStatus.DENIED, AuthorizationStatus.TIMEOUT)


class AppPermission(str, Enum):
    """Capabilities the router may grant to an authenticated application."""

    PARENTAL = "parental"
    CONTACTS = "contacts"
    EXPLORER = "explorer"
    TV = "tv"
    WDO = "wdo"
    DOWNLOADER = "downloader"
    PROFILE = "profile"
    CAMERA = "camera"
    SETTINGS = "settings"
    CALLS = "calls"
    HOME = "home"
    PVR = "pvr"
    VM = "vm"
    PLAYER = "player"


@dataclass(frozen=True)
class DeviceDescriptor:
    """
    A reachable router endpoint, as produced by discovery.

    The descriptor is immutable: every component that needs to talk to the
    router reads ``base_url`` from it and nothing ever writes back.

    Attributes:
        name: Service instance name (mDNS) or device name (HTTP probe)
        box_model: Box model identifier (e.g. "fbxgw7-r1/full")
        box_model_name: Box model display name
        host: Host name the router was found at
        ip: IPv4 address
        ipv6: IPv6 address
        port_http: Plain HTTP API port
        port_https: HTTPS API port
        https_available: Whether the API is served over TLS
        api_version: Dotted API version (e.g. "8.0")
        api_base_url: API base path (e.g. "/api/")
        api_domain: Domain name to use in API URLs
        uid: Unique device id
        device_type: Device type string (e.g. "FreeboxServer7,1")

    Examples:
        >>> device = DeviceDescriptor(
        ...     api_domain="abcdef.fbxos.fr",
        ...     api_base_url="/api/",
        ...     api_version="8.0",
        ...     port_https=11283,
        ...     https_available=True,
        ... )
        >>> device.base_url
        'https://abcdef.fbxos.fr:11283/api/v8/'
    """

    name: str = ""
    box_model: str = ""
    box_model_name: str = ""
    host: str = ""
    ip: str = ""
    ipv6: str = ""
    port_http: int = 80
    port_https: int = 0
    https_available: bool = False
    api_version: str = ""
    api_base_url: str = ""
    api_domain: str = ""
    uid: str = ""
    device_type: str = ""

    @property
    def major_api_version(self) -> Optional[int]:
        """Major component of the leading MAJOR.MINOR in api_version, if any."""
        match = _API_VERSION_PATTERN.search(self.api_version or "")
        if match is None:
            return None
        return int(match.group(1))

    @property
    def base_url(self) -> str:
        """Versioned base URL every API endpoint is relative to."""
        if self.https_available:
            scheme, port = "https", self.port_https
        else:
            scheme, port = "http", self.port_http

        path = self.api_base_url
        major = self.major_api_version
        if major is not None:
            if not path.endswith("/"):
                path += "/"
            path += f"v{major}/"

        return f"{scheme}://{self.api_domain}:{port}{path}"

    def to_dict(self) -> dict:
        """Plain dictionary form, for JSON output."""
        return {
            "name": self.name,
            "box_model": self.box_model,
            "box_model_name": self.box_model_name,
            "host": self.host,
            "ip": self.ip,
            "ipv6": self.ipv6,
            "port_http": self.port_http,
            "port_https": self.port_https,
            "https_available": self.https_available,
            "api_version": self.api_version,
            "api_base_url": self.api_base_url,
            "api_domain": self.api_domain,
            "uid": self.uid,
            "device_type": self.device_type,
            "base_url": self.base_url,
        }


@dataclass
class TokenRequest:
    """Identity of the application asking to be paired."""

    app_id: str
    app_name: str
    app_version: str
    device_name: str

    def to_payload(self) -> dict[str, str]:
        return {
            "app_id": self.app_id,
            "app_name": self.app_name,
            "app_version": self.app_version,
            "device_name": self.device_name,
        }


@dataclass
class AuthorizationToken:
    """
    Result of a pairing request.

    ``app_token`` only becomes usable once the pairing is granted on the
    router; ``track_id`` is what to poll in the meantime. Storing the token
    is the caller's job.
    """

    app_token: str
    track_id: int


@dataclass
class AuthorizationProgress:
    """One poll of a pairing request. ``challenge`` is not meaningful while pending."""

    status: AuthorizationStatus
    challenge: str = ""


@dataclass
class Challenge:
    """Per-login nonce the router expects to be signed."""

    challenge: str
    logged_in: bool = False
    password_set: bool = False
    password_salt: str = ""


@dataclass
class Session:
    """An open session. Pass ``session_token`` explicitly to authenticated calls."""

    session_token: str
    challenge: str = ""
    permissions: dict[AppPermission, bool] = field(default_factory=dict)
    password_set: bool = False
    password_salt: str = ""

    def has_permission(self, permission: AppPermission) -> bool:
        return self.permissions.get(permission, False)


@dataclass
class ConnectionStatus:
    """Current state of the router's internet connection."""

    type: str = ""
    state: str = ""
    media: str = ""
    ipv4: str = ""
    ipv4_port_range: list[int] = field(default_factory=list)
    rate_down: int = 0
    rate_up: int = 0
    bytes_up: int = 0
    bytes_down: int = 0
    bandwidth_up: int = 0
    bandwidth_down: int = 0


@dataclass
class ConnectionLog:
    """One entry of the connection history."""

    id: int
    date: int = 0
    state: str = ""
    type: str = ""
    conn: str = ""
    link: str = ""
    bw_down: int = 0
    bw_up: int = 0


__all__ = [
    "AppPermission",
    "AuthorizationProgress",
    "AuthorizationStatus",
    "AuthorizationToken",
    "Challenge",
    "ConnectionLog",
    "ConnectionStatus",
    "DeviceDescriptor",
    "DiscoverProtocol",
    "Session",
    "TokenRequest",
]
