"""
Response Parser for the Freebox API Client
==========================================

This module decodes the ``{success, error_code, msg, result}`` envelope that
every API endpoint answers with, and turns result payloads into models.

"""

import json
import logging
from typing import Any, Callable, Optional, TypeVar

from freebox_api.exceptions import FreeboxHTTPError, FreeboxParsingError, api_error_from_envelope
from freebox_api.models import (
    AppPermission,
    AuthorizationProgress,
    AuthorizationStatus,
    AuthorizationToken,
    Challenge,
    ConnectionLog,
    ConnectionStatus,
    DeviceDescriptor,
    Session,
)

logger = logging.getLogger("freebox-api")

T = TypeVar("T")


def decode_json_body(response_text: str, operation: str, status_code: int = 200) -> Any:
    """
    Decode a JSON response body.

    Args:
        response_text: Raw response text
        operation: Endpoint name, for error context
        status_code: HTTP status the body arrived with

    Returns:
        Decoded JSON value

    Raises:
        FreeboxHTTPError: Body is not JSON and the status is an error
        FreeboxParsingError: Body is not JSON on a successful status
    """
    try:
        return json.loads(response_text)
    except (json.JSONDecodeError, TypeError) as e:
        if status_code >= 400:
            raise FreeboxHTTPError(
                f"HTTP {status_code} error for {operation}",
                status_code=status_code,
                details={"operation": operation, "response_text": str(response_text)[:500]},
            ) from e
        logger.error(f"Response parsing failed for {operation}: {e}")
        raise FreeboxParsingError(
            f"Failed to parse {operation} response",
            details={"operation": operation, "parse_error": str(e), "response": str(response_text)[:200]},
        ) from e


def decode_envelope(
    response_text: str,
    operation: str,
    result_parser: Optional[Callable[[Any], T]] = None,
    status_code: int = 200,
) -> Optional[T]:
    """
    Decode an API envelope and return its parsed result.

    A ``success=false`` envelope is raised as FreeboxAPIError (or
    FreeboxAuthenticationError) whatever the HTTP status; the router answers
    refused logins with a 403 carrying a well-formed envelope.

    Args:
        response_text: Raw response text
        operation: Endpoint name, for error context
        result_parser: Converts the ``result`` payload; None to ignore it
        status_code: HTTP status the body arrived with

    Returns:
        Whatever result_parser returns, or None when no parser is given
    """
    body = decode_json_body(response_text, operation, status_code)

    if not isinstance(body, dict) or "success" not in body:
        if status_code >= 400:
            raise FreeboxHTTPError(
                f"HTTP {status_code} error for {operation}",
                status_code=status_code,
                details={"operation": operation, "response_text": str(response_text)[:500]},
            )
        raise FreeboxParsingError(
            f"Unexpected {operation} response: not an API envelope",
            details={"operation": operation, "response": str(response_text)[:200]},
        )

    if not body.get("success"):
        error_code = str(body.get("error_code") or "")
        api_message = str(body.get("msg") or "")
        logger.debug(f"📥 {operation} refused: {error_code} {api_message}")
        raise api_error_from_envelope(operation, error_code, api_message, status_code)

    if result_parser is None:
        return None
    return result_parser(body.get("result"))


def _require_mapping(result: Any, operation: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise FreeboxParsingError(
            f"Missing result in {operation} response",
            details={"operation": operation, "result": repr(result)[:200]},
        )
    return result


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


TRUE_VALUES = {"1", "t", "T", "true", "TRUE", "True"}
FALSE_VALUES = {"0", "f", "F", "false", "FALSE", "False"}


def as_bool(value: Any, key: str = "") -> bool:
    """
    Read a flag that may arrive as a JSON boolean, a number or a string.

    Strings follow the usual "1"/"true"/"0"/"false" spellings; anything else
    is treated as False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        if value in TRUE_VALUES:
            return True
        if value not in FALSE_VALUES:
            logger.debug(f"Ignoring malformed boolean {key}={value!r}")
        return False
    if value is not None:
        logger.debug(f"Ignoring malformed boolean {key}={value!r}")
    return False


def parse_permissions(raw: Any) -> dict[AppPermission, bool]:
    """Keep known permission names, ignore the rest."""
    permissions: dict[AppPermission, bool] = {}
    if not isinstance(raw, dict):
        return permissions

    for name, granted in raw.items():
        try:
            permissions[AppPermission(name)] = as_bool(granted, name)
        except ValueError:
            logger.debug(f"Ignoring unknown permission: {name}")
    return permissions


def parse_authorization_token(result: Any) -> AuthorizationToken:
    data = _require_mapping(result, "login/authorize")
    if not data.get("app_token"):
        raise FreeboxParsingError("Authorization response has no app_token", details={"operation": "login/authorize"})
    return AuthorizationToken(app_token=str(data["app_token"]), track_id=_as_int(data.get("track_id")))


def parse_authorization_progress(result: Any) -> AuthorizationProgress:
    data = _require_mapping(result, "login/authorize/<track_id>")
    return AuthorizationProgress(
        status=AuthorizationStatus(data.get("status", "unknown")),
        challenge=str(data.get("challenge") or ""),
    )


def parse_challenge(result: Any) -> Challenge:
    data = _require_mapping(result, "login")
    return Challenge(
        challenge=str(data.get("challenge") or ""),
        logged_in=as_bool(data.get("logged_in"), "logged_in"),
        password_set=as_bool(data.get("password_set"), "password_set"),
        password_salt=str(data.get("password_salt") or ""),
    )


def parse_session(result: Any) -> Session:
    data = _require_mapping(result, "login/session")
    if not data.get("session_token"):
        raise FreeboxParsingError("Session response has no session_token", details={"operation": "login/session"})
    return Session(
        session_token=str(data["session_token"]),
        challenge=str(data.get("challenge") or ""),
        permissions=parse_permissions(data.get("permissions")),
        password_set=as_bool(data.get("password_set"), "password_set"),
        password_salt=str(data.get("password_salt") or ""),
    )


def parse_connection_status(result: Any) -> ConnectionStatus:
    data = _require_mapping(result, "connection")
    port_range = data.get("ipv4_port_range") or []
    return ConnectionStatus(
        type=str(data.get("type") or ""),
        state=str(data.get("state") or ""),
        media=str(data.get("media") or ""),
        ipv4=str(data.get("ipv4") or ""),
        ipv4_port_range=[_as_int(port) for port in port_range] if isinstance(port_range, list) else [],
        rate_down=_as_int(data.get("rate_down")),
        rate_up=_as_int(data.get("rate_up")),
        bytes_up=_as_int(data.get("bytes_up")),
        bytes_down=_as_int(data.get("bytes_down")),
        bandwidth_up=_as_int(data.get("bandwidth_up")),
        bandwidth_down=_as_int(data.get("bandwidth_down")),
    )


def parse_connection_logs(result: Any) -> list[ConnectionLog]:
    # The router sends a null result when the history is empty
    if result is None:
        return []
    if not isinstance(result, list):
        raise FreeboxParsingError(
            "Unexpected connection/logs result: not a list",
            details={"operation": "connection/logs", "result": repr(result)[:200]},
        )

    logs = []
    for entry in result:
        if not isinstance(entry, dict):
            logger.debug(f"Skipping malformed connection log entry: {entry!r}")
            continue
        logs.append(
            ConnectionLog(
                id=_as_int(entry.get("id")),
                date=_as_int(entry.get("date")),
                state=str(entry.get("state") or ""),
                type=str(entry.get("type") or ""),
                conn=str(entry.get("conn") or ""),
                link=str(entry.get("link") or ""),
                bw_down=_as_int(entry.get("bw_down")),
                bw_up=_as_int(entry.get("bw_up")),
            )
        )
    return logs


def parse_api_version(body: Any) -> dict[str, Any]:
    """
    Validate the bare ``api_version`` discovery document.

    Unlike every other endpoint this one is not wrapped in an envelope.
    """
    if not isinstance(body, dict):
        raise FreeboxParsingError(
            "Unexpected api_version response: not a JSON object",
            details={"operation": "api_version", "response": repr(body)[:200]},
        )
    return body


def descriptor_from_api_version(body: dict[str, Any], host: str, ip: str) -> DeviceDescriptor:
    """Build a descriptor from the api_version document of an HTTP probe."""
    return DeviceDescriptor(
        name=str(body.get("device_name") or ""),
        box_model=str(body.get("box_model") or ""),
        box_model_name=str(body.get("box_model_name") or ""),
        host=host,
        ip=ip,
        port_http=80,
        port_https=_as_int(body.get("https_port")),
        https_available=as_bool(body.get("https_available"), "https_available"),
        api_version=str(body.get("api_version") or ""),
        api_base_url=str(body.get("api_base_url") or ""),
        api_domain=str(body.get("api_domain") or ""),
        uid=str(body.get("uid") or ""),
        device_type=str(body.get("device_type") or ""),
    )
