"""
Output Formatting Module

This module formats discovery results, pairing results and session data as
JSON for stdout and as human-readable summaries for stderr.

License: MIT
"""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from typing import Any, Optional

from freebox_api import __version__
from freebox_api.models import AuthorizationToken, ConnectionLog, ConnectionStatus, DeviceDescriptor, Session

logger = logging.getLogger(__name__)


def format_devices(devices: list[DeviceDescriptor]) -> list[dict[str, Any]]:
    return [device.to_dict() for device in devices]


def format_session(session: Session) -> dict[str, Any]:
    """Session data safe for output; the session token is not printed."""
    return {
        "permissions": {permission.value: granted for permission, granted in session.permissions.items()},
        "password_set": session.password_set,
    }


def format_connection(status: ConnectionStatus, logs: Optional[list[ConnectionLog]] = None) -> dict[str, Any]:
    output: dict[str, Any] = {"connection": asdict(status)}
    if logs is not None:
        output["logs"] = [asdict(entry) for entry in logs]
    return output


def format_json_output(command: str, data: Any, elapsed_time: float) -> dict[str, Any]:
    """
    Wrap command output with query metadata.

    Args:
        command: CLI subcommand that produced the data
        data: Command result
        elapsed_time: Total elapsed time for the operation

    Returns:
        Complete JSON output dictionary
    """
    return {
        "command": command,
        "result": data,
        "query_timestamp": datetime.now().isoformat(),
        "client_version": __version__,
        "elapsed_time": elapsed_time,
    }


def print_json_output(json_data: dict) -> None:
    logger.debug("Outputting JSON to stdout")
    print(json.dumps(json_data, indent=2))


def print_devices_summary(devices: list[DeviceDescriptor]) -> None:
    print("=" * 60, file=sys.stderr)
    print(f"FREEBOX DISCOVERY: {len(devices)} device(s)", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    for device in devices:
        print(f"{device.name or 'Unknown'} ({device.box_model_name or device.box_model or 'unknown model'})", file=sys.stderr)
        print(f"  Address: {device.ip or device.host}", file=sys.stderr)
        print(f"  API: {device.base_url}", file=sys.stderr)
    print("=" * 60, file=sys.stderr)


def print_authorization_summary(token: AuthorizationToken, status: str) -> None:
    print(f"Authorization {status} (track id {token.track_id})", file=sys.stderr)
    if status == "granted":
        print("Store the app_token from the JSON output; it will not be shown again.", file=sys.stderr)


def print_session_summary(session: Session) -> None:
    granted = sorted(p.value for p, allowed in session.permissions.items() if allowed)
    print(f"Session opened, permissions: {', '.join(granted) or 'none'}", file=sys.stderr)


def print_connection_summary(status: ConnectionStatus) -> None:
    print("=" * 60, file=sys.stderr)
    print("FREEBOX CONNECTION STATUS", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"State: {status.state or 'Unknown'} ({status.media or 'unknown media'})", file=sys.stderr)
    print(f"IPv4: {status.ipv4 or 'Unknown'}", file=sys.stderr)
    print(f"Rate: {status.rate_down} B/s down, {status.rate_up} B/s up", file=sys.stderr)
    print(f"Bandwidth: {status.bandwidth_down} b/s down, {status.bandwidth_up} b/s up", file=sys.stderr)
    print("=" * 60, file=sys.stderr)


def print_error_suggestions(debug: bool = False) -> None:
    """
    Print helpful error suggestions.

    Args:
        debug: Whether debug mode is enabled
    """
    if debug:
        import traceback

        traceback.print_exc(file=sys.stderr)
    else:
        print("\nTroubleshooting suggestions:", file=sys.stderr)
        print("1. Check that this machine is on the router's local network", file=sys.stderr)
        print("2. Try another discovery method with --protocol mdns|http|https", file=sys.stderr)
        print("3. For HTTPS, pass the Freebox root CA with --ca-bundle", file=sys.stderr)
        print("4. A refused login usually means the app token was revoked; run 'authorize' again", file=sys.stderr)
        print("5. Try with --debug for more detailed error information", file=sys.stderr)
