"""
Main CLI Orchestration Module

This module provides the entry point of the freebox-api command and
dispatches each subcommand to the library.

License: MIT
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Any, Optional

from freebox_api import __version__
from freebox_api.client.auth import SigningKeySource
from freebox_api.client.main import FreeboxClient
from freebox_api.discovery import discover
from freebox_api.exceptions import FreeboxDiscoveryError, FreeboxError
from freebox_api.models import AuthorizationStatus, DeviceDescriptor, DiscoverProtocol

from .args import parse_args, tls_verify
from .formatters import (
    format_connection,
    format_devices,
    format_json_output,
    format_session,
    print_authorization_summary,
    print_connection_summary,
    print_devices_summary,
    print_error_suggestions,
    print_json_output,
    print_session_summary,
)
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


def find_devices(args: argparse.Namespace) -> list[DeviceDescriptor]:
    """Run discovery with the protocol and options given on the command line."""
    if args.protocol == DiscoverProtocol.MDNS.value:
        return discover(args.protocol, timeout=args.mdns_timeout)
    return discover(args.protocol, timeout=(args.connect_timeout, args.timeout), verify=tls_verify(args))


def find_device(args: argparse.Namespace) -> DeviceDescriptor:
    devices = find_devices(args)
    if not devices:
        raise FreeboxDiscoveryError(
            "No Freebox found on the local network",
            details={"protocol": args.protocol},
        )
    if len(devices) > 1:
        logger.info(f"Found {len(devices)} devices, using {devices[0].name}")
    return devices[0]


def build_client(args: argparse.Namespace, device: DeviceDescriptor) -> FreeboxClient:
    return FreeboxClient(
        device,
        app_id=args.app_id,
        app_name=getattr(args, "app_name", "freebox-api"),
        app_version=getattr(args, "app_version", __version__),
        device_name=getattr(args, "device_name", "freebox-api"),
        app_token=getattr(args, "app_token", None),
        signing_key_source=SigningKeySource(getattr(args, "sign_with", SigningKeySource.APP_ID.value)),
        timeout=(args.connect_timeout, args.timeout),
        verify=tls_verify(args),
    )


def run_discover(args: argparse.Namespace) -> Any:
    devices = find_devices(args)
    if not args.quiet:
        print_devices_summary(devices)
    return format_devices(devices)


def run_authorize(args: argparse.Namespace) -> Any:
    client = build_client(args, find_device(args))
    token = client.request_authorization()

    if not args.quiet:
        print("Accept the request on the Freebox front panel...", file=sys.stderr)

    # The library exposes a single poll; waiting is this command's policy
    deadline = time.monotonic() + args.max_wait
    status = AuthorizationStatus.PENDING
    while True:
        status = client.track_authorization_progress(token.track_id).status
        if status.is_terminal or time.monotonic() >= deadline:
            break
        time.sleep(args.poll_interval)

    if not args.quiet:
        print_authorization_summary(token, status.value)

    if status is not AuthorizationStatus.GRANTED:
        raise FreeboxError(
            f"Authorization not granted: {status.value}",
            details={"track_id": token.track_id, "status": status.value},
        )

    return {"app_id": args.app_id, "app_token": token.app_token, "track_id": token.track_id, "status": status.value}


def run_login(args: argparse.Namespace) -> Any:
    client = build_client(args, find_device(args))
    session = client.login()
    try:
        if not args.quiet:
            print_session_summary(session)
        return format_session(session)
    finally:
        client.close_session(session.session_token)


def run_status(args: argparse.Namespace) -> Any:
    client = build_client(args, find_device(args))
    session = client.login()
    try:
        status = client.connection_status(session.session_token)
        logs = client.connection_logs(session.session_token) if args.logs else None
    finally:
        client.close_session(session.session_token)

    if not args.quiet:
        print_connection_summary(status)
    return format_connection(status, logs)


COMMANDS = {
    "discover": run_discover,
    "authorize": run_authorize,
    "login": run_login,
    "status": run_status,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI application."""
    start_time = time.time()

    try:
        args = parse_args(argv)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    setup_logging(debug=args.debug, quiet=args.quiet)

    if not args.quiet:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        print(f"Freebox API Client v{__version__} - {timestamp}", file=sys.stderr)

    try:
        result = COMMANDS[args.command](args)

    except KeyboardInterrupt:
        elapsed = time.time() - start_time
        logger.error(f"Operation cancelled by user after {elapsed:.2f}s")
        print(f"Operation cancelled by user after {elapsed:.2f}s", file=sys.stderr)
        return 1

    except FreeboxError as e:
        elapsed = time.time() - start_time
        logger.error(f"{args.command} failed after {elapsed:.2f}s: {e}")
        print(f"Error after {elapsed:.2f}s: {e}", file=sys.stderr)
        print_error_suggestions(debug=args.debug)
        return 1

    elapsed = time.time() - start_time
    print_json_output(format_json_output(args.command, result, elapsed))
    logger.info(f"{args.command} completed in {elapsed:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
