"""
Command Line Argument Parsing Module

This module defines the freebox-api command line interface and validates
user inputs.

License: MIT
"""

import argparse
import logging
from typing import Optional, Union

from freebox_api.client.auth import SigningKeySource
from freebox_api.models import DiscoverProtocol

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--protocol",
        choices=[p.value for p in DiscoverProtocol],
        default=DiscoverProtocol.HTTP.value,
        help="How to locate the router (default: %(default)s)",
    )
    parser.add_argument(
        "--mdns-timeout",
        type=float,
        default=1.0,
        help="Seconds to listen for mDNS announcements (default: %(default)s)",
    )
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=3.0,
        help="HTTP connect timeout in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=12.0,
        help="HTTP read timeout in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Do not verify the router's TLS certificate",
    )
    parser.add_argument(
        "--ca-bundle",
        help="CA bundle to verify the router's TLS certificate with (e.g. the Freebox root CA)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging output to stderr")
    parser.add_argument("--quiet", action="store_true", help="Suppress summary output to stderr (JSON only to stdout)")


def _add_app_arguments(parser: argparse.ArgumentParser, token_required: bool) -> None:
    parser.add_argument("--app-id", required=True, help="Application identifier (required)")
    if token_required:
        parser.add_argument("--app-token", required=True, help="App token obtained with 'authorize' (required)")
        parser.add_argument(
            "--sign-with",
            choices=[s.value for s in SigningKeySource],
            default=SigningKeySource.APP_TOKEN.value,
            help="Credential used to sign the login challenge (default: %(default)s)",
        )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="freebox-api",
        description="Discover a Freebox and authenticate against its local API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s discover --protocol mdns
  %(prog)s authorize --app-id fr.example.app --app-name Example --app-version 1.0 --device-name laptop
  %(prog)s login --app-id fr.example.app --app-token "<token>"
  %(prog)s status --app-id fr.example.app --app-token "<token>" --logs

Output:
  JSON on stdout, human-readable summary on stderr.
  Use --quiet to get pure JSON on stdout.

Pairing:
  'authorize' waits until the request is accepted on the router's front
  panel. Store the printed app_token; it is the credential for 'login'
  and 'status'.
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    discover_parser = subparsers.add_parser("discover", help="List routers found on the network")
    _add_common_arguments(discover_parser)

    authorize_parser = subparsers.add_parser("authorize", help="Pair a new application with the router")
    _add_common_arguments(authorize_parser)
    _add_app_arguments(authorize_parser, token_required=False)
    authorize_parser.add_argument("--app-name", required=True, help="Application name shown on the router")
    authorize_parser.add_argument("--app-version", required=True, help="Application version")
    authorize_parser.add_argument("--device-name", required=True, help="Name of this machine")
    authorize_parser.add_argument(
        "--poll-interval",
        type=float,
        default=2.0,
        help="Seconds between authorization status checks (default: %(default)s)",
    )
    authorize_parser.add_argument(
        "--max-wait",
        type=float,
        default=120.0,
        help="Give up waiting for approval after this many seconds (default: %(default)s)",
    )

    login_parser = subparsers.add_parser("login", help="Open and close a session, printing granted permissions")
    _add_common_arguments(login_parser)
    _add_app_arguments(login_parser, token_required=True)

    status_parser = subparsers.add_parser("status", help="Print the router's connection status")
    _add_common_arguments(status_parser)
    _add_app_arguments(status_parser, token_required=True)
    status_parser.add_argument("--logs", action="store_true", help="Include the connection history")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list; defaults to sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logger.debug(f"Parsed arguments: command={args.command}")

    validate_args(args)

    return args


def validate_args(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        ValueError: If arguments are invalid
    """
    if args.timeout <= 0 or args.connect_timeout <= 0:
        raise ValueError("Timeouts must be greater than 0")

    if args.mdns_timeout <= 0:
        raise ValueError("mDNS timeout must be greater than 0")

    if args.insecure and args.ca_bundle:
        raise ValueError("--insecure and --ca-bundle are mutually exclusive")

    if getattr(args, "poll_interval", 1.0) <= 0:
        raise ValueError("Poll interval must be greater than 0")

    if getattr(args, "max_wait", 1.0) <= 0:
        raise ValueError("Max wait must be greater than 0")

    logger.debug("Arguments validated successfully")


def tls_verify(args: argparse.Namespace) -> Union[bool, str]:
    """TLS verification setting from --insecure / --ca-bundle."""
    if args.ca_bundle:
        return args.ca_bundle
    return not args.insecure
