"""
Connection endpoints for the Freebox API Client
===============================================

Authenticated reads of the internet connection state and history.

"""

from freebox_api.client.http import FreeboxRequestHandler
from freebox_api.client.parser import parse_connection_logs, parse_connection_status
from freebox_api.models import ConnectionLog, ConnectionStatus

ENDPOINT_CONNECTION = "connection/"
ENDPOINT_CONNECTION_LOGS = "connection/logs/"


class ConnectionEndpoint:
    """Reads connection data with an explicitly supplied session token."""

    def __init__(self, handler: FreeboxRequestHandler):
        self.handler = handler

    def status(self, session_token: str) -> ConnectionStatus:
        return self.handler.call("GET", ENDPOINT_CONNECTION, parse_connection_status, session_token=session_token)

    def logs(self, session_token: str) -> list[ConnectionLog]:
        return self.handler.call("GET", ENDPOINT_CONNECTION_LOGS, parse_connection_logs, session_token=session_token)
