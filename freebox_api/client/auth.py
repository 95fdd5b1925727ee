"""
Authentication module for the Freebox API Client
================================================

This module implements the two halves of the login handshake:

* pairing (AuthorizationFlow): ask the router for an app token and poll
  until someone approves or denies it on the box's front panel;
* per-login session (ChallengeSession): fetch a challenge, sign it, and
  trade the signature for a session token.

"""

import hashlib
import hmac
import logging
from enum import Enum
from typing import Optional

from freebox_api.client.http import FreeboxRequestHandler
from freebox_api.client.parser import (
    parse_authorization_progress,
    parse_authorization_token,
    parse_challenge,
    parse_session,
)
from freebox_api.models import (
    AuthorizationProgress,
    AuthorizationToken,
    Challenge,
    Session,
    TokenRequest,
)

logger = logging.getLogger("freebox-api")

ENDPOINT_LOGIN = "login/"
ENDPOINT_AUTHORIZE = "login/authorize/"
ENDPOINT_SESSION = "login/session/"
ENDPOINT_LOGOUT = "login/logout/"


class SigningKeySource(str, Enum):
    """
    Which credential keys the HMAC that turns a challenge into a password.

    APP_ID reproduces what earlier versions of this client did. The vendor
    documentation signs with the app token obtained at pairing time.
    """

    APP_ID = "app-id"
    APP_TOKEN = "app-token"


def compute_session_password(challenge: str, key: str) -> str:
    """
    Derive the one-time session password.

    Args:
        challenge: Challenge string from the router
        key: HMAC key (app id or app token)

    Returns:
        Lower-case hex HMAC-SHA1 of the challenge
    """
    return hmac.new(key.encode("utf-8"), challenge.encode("utf-8"), hashlib.sha1).hexdigest()


class AuthorizationFlow:
    """Pairs an application with the router."""

    def __init__(self, handler: FreeboxRequestHandler):
        self.handler = handler

    def request_authorization(
        self, app_id: str, app_name: str, app_version: str, device_name: str
    ) -> AuthorizationToken:
        """
        Ask the router to authorize a new application.

        The returned app token is inert until the request is granted on the
        router; poll track_authorization_progress with the track id.

        Args:
            app_id: Stable application identifier
            app_name: Display name shown on the router
            app_version: Application version
            device_name: Name of the machine running the application

        Returns:
            AuthorizationToken with app_token and track_id
        """
        request = TokenRequest(app_id=app_id, app_name=app_name, app_version=app_version, device_name=device_name)
        token = self.handler.call("POST", ENDPOINT_AUTHORIZE, parse_authorization_token, payload=request.to_payload())
        logger.info(f"🔑 Authorization requested for {app_id}, track id {token.track_id}")
        return token

    def track_authorization_progress(self, track_id: int) -> AuthorizationProgress:
        """
        Poll a pairing request once.

        Denied and timed out requests are reported through the returned
        status, not raised.
        """
        progress = self.handler.call("GET", f"{ENDPOINT_AUTHORIZE}{track_id}", parse_authorization_progress)
        logger.debug(f"Authorization {track_id} status: {progress.status.value}")
        return progress


class ChallengeSession:
    """Opens and closes sessions with a paired application's credentials."""

    def __init__(self, handler: FreeboxRequestHandler):
        self.handler = handler

    def get_challenge(self) -> Challenge:
        """Fetch the challenge to sign for the next login."""
        return self.handler.call("GET", ENDPOINT_LOGIN, parse_challenge)

    def open_session(self, app_id: str, challenge: str, signing_key: Optional[str] = None) -> Session:
        """
        Open a session by signing the challenge.

        Args:
            app_id: Application identifier sent with the login
            challenge: Challenge string from get_challenge
            signing_key: HMAC key; defaults to app_id

        Returns:
            Session holding the session token and granted permissions
        """
        password = compute_session_password(challenge, signing_key if signing_key is not None else app_id)
        session = self.handler.call(
            "POST",
            ENDPOINT_SESSION,
            parse_session,
            payload={"app_id": app_id, "password": password},
        )
        granted = sorted(p.value for p, allowed in session.permissions.items() if allowed)
        logger.info(f"✅ Session opened for {app_id} (permissions: {', '.join(granted) or 'none'})")
        return session

    def close_session(self, session_token: str) -> None:
        """Invalidate a session on the router."""
        self.handler.call("POST", ENDPOINT_LOGOUT, session_token=session_token)
        logger.info("🔒 Session closed")
