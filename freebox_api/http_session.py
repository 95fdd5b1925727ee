"""
HTTP Session Factory for the Freebox API Client
===============================================

Builds the ``requests.Session`` used for a single API call. Sessions are
never shared between calls and never retry: a failed request surfaces its
error to the caller once.

"""

import logging
from typing import Union

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.exceptions import InsecureRequestWarning
from urllib3.util.retry import Retry

logger = logging.getLogger("freebox-api")

USER_AGENT = "freebox-api/1.0.0"


def create_freebox_session(verify: Union[bool, str] = True) -> requests.Session:
    """
    Create a requests Session for one call to the router.

    Args:
        verify: TLS verification. True for the system trust store, a path to
            a CA bundle (e.g. the Freebox root CA), or False to skip checks.

    Returns:
        requests.Session with retries disabled
    """
    session = requests.Session()

    # Resilience policy belongs to the caller. read=False lets read timeouts
    # surface as ReadTimeout rather than a MaxRetryError
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=1,
        max_retries=Retry(total=0, connect=0, read=False, redirect=0, status=0),
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.verify = verify
    if verify is False:
        urllib3.disable_warnings(InsecureRequestWarning)

    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Cache-Control": "no-cache",
        }
    )

    logger.debug(f"🔧 Created HTTP session (verify={verify})")
    return session


__all__ = ["USER_AGENT", "create_freebox_session"]
