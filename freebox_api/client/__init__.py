"""
Client Package for the Freebox API

- http.py: request sending and transport error mapping
- parser.py: envelope decoding and result models
- auth.py: pairing flow and login challenge handshake
- connection.py: authenticated connection endpoints
- main.py: FreeboxClient facade

License: MIT
"""

from .main import FreeboxClient

__all__ = ["FreeboxClient"]
