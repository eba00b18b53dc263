"""
Update transports.

This package contains the dnspython update transport, an in-memory mock
transport and TSIG signing key handling.
"""

from .base_transport import UpdateTransport
from .dns_transport import DNSUpdateTransport
from .mock_transport import MockUpdateTransport
from .signing_key import SigningKey

__all__ = ["UpdateTransport", "DNSUpdateTransport", "MockUpdateTransport", "SigningKey"]
