"""
DDNS Updater - Signed dynamic DNS updates without shelling out

Validates record parameters, builds a single RFC 2136 update transaction
and sends it to the authoritative server with a TSIG signing key.
"""

__version__ = "1.0.0"
__author__ = "DDNS Updater Team"
__description__ = "Validated, TSIG-signed dynamic DNS updates"

from .core.errors import DDNSError, TransportError, ValidationError
from .core.result import Ack, UpdateResult
from .core.service import DDNSService
from .core.transaction import UpdateTransaction, UpdateTransactionBuilder
from .transport.dns_transport import DNSUpdateTransport
from .transport.signing_key import SigningKey

__all__ = [
    "Ack",
    "DDNSError",
    "DDNSService",
    "DNSUpdateTransport",
    "SigningKey",
    "TransportError",
    "UpdateResult",
    "UpdateTransaction",
    "UpdateTransactionBuilder",
    "ValidationError",
]
