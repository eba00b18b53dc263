"""
Core update functionality.

This package contains the error taxonomy, the transaction builder and the
service boundary.
"""

from .errors import DDNSError, SubmissionState, TransportError, ValidationError
from .transaction import (
    Operation,
    RecordType,
    UpdateTransaction,
    UpdateTransactionBuilder,
    parse_transaction,
)
from .result import Ack, UpdateResult
from .service import DDNSService

__all__ = [
    "Ack",
    "DDNSError",
    "DDNSService",
    "Operation",
    "RecordType",
    "SubmissionState",
    "TransportError",
    "UpdateResult",
    "UpdateTransaction",
    "UpdateTransactionBuilder",
    "ValidationError",
    "parse_transaction",
]
