"""
Errors - Failure taxonomy for DNS update transactions

Validation errors are raised by the transaction builder before anything is
sent. Transport errors are raised by the update transport after a submission
has been attempted. Every error carries a stable ``code``, an HTTP-style
``status`` for the service boundary, and whether the caller may retry.
"""

from enum import Enum
from typing import Dict, Optional


class SubmissionState(Enum):
    """States of a single submission. Terminal states are final per call."""

    IDLE = "idle"
    SENDING = "sending"
    ACKED = "acked"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    CONNECTION_FAILED = "connection_failed"


class DDNSError(Exception):
    """Base class for every error raised by the updater."""

    code = "ddns_error"
    status = 500
    retryable = False

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> Dict:
        data = {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.detail:
            data["detail"] = self.detail
        return data


class ConfigurationError(DDNSError):
    """Invalid configuration or signing key, detected at start-up."""

    code = "configuration_error"
    status = 500


class ValidationError(DDNSError):
    """Caller input was rejected; no transaction was attempted."""

    code = "validation_error"
    status = 422


class InvalidName(ValidationError):
    code = "invalid_name"


class UnsupportedType(ValidationError):
    code = "unsupported_type"


class InvalidValue(ValidationError):
    code = "invalid_value"


class InvalidTTL(ValidationError):
    code = "invalid_ttl"


class TransportError(DDNSError):
    """The update was attempted but not acknowledged by the server."""

    code = "transport_error"
    status = 502
    state = SubmissionState.CONNECTION_FAILED


class AuthenticationFailure(TransportError):
    """The server rejected the signing key or the request signature."""

    code = "authentication_failure"
    status = 401
    state = SubmissionState.REJECTED


class ServerRejected(TransportError):
    """The server answered with a non-success response code."""

    code = "server_rejected"
    status = 409
    state = SubmissionState.REJECTED

    def __init__(self, message: str, rcode: str, detail: Optional[str] = None):
        super().__init__(message, detail)
        self.rcode = rcode

    def to_dict(self) -> Dict:
        data = super().to_dict()
        data["rcode"] = self.rcode
        return data


class Timeout(TransportError):
    """No response arrived before the timeout elapsed."""

    code = "timeout"
    status = 504
    retryable = True
    state = SubmissionState.TIMED_OUT


class TransportUnavailable(TransportError):
    """The connection to the server could not be established."""

    code = "transport_unavailable"
    status = 503
    retryable = True
    state = SubmissionState.CONNECTION_FAILED
