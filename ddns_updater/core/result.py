"""
Acknowledgements and boundary results.

``Ack`` is what a transport returns when the server accepted an update.
``UpdateResult`` is the tagged success/error value handed to callers of the
service, carrying either an Ack or the DDNSError that stopped the update.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .errors import DDNSError, SubmissionState
from .transaction import Operation, RecordType


@dataclass(frozen=True)
class Ack:
    """Protocol-level acknowledgement of a single update."""

    fqdn: str
    rdtype: RecordType
    operation: Operation
    server: str
    port: int
    rcode: str = "NOERROR"
    message_id: Optional[int] = None
    signed: bool = False
    state: SubmissionState = SubmissionState.ACKED


@dataclass(frozen=True)
class UpdateResult:
    ack: Optional[Ack] = None
    error: Optional[DDNSError] = None

    def __post_init__(self):
        if (self.ack is None) == (self.error is None):
            raise ValueError("UpdateResult holds exactly one of ack or error")

    @classmethod
    def success(cls, ack: Ack) -> "UpdateResult":
        return cls(ack=ack)

    @classmethod
    def failure(cls, error: DDNSError) -> "UpdateResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.ack is not None

    @property
    def retryable(self) -> bool:
        return not self.ok and self.error.retryable

    @property
    def status(self) -> int:
        """HTTP-style status, distinct per error kind."""
        return 200 if self.ok else self.error.status

    def to_dict(self) -> Dict:
        if self.ok:
            verb = "added" if self.ack.operation is Operation.ADD else "deleted"
            return {
                "message": f"Record {verb}",
                "fqdn": self.ack.fqdn,
                "type": self.ack.rdtype.value,
                "rcode": self.ack.rcode,
            }
        return {"error": self.error.to_dict()}
