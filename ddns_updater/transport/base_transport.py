"""
Base update transport interface.

This module defines the abstract base class that all update transports must implement.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..core.result import Ack
from ..core.transaction import UpdateTransaction
from .signing_key import SigningKey


class UpdateTransport(ABC):
    """Abstract base class for update transports."""

    @abstractmethod
    def submit(
        self,
        transaction: UpdateTransaction,
        signing_key: Optional[SigningKey] = None,
        endpoint: Optional[Tuple[str, int]] = None,
        timeout: Optional[float] = None,
    ) -> Ack:
        """Deliver one transaction and return the server's acknowledgement."""
        pass
