"""
Mock update transport for testing and demonstration.

This module provides a transport that records submitted transactions in
memory instead of sending them, and can be told to fail with a given error.
"""

import logging
from typing import List, Optional, Tuple

from .base_transport import UpdateTransport
from .signing_key import SigningKey
from ..core.errors import TransportError
from ..core.result import Ack
from ..core.transaction import UpdateTransaction

logger = logging.getLogger(__name__)


class MockUpdateTransport(UpdateTransport):
    """Mock transport for testing and demonstration purposes."""

    def __init__(self, error: Optional[TransportError] = None):
        """Initialize mock transport, optionally failing every submission."""
        self.error = error
        self.submitted: List[UpdateTransaction] = []
        logger.info("Mock update transport initialized")

    def submit(
        self,
        transaction: UpdateTransaction,
        signing_key: Optional[SigningKey] = None,
        endpoint: Optional[Tuple[str, int]] = None,
        timeout: Optional[float] = None,
    ) -> Ack:
        host, port = endpoint or (transaction.server, transaction.port)
        if self.error is not None:
            logger.info(f"Mock: Failing update for {transaction.fqdn}: {self.error.code}")
            raise self.error

        self.submitted.append(transaction)
        logger.info(
            f"Mock: {transaction.operation.value} {transaction.fqdn} "
            f"{transaction.rdtype.value} {transaction.value}"
        )
        return Ack(
            fqdn=transaction.fqdn,
            rdtype=transaction.rdtype,
            operation=transaction.operation,
            server=host,
            port=port,
            message_id=len(self.submitted),
            signed=signing_key is not None,
        )
