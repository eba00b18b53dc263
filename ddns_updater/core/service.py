"""
DDNS Service - Boundary for adding and deleting records

This module wires configuration, the signing key, the transaction builder
and an update transport together. Its operations never raise for a failed
update: every outcome is returned as an UpdateResult so that the calling
layer (an HTTP handler, the CLI) can map each error kind to its own response.
"""

import logging
import math
from typing import Dict, Optional, Union

from .errors import ConfigurationError, TransportError, ValidationError
from .result import UpdateResult
from .transaction import Operation, UpdateTransactionBuilder
from ..transport.base_transport import UpdateTransport
from ..transport.dns_transport import DNSUpdateTransport
from ..transport.mock_transport import MockUpdateTransport
from ..transport.signing_key import SigningKey

logger = logging.getLogger(__name__)

_UNSET = object()


class DDNSService:
    """Adds and deletes records in one zone on one authoritative server."""

    def __init__(
        self,
        config: Dict,
        transport: Optional[UpdateTransport] = None,
        signing_key=_UNSET,
    ):
        """
        Initialize the service.

        Args:
            config: Configuration as returned by ``load_config``
            transport: Transport to use; chosen from configuration when None
            signing_key: Key to sign with; loaded from configuration when not
                given. Pass None explicitly to send unsigned updates.

        Raises:
            ConfigurationError: for an invalid zone, server, timeout or signing key
        """
        self.config = config
        server_config = config.get("server", {})
        self.timeout = self._parse_timeout(server_config.get("timeout", 5.0))

        try:
            self.builder = UpdateTransactionBuilder(
                zone=config.get("zone", "example.test"),
                server=server_config.get("host", "dns-server"),
                port=server_config.get("port", 53),
                default_ttl=config.get("default_ttl", 60),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e.message}") from e

        self.transport = transport or self._get_transport()
        self.signing_key = (
            self._load_signing_key() if signing_key is _UNSET else signing_key
        )

        logger.info(
            f"DDNS service initialized for zone {self.builder.zone} "
            f"via {self.builder.server}:{self.builder.port}"
        )

    @staticmethod
    def _parse_timeout(timeout) -> float:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid server timeout: {timeout!r}") from None
        if not (timeout > 0 and math.isfinite(timeout)):
            raise ConfigurationError(f"Server timeout must be positive, got {timeout}")
        return timeout

    def _get_transport(self) -> UpdateTransport:
        """Get update transport based on configuration."""
        protocol = self.config.get("server", {}).get("protocol", "tcp")
        if protocol == "mock":
            return MockUpdateTransport()
        try:
            return DNSUpdateTransport(timeout=self.timeout, protocol=protocol)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def _load_signing_key(self) -> Optional[SigningKey]:
        key_config = self.config.get("signing_key") or {}
        key_file = key_config.get("file")
        if not key_file:
            logger.warning("No signing key configured, updates will be sent unsigned")
            return None
        return SigningKey.from_file(
            key_file,
            key_name=key_config.get("name"),
            algorithm=key_config.get("algorithm"),
        )

    def add_record(
        self,
        name: str,
        record_type: str,
        value: str,
        ttl: Optional[Union[int, str]] = None,
    ) -> UpdateResult:
        """Add a record to the zone."""
        return self._execute(Operation.ADD, name, record_type, value, ttl)

    def delete_record(
        self, name: str, record_type: str, value: Optional[str] = None
    ) -> UpdateResult:
        """Delete one record, or the whole RRset of the type when value is empty."""
        return self._execute(Operation.DELETE, name, record_type, value, None)

    def preview(
        self,
        name: str,
        record_type: str,
        value: Optional[str],
        ttl: Optional[Union[int, str]] = None,
        operation: Union[Operation, str] = Operation.ADD,
    ) -> str:
        """Render the transaction that would be sent. Raises ValidationError."""
        return self.builder.build(name, record_type, value, ttl, operation).render()

    def _execute(self, operation, name, record_type, value, ttl) -> UpdateResult:
        try:
            transaction = self.builder.build(name, record_type, value, ttl, operation)
        except ValidationError as e:
            logger.warning(f"Rejected {operation.value} request for {name!r}: {e.message}")
            return UpdateResult.failure(e)

        try:
            ack = self.transport.submit(
                transaction, self.signing_key, timeout=self.timeout
            )
        except (TransportError, ValidationError) as e:
            logger.error(f"Failed to {operation.value} record {transaction.fqdn}: {e.message}")
            return UpdateResult.failure(e)

        logger.info(
            f"{operation.value.capitalize()} {transaction.fqdn} "
            f"{transaction.rdtype.value} acknowledged ({ack.rcode})"
        )
        return UpdateResult.success(ack)
