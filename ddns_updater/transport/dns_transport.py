"""
RFC 2136 update transport.

This module sends update transactions straight to the authoritative server
using the dnspython library. No external process or shell is involved.
"""

import logging
import socket
import time
from typing import Optional, Tuple

import dns.exception
import dns.inet
import dns.message
import dns.name
import dns.query
import dns.rcode
import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.tsig
import dns.update

from .base_transport import UpdateTransport
from .signing_key import SigningKey
from ..core.errors import (
    AuthenticationFailure,
    InvalidValue,
    ServerRejected,
    SubmissionState,
    Timeout,
    TransportUnavailable,
)
from ..core.result import Ack
from ..core.transaction import Operation, UpdateTransaction

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
PROTOCOLS = ("tcp", "udp")

# Response-signature problems reported by dnspython while reading the reply
_TSIG_ERRORS = (
    dns.tsig.PeerError,
    dns.tsig.BadSignature,
    dns.tsig.BadTime,
    dns.message.UnknownTSIGKey,
)


class DNSUpdateTransport(UpdateTransport):
    """Update transport speaking the DNS UPDATE protocol via dnspython."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, protocol: str = "tcp"):
        """Initialize the transport."""
        if protocol not in PROTOCOLS:
            raise ValueError(f"Unsupported protocol '{protocol}', expected one of {PROTOCOLS}")
        self.timeout = timeout
        self.protocol = protocol

    def submit(
        self,
        transaction: UpdateTransaction,
        signing_key: Optional[SigningKey] = None,
        endpoint: Optional[Tuple[str, int]] = None,
        timeout: Optional[float] = None,
    ) -> Ack:
        """
        Sign, send and await acknowledgement of one update.

        Args:
            transaction: A transaction produced by UpdateTransactionBuilder
            signing_key: TSIG key; the update is sent unsigned when None
            endpoint: (host, port) overriding the transaction's server
            timeout: Seconds to wait for the whole exchange

        Returns:
            Ack when the server answers NOERROR

        Raises:
            AuthenticationFailure, ServerRejected, Timeout, TransportUnavailable
        """
        host, port = endpoint or (transaction.server, transaction.port)
        timeout = self.timeout if timeout is None else timeout

        update = self._create_update_message(transaction, signing_key)
        address, remaining = self._resolve_address(host, port, timeout)

        logger.info(
            f"Sending {transaction.operation.value} {transaction.fqdn} "
            f"{transaction.rdtype.value} to {host}:{port} over {self.protocol}"
        )
        logger.debug(f"Update transaction:\n{transaction.render()}")

        try:
            response = self._send(update, address, port, remaining)
        except dns.exception.Timeout as e:
            logger.error(f"No response from {host}:{port} within {timeout}s")
            raise Timeout(f"No response from {host}:{port} within {timeout}s") from e
        except _TSIG_ERRORS as e:
            logger.error(f"TSIG verification failed against {host}:{port}: {e}")
            raise AuthenticationFailure(
                f"Server {host}:{port} rejected the signing key", detail=str(e)
            ) from e
        except OSError as e:
            logger.error(f"Cannot reach {host}:{port}: {e}")
            raise TransportUnavailable(f"Cannot reach {host}:{port}", detail=str(e)) from e
        except dns.exception.DNSException as e:
            logger.error(f"Bad response from {host}:{port}: {e}")
            raise TransportUnavailable(
                f"Bad response from {host}:{port}", detail=str(e)
            ) from e

        state = self._handle_response(response, host, port)
        logger.info(f"Update for {transaction.fqdn} acknowledged by {host}:{port}")
        return Ack(
            fqdn=transaction.fqdn,
            rdtype=transaction.rdtype,
            operation=transaction.operation,
            server=host,
            port=port,
            rcode=dns.rcode.to_text(response.rcode()),
            message_id=update.id,
            signed=signing_key is not None,
            state=state,
        )

    def _create_update_message(
        self, transaction: UpdateTransaction, signing_key: Optional[SigningKey]
    ) -> dns.update.UpdateMessage:
        """Create a DNS update message for the transaction."""
        if signing_key is not None:
            update = dns.update.UpdateMessage(
                transaction.zone,
                keyring=signing_key.keyring(),
                keyname=signing_key.keyname,
            )
        else:
            update = dns.update.UpdateMessage(transaction.zone)

        fqdn = dns.name.from_text(transaction.fqdn)
        rdtype = dns.rdatatype.from_text(transaction.rdtype.value)

        if transaction.operation is Operation.DELETE and not transaction.value:
            update.delete(fqdn, rdtype)
            return update

        try:
            rdata = dns.rdata.from_text(
                dns.rdataclass.IN, rdtype, transaction.rdata_text, origin=update.origin
            )
        except dns.exception.SyntaxError as e:
            raise InvalidValue(f"Record data rejected by encoder: {e}") from e

        if transaction.operation is Operation.ADD:
            update.add(fqdn, transaction.ttl, rdata)
        else:
            update.delete(fqdn, rdata)
        return update

    def _resolve_address(self, host: str, port: int, timeout: float) -> Tuple[str, float]:
        """
        Resolve the server to the address literal dns.query needs.

        The lookup counts against the timeout and the remaining budget is
        returned with the address. getaddrinfo itself cannot be interrupted,
        so a resolver that hangs is only noticed once it returns.
        """
        if dns.inet.is_address(host):
            return host, timeout

        started = time.monotonic()
        try:
            infos = socket.getaddrinfo(host, port, proto=socket.IPPROTO_TCP)
        except OSError as e:
            logger.error(f"Cannot resolve server {host}: {e}")
            raise TransportUnavailable(f"Cannot resolve server {host}", detail=str(e)) from e

        remaining = timeout - (time.monotonic() - started)
        if remaining <= 0:
            logger.error(f"Resolving {host} used up the {timeout}s timeout")
            raise Timeout(f"Resolving {host} took longer than {timeout}s")
        return infos[0][4][0], remaining

    def _send(self, update: dns.update.UpdateMessage, address: str, port: int, timeout: float):
        if self.protocol == "udp":
            return dns.query.udp(update, address, timeout=timeout, port=port)
        return dns.query.tcp(update, address, timeout=timeout, port=port)

    def _handle_response(self, response: dns.message.Message, host: str, port: int) -> SubmissionState:
        """Map the response code to a terminal state, raising on failure."""
        rcode = response.rcode()
        if rcode == dns.rcode.NOERROR:
            return SubmissionState.ACKED

        rcode_text = dns.rcode.to_text(rcode)
        error_message = f"DNS update failed with response code: {rcode_text}"
        logger.error(f"{error_message} from {host}:{port}")
        if rcode == dns.rcode.NOTAUTH:
            raise AuthenticationFailure(error_message, detail=rcode_text)
        raise ServerRejected(error_message, rcode=rcode_text)
