"""
Update Transaction - Validated, immutable dynamic update requests

This module turns caller input into an UpdateTransaction and renders it in
the line-oriented update syntax understood by nsupdate-style tooling:

    server <host> <port>
    zone <zone>
    update add <fqdn> <ttl> <type> <value>
    send

Nothing unvalidated ever reaches the rendered text.
"""

import ipaddress
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import dns.exception
import dns.rdata
import dns.rdataclass
import dns.rdatatype

from .errors import InvalidName, InvalidTTL, InvalidValue, UnsupportedType, ValidationError
from ..utils.validators import (
    MAX_NAME_LENGTH,
    MAX_TXT_RDATA_LENGTH,
    escape_txt,
    txt_rdata_length,
    validate_domain_name,
    validate_ipv4,
    validate_ipv6,
    validate_relative_name,
    validate_ttl,
    validate_txt,
    validate_zone_name,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL = 60
DEFAULT_MX_PREFERENCE = 10


class RecordType(str, Enum):
    """Record types the updater knows how to validate."""

    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    TXT = "TXT"
    MX = "MX"
    NS = "NS"
    PTR = "PTR"


class Operation(str, Enum):
    ADD = "add"
    DELETE = "delete"


# Types whose value is a single domain name
_NAME_TYPES = {RecordType.CNAME, RecordType.NS, RecordType.PTR}


@dataclass(frozen=True)
class UpdateTransaction:
    """A single well-formed update, consumed once by a transport."""

    server: str
    port: int
    zone: str
    operation: Operation
    fqdn: str
    ttl: int
    rdtype: RecordType
    value: str

    @property
    def rdata_text(self) -> str:
        """Record data in update syntax, escaped where the type requires it."""
        if self.rdtype is RecordType.TXT:
            return escape_txt(self.value)
        return self.value

    def update_line(self) -> str:
        if self.operation is Operation.ADD:
            return (
                f"update add {self.fqdn} {self.ttl} {self.rdtype.value} {self.rdata_text}"
            )
        line = f"update delete {self.fqdn} {self.rdtype.value}"
        if self.value:
            line += f" {self.rdata_text}"
        return line

    def render(self) -> str:
        """Render the complete transaction text, terminated by ``send``."""
        lines = [
            f"server {self.server} {self.port}",
            f"zone {self.zone}",
            self.update_line(),
            "send",
        ]
        return "\n".join(lines) + "\n"


class UpdateTransactionBuilder:
    """Validates record parameters and builds UpdateTransactions for one zone."""

    def __init__(
        self,
        zone: str,
        server: str = "dns-server",
        port: int = 53,
        default_ttl: int = DEFAULT_TTL,
    ):
        """Initialize the builder for a zone and its primary server."""
        if not validate_zone_name(zone):
            raise InvalidName(f"Invalid zone name: {zone!r}")
        if not (validate_ipv4(server) or validate_ipv6(server) or validate_domain_name(server)):
            raise InvalidName(f"Invalid server address: {server!r}")
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise InvalidValue(f"Invalid server port: {port!r}")
        if not validate_ttl(default_ttl):
            raise InvalidTTL(f"Invalid default TTL: {default_ttl!r}")

        self.zone = zone.rstrip(".").lower()
        self.server = server
        self.port = port
        self.default_ttl = default_ttl

    def build(
        self,
        name: str,
        record_type: str,
        value: Optional[str],
        ttl: Optional[Union[int, str]] = None,
        operation: Union[Operation, str] = Operation.ADD,
    ) -> UpdateTransaction:
        """
        Validate the inputs and build a transaction.

        Args:
            name: Record name relative to the zone, or ``@`` for the apex
            record_type: Record type, e.g. ``A`` or ``txt``
            value: Record data; may be empty only for a delete
            ttl: TTL in seconds, defaults to the builder's default TTL
            operation: ``add`` or ``delete``

        Returns:
            The immutable UpdateTransaction

        Raises:
            InvalidName, UnsupportedType, InvalidValue, InvalidTTL
        """
        operation = self._parse_operation(operation)
        fqdn = self._make_fqdn(name)
        rdtype = self._parse_type(record_type)
        value = self._normalize_value(rdtype, value, operation)
        ttl = self._resolve_ttl(ttl) if operation is Operation.ADD else 0

        return UpdateTransaction(
            server=self.server,
            port=self.port,
            zone=self.zone,
            operation=operation,
            fqdn=fqdn,
            ttl=ttl,
            rdtype=rdtype,
            value=value,
        )

    def _parse_operation(self, operation) -> Operation:
        try:
            return Operation(operation)
        except ValueError:
            raise ValidationError(f"Unsupported operation: {operation!r}") from None

    def _parse_type(self, record_type) -> RecordType:
        if not isinstance(record_type, str):
            raise UnsupportedType(f"Record type must be a string, got {record_type!r}")
        try:
            return RecordType(record_type.upper())
        except ValueError:
            raise UnsupportedType(f"Unsupported record type: {record_type!r}") from None

    def _make_fqdn(self, name) -> str:
        """Combine a relative name with the zone into an absolute name."""
        if not isinstance(name, str) or not name:
            raise InvalidName("Record name must be a non-empty string")

        if name == "@":
            return f"{self.zone}."

        if name.endswith("."):
            absolute = name[:-1].lower()
            if absolute == self.zone:
                return f"{self.zone}."
            if not absolute.endswith(f".{self.zone}"):
                raise InvalidName(f"Name {name!r} is outside zone {self.zone}")
            name = absolute[: -len(self.zone) - 1]

        if not validate_relative_name(name):
            raise InvalidName(f"Invalid record name: {name!r}")

        fqdn = f"{name}.{self.zone}".lower()
        if len(fqdn) > MAX_NAME_LENGTH:
            raise InvalidName(f"Name {fqdn!r} exceeds {MAX_NAME_LENGTH} bytes")
        return f"{fqdn}."

    def _make_target(self, target: str) -> str:
        """Normalize a domain name used as record data to absolute form."""
        if target == "@":
            return f"{self.zone}."
        if not validate_domain_name(target):
            raise InvalidValue(f"Invalid domain name: {target!r}")
        if target.endswith("."):
            return target.lower()

        absolute = f"{target}.{self.zone}".lower()
        if len(absolute) > MAX_NAME_LENGTH:
            raise InvalidValue(f"Domain name {absolute!r} exceeds {MAX_NAME_LENGTH} bytes")
        return f"{absolute}."

    def _normalize_value(self, rdtype: RecordType, value, operation: Operation) -> str:
        if value is None or value == "":
            if operation is Operation.DELETE:
                return ""
            raise InvalidValue(f"A value is required for {rdtype.value} records")

        if not isinstance(value, str):
            raise InvalidValue(f"Record value must be a string, got {value!r}")

        if rdtype is RecordType.A:
            if not validate_ipv4(value):
                raise InvalidValue(f"Invalid IPv4 address: {value!r}")
            return str(ipaddress.IPv4Address(value))

        if rdtype is RecordType.AAAA:
            if not validate_ipv6(value):
                raise InvalidValue(f"Invalid IPv6 address: {value!r}")
            return ipaddress.IPv6Address(value).compressed

        if rdtype in _NAME_TYPES:
            return self._make_target(value)

        if rdtype is RecordType.MX:
            return self._normalize_mx(value)

        if not validate_txt(value):
            raise InvalidValue("TXT data must not contain control characters")
        length = txt_rdata_length(value)
        if length > MAX_TXT_RDATA_LENGTH:
            raise InvalidValue(
                f"TXT data too long: {length} bytes encoded, "
                f"at most {MAX_TXT_RDATA_LENGTH}"
            )
        return value

    def _normalize_mx(self, value: str) -> str:
        parts = value.split(" ")
        if len(parts) == 1:
            preference = DEFAULT_MX_PREFERENCE
        elif len(parts) == 2 and parts[0].isdigit() and parts[0].isascii():
            preference = int(parts[0])
            if preference > 65535:
                raise InvalidValue(f"MX preference out of range: {parts[0]}")
        else:
            raise InvalidValue(f"Invalid MX value: {value!r}")
        # RFC 7505 null MX: the domain accepts no mail
        if parts[-1] == "." and preference == 0:
            return "0 ."
        return f"{preference} {self._make_target(parts[-1])}"

    def _resolve_ttl(self, ttl) -> int:
        if ttl is None:
            return self.default_ttl
        if isinstance(ttl, str) and ttl.isdigit() and ttl.isascii():
            ttl = int(ttl)
        if not validate_ttl(ttl):
            raise InvalidTTL(f"Invalid TTL: {ttl!r}")
        return ttl


def parse_transaction(text: str) -> UpdateTransaction:
    """
    Parse rendered transaction text back into an UpdateTransaction.

    TXT data is unescaped with dnspython's own master-file parser so the
    recovered value is what a server would store.

    Raises:
        ValueError: if the text is not a single rendered transaction
    """
    lines = [line.strip() for line in text.strip().splitlines()]
    if len(lines) != 4 or lines[3] != "send":
        raise ValueError("Transaction must be server, zone, update and send lines")

    server_line = lines[0].split()
    zone_line = lines[1].split()
    if len(server_line) != 3 or server_line[0] != "server":
        raise ValueError(f"Malformed server line: {lines[0]!r}")
    if len(zone_line) != 2 or zone_line[0] != "zone":
        raise ValueError(f"Malformed zone line: {lines[1]!r}")

    head = lines[2].split(None, 2)
    if len(head) != 3 or head[0] != "update":
        raise ValueError(f"Malformed update line: {lines[2]!r}")
    operation = Operation(head[1])

    if operation is Operation.ADD:
        fields = head[2].split(None, 3)
        if len(fields) != 4:
            raise ValueError(f"Malformed update line: {lines[2]!r}")
        fqdn, ttl, rdtype, rdata_text = fields
        ttl = int(ttl)
    else:
        fields = head[2].split(None, 2)
        if len(fields) < 2:
            raise ValueError(f"Malformed update line: {lines[2]!r}")
        fqdn, rdtype = fields[0], fields[1]
        rdata_text = fields[2] if len(fields) == 3 else ""
        ttl = 0

    rdtype = RecordType(rdtype)
    value = rdata_text
    if rdtype is RecordType.TXT and rdata_text:
        try:
            rdata = dns.rdata.from_text(dns.rdataclass.IN, dns.rdatatype.TXT, rdata_text)
        except dns.exception.SyntaxError as e:
            raise ValueError(f"Malformed TXT data: {e}") from e
        value = b"".join(rdata.strings).decode("utf-8")

    return UpdateTransaction(
        server=server_line[1],
        port=int(server_line[2]),
        zone=zone_line[1],
        operation=operation,
        fqdn=fqdn,
        ttl=ttl,
        rdtype=rdtype,
        value=value,
    )
