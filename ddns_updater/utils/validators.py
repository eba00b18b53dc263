"""
Validators - Input validation for dynamic update records

This module provides validation functions for record names, addresses,
domain name targets and TXT data, plus the escaping used when TXT data is
rendered into update syntax.
"""

import ipaddress
import logging
import re

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 63
MAX_NAME_LENGTH = 253
MAX_CHARACTER_STRING = 255
# Largest TXT rdata that still fits a 65535-byte update message with its
# header, zone, owner name and TSIG record.
MAX_TXT_RDATA_LENGTH = 64512
MAX_TTL = 2**31 - 1

_LABEL_RE = re.compile(r"[A-Za-z0-9_]([A-Za-z0-9_-]*[A-Za-z0-9_])?")

# Characters with meaning inside a quoted update-syntax string.
TXT_ESCAPED_CHARS = '"\\;'


def validate_label(label: str) -> bool:
    """
    Validate a single domain label.

    Labels can contain letters, digits, hyphens and underscores, cannot
    start or end with a hyphen and are at most 63 bytes long.
    """
    if not label or len(label) > MAX_LABEL_LENGTH:
        return False
    return bool(_LABEL_RE.fullmatch(label))


def validate_relative_name(name: str, allow_wildcard: bool = True) -> bool:
    """
    Validate a name relative to a zone (no trailing dot).

    Args:
        name: The relative name, e.g. ``www`` or ``_acme-challenge.api``
        allow_wildcard: Accept ``*`` as the leftmost label

    Returns:
        True if valid, False otherwise
    """
    if not name or not isinstance(name, str):
        return False

    if name.startswith(".") or name.endswith("."):
        return False

    labels = name.split(".")
    for i, label in enumerate(labels):
        if i == 0 and allow_wildcard and label == "*":
            continue
        if not validate_label(label):
            logger.warning(f"Invalid label '{label}' in name: {name}")
            return False

    return True


def validate_domain_name(name: str) -> bool:
    """
    Validate an absolute or relative domain name.

    A single trailing dot marks the name absolute. The length limit applies
    to the textual name without the final root dot.
    """
    if not name or not isinstance(name, str):
        return False

    relative = name[:-1] if name.endswith(".") else name
    if len(relative) > MAX_NAME_LENGTH:
        logger.warning(f"Domain name too long: {name}")
        return False

    return validate_relative_name(relative, allow_wildcard=False)


def validate_zone_name(zone: str) -> bool:
    """Validate DNS zone name."""
    if not validate_domain_name(zone):
        return False

    # Zone names are never IP addresses
    if validate_ipv4(zone):
        return False

    return True


def validate_ipv4(ipv4: str) -> bool:
    """
    Validate IPv4 address.

    Args:
        ipv4: The IPv4 address to validate

    Returns:
        True if valid, False otherwise
    """
    if not ipv4 or not isinstance(ipv4, str):
        return False

    try:
        ipaddress.IPv4Address(ipv4)
        return True
    except ipaddress.AddressValueError:
        return False


def validate_ipv6(ipv6: str) -> bool:
    """Validate IPv6 address. Scoped addresses are not valid record data."""
    if not ipv6 or not isinstance(ipv6, str) or "%" in ipv6:
        return False

    try:
        ipaddress.IPv6Address(ipv6)
        return True
    except ipaddress.AddressValueError:
        return False


def validate_txt(text: str) -> bool:
    """TXT data must be printable; control characters are never accepted."""
    if not isinstance(text, str):
        return False
    return text.isprintable()


def validate_ttl(ttl) -> bool:
    """TTL is an integer between 0 and 2**31 - 1 seconds."""
    if isinstance(ttl, bool) or not isinstance(ttl, int):
        return False
    return 0 <= ttl <= MAX_TTL


def txt_rdata_length(text: str) -> int:
    """Wire length of TXT data: each 255-byte chunk plus its length byte."""
    size = len(text.encode("utf-8"))
    chunks = max(1, -(-size // MAX_CHARACTER_STRING))
    return size + chunks


def escape_txt(text: str) -> str:
    """
    Render TXT data as one or more quoted character-strings.

    Quotes, backslashes and semicolons are backslash-escaped, bytes outside
    printable ASCII become ``\\DDD``, and data longer than 255 bytes is split
    across several strings.

    Args:
        text: Printable TXT data

    Returns:
        The rendered rdata text, e.g. ``"v=spf1 -all"``
    """
    data = text.encode("utf-8")
    chunks = [
        data[i : i + MAX_CHARACTER_STRING]
        for i in range(0, len(data), MAX_CHARACTER_STRING)
    ] or [b""]
    return " ".join(_quote_character_string(chunk) for chunk in chunks)


def _quote_character_string(chunk: bytes) -> str:
    escaped = []
    for byte in chunk:
        char = chr(byte)
        if char in TXT_ESCAPED_CHARS:
            escaped.append("\\" + char)
        elif 0x20 <= byte < 0x7F:
            escaped.append(char)
        else:
            escaped.append(f"\\{byte:03d}")
    return '"' + "".join(escaped) + '"'
