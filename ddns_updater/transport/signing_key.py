"""
TSIG signing keys for update requests.

Keys are loaded once at start-up, from a BIND ``key { ... };`` statement
(as written by tsig-keygen) or from a legacy ``K<name>.+157+NNNNN.key``
file as produced by dnssec-keygen, and are shared read-only afterwards.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

import dns.exception
import dns.name
import dns.tsig
import dns.tsigkeyring

from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "hmac-sha256"

SUPPORTED_ALGORITHMS = {
    "hmac-md5": dns.tsig.HMAC_MD5,
    "hmac-md5.sig-alg.reg.int": dns.tsig.HMAC_MD5,
    "hmac-sha1": dns.tsig.HMAC_SHA1,
    "hmac-sha224": dns.tsig.HMAC_SHA224,
    "hmac-sha256": dns.tsig.HMAC_SHA256,
    "hmac-sha384": dns.tsig.HMAC_SHA384,
    "hmac-sha512": dns.tsig.HMAC_SHA512,
}

# DNSSEC algorithm numbers used by dnssec-keygen for HMAC keys
_KEY_RR_ALGORITHMS = {
    "157": "hmac-md5",
    "161": "hmac-sha1",
    "162": "hmac-sha224",
    "163": "hmac-sha256",
    "164": "hmac-sha384",
    "165": "hmac-sha512",
}

_KEY_BLOCK_RE = re.compile(r'key\s+"?([A-Za-z0-9._-]+)"?\s*\{(.*?)\}\s*;', re.DOTALL)
_KEY_RR_RE = re.compile(
    r"^(\S+)\s+(?:\d+\s+)?IN\s+KEY\s+\d+\s+\d+\s+(\d+)\s+(.+)$", re.MULTILINE
)


@dataclass(frozen=True)
class SigningKey:
    """A TSIG key: name, base64 secret and HMAC algorithm."""

    name: str
    secret: str = field(repr=False)
    algorithm: str = DEFAULT_ALGORITHM

    def __post_init__(self):
        algorithm = self.algorithm.lower().rstrip(".")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(f"Unsupported TSIG algorithm: {self.algorithm}")
        object.__setattr__(self, "algorithm", algorithm)

        try:
            dns.name.from_text(self.name)
            if not base64.b64decode(self.secret, validate=True):
                raise binascii.Error("empty secret")
        except (dns.exception.DNSException, binascii.Error) as e:
            raise ConfigurationError(f"Invalid TSIG key '{self.name}': {e}") from e

    @property
    def keyname(self) -> dns.name.Name:
        return dns.name.from_text(self.name)

    def keyring(self) -> Dict:
        """Keyring in the form dnspython's message signing expects."""
        return dns.tsigkeyring.from_text(
            {self.name: (SUPPORTED_ALGORITHMS[self.algorithm], self.secret)}
        )

    @classmethod
    def from_file(
        cls,
        key_file: str,
        key_name: Optional[str] = None,
        algorithm: Optional[str] = None,
    ) -> "SigningKey":
        """
        Load a key from a BIND key file.

        Args:
            key_file: Path to the key file
            key_name: Key to pick when the file holds several; first one otherwise
            algorithm: Overrides the algorithm found in the file

        Raises:
            ConfigurationError: if the file cannot be read or holds no usable key
        """
        try:
            with open(key_file, "r") as f:
                key_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read TSIG key file {key_file}: {e}") from e

        parsed = cls._parse_bind_key_file(key_content, key_name)
        if parsed is None:
            raise ConfigurationError(
                f"No TSIG key{f' named {key_name!r}' if key_name else ''} found in {key_file}"
            )

        name, secret, file_algorithm = parsed
        key = cls(name=name, secret=secret, algorithm=algorithm or file_algorithm)
        logger.info(f"TSIG key '{key.name}' ({key.algorithm}) loaded from {key_file}")
        return key

    @staticmethod
    def _parse_bind_key_file(key_content: str, key_name: Optional[str]):
        """Return (name, secret, algorithm) for the selected key, or None."""
        for match in _KEY_BLOCK_RE.finditer(key_content):
            name, key_block = match.group(1), match.group(2)
            if key_name and name.rstrip(".") != key_name.rstrip("."):
                continue
            secret_match = re.search(r'secret\s+"([^"]+)"\s*;', key_block)
            if not secret_match:
                continue
            algorithm_match = re.search(r"algorithm\s+([A-Za-z0-9.-]+)\s*;", key_block)
            algorithm = algorithm_match.group(1) if algorithm_match else DEFAULT_ALGORITHM
            return name, secret_match.group(1), algorithm

        for match in _KEY_RR_RE.finditer(key_content):
            name, number, secret = match.groups()
            if key_name and name.rstrip(".") != key_name.rstrip("."):
                continue
            algorithm = _KEY_RR_ALGORITHMS.get(number)
            if algorithm is None:
                logger.warning(f"Skipping key '{name}' with non-HMAC algorithm {number}")
                continue
            return name.rstrip("."), "".join(secret.split()), algorithm

        return None
