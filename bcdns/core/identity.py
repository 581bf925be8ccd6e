"""
Identity anchors and cross-chain domain names.

An ObjectIdentity is a typed reference to identity material, usually the
DER-encoded SubjectPublicKeyInfo of a public key. Identity types this
library does not know are kept as plain integers so they survive a
decode/encode cycle unchanged.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from ..exceptions import InvalidCertificateFields, MalformedEncoding
from .tlv import TLVReader, TLVWriter

MAX_DOMAIN_LENGTH = 128

_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


class ObjectIdentityType(IntEnum):
    """Known identity anchor kinds."""
    X509_PUBLIC_KEY_INFO = 0  # DER SubjectPublicKeyInfo
    BID = 1                   # BIF blockchain identity document


IdentityTypeValue = Union[ObjectIdentityType, int]


@dataclass(frozen=True)
class ObjectIdentity:
    """Identity anchor: a type code plus opaque raw bytes."""

    TAG_TYPE = 0
    TAG_RAW_BYTES = 1

    type: IdentityTypeValue
    raw_bytes: bytes

    def __post_init__(self):
        if isinstance(self.type, bool) or not isinstance(self.type, int):
            raise InvalidCertificateFields("identity.type", "integer type code", self.type)
        if not 0 <= int(self.type) <= 0xFF:
            raise InvalidCertificateFields("identity.type", "type code in [0, 255]", self.type)
        if not isinstance(self.raw_bytes, (bytes, bytearray, memoryview)):
            raise InvalidCertificateFields("identity.raw_bytes", "bytes", type(self.raw_bytes).__name__)

        # Copy into immutable bytes so no buffer is shared across certificates
        object.__setattr__(self, "raw_bytes", bytes(self.raw_bytes))
        object.__setattr__(self, "type", _coerce_identity_type(int(self.type)))

    @property
    def is_recognized(self) -> bool:
        """True when the type is one this library knows how to interpret."""
        return isinstance(self.type, ObjectIdentityType)

    def encode(self) -> bytes:
        return (
            TLVWriter()
            .write_u8(self.TAG_TYPE, int(self.type))
            .write_bytes(self.TAG_RAW_BYTES, self.raw_bytes)
            .getvalue()
        )

    @classmethod
    def decode(cls, data: bytes) -> "ObjectIdentity":
        reader = TLVReader(data, "ObjectIdentity")
        type_code = reader.read_u8(cls.TAG_TYPE, "type")
        raw_bytes = reader.read_bytes(cls.TAG_RAW_BYTES, "raw_bytes")
        reader.finish()
        return cls(type=type_code, raw_bytes=raw_bytes)

    def __repr__(self) -> str:
        type_name = self.type.name if self.is_recognized else str(int(self.type))
        return f"ObjectIdentity(type={type_name}, raw_bytes=<{len(self.raw_bytes)} bytes>)"


def _coerce_identity_type(code: int) -> IdentityTypeValue:
    try:
        return ObjectIdentityType(code)
    except ValueError:
        return code


@dataclass(frozen=True)
class CrossChainDomain:
    """
    Normalized cross-chain domain name such as "antchain.com".

    A value beginning with "." names a domain-name space (".com") under
    which domain names are issued. Normalization only lower-cases ASCII
    letters, so the same input always maps to the same string regardless
    of locale.
    """

    value: str

    def __post_init__(self):
        object.__setattr__(self, "value", normalize_domain(self.value))

    @property
    def is_domain_space(self) -> bool:
        return self.value.startswith(".")

    def __str__(self) -> str:
        return self.value


def normalize_domain(value: str) -> str:
    """
    Validate and normalize a domain string.

    Raises:
        InvalidCertificateFields: If the domain is empty, too long or
            contains whitespace or control characters
    """
    if not isinstance(value, str):
        raise InvalidCertificateFields("domain", "string", type(value).__name__)
    if not value:
        raise InvalidCertificateFields("domain", "non-empty domain", value)

    encoded_length = len(value.encode("utf-8"))
    if encoded_length > MAX_DOMAIN_LENGTH:
        raise InvalidCertificateFields(
            "domain", f"at most {MAX_DOMAIN_LENGTH} UTF-8 bytes", f"{encoded_length} bytes"
        )

    for char in value:
        if char.isspace() or not char.isprintable():
            raise InvalidCertificateFields("domain", "no whitespace or control characters", value)

    return value.translate(_ASCII_LOWER)


def decode_domain(value: str, field: str) -> CrossChainDomain:
    """Decode-side domain check: only canonical (already normalized) domains are accepted."""
    try:
        domain = CrossChainDomain(value)
    except InvalidCertificateFields as e:
        raise MalformedEncoding(field, str(e))
    if domain.value != value:
        raise MalformedEncoding(field, f"domain {value!r} is not in normalized form")
    return domain


__all__ = [
    "ObjectIdentityType",
    "ObjectIdentity",
    "CrossChainDomain",
    "normalize_domain",
    "decode_domain",
    "MAX_DOMAIN_LENGTH",
]
