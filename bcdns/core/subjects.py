"""
Credential subjects: the typed payload a certificate attests to.

The variant set is closed. Each variant maps to exactly one CertificateType
and carries its own version tag as the first encoded item, so decoders can
reject versions they do not understand before reading anything else.

    BCDNSTrustRootCredentialSubject  -> BCDNS_TRUST_ROOT_CERTIFICATE
    DomainNameCredentialSubject      -> DOMAIN_NAME_CERTIFICATE
    RelayerCredentialSubject         -> RELAYER_CERTIFICATE
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Dict, Tuple, Type, Union

from ..exceptions import (
    InvalidCertificateFields,
    MalformedEncoding,
    UnsupportedVersion,
)
from .identity import CrossChainDomain, ObjectIdentity, decode_domain
from .tlv import TLVReader, TLVWriter

logger = logging.getLogger(__name__)


class CertificateType(IntEnum):
    """Certificate kinds, one per credential subject variant."""
    BCDNS_TRUST_ROOT_CERTIFICATE = 0
    DOMAIN_NAME_CERTIFICATE = 1
    RELAYER_CERTIFICATE = 2


class DomainNameType(IntEnum):
    """What a domain name certificate grants."""
    DOMAIN_NAME = 0
    DOMAIN_NAME_SPACE = 1


class CredentialSubject(ABC):
    """Interface shared by every credential subject variant."""

    CURRENT_VERSION: ClassVar[int] = 1
    SUPPORTED_VERSIONS: ClassVar[Tuple[int, ...]] = (1,)
    certificate_type: ClassVar[CertificateType]

    TAG_VERSION: ClassVar[int] = 0

    version: int

    @abstractmethod
    def encode(self) -> bytes:
        """Canonical, version-prefixed encoding."""

    @classmethod
    @abstractmethod
    def decode(cls, data: bytes) -> "CredentialSubject":
        """Inverse of encode()."""

    @property
    @abstractmethod
    def subject_identity(self) -> ObjectIdentity:
        """The identity this subject binds."""

    def _check_version(self):
        if isinstance(self.version, bool) or self.version not in self.SUPPORTED_VERSIONS:
            raise UnsupportedVersion(type(self).__name__, self.version, self.SUPPORTED_VERSIONS)

    @classmethod
    def _open(cls, data: bytes) -> Tuple[TLVReader, int]:
        """Split the encoding and validate its version item."""
        reader = TLVReader(data, cls.__name__)
        version = reader.read_u16(cls.TAG_VERSION, "version")
        if version not in cls.SUPPORTED_VERSIONS:
            raise UnsupportedVersion(cls.__name__, version, cls.SUPPORTED_VERSIONS)
        return reader, version


def _check_text(field: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidCertificateFields(field, "non-empty string", value)


def _check_identity(field: str, value: ObjectIdentity) -> None:
    if not isinstance(value, ObjectIdentity):
        raise InvalidCertificateFields(field, "ObjectIdentity", type(value).__name__)


def _copy_extra(value) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidCertificateFields("credential_subject.extra", "bytes", type(value).__name__)
    return bytes(value)


@dataclass(frozen=True)
class BCDNSTrustRootCredentialSubject(CredentialSubject):
    """
    Anchors the root of trust of a naming/issuing authority.

    Attributes:
        name: Root tag naming the authority (e.g. "root-x")
        root_identity: Identity of the root's owner
        extra: Opaque application data
        version: Subject encoding version
    """

    certificate_type: ClassVar[CertificateType] = CertificateType.BCDNS_TRUST_ROOT_CERTIFICATE

    TAG_NAME: ClassVar[int] = 1
    TAG_ROOT_IDENTITY: ClassVar[int] = 2
    TAG_EXTRA: ClassVar[int] = 3

    name: str
    root_identity: ObjectIdentity
    extra: bytes = b""
    version: int = CredentialSubject.CURRENT_VERSION

    def __post_init__(self):
        self._check_version()
        _check_text("credential_subject.name", self.name)
        _check_identity("credential_subject.root_identity", self.root_identity)
        object.__setattr__(self, "extra", _copy_extra(self.extra))

    @property
    def subject_identity(self) -> ObjectIdentity:
        return self.root_identity

    def encode(self) -> bytes:
        return (
            TLVWriter()
            .write_u16(self.TAG_VERSION, self.version)
            .write_string(self.TAG_NAME, self.name)
            .write_bytes(self.TAG_ROOT_IDENTITY, self.root_identity.encode())
            .write_bytes(self.TAG_EXTRA, self.extra)
            .getvalue()
        )

    @classmethod
    def decode(cls, data: bytes) -> "BCDNSTrustRootCredentialSubject":
        reader, version = cls._open(data)
        name = reader.read_string(cls.TAG_NAME, "name")
        root_identity = ObjectIdentity.decode(reader.read_bytes(cls.TAG_ROOT_IDENTITY, "root_identity"))
        extra = reader.read_bytes(cls.TAG_EXTRA, "extra")
        reader.finish()

        try:
            return cls(name=name, root_identity=root_identity, extra=extra, version=version)
        except InvalidCertificateFields as e:
            raise MalformedEncoding(cls.__name__, str(e))


@dataclass(frozen=True)
class DomainNameCredentialSubject(CredentialSubject):
    """
    Grants a domain name ("antchain.com") or a domain-name space (".com")
    to the applicant identity.
    """

    certificate_type: ClassVar[CertificateType] = CertificateType.DOMAIN_NAME_CERTIFICATE

    TAG_DOMAIN_TYPE: ClassVar[int] = 1
    TAG_DOMAIN: ClassVar[int] = 2
    TAG_APPLICANT: ClassVar[int] = 3
    TAG_EXTRA: ClassVar[int] = 4

    version: int
    domain_type: DomainNameType
    domain: CrossChainDomain
    applicant: ObjectIdentity
    extra: bytes = b""

    def __post_init__(self):
        self._check_version()
        try:
            object.__setattr__(self, "domain_type", DomainNameType(self.domain_type))
        except ValueError:
            raise InvalidCertificateFields(
                "credential_subject.domain_type", "DOMAIN_NAME or DOMAIN_NAME_SPACE", self.domain_type
            )
        if isinstance(self.domain, str):
            object.__setattr__(self, "domain", CrossChainDomain(self.domain))
        elif not isinstance(self.domain, CrossChainDomain):
            raise InvalidCertificateFields(
                "credential_subject.domain", "CrossChainDomain", type(self.domain).__name__
            )

        wants_space = self.domain_type == DomainNameType.DOMAIN_NAME_SPACE
        if self.domain.is_domain_space != wants_space:
            expected = "domain starting with '.'" if wants_space else "domain not starting with '.'"
            raise InvalidCertificateFields("credential_subject.domain", expected, self.domain.value)

        _check_identity("credential_subject.applicant", self.applicant)
        object.__setattr__(self, "extra", _copy_extra(self.extra))

    @property
    def subject_identity(self) -> ObjectIdentity:
        return self.applicant

    def encode(self) -> bytes:
        return (
            TLVWriter()
            .write_u16(self.TAG_VERSION, self.version)
            .write_u8(self.TAG_DOMAIN_TYPE, int(self.domain_type))
            .write_string(self.TAG_DOMAIN, self.domain.value)
            .write_bytes(self.TAG_APPLICANT, self.applicant.encode())
            .write_bytes(self.TAG_EXTRA, self.extra)
            .getvalue()
        )

    @classmethod
    def decode(cls, data: bytes) -> "DomainNameCredentialSubject":
        reader, version = cls._open(data)
        type_code = reader.read_u8(cls.TAG_DOMAIN_TYPE, "domain_type")
        try:
            domain_type = DomainNameType(type_code)
        except ValueError:
            raise MalformedEncoding(f"{cls.__name__}.domain_type", f"unknown domain type {type_code}")
        domain = decode_domain(reader.read_string(cls.TAG_DOMAIN, "domain"), f"{cls.__name__}.domain")
        applicant = ObjectIdentity.decode(reader.read_bytes(cls.TAG_APPLICANT, "applicant"))
        extra = reader.read_bytes(cls.TAG_EXTRA, "extra")
        reader.finish()

        try:
            return cls(
                version=version,
                domain_type=domain_type,
                domain=domain,
                applicant=applicant,
                extra=extra,
            )
        except InvalidCertificateFields as e:
            raise MalformedEncoding(cls.__name__, str(e))


@dataclass(frozen=True)
class RelayerCredentialSubject(CredentialSubject):
    """Identifies a relayer that carries cross-chain messages."""

    certificate_type: ClassVar[CertificateType] = CertificateType.RELAYER_CERTIFICATE

    TAG_NAME: ClassVar[int] = 1
    TAG_APPLICANT: ClassVar[int] = 2
    TAG_EXTRA: ClassVar[int] = 3

    version: int
    name: str
    applicant: ObjectIdentity
    extra: bytes = b""

    def __post_init__(self):
        self._check_version()
        _check_text("credential_subject.name", self.name)
        _check_identity("credential_subject.applicant", self.applicant)
        object.__setattr__(self, "extra", _copy_extra(self.extra))

    @property
    def subject_identity(self) -> ObjectIdentity:
        return self.applicant

    def encode(self) -> bytes:
        return (
            TLVWriter()
            .write_u16(self.TAG_VERSION, self.version)
            .write_string(self.TAG_NAME, self.name)
            .write_bytes(self.TAG_APPLICANT, self.applicant.encode())
            .write_bytes(self.TAG_EXTRA, self.extra)
            .getvalue()
        )

    @classmethod
    def decode(cls, data: bytes) -> "RelayerCredentialSubject":
        reader, version = cls._open(data)
        name = reader.read_string(cls.TAG_NAME, "name")
        applicant = ObjectIdentity.decode(reader.read_bytes(cls.TAG_APPLICANT, "applicant"))
        extra = reader.read_bytes(cls.TAG_EXTRA, "extra")
        reader.finish()

        try:
            return cls(version=version, name=name, applicant=applicant, extra=extra)
        except InvalidCertificateFields as e:
            raise MalformedEncoding(cls.__name__, str(e))


AnyCredentialSubject = Union[
    BCDNSTrustRootCredentialSubject,
    DomainNameCredentialSubject,
    RelayerCredentialSubject,
]

SUBJECT_TYPES: Dict[CertificateType, Type[CredentialSubject]] = {
    CertificateType.BCDNS_TRUST_ROOT_CERTIFICATE: BCDNSTrustRootCredentialSubject,
    CertificateType.DOMAIN_NAME_CERTIFICATE: DomainNameCredentialSubject,
    CertificateType.RELAYER_CERTIFICATE: RelayerCredentialSubject,
}


def decode_credential_subject(certificate_type: CertificateType, data: bytes) -> CredentialSubject:
    """Decode the subject variant that belongs to a certificate type."""
    subject_cls = SUBJECT_TYPES[CertificateType(certificate_type)]
    subject = subject_cls.decode(data)
    logger.debug(f"Decoded {subject_cls.__name__} v{subject.version}")
    return subject


__all__ = [
    "CertificateType",
    "DomainNameType",
    "CredentialSubject",
    "BCDNSTrustRootCredentialSubject",
    "DomainNameCredentialSubject",
    "RelayerCredentialSubject",
    "AnyCredentialSubject",
    "SUBJECT_TYPES",
    "decode_credential_subject",
]
