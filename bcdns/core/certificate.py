"""
Cross-chain certificate envelope.

A certificate binds an issuer identity and a validity window to a credential
subject. It exists in two states:

- UnsignedCertificate: fields only, as returned by the factory
- SignedCertificate: fields plus the IssueProof, returned by set_proof()

Binary layout (TLV items, see tlv.py):

    0 version            uint16
    1 type               uint8  (CertificateType of the credential subject)
    2 subject_id         UTF-8
    3 issuer             ObjectIdentity
    4 effective_time     uint64 unix seconds
    5 expire_time        uint64 unix seconds
    6 credential_subject subject encoding (version-tagged)
    7 proof              IssueProof, signed certificates only

Items 0-6 form the encode-to-sign bytes. The full encoding appends item 7,
so a proof can never influence the bytes it signs.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from ..exceptions import (
    InvalidCertificateFields,
    MalformedEncoding,
    ProofAlreadySet,
    UnsupportedVersion,
)
from .identity import CrossChainDomain, ObjectIdentity
from .subjects import (
    CertificateType,
    CredentialSubject,
    DomainNameCredentialSubject,
    SUBJECT_TYPES,
    decode_credential_subject,
)
from .tlv import TLVReader, TLVWriter, encode_item

logger = logging.getLogger(__name__)

CERTIFICATE_VERSION_1 = 1
SUPPORTED_CERTIFICATE_VERSIONS = (CERTIFICATE_VERSION_1,)

MAX_TIMESTAMP = 2 ** 64 - 1

TAG_VERSION = 0
TAG_TYPE = 1
TAG_SUBJECT_ID = 2
TAG_ISSUER = 3
TAG_EFFECTIVE_TIME = 4
TAG_EXPIRE_TIME = 5
TAG_CREDENTIAL_SUBJECT = 6
TAG_PROOF = 7


@dataclass(frozen=True)
class IssueProof:
    """Digest and signature an issuer computed over the encode-to-sign bytes."""

    TAG_DIGEST_ALGORITHM: ClassVar[int] = 0
    TAG_DIGEST_VALUE: ClassVar[int] = 1
    TAG_SIGNATURE_ALGORITHM: ClassVar[int] = 2
    TAG_SIGNATURE_VALUE: ClassVar[int] = 3

    digest_algorithm: str
    digest_value: bytes
    signature_algorithm: str
    signature_value: bytes

    def __post_init__(self):
        for name in ("digest_algorithm", "signature_algorithm"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidCertificateFields(f"proof.{name}", "non-empty algorithm name", value)
        for name in ("digest_value", "signature_value"):
            value = getattr(self, name)
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise InvalidCertificateFields(f"proof.{name}", "bytes", type(value).__name__)
            object.__setattr__(self, name, bytes(value))

    def encode(self) -> bytes:
        return (
            TLVWriter()
            .write_string(self.TAG_DIGEST_ALGORITHM, self.digest_algorithm)
            .write_bytes(self.TAG_DIGEST_VALUE, self.digest_value)
            .write_string(self.TAG_SIGNATURE_ALGORITHM, self.signature_algorithm)
            .write_bytes(self.TAG_SIGNATURE_VALUE, self.signature_value)
            .getvalue()
        )

    @classmethod
    def decode(cls, data: bytes) -> "IssueProof":
        reader = TLVReader(data, "IssueProof")
        digest_algorithm = reader.read_string(cls.TAG_DIGEST_ALGORITHM, "digest_algorithm")
        digest_value = reader.read_bytes(cls.TAG_DIGEST_VALUE, "digest_value")
        signature_algorithm = reader.read_string(cls.TAG_SIGNATURE_ALGORITHM, "signature_algorithm")
        signature_value = reader.read_bytes(cls.TAG_SIGNATURE_VALUE, "signature_value")
        reader.finish()

        try:
            return cls(digest_algorithm, digest_value, signature_algorithm, signature_value)
        except InvalidCertificateFields as e:
            raise MalformedEncoding("IssueProof", str(e))


@dataclass(frozen=True)
class CrossChainCertificate:
    """
    Fields shared by both certificate states.

    subject_id is a human-facing label. Trust derives only from the
    credential subject together with a verified proof.
    """

    version: int
    subject_id: str
    issuer: ObjectIdentity
    effective_time: int
    expire_time: int
    credential_subject: CredentialSubject

    def __post_init__(self):
        if isinstance(self.version, bool) or self.version not in SUPPORTED_CERTIFICATE_VERSIONS:
            raise UnsupportedVersion("certificate", self.version, SUPPORTED_CERTIFICATE_VERSIONS)
        if not isinstance(self.subject_id, str) or not self.subject_id:
            raise InvalidCertificateFields("subject_id", "non-empty string", self.subject_id)
        if not isinstance(self.issuer, ObjectIdentity):
            raise InvalidCertificateFields("issuer", "ObjectIdentity", type(self.issuer).__name__)

        for name in ("effective_time", "expire_time"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_TIMESTAMP:
                raise InvalidCertificateFields(name, "unix seconds in [0, 2^64)", value)
        if self.expire_time <= self.effective_time:
            raise InvalidCertificateFields(
                "expire_time", f"greater than effective_time ({self.effective_time})", self.expire_time
            )

        if type(self.credential_subject) not in SUBJECT_TYPES.values():
            raise InvalidCertificateFields(
                "credential_subject",
                "one of " + ", ".join(cls.__name__ for cls in SUBJECT_TYPES.values()),
                type(self.credential_subject).__name__,
            )

    @property
    def certificate_type(self) -> CertificateType:
        return self.credential_subject.certificate_type

    @property
    def is_trust_root(self) -> bool:
        return self.certificate_type == CertificateType.BCDNS_TRUST_ROOT_CERTIFICATE

    @property
    def is_domain_certificate(self) -> bool:
        return self.certificate_type == CertificateType.DOMAIN_NAME_CERTIFICATE

    @property
    def is_relayer_certificate(self) -> bool:
        return self.certificate_type == CertificateType.RELAYER_CERTIFICATE

    @property
    def domain(self) -> Optional[CrossChainDomain]:
        """Domain granted by a domain name certificate, None for other types."""
        if isinstance(self.credential_subject, DomainNameCredentialSubject):
            return self.credential_subject.domain
        return None

    @property
    def subject_identity(self) -> ObjectIdentity:
        """Identity bound by the credential subject (root owner or applicant)."""
        return self.credential_subject.subject_identity

    def is_effective_at(self, now: int, skew: int = 0) -> bool:
        """True when now lies within [effective_time - skew, expire_time + skew]."""
        return self.effective_time - skew <= now <= self.expire_time + skew

    def encoded_to_sign(self) -> bytes:
        """
        Canonical bytes that are digested and signed.

        Covers every field except the proof, in fixed tag order, with every
        variable-length field length-prefixed.
        """
        return (
            TLVWriter()
            .write_u16(TAG_VERSION, self.version)
            .write_u8(TAG_TYPE, int(self.certificate_type))
            .write_string(TAG_SUBJECT_ID, self.subject_id)
            .write_bytes(TAG_ISSUER, self.issuer.encode())
            .write_u64(TAG_EFFECTIVE_TIME, self.effective_time)
            .write_u64(TAG_EXPIRE_TIME, self.expire_time)
            .write_bytes(TAG_CREDENTIAL_SUBJECT, self.credential_subject.encode())
            .getvalue()
        )

    def encode(self) -> bytes:
        """Full binary encoding, including the proof when one is attached."""
        return self.encoded_to_sign()

    @staticmethod
    def decode(data: bytes) -> "Certificate":
        return decode_certificate(data)

    def _field_values(self) -> dict:
        return {
            "version": self.version,
            "subject_id": self.subject_id,
            "issuer": self.issuer,
            "effective_time": self.effective_time,
            "expire_time": self.expire_time,
            "credential_subject": self.credential_subject,
        }


@dataclass(frozen=True)
class UnsignedCertificate(CrossChainCertificate):
    """
    Certificate without a proof.

    set_proof() is the only way to a SignedCertificate and succeeds once per
    instance; one builder owns an unsigned certificate until it is signed.
    """

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)
    _signed: Optional["SignedCertificate"] = field(default=None, init=False, repr=False, compare=False)

    @property
    def proof(self) -> None:
        return None

    @property
    def is_consumed(self) -> bool:
        """True once set_proof() has produced a signed certificate."""
        return self._signed is not None

    def set_proof(self, proof: "IssueProof") -> "SignedCertificate":
        """
        Attach the issuance proof.

        Args:
            proof: Digest and signature over encoded_to_sign()

        Returns:
            The signed certificate

        Raises:
            ProofAlreadySet: If a proof was already attached to this instance
        """
        if not isinstance(proof, IssueProof):
            raise InvalidCertificateFields("proof", "IssueProof", type(proof).__name__)

        with self._lock:
            if self._signed is not None:
                raise ProofAlreadySet(f"Certificate '{self.subject_id}' already has a proof")
            signed = SignedCertificate(proof=proof, **self._field_values())
            object.__setattr__(self, "_signed", signed)

        logger.debug(f"Attached {proof.signature_algorithm} proof to '{self.subject_id}'")
        return signed


@dataclass(frozen=True)
class SignedCertificate(CrossChainCertificate):
    """Certificate with its issuance proof. Immutable."""

    proof: IssueProof

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.proof, IssueProof):
            raise InvalidCertificateFields("proof", "IssueProof", type(self.proof).__name__)

    def set_proof(self, proof: IssueProof) -> "SignedCertificate":
        raise ProofAlreadySet(f"Certificate '{self.subject_id}' already has a proof")

    def without_proof(self) -> UnsignedCertificate:
        """A fresh unsigned copy with the same fields, e.g. for re-issuing."""
        return UnsignedCertificate(**self._field_values())

    def encode(self) -> bytes:
        return self.encoded_to_sign() + encode_item(TAG_PROOF, self.proof.encode())


Certificate = Union[UnsignedCertificate, SignedCertificate]


def decode_certificate(data: bytes) -> Certificate:
    """
    Decode a full binary certificate.

    Returns:
        SignedCertificate if a proof item is present, else UnsignedCertificate

    Raises:
        UnsupportedVersion: Certificate or subject version not supported
        MalformedEncoding: Truncated, reordered, unknown or invalid fields
    """
    reader = TLVReader(data, "CrossChainCertificate")

    version = reader.read_u16(TAG_VERSION, "version")
    if version not in SUPPORTED_CERTIFICATE_VERSIONS:
        raise UnsupportedVersion("certificate", version, SUPPORTED_CERTIFICATE_VERSIONS)

    type_code = reader.read_u8(TAG_TYPE, "type")
    try:
        certificate_type = CertificateType(type_code)
    except ValueError:
        raise MalformedEncoding("CrossChainCertificate.type", f"unknown certificate type {type_code}")

    subject_id = reader.read_string(TAG_SUBJECT_ID, "subject_id")
    issuer = ObjectIdentity.decode(reader.read_bytes(TAG_ISSUER, "issuer"))
    effective_time = reader.read_u64(TAG_EFFECTIVE_TIME, "effective_time")
    expire_time = reader.read_u64(TAG_EXPIRE_TIME, "expire_time")
    credential_subject = decode_credential_subject(
        certificate_type, reader.read_bytes(TAG_CREDENTIAL_SUBJECT, "credential_subject")
    )

    proof_bytes = reader.read_optional(TAG_PROOF, "proof")
    reader.finish()

    values = {
        "version": version,
        "subject_id": subject_id,
        "issuer": issuer,
        "effective_time": effective_time,
        "expire_time": expire_time,
        "credential_subject": credential_subject,
    }
    try:
        if proof_bytes is None:
            certificate = UnsignedCertificate(**values)
        else:
            certificate = SignedCertificate(proof=IssueProof.decode(proof_bytes), **values)
    except InvalidCertificateFields as e:
        raise MalformedEncoding("CrossChainCertificate", str(e))

    logger.debug(
        f"Decoded {certificate_type.name} '{subject_id}' "
        f"({'signed' if proof_bytes is not None else 'unsigned'})"
    )
    return certificate


__all__ = [
    "CERTIFICATE_VERSION_1",
    "SUPPORTED_CERTIFICATE_VERSIONS",
    "IssueProof",
    "CrossChainCertificate",
    "UnsignedCertificate",
    "SignedCertificate",
    "Certificate",
    "decode_certificate",
]
