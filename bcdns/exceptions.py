"""
Exceptions raised by the BCDNS certificate library.

All errors derive from CertificateError. None of them are transient:
construction, decode and verification failures are terminal for the call
that raised them.
"""

from typing import Any, Optional


class CertificateError(Exception):
    """Base exception for certificate errors."""
    pass


class InvalidCertificateFields(CertificateError):
    """Raised when a certificate or subject is built from invalid fields."""

    def __init__(self, field: str, expected: str, actual: Any = None):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid field '{field}': expected {expected}, got {actual!r}")


class ProofAlreadySet(CertificateError):
    """Raised when a proof is attached to a certificate a second time."""
    pass


class DecodeError(CertificateError):
    """Base exception for binary decoding errors."""
    pass


class UnsupportedVersion(DecodeError):
    """Raised when a version tag is not one this library understands."""

    def __init__(self, field: str, actual: Any, supported: Any = None):
        self.field = field
        self.actual = actual
        self.supported = supported
        message = f"Unsupported {field} version: {actual!r}"
        if supported is not None:
            message += f" (supported: {supported})"
        super().__init__(message)


class MalformedEncoding(DecodeError):
    """Raised when bytes are truncated, reordered or otherwise malformed."""

    def __init__(self, field: str, reason: str, offset: Optional[int] = None):
        self.field = field
        self.reason = reason
        self.offset = offset
        location = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"Malformed {field}{location}: {reason}")


class VerifyError(CertificateError):
    """Base exception for verification failures."""
    pass


class MissingProof(VerifyError):
    """Raised when verifying a certificate that carries no proof."""
    pass


class CertificateExpired(VerifyError):
    """Raised when the verification time is outside the validity window."""

    def __init__(self, now: int, effective_time: int, expire_time: int):
        self.now = now
        self.effective_time = effective_time
        self.expire_time = expire_time
        super().__init__(
            f"Certificate not valid at {now}: window is [{effective_time}, {expire_time}]"
        )


class DigestMismatch(VerifyError):
    """Raised when the recomputed digest differs from the proof digest."""
    pass


class SignatureInvalid(VerifyError):
    """Raised when the proof signature does not verify."""
    pass


class UnsupportedAlgorithm(VerifyError):
    """Raised for digest or signature algorithms without a backend."""

    def __init__(self, algorithm: str, reason: str = "no backend registered"):
        self.algorithm = algorithm
        super().__init__(f"Unsupported algorithm '{algorithm}': {reason}")


class UnrecognizedIdentity(VerifyError):
    """Raised when an identity cannot be used as verification key material."""

    def __init__(self, identity_type: Any, reason: str = "unrecognized identity type"):
        self.identity_type = identity_type
        super().__init__(f"Cannot use identity of type {identity_type!r}: {reason}")


class FramingError(CertificateError):
    """Raised when armored text does not have the expected framing."""
    pass


__all__ = [
    "CertificateError",
    "InvalidCertificateFields",
    "ProofAlreadySet",
    "DecodeError",
    "UnsupportedVersion",
    "MalformedEncoding",
    "VerifyError",
    "MissingProof",
    "CertificateExpired",
    "DigestMismatch",
    "SignatureInvalid",
    "UnsupportedAlgorithm",
    "UnrecognizedIdentity",
    "FramingError",
]
