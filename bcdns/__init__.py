"""
BCDNS cross-chain trust certificates

A library for building, signing, verifying and armoring the certificates a
blockchain domain name service (BCDNS) issues: trust roots, domain names,
domain-name spaces and relayers. Every organization running an
implementation must produce the same canonical bytes for the same
certificate, so the binary encoding is fixed, length-prefixed and
version-tagged at every level.

Quick Start:
    from bcdns import (
        CertificateIssuer, CertificateVerifier, generate_private_key,
        serialize, deserialize,
    )

    root_key = generate_private_key("ED25519")
    issuer = CertificateIssuer(root_key)
    root = issuer.self_signed_trust_root("root-x", effective_time=1000,
                                         expire_time=1000 + 31536000)

    text = serialize(root)
    CertificateVerifier().verify(deserialize(text), root_key.public_key(), now=1001)

Package Structure:
    bcdns/
    ├── core/          # Identities, credential subjects, certificate envelope
    ├── security/      # Algorithms, keys, issuing and verification
    ├── codec.py       # Armored text format
    ├── ledger.py      # Ledger data reader interface
    ├── config.py      # Defaults and BCDNS_* environment overrides
    └── cli.py         # bcdns-cert command line
"""

# =============================================================================
# Core - Data model and canonical encoding
# =============================================================================

from .core import (
    ObjectIdentityType,
    ObjectIdentity,
    CrossChainDomain,
    CertificateType,
    DomainNameType,
    CredentialSubject,
    BCDNSTrustRootCredentialSubject,
    DomainNameCredentialSubject,
    RelayerCredentialSubject,
    IssueProof,
    CrossChainCertificate,
    UnsignedCertificate,
    SignedCertificate,
    decode_certificate,
    CrossChainCertificateFactory,
    CERTIFICATE_VERSION_1,
)

# =============================================================================
# Security - Issuing and verification
# =============================================================================

from .security import (
    AlgorithmProvider,
    CertificateIssuer,
    CertificateVerifier,
    verify_certificate,
    generate_private_key,
    public_key_to_identity,
    load_public_key,
)

# =============================================================================
# Codec, configuration, errors
# =============================================================================

from .codec import serialize, deserialize
from .config import CertificateConfig
from .exceptions import (
    CertificateError,
    InvalidCertificateFields,
    ProofAlreadySet,
    DecodeError,
    UnsupportedVersion,
    MalformedEncoding,
    VerifyError,
    MissingProof,
    CertificateExpired,
    DigestMismatch,
    SignatureInvalid,
    UnsupportedAlgorithm,
    UnrecognizedIdentity,
    FramingError,
)

__version__ = "1.0.0"

__all__ = [
    # Core
    "ObjectIdentityType",
    "ObjectIdentity",
    "CrossChainDomain",
    "CertificateType",
    "DomainNameType",
    "CredentialSubject",
    "BCDNSTrustRootCredentialSubject",
    "DomainNameCredentialSubject",
    "RelayerCredentialSubject",
    "IssueProof",
    "CrossChainCertificate",
    "UnsignedCertificate",
    "SignedCertificate",
    "decode_certificate",
    "CrossChainCertificateFactory",
    "CERTIFICATE_VERSION_1",
    # Security
    "AlgorithmProvider",
    "CertificateIssuer",
    "CertificateVerifier",
    "verify_certificate",
    "generate_private_key",
    "public_key_to_identity",
    "load_public_key",
    # Codec / config
    "serialize",
    "deserialize",
    "CertificateConfig",
    # Errors
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
