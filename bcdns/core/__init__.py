"""
BCDNS Core Module

Contains the certificate data model and its canonical encoding:
- ObjectIdentity / CrossChainDomain: identity anchors and domain names
- Credential subjects: trust root, domain name, relayer
- Certificate envelope: unsigned/signed states, encode-to-sign bytes
- CrossChainCertificateFactory: builds unsigned certificates
"""

from .identity import (
    ObjectIdentityType,
    ObjectIdentity,
    CrossChainDomain,
    MAX_DOMAIN_LENGTH,
)

from .subjects import (
    CertificateType,
    DomainNameType,
    CredentialSubject,
    BCDNSTrustRootCredentialSubject,
    DomainNameCredentialSubject,
    RelayerCredentialSubject,
    decode_credential_subject,
)

from .certificate import (
    CERTIFICATE_VERSION_1,
    SUPPORTED_CERTIFICATE_VERSIONS,
    IssueProof,
    CrossChainCertificate,
    UnsignedCertificate,
    SignedCertificate,
    Certificate,
    decode_certificate,
)

from .factory import CrossChainCertificateFactory

__all__ = [
    # Identity
    "ObjectIdentityType",
    "ObjectIdentity",
    "CrossChainDomain",
    # Subjects
    "CertificateType",
    "DomainNameType",
    "CredentialSubject",
    "BCDNSTrustRootCredentialSubject",
    "DomainNameCredentialSubject",
    "RelayerCredentialSubject",
    "decode_credential_subject",
    # Certificates
    "IssueProof",
    "CrossChainCertificate",
    "UnsignedCertificate",
    "SignedCertificate",
    "Certificate",
    "decode_certificate",
    "CrossChainCertificateFactory",
    # Constants
    "CERTIFICATE_VERSION_1",
    "SUPPORTED_CERTIFICATE_VERSIONS",
    "MAX_DOMAIN_LENGTH",
]
