"""
BCDNS Security Module

Contains issuance and verification:
- AlgorithmProvider: explicit table of digest and signature algorithms
- CertificateIssuer: digests and signs certificates with a caller-held key
- CertificateVerifier: checks proofs against issuer public keys
- Key helpers: generation, PEM loading, public key <-> ObjectIdentity

Import specific modules directly:
    from bcdns.security.issuer import CertificateIssuer
    from bcdns.security.verifier import CertificateVerifier
"""

from .algorithms import (
    AlgorithmProvider,
    SignatureScheme,
    SigningBackend,
    default_signature_algorithm,
)
from .keys import (
    generate_private_key,
    private_key_to_pem,
    load_private_key_pem,
    public_key_to_pem,
    public_key_to_identity,
    load_public_key,
    identity_fingerprint,
)
from .issuer import CertificateIssuer
from .verifier import CertificateVerifier, verify_certificate

__all__ = [
    "AlgorithmProvider",
    "SignatureScheme",
    "SigningBackend",
    "default_signature_algorithm",
    "generate_private_key",
    "private_key_to_pem",
    "load_private_key_pem",
    "public_key_to_pem",
    "public_key_to_identity",
    "load_public_key",
    "identity_fingerprint",
    "CertificateIssuer",
    "CertificateVerifier",
    "verify_certificate",
]
