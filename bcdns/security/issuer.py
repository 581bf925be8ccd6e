"""
Certificate issuance: digest and sign the encode-to-sign bytes, then attach
the resulting proof.

Usage:
    issuer = CertificateIssuer(private_key)
    root = issuer.self_signed_trust_root("root-x", effective_time=1000,
                                         expire_time=1000 + 31536000)

    unsigned = CrossChainCertificateFactory.create(...)
    signed = issuer.issue(unsigned)
"""

import logging
from typing import Any, Optional

from ..config import CertificateConfig
from ..core.certificate import (
    CERTIFICATE_VERSION_1,
    IssueProof,
    SignedCertificate,
    UnsignedCertificate,
)
from ..core.factory import CrossChainCertificateFactory
from ..core.identity import ObjectIdentity
from ..core.subjects import BCDNSTrustRootCredentialSubject, CredentialSubject
from ..exceptions import InvalidCertificateFields, UnsupportedAlgorithm
from .algorithms import AlgorithmProvider, SigningBackend, default_signature_algorithm
from .keys import load_public_key, public_key_to_identity

logger = logging.getLogger(__name__)


class CertificateIssuer:
    """
    Issues certificates with a private key held by the caller.

    The issuer never stores or persists the key; it only hands it to the
    signing backend for each proof.
    """

    def __init__(
        self,
        private_key: Any,
        provider: Optional[SigningBackend] = None,
        digest_algorithm: Optional[str] = None,
        signature_algorithm: Optional[str] = None,
        config: Optional[CertificateConfig] = None,
        identity: Optional[ObjectIdentity] = None,
    ):
        """
        Initialize issuer.

        Args:
            private_key: cryptography private key (Ed25519, EC or RSA), or an
                opaque handle understood by a custom provider
            provider: Signing backend. Defaults to a fresh AlgorithmProvider.
            digest_algorithm: Digest recorded in proofs. Defaults to config.
            signature_algorithm: Defaults to the algorithm matching the key,
                then to config.
            config: Library defaults
            identity: Issuer identity. Required when private_key is a handle
                without public_key(); otherwise derived from the key.

        Raises:
            UnsupportedAlgorithm: Unknown algorithm or key of the wrong type
            InvalidCertificateFields: No usable issuer identity
        """
        self.config = config or CertificateConfig()
        self.provider = provider if provider is not None else AlgorithmProvider()
        self._private_key = private_key

        self.digest_algorithm = digest_algorithm or self.config.digest_algorithm
        self.signature_algorithm = (
            signature_algorithm
            or default_signature_algorithm(private_key)
            or self.config.signature_algorithm
        )

        if isinstance(self.provider, AlgorithmProvider):
            if not self.provider.supports_digest(self.digest_algorithm):
                raise UnsupportedAlgorithm(self.digest_algorithm, "unknown digest algorithm")
            scheme = self.provider.signature_scheme(self.signature_algorithm)
            if not isinstance(private_key, scheme.private_key_type):
                raise UnsupportedAlgorithm(
                    self.signature_algorithm,
                    f"private key type {type(private_key).__name__} does not match",
                )

        self._identity = self._resolve_identity(private_key, identity)

    @staticmethod
    def _resolve_identity(private_key: Any, identity: Optional[ObjectIdentity]) -> ObjectIdentity:
        if identity is not None and not isinstance(identity, ObjectIdentity):
            raise InvalidCertificateFields("issuer", "ObjectIdentity", type(identity).__name__)

        if not callable(getattr(private_key, "public_key", None)):
            if identity is None:
                raise InvalidCertificateFields(
                    "issuer",
                    "identity argument for a key handle without public_key()",
                    type(private_key).__name__,
                )
            return identity

        derived = public_key_to_identity(private_key.public_key())
        if identity is not None and identity != derived:
            raise InvalidCertificateFields("issuer", "identity of the signing key", identity)
        return derived

    @property
    def identity(self) -> ObjectIdentity:
        """The issuer's own identity."""
        return self._identity

    @property
    def public_key(self):
        if callable(getattr(self._private_key, "public_key", None)):
            return self._private_key.public_key()
        return load_public_key(self._identity)

    def create_proof(self, data: bytes) -> IssueProof:
        """Digest and sign data with the configured algorithms."""
        return IssueProof(
            digest_algorithm=self.digest_algorithm,
            digest_value=self.provider.digest(data, self.digest_algorithm),
            signature_algorithm=self.signature_algorithm,
            signature_value=self.provider.sign(data, self._private_key, self.signature_algorithm),
        )

    def issue(self, certificate: UnsignedCertificate) -> SignedCertificate:
        """
        Sign an unsigned certificate.

        Args:
            certificate: Certificate from CrossChainCertificateFactory

        Returns:
            Signed certificate

        Raises:
            ProofAlreadySet: If the certificate was already signed
        """
        proof = self.create_proof(certificate.encoded_to_sign())
        signed = certificate.set_proof(proof)
        logger.info(
            f"Issued {signed.certificate_type.name} '{signed.subject_id}' "
            f"with {self.digest_algorithm}/{self.signature_algorithm}"
        )
        return signed

    def issue_certificate(
        self,
        subject_id: str,
        credential_subject: CredentialSubject,
        effective_time: int,
        expire_time: int,
        version: int = CERTIFICATE_VERSION_1,
    ) -> SignedCertificate:
        """Create and sign a certificate with this issuer as the issuer identity."""
        unsigned = CrossChainCertificateFactory.create(
            version,
            subject_id,
            self.identity,
            effective_time,
            expire_time,
            credential_subject,
        )
        return self.issue(unsigned)

    def self_signed_trust_root(
        self,
        name: str,
        effective_time: int,
        expire_time: int,
        extra: bytes = b"",
        subject_id: Optional[str] = None,
    ) -> SignedCertificate:
        """
        Issue a trust root certificate whose issuer and root identity are
        both this issuer's key.
        """
        subject = BCDNSTrustRootCredentialSubject(
            name=name,
            root_identity=self.identity,
            extra=extra,
        )
        return self.issue_certificate(subject_id or name, subject, effective_time, expire_time)


__all__ = ["CertificateIssuer"]
