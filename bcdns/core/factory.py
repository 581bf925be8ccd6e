"""
Factory for well-formed, unsigned cross-chain certificates.

Usage:
    cert = CrossChainCertificateFactory.create(
        CERTIFICATE_VERSION_1,
        "root-x",
        issuer_identity,
        effective_time=1000,
        expire_time=1000 + 365 * 24 * 3600,
        credential_subject=BCDNSTrustRootCredentialSubject("root-x", issuer_identity),
    )
"""

import logging

from .certificate import UnsignedCertificate
from .identity import ObjectIdentity
from .subjects import CredentialSubject

logger = logging.getLogger(__name__)


class CrossChainCertificateFactory:
    """Builds unsigned certificates; field validation lives on the certificate itself."""

    @staticmethod
    def create(
        version: int,
        subject_id: str,
        issuer: ObjectIdentity,
        effective_time: int,
        expire_time: int,
        credential_subject: CredentialSubject,
    ) -> UnsignedCertificate:
        """
        Create an unsigned certificate.

        Args:
            version: Certificate format version (CERTIFICATE_VERSION_1)
            subject_id: Human-facing label for the certificate
            issuer: Identity of the issuing authority
            effective_time: Start of validity, unix seconds
            expire_time: End of validity, unix seconds, after effective_time
            credential_subject: Payload the certificate attests to

        Returns:
            Certificate with no proof

        Raises:
            InvalidCertificateFields: If a field violates its constraints
            UnsupportedVersion: If version is not a supported certificate version
        """
        certificate = UnsignedCertificate(
            version=version,
            subject_id=subject_id,
            issuer=issuer,
            effective_time=effective_time,
            expire_time=expire_time,
            credential_subject=credential_subject,
        )
        logger.debug(
            f"Created {certificate.certificate_type.name} '{subject_id}' "
            f"valid [{effective_time}, {expire_time}]"
        )
        return certificate


__all__ = ["CrossChainCertificateFactory"]
