"""
Certificate verification.

Verification is a pure function of the certificate, the caller-supplied
issuer key material and the evaluation time. There is no trust-store lookup
here; callers resolve the issuer key, for example from a trust root
certificate they already verified.

Checks run in a fixed order and the first failure ends the call:

    1. proof present                         MissingProof
    2. now within the validity window        CertificateExpired
    3. digest algorithm known, digest equal  UnsupportedAlgorithm / DigestMismatch
    4. signature algorithm known             UnsupportedAlgorithm
    5. key material usable                   UnrecognizedIdentity
    6. signature valid                       SignatureInvalid
"""

import hmac
import logging
import time
from typing import Any, Dict, Optional, Tuple

from ..config import CertificateConfig
from ..core.certificate import CrossChainCertificate
from ..exceptions import (
    CertificateExpired,
    DigestMismatch,
    MissingProof,
    SignatureInvalid,
    VerifyError,
)
from .algorithms import AlgorithmProvider
from .keys import PublicKeyMaterial, load_public_key

logger = logging.getLogger(__name__)


class CertificateVerifier:
    """
    Verifies certificate proofs against issuer public keys.

    Usage:
        verifier = CertificateVerifier()
        verifier.verify(certificate, issuer_public_key)        # raises VerifyError
        valid, details = verifier.check(certificate, issuer_public_key)
    """

    def __init__(
        self,
        provider: Optional[AlgorithmProvider] = None,
        config: Optional[CertificateConfig] = None,
    ):
        self.provider = provider if provider is not None else AlgorithmProvider()
        self.config = config or CertificateConfig()

    def verify(
        self,
        certificate: CrossChainCertificate,
        issuer_public_key: PublicKeyMaterial,
        now: Optional[int] = None,
    ) -> None:
        """
        Verify a certificate's proof.

        Args:
            certificate: Certificate to verify
            issuer_public_key: Public key object, X509_PUBLIC_KEY_INFO identity,
                DER or PEM bytes of the issuer's key
            now: Evaluation time in unix seconds. Defaults to the current time.

        Raises:
            VerifyError: One of MissingProof, CertificateExpired, DigestMismatch,
                UnsupportedAlgorithm, UnrecognizedIdentity, SignatureInvalid
        """
        proof = getattr(certificate, "proof", None)
        if proof is None:
            raise MissingProof(f"Certificate '{certificate.subject_id}' has no proof")

        if now is None:
            now = int(time.time())
        if not certificate.is_effective_at(now, self.config.clock_skew_seconds):
            raise CertificateExpired(now, certificate.effective_time, certificate.expire_time)

        data = certificate.encoded_to_sign()

        digest = self.provider.digest(data, proof.digest_algorithm)
        if not hmac.compare_digest(digest, proof.digest_value):
            raise DigestMismatch(
                f"{proof.digest_algorithm} digest of '{certificate.subject_id}' does not match the proof"
            )

        scheme = self.provider.signature_scheme(proof.signature_algorithm)
        public_key = load_public_key(issuer_public_key)
        if not isinstance(public_key, scheme.public_key_type):
            raise SignatureInvalid(
                f"{type(public_key).__name__} cannot verify a {scheme.name} signature"
            )

        if not self.provider.verify(data, proof.signature_value, public_key, scheme.name):
            raise SignatureInvalid(
                f"{scheme.name} signature of '{certificate.subject_id}' is invalid"
            )

        logger.info(f"Verified {certificate.certificate_type.name} '{certificate.subject_id}'")

    def check(
        self,
        certificate: CrossChainCertificate,
        issuer_public_key: PublicKeyMaterial,
        now: Optional[int] = None,
    ) -> Tuple[bool, Dict[str, Any]]:
        """
        Verify and report instead of raising.

        Returns:
            (is_valid, details_dict)
        """
        result = {
            "valid": False,
            "subject_id": certificate.subject_id,
            "certificate_type": certificate.certificate_type.name,
            "error_type": None,
            "errors": [],
        }

        try:
            self.verify(certificate, issuer_public_key, now=now)
        except VerifyError as e:
            result["error_type"] = type(e).__name__
            result["errors"].append(str(e))
            logger.warning(f"Verification failed for '{certificate.subject_id}': {e}")
            return False, result

        result["valid"] = True
        return True, result


def verify_certificate(
    certificate: CrossChainCertificate,
    issuer_public_key: PublicKeyMaterial,
    now: Optional[int] = None,
    provider: Optional[AlgorithmProvider] = None,
) -> None:
    """Convenience wrapper around CertificateVerifier.verify()."""
    CertificateVerifier(provider=provider).verify(certificate, issuer_public_key, now=now)


__all__ = ["CertificateVerifier", "verify_certificate"]
