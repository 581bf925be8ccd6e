"""
Digest and signature algorithms used for certificate proofs.

An AlgorithmProvider is an explicit, per-instance table of named algorithms.
Callers pass a provider into issuing and verification instead of relying on
process-wide registration, so two providers never interfere.

Built-in algorithms (names are matched case-insensitively, ignoring '-'
and '_', so "SHA-256" and "sha256" both select SHA256):

    Digests:     SHA256, SHA384, SHA512, SHA3-256, SM3
    Signatures:  ED25519, SHA256WITHECDSA, SHA256WITHRSA

Usage:
    provider = AlgorithmProvider()
    digest = provider.digest(data, "SHA256")
    signature = provider.sign(data, private_key, "ED25519")
    ok = provider.verify(data, signature, public_key, "ED25519")
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.exceptions import UnsupportedAlgorithm as CryptographyUnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa

from ..exceptions import UnsupportedAlgorithm

logger = logging.getLogger(__name__)

# Algorithm names peer implementations use that have no cryptography backend.
# Lookups of these always fail closed.
UNAVAILABLE_ALGORITHMS: Dict[str, str] = {
    "SM3WITHSM2": "SM2 signatures are not provided by the cryptography library",
    "KECCAK256WITHSECP256K1": "Keccak-256 is not provided by the cryptography library",
}


def normalize_algorithm_name(name: str) -> str:
    """Canonical lookup key for an algorithm name."""
    return name.strip().upper().replace("-", "").replace("_", "")


@dataclass(frozen=True)
class SignatureScheme:
    """A named signature algorithm bound to the key classes it accepts."""

    name: str
    private_key_type: type
    public_key_type: type
    sign: Callable[[Any, bytes], bytes]
    verify: Callable[[Any, bytes, bytes], None]  # raises InvalidSignature


class SigningBackend(Protocol):
    """What an issuer needs from a signing backend."""

    def digest(self, data: bytes, algorithm: str) -> bytes:
        ...

    def sign(self, data: bytes, private_key: Any, algorithm: str) -> bytes:
        ...


def _ed25519_scheme() -> SignatureScheme:
    return SignatureScheme(
        name="ED25519",
        private_key_type=ed25519.Ed25519PrivateKey,
        public_key_type=ed25519.Ed25519PublicKey,
        sign=lambda key, data: key.sign(data),
        verify=lambda key, signature, data: key.verify(signature, data),
    )


def _ecdsa_sha256_scheme() -> SignatureScheme:
    return SignatureScheme(
        name="SHA256WITHECDSA",
        private_key_type=ec.EllipticCurvePrivateKey,
        public_key_type=ec.EllipticCurvePublicKey,
        sign=lambda key, data: key.sign(data, ec.ECDSA(hashes.SHA256())),
        verify=lambda key, signature, data: key.verify(signature, data, ec.ECDSA(hashes.SHA256())),
    )


def _rsa_sha256_scheme() -> SignatureScheme:
    return SignatureScheme(
        name="SHA256WITHRSA",
        private_key_type=rsa.RSAPrivateKey,
        public_key_type=rsa.RSAPublicKey,
        sign=lambda key, data: key.sign(data, padding.PKCS1v15(), hashes.SHA256()),
        verify=lambda key, signature, data: key.verify(
            signature, data, padding.PKCS1v15(), hashes.SHA256()
        ),
    )


DEFAULT_DIGESTS: Tuple[Tuple[str, Callable[[], hashes.HashAlgorithm]], ...] = (
    ("SHA256", hashes.SHA256),
    ("SHA384", hashes.SHA384),
    ("SHA512", hashes.SHA512),
    ("SHA3-256", hashes.SHA3_256),
    ("SM3", hashes.SM3),
)


class AlgorithmProvider:
    """
    Table of digest and signature algorithms.

    Registration is per instance and guarded by a lock; lookups of unknown
    names raise UnsupportedAlgorithm rather than falling back to another
    algorithm.
    """

    def __init__(self, include_defaults: bool = True):
        """
        Initialize provider.

        Args:
            include_defaults: Register the built-in digests and signatures
        """
        self._digests: Dict[str, Tuple[str, Callable[[], hashes.HashAlgorithm]]] = {}
        self._signatures: Dict[str, SignatureScheme] = {}
        self._lock = threading.RLock()

        if include_defaults:
            for name, factory in DEFAULT_DIGESTS:
                self.register_digest(name, factory)
            for scheme in (_ed25519_scheme(), _ecdsa_sha256_scheme(), _rsa_sha256_scheme()):
                self.register_signature(scheme)

    def register_digest(self, name: str, factory: Callable[[], hashes.HashAlgorithm]) -> None:
        """Register a digest under name; factory returns a cryptography HashAlgorithm."""
        with self._lock:
            self._digests[normalize_algorithm_name(name)] = (name, factory)

    def register_signature(self, scheme: SignatureScheme) -> None:
        with self._lock:
            self._signatures[normalize_algorithm_name(scheme.name)] = scheme

    @property
    def digest_algorithms(self) -> List[str]:
        with self._lock:
            return sorted(name for name, _ in self._digests.values())

    @property
    def signature_algorithms(self) -> List[str]:
        with self._lock:
            return sorted(scheme.name for scheme in self._signatures.values())

    def supports_digest(self, algorithm: str) -> bool:
        with self._lock:
            return normalize_algorithm_name(algorithm) in self._digests

    def supports_signature(self, algorithm: str) -> bool:
        with self._lock:
            return normalize_algorithm_name(algorithm) in self._signatures

    def _digest_factory(self, algorithm: str) -> Callable[[], hashes.HashAlgorithm]:
        key = normalize_algorithm_name(algorithm)
        with self._lock:
            entry = self._digests.get(key)
        if entry is None:
            raise UnsupportedAlgorithm(algorithm, UNAVAILABLE_ALGORITHMS.get(key, "unknown digest algorithm"))
        return entry[1]

    def signature_scheme(self, algorithm: str) -> SignatureScheme:
        """Look up a signature scheme, failing closed for unknown names."""
        key = normalize_algorithm_name(algorithm)
        with self._lock:
            scheme = self._signatures.get(key)
        if scheme is None:
            raise UnsupportedAlgorithm(
                algorithm, UNAVAILABLE_ALGORITHMS.get(key, "unknown signature algorithm")
            )
        return scheme

    def digest(self, data: bytes, algorithm: str) -> bytes:
        """
        Compute a digest.

        Raises:
            UnsupportedAlgorithm: Unknown name, or no backend in the linked OpenSSL
        """
        factory = self._digest_factory(algorithm)
        try:
            hasher = hashes.Hash(factory())
        except CryptographyUnsupportedAlgorithm as e:
            raise UnsupportedAlgorithm(algorithm, str(e))
        hasher.update(data)
        return hasher.finalize()

    def sign(self, data: bytes, private_key: Any, algorithm: str) -> bytes:
        """
        Sign data with a cryptography private key.

        Raises:
            UnsupportedAlgorithm: Unknown algorithm or key of the wrong type
        """
        scheme = self.signature_scheme(algorithm)
        if not isinstance(private_key, scheme.private_key_type):
            raise UnsupportedAlgorithm(
                algorithm, f"private key type {type(private_key).__name__} does not match"
            )
        return scheme.sign(private_key, data)

    def verify(self, data: bytes, signature: bytes, public_key: Any, algorithm: str) -> bool:
        """
        Verify a signature.

        Returns:
            True if the signature is valid, False otherwise

        Raises:
            UnsupportedAlgorithm: Unknown algorithm or key of the wrong type
        """
        scheme = self.signature_scheme(algorithm)
        if not isinstance(public_key, scheme.public_key_type):
            raise UnsupportedAlgorithm(
                algorithm, f"public key type {type(public_key).__name__} does not match"
            )
        try:
            scheme.verify(public_key, signature, data)
            return True
        except InvalidSignature:
            return False
        except ValueError as e:
            # Structurally broken signatures (bad DER, wrong length)
            logger.debug(f"Rejected malformed {scheme.name} signature: {e}")
            return False


def default_signature_algorithm(private_key: Any) -> Optional[str]:
    """Pick the built-in signature algorithm matching a private key, if any."""
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return "ED25519"
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return "SHA256WITHECDSA"
    if isinstance(private_key, rsa.RSAPrivateKey):
        return "SHA256WITHRSA"
    return None


__all__ = [
    "AlgorithmProvider",
    "SignatureScheme",
    "SigningBackend",
    "UNAVAILABLE_ALGORITHMS",
    "normalize_algorithm_name",
    "default_signature_algorithm",
]
