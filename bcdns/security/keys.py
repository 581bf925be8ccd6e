"""
Key helpers: generation, PEM loading, and conversion between public keys and
ObjectIdentity anchors.

X509_PUBLIC_KEY_INFO identities carry the DER-encoded SubjectPublicKeyInfo
of the key, the same bytes other implementations produce from their
standard public key encoding.
"""

import hashlib
import logging
from typing import Any, Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm as CryptographyUnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from ..core.identity import ObjectIdentity, ObjectIdentityType
from ..exceptions import UnrecognizedIdentity, UnsupportedAlgorithm
from .algorithms import normalize_algorithm_name

logger = logging.getLogger(__name__)

PUBLIC_KEY_TYPES = (
    ed25519.Ed25519PublicKey,
    ec.EllipticCurvePublicKey,
    rsa.RSAPublicKey,
)

PublicKeyMaterial = Union[ObjectIdentity, bytes, str, Any]


def generate_private_key(algorithm: str = "ED25519"):
    """
    Generate a private key suitable for a signature algorithm.

    Args:
        algorithm: ED25519, SHA256WITHECDSA (P-256) or SHA256WITHRSA (2048 bit)

    Returns:
        cryptography private key
    """
    key = normalize_algorithm_name(algorithm)
    if key == "ED25519":
        return ed25519.Ed25519PrivateKey.generate()
    if key == "SHA256WITHECDSA":
        return ec.generate_private_key(ec.SECP256R1())
    if key == "SHA256WITHRSA":
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    raise UnsupportedAlgorithm(algorithm, "no key generator for this algorithm")


def private_key_to_pem(private_key, password: Optional[bytes] = None) -> bytes:
    """Serialize a private key as PKCS#8 PEM, optionally encrypted."""
    if password:
        encryption = serialization.BestAvailableEncryption(password)
    else:
        encryption = serialization.NoEncryption()
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )


def load_private_key_pem(data: Union[bytes, str], password: Optional[bytes] = None):
    """
    Load a PEM private key.

    Raises:
        ValueError: If the PEM is malformed, or the password is missing or wrong
        UnsupportedAlgorithm: If the key type has no cryptography backend
    """
    if isinstance(data, str):
        data = data.encode()
    try:
        return serialization.load_pem_private_key(data, password=password)
    except TypeError as e:
        # Encrypted key without a password, or a password for a plain key
        raise ValueError(f"Cannot load private key: {e}")
    except CryptographyUnsupportedAlgorithm as e:
        raise UnsupportedAlgorithm("private key", str(e))


def public_key_to_pem(public_key) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def public_key_to_identity(public_key) -> ObjectIdentity:
    """Wrap a public key as an X509_PUBLIC_KEY_INFO identity."""
    if not isinstance(public_key, PUBLIC_KEY_TYPES):
        # Accept a private key for convenience
        if hasattr(public_key, "public_key"):
            public_key = public_key.public_key()
        else:
            raise UnrecognizedIdentity(type(public_key).__name__, "not a public key")

    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return ObjectIdentity(ObjectIdentityType.X509_PUBLIC_KEY_INFO, der)


def load_public_key(material: PublicKeyMaterial):
    """
    Resolve caller-supplied key material to a cryptography public key.

    Args:
        material: A public key object, an X509_PUBLIC_KEY_INFO ObjectIdentity,
            DER SubjectPublicKeyInfo bytes, or PEM text/bytes

    Returns:
        cryptography public key

    Raises:
        UnrecognizedIdentity: If the material cannot be interpreted as a key
    """
    if isinstance(material, PUBLIC_KEY_TYPES):
        return material

    if isinstance(material, ObjectIdentity):
        if material.type != ObjectIdentityType.X509_PUBLIC_KEY_INFO:
            raise UnrecognizedIdentity(
                material.type, "only X509_PUBLIC_KEY_INFO identities carry verification keys"
            )
        return _load_der(material.raw_bytes, material.type)

    if isinstance(material, str):
        material = material.encode()

    if isinstance(material, (bytes, bytearray, memoryview)):
        data = bytes(material)
        if data.lstrip().startswith(b"-----BEGIN"):
            try:
                return serialization.load_pem_public_key(data)
            except (ValueError, TypeError, CryptographyUnsupportedAlgorithm) as e:
                raise UnrecognizedIdentity("PEM", f"cannot load public key: {e}")
        return _load_der(data, "DER")

    raise UnrecognizedIdentity(type(material).__name__, "unsupported key material")


def _load_der(data: bytes, label: Any):
    try:
        return serialization.load_der_public_key(data)
    except (ValueError, TypeError, CryptographyUnsupportedAlgorithm) as e:
        raise UnrecognizedIdentity(label, f"cannot load public key: {e}")


def identity_fingerprint(identity: ObjectIdentity) -> str:
    """SHA-256 over the identity's canonical encoding, hex encoded."""
    return hashlib.sha256(identity.encode()).hexdigest()


__all__ = [
    "generate_private_key",
    "private_key_to_pem",
    "load_private_key_pem",
    "public_key_to_pem",
    "public_key_to_identity",
    "load_public_key",
    "identity_fingerprint",
    "PUBLIC_KEY_TYPES",
]
