"""
Shared test fixtures for certificate tests.

Provides keypairs, issuers and ready-made certificates for the three
credential subject kinds.
"""

import base64
import shutil
import tempfile

import pytest
from cryptography.hazmat.primitives.asymmetric import ed25519

from bcdns.core import (
    CERTIFICATE_VERSION_1,
    BCDNSTrustRootCredentialSubject,
    CrossChainCertificateFactory,
    DomainNameCredentialSubject,
    DomainNameType,
    RelayerCredentialSubject,
)
from bcdns.security import CertificateIssuer, public_key_to_identity

EFFECTIVE_TIME = 1000
ONE_YEAR = 31536000
EXPIRE_TIME = EFFECTIVE_TIME + ONE_YEAR


@pytest.fixture
def temp_dir():
    """Create a temporary directory, removed after the test."""
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def root_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def other_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def root_identity(root_key):
    return public_key_to_identity(root_key.public_key())


@pytest.fixture
def applicant_identity(other_key):
    return public_key_to_identity(other_key.public_key())


@pytest.fixture
def issuer(root_key):
    return CertificateIssuer(root_key)


@pytest.fixture
def trust_root_subject(root_identity):
    return BCDNSTrustRootCredentialSubject(name="root-x", root_identity=root_identity, extra=b"")


@pytest.fixture
def domain_subject(applicant_identity):
    return DomainNameCredentialSubject(
        version=DomainNameCredentialSubject.CURRENT_VERSION,
        domain_type=DomainNameType.DOMAIN_NAME,
        domain="antchain.com",
        applicant=applicant_identity,
        extra=b"",
    )


@pytest.fixture
def domain_space_subject(applicant_identity):
    return DomainNameCredentialSubject(
        version=DomainNameCredentialSubject.CURRENT_VERSION,
        domain_type=DomainNameType.DOMAIN_NAME_SPACE,
        domain=".com",
        applicant=applicant_identity,
    )


@pytest.fixture
def relayer_subject(applicant_identity):
    return RelayerCredentialSubject(
        version=RelayerCredentialSubject.CURRENT_VERSION,
        name="antchain-relayer",
        applicant=applicant_identity,
        extra=b"\x01\x02",
    )


@pytest.fixture
def unsigned_root(root_identity, trust_root_subject):
    return CrossChainCertificateFactory.create(
        CERTIFICATE_VERSION_1,
        "root-x",
        root_identity,
        EFFECTIVE_TIME,
        EXPIRE_TIME,
        trust_root_subject,
    )


@pytest.fixture
def signed_root(issuer, unsigned_root):
    return issuer.issue(unsigned_root)


@pytest.fixture
def signed_domain(issuer, domain_subject):
    return issuer.issue_certificate("antchain.com", domain_subject, EFFECTIVE_TIME, EXPIRE_TIME)


@pytest.fixture
def signed_relayer(issuer, relayer_subject):
    return issuer.issue_certificate("antchain-relayer", relayer_subject, EFFECTIVE_TIME, EXPIRE_TIME)


# SubjectPublicKeyInfo for an EC key on the SM2 curve (OID 1.2.156.10197.1.301),
# which cryptography cannot load.
SM2_SPKI_DER = (
    bytes.fromhex("3059" "3013" "06072a8648ce3d0201" "06082a811ccf5501822d" "034200" "04")
    + bytes(range(1, 33))
    + bytes(range(33, 65))
)

_SM2_B64 = base64.b64encode(SM2_SPKI_DER).decode("ascii")
SM2_SPKI_PEM = (
    "-----BEGIN PUBLIC KEY-----\n"
    + "".join(_SM2_B64[i:i + 64] + "\n" for i in range(0, len(_SM2_B64), 64))
    + "-----END PUBLIC KEY-----\n"
)
