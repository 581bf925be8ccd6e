"""
Tests for the certificate envelope.

Tests cover:
- Factory construction and field validation
- Encode/decode of unsigned and signed certificates
- Write-once proof attachment
- Encode-to-sign bytes excluding the proof
"""

import threading

import pytest

from bcdns.core import (
    CERTIFICATE_VERSION_1,
    CertificateType,
    CrossChainCertificateFactory,
    IssueProof,
    SignedCertificate,
    UnsignedCertificate,
    decode_certificate,
)
from bcdns.core.tlv import TLVWriter
from bcdns.exceptions import (
    InvalidCertificateFields,
    MalformedEncoding,
    ProofAlreadySet,
    UnsupportedVersion,
)

from conftest import EFFECTIVE_TIME, EXPIRE_TIME

PROOF = IssueProof("SHA256", b"\x01" * 32, "ED25519", b"\x02" * 64)


class TestFactory:
    """Tests for CrossChainCertificateFactory."""

    def test_create_unsigned(self, unsigned_root, root_identity):
        assert isinstance(unsigned_root, UnsignedCertificate)
        assert unsigned_root.proof is None
        assert unsigned_root.issuer == root_identity
        assert unsigned_root.certificate_type == CertificateType.BCDNS_TRUST_ROOT_CERTIFICATE
        assert unsigned_root.is_trust_root is True

    def test_certificate_type_follows_subject(self, root_identity, domain_subject, relayer_subject):
        domain = CrossChainCertificateFactory.create(
            1, "antchain.com", root_identity, EFFECTIVE_TIME, EXPIRE_TIME, domain_subject
        )
        relayer = CrossChainCertificateFactory.create(
            1, "relayer", root_identity, EFFECTIVE_TIME, EXPIRE_TIME, relayer_subject
        )
        assert domain.is_domain_certificate
        assert domain.domain.value == "antchain.com"
        assert relayer.is_relayer_certificate
        assert relayer.domain is None

    def test_unsupported_version(self, root_identity, trust_root_subject):
        with pytest.raises(UnsupportedVersion):
            CrossChainCertificateFactory.create(
                2, "root-x", root_identity, EFFECTIVE_TIME, EXPIRE_TIME, trust_root_subject
            )

    def test_expire_must_follow_effective(self, root_identity, trust_root_subject):
        with pytest.raises(InvalidCertificateFields) as exc_info:
            CrossChainCertificateFactory.create(
                1, "root-x", root_identity, EFFECTIVE_TIME, EFFECTIVE_TIME, trust_root_subject
            )
        assert exc_info.value.field == "expire_time"

    def test_negative_time_rejected(self, root_identity, trust_root_subject):
        with pytest.raises(InvalidCertificateFields):
            CrossChainCertificateFactory.create(
                1, "root-x", root_identity, -1, EXPIRE_TIME, trust_root_subject
            )

    def test_empty_subject_id_rejected(self, root_identity, trust_root_subject):
        with pytest.raises(InvalidCertificateFields):
            CrossChainCertificateFactory.create(
                1, "", root_identity, EFFECTIVE_TIME, EXPIRE_TIME, trust_root_subject
            )

    def test_unknown_subject_rejected(self, root_identity):
        with pytest.raises(InvalidCertificateFields):
            CrossChainCertificateFactory.create(
                1, "root-x", root_identity, EFFECTIVE_TIME, EXPIRE_TIME, object()
            )

    def test_validity_window_inclusive(self, unsigned_root):
        assert unsigned_root.is_effective_at(EFFECTIVE_TIME)
        assert unsigned_root.is_effective_at(EXPIRE_TIME)
        assert not unsigned_root.is_effective_at(EFFECTIVE_TIME - 1)
        assert not unsigned_root.is_effective_at(EXPIRE_TIME + 1)
        assert unsigned_root.is_effective_at(EXPIRE_TIME + 5, skew=5)


class TestProofAttachment:
    """Tests for the unsigned -> signed transition."""

    def test_set_proof(self, unsigned_root):
        signed = unsigned_root.set_proof(PROOF)
        assert isinstance(signed, SignedCertificate)
        assert signed.proof == PROOF
        assert signed.subject_id == unsigned_root.subject_id
        assert unsigned_root.is_consumed

    def test_set_proof_twice(self, unsigned_root):
        unsigned_root.set_proof(PROOF)
        with pytest.raises(ProofAlreadySet):
            unsigned_root.set_proof(PROOF)

    def test_signed_rejects_proof(self, signed_root):
        with pytest.raises(ProofAlreadySet):
            signed_root.set_proof(PROOF)

    def test_concurrent_set_proof_single_winner(self, unsigned_root):
        """Only one of many concurrent callers obtains a signed certificate."""
        results = []
        errors = []

        def attach():
            try:
                results.append(unsigned_root.set_proof(PROOF))
            except ProofAlreadySet as e:
                errors.append(e)

        threads = [threading.Thread(target=attach) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 1
        assert len(errors) == 7

    def test_proof_type_checked(self, unsigned_root):
        with pytest.raises(InvalidCertificateFields):
            unsigned_root.set_proof(b"not a proof")
        assert not unsigned_root.is_consumed

    def test_without_proof(self, signed_root):
        unsigned = signed_root.without_proof()
        assert isinstance(unsigned, UnsignedCertificate)
        assert unsigned.encoded_to_sign() == signed_root.encoded_to_sign()


class TestEncoding:
    """Tests for the canonical binary encoding."""

    def test_encoded_to_sign_excludes_proof(self, unsigned_root):
        signed = unsigned_root.set_proof(PROOF)
        other = signed.without_proof().set_proof(
            IssueProof("SHA512", b"\x03" * 64, "ED25519", b"\x04" * 64)
        )
        assert signed.encoded_to_sign() == unsigned_root.encoded_to_sign()
        assert other.encoded_to_sign() == signed.encoded_to_sign()
        assert signed.encode() != other.encode()

    def test_full_encoding_extends_signed_bytes(self, signed_root):
        encoded = signed_root.encode()
        assert encoded.startswith(signed_root.encoded_to_sign())
        assert len(encoded) > len(signed_root.encoded_to_sign())

    def test_field_change_changes_signed_bytes(self, root_identity, trust_root_subject, unsigned_root):
        later = CrossChainCertificateFactory.create(
            1, "root-x", root_identity, EFFECTIVE_TIME + 1, EXPIRE_TIME, trust_root_subject
        )
        assert later.encoded_to_sign() != unsigned_root.encoded_to_sign()

    def test_decode_signed(self, signed_root):
        decoded = decode_certificate(signed_root.encode())
        assert isinstance(decoded, SignedCertificate)
        assert decoded == signed_root
        assert decoded.encode() == signed_root.encode()

    def test_decode_unsigned(self, unsigned_root):
        decoded = decode_certificate(unsigned_root.encode())
        assert isinstance(decoded, UnsignedCertificate)
        assert decoded.proof is None
        assert decoded.encoded_to_sign() == unsigned_root.encoded_to_sign()

    @pytest.mark.parametrize("fixture", ["signed_domain", "signed_relayer"])
    def test_decode_subject_variants(self, request, fixture):
        cert = request.getfixturevalue(fixture)
        decoded = decode_certificate(cert.encode())
        assert type(decoded.credential_subject) is type(cert.credential_subject)
        assert decoded.credential_subject == cert.credential_subject

    def test_decode_truncated(self, signed_root):
        encoded = signed_root.encode()
        for cut in (1, 10, len(encoded) // 2):
            with pytest.raises(MalformedEncoding):
                decode_certificate(encoded[:-cut])

    def test_decode_trailing_item(self, signed_root):
        encoded = signed_root.encode() + TLVWriter().write_bytes(9, b"x").getvalue()
        with pytest.raises(MalformedEncoding):
            decode_certificate(encoded)

    def test_decode_unsupported_version(self, signed_root):
        encoded = signed_root.encode()
        patched = TLVWriter().write_u16(0, 7).getvalue() + encoded[8:]
        with pytest.raises(UnsupportedVersion):
            decode_certificate(patched)

    def test_decode_unknown_type(self, signed_root):
        encoded = bytearray(signed_root.encode())
        # version item (8 bytes), then type item header (6 bytes)
        encoded[14] = 9
        with pytest.raises(MalformedEncoding):
            decode_certificate(bytes(encoded))

    def test_decode_type_subject_mismatch(self, signed_domain):
        encoded = bytearray(signed_domain.encode())
        encoded[14] = int(CertificateType.RELAYER_CERTIFICATE)
        with pytest.raises(MalformedEncoding):
            decode_certificate(bytes(encoded))

    def test_version_constant(self, signed_root):
        assert signed_root.version == CERTIFICATE_VERSION_1


class TestIssueProof:
    """Tests for IssueProof."""

    def test_encode_decode(self):
        assert IssueProof.decode(PROOF.encode()) == PROOF

    def test_empty_algorithm_rejected(self):
        with pytest.raises(InvalidCertificateFields):
            IssueProof("", b"", "ED25519", b"")

    def test_decode_empty_algorithm(self):
        data = (
            TLVWriter()
            .write_string(0, "")
            .write_bytes(1, b"")
            .write_string(2, "ED25519")
            .write_bytes(3, b"")
            .getvalue()
        )
        with pytest.raises(MalformedEncoding):
            IssueProof.decode(data)
