"""
Tests for identity anchors and cross-chain domains.
"""

import pytest

from bcdns.core.identity import (
    MAX_DOMAIN_LENGTH,
    CrossChainDomain,
    ObjectIdentity,
    ObjectIdentityType,
    decode_domain,
)
from bcdns.exceptions import InvalidCertificateFields, MalformedEncoding


class TestObjectIdentity:
    """Tests for ObjectIdentity."""

    def test_encode_decode(self):
        identity = ObjectIdentity(ObjectIdentityType.X509_PUBLIC_KEY_INFO, b"\x30\x2a\x30\x05")
        decoded = ObjectIdentity.decode(identity.encode())
        assert decoded == identity
        assert decoded.type is ObjectIdentityType.X509_PUBLIC_KEY_INFO

    def test_raw_bytes_are_copied(self):
        """Mutating the caller's buffer does not change the identity."""
        buffer = bytearray(b"key-material")
        identity = ObjectIdentity(ObjectIdentityType.BID, buffer)
        buffer[0] = 0
        assert identity.raw_bytes == b"key-material"
        assert isinstance(identity.raw_bytes, bytes)

    def test_unknown_type_preserved(self):
        identity = ObjectIdentity(42, b"future")
        assert identity.is_recognized is False
        decoded = ObjectIdentity.decode(identity.encode())
        assert decoded.type == 42
        assert decoded.encode() == identity.encode()

    def test_known_type_recognized(self):
        assert ObjectIdentity(0, b"x").is_recognized is True
        assert ObjectIdentity(0, b"x").type is ObjectIdentityType.X509_PUBLIC_KEY_INFO

    def test_invalid_type(self):
        with pytest.raises(InvalidCertificateFields):
            ObjectIdentity(256, b"x")
        with pytest.raises(InvalidCertificateFields):
            ObjectIdentity("X509", b"x")

    def test_invalid_raw_bytes(self):
        with pytest.raises(InvalidCertificateFields):
            ObjectIdentity(ObjectIdentityType.BID, "not bytes")

    def test_decode_truncated(self):
        data = ObjectIdentity(ObjectIdentityType.BID, b"abcdef").encode()
        with pytest.raises(MalformedEncoding):
            ObjectIdentity.decode(data[:-2])


class TestCrossChainDomain:
    """Tests for CrossChainDomain."""

    def test_normalizes_ascii_case(self):
        assert CrossChainDomain("AntChain.COM").value == "antchain.com"

    def test_equal_after_normalization(self):
        assert CrossChainDomain("ANTCHAIN.com") == CrossChainDomain("antchain.com")

    def test_domain_space(self):
        assert CrossChainDomain(".com").is_domain_space is True
        assert CrossChainDomain("antchain.com").is_domain_space is False

    def test_empty_rejected(self):
        with pytest.raises(InvalidCertificateFields):
            CrossChainDomain("")

    def test_whitespace_rejected(self):
        with pytest.raises(InvalidCertificateFields):
            CrossChainDomain("ant chain.com")
        with pytest.raises(InvalidCertificateFields):
            CrossChainDomain("antchain.com\n")

    def test_length_limit(self):
        CrossChainDomain("a" * MAX_DOMAIN_LENGTH)
        with pytest.raises(InvalidCertificateFields):
            CrossChainDomain("a" * (MAX_DOMAIN_LENGTH + 1))

    def test_decode_requires_normalized_form(self):
        assert decode_domain("antchain.com", "domain").value == "antchain.com"
        with pytest.raises(MalformedEncoding):
            decode_domain("AntChain.com", "domain")
        with pytest.raises(MalformedEncoding):
            decode_domain("", "domain")
