"""
Tests for CertificateConfig.
"""

import dataclasses

import pytest

from bcdns.config import CertificateConfig


class TestCertificateConfig:
    """Tests for defaults and environment overrides."""

    def test_defaults(self):
        config = CertificateConfig()
        assert config.digest_algorithm == "SHA256"
        assert config.signature_algorithm == "ED25519"
        assert config.clock_skew_seconds == 0
        assert config.pem_line_width == 64
        assert config.default_validity_days == 365

    def test_immutable(self):
        config = CertificateConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.clock_skew_seconds = 10

    def test_from_env(self):
        config = CertificateConfig.from_env({
            "BCDNS_DIGEST_ALGORITHM": "SHA512",
            "BCDNS_CLOCK_SKEW_SECONDS": " 120 ",
            "BCDNS_PEM_LINE_WIDTH": "76",
            "UNRELATED": "x",
        })
        assert config.digest_algorithm == "SHA512"
        assert config.clock_skew_seconds == 120
        assert config.pem_line_width == 76
        assert config.signature_algorithm == "ED25519"

    def test_from_os_environ(self, monkeypatch):
        monkeypatch.setenv("BCDNS_DEFAULT_VALIDITY_DAYS", "30")
        assert CertificateConfig.from_env().default_validity_days == 30

    def test_bad_integer(self):
        with pytest.raises(ValueError) as exc_info:
            CertificateConfig.from_env({"BCDNS_CLOCK_SKEW_SECONDS": "soon"})
        assert "BCDNS_CLOCK_SKEW_SECONDS" in str(exc_info.value)

    @pytest.mark.parametrize("kwargs", [
        {"clock_skew_seconds": -1},
        {"pem_line_width": 0},
        {"pem_line_width": 63},
        {"default_validity_days": 0},
        {"digest_algorithm": ""},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            CertificateConfig(**kwargs)
