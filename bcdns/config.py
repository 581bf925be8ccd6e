"""
Configuration defaults for issuing and verifying certificates.

Values can be overridden through BCDNS_* environment variables:

    BCDNS_DIGEST_ALGORITHM       default digest for new proofs (SHA256)
    BCDNS_SIGNATURE_ALGORITHM    default signature algorithm (ED25519)
    BCDNS_CLOCK_SKEW_SECONDS     tolerance applied to the validity window (0)
    BCDNS_PEM_LINE_WIDTH         base64 line width for armored output (64)
    BCDNS_DEFAULT_VALIDITY_DAYS  validity used by the CLI when issuing (365)
"""

import os
import logging
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "BCDNS_"


@dataclass(frozen=True)
class CertificateConfig:
    """Library-wide defaults. Instances are immutable; build a new one to change them."""

    digest_algorithm: str = "SHA256"
    signature_algorithm: str = "ED25519"
    clock_skew_seconds: int = 0
    pem_line_width: int = 64
    default_validity_days: int = 365

    def __post_init__(self):
        if self.clock_skew_seconds < 0:
            raise ValueError(f"clock_skew_seconds must be >= 0, got {self.clock_skew_seconds}")
        if self.pem_line_width <= 0 or self.pem_line_width % 4:
            raise ValueError(
                f"pem_line_width must be a positive multiple of 4, got {self.pem_line_width}"
            )
        if self.default_validity_days <= 0:
            raise ValueError(
                f"default_validity_days must be > 0, got {self.default_validity_days}"
            )
        if not self.digest_algorithm or not self.signature_algorithm:
            raise ValueError("Algorithm names must not be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CertificateConfig":
        """
        Build a config from BCDNS_* environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            CertificateConfig with overrides applied

        Raises:
            ValueError: If a variable holds a value of the wrong type
        """
        if environ is None:
            environ = os.environ

        overrides: Dict[str, object] = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            if key not in environ:
                continue
            raw = environ[key].strip()
            if f.type in (int, "int"):
                try:
                    overrides[f.name] = int(raw)
                except ValueError:
                    raise ValueError(f"{key} must be an integer, got {raw!r}")
            else:
                overrides[f.name] = raw
            logger.debug(f"Config override from {key}: {overrides[f.name]!r}")

        return cls(**overrides)


__all__ = ["CertificateConfig", "ENV_PREFIX"]
