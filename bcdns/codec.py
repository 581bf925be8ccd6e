"""
Armored text codec for certificates.

A certificate is written as its full binary encoding (fields plus proof),
base64 encoded and framed by marker lines naming the certificate type:

    -----BEGIN BCDNS TRUST ROOT CERTIFICATE-----
    <base64 of the binary encoding, 64 columns per line>
    -----END BCDNS TRUST ROOT CERTIFICATE-----

The codec never interprets field semantics beyond matching the marker
label to the decoded certificate type.
"""

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Optional, Union

from .core.certificate import Certificate, CrossChainCertificate, decode_certificate
from .core.subjects import CertificateType
from .exceptions import FramingError

logger = logging.getLogger(__name__)

PEM_LABELS = {
    CertificateType.BCDNS_TRUST_ROOT_CERTIFICATE: "BCDNS TRUST ROOT CERTIFICATE",
    CertificateType.DOMAIN_NAME_CERTIFICATE: "DOMAIN NAME CERTIFICATE",
    CertificateType.RELAYER_CERTIFICATE: "RELAYER CERTIFICATE",
}
LABEL_TYPES = {label: cert_type for cert_type, label in PEM_LABELS.items()}

DEFAULT_LINE_WIDTH = 64

_BEGIN_RE = re.compile(r"^-----BEGIN ([A-Z ]+)-----$")
_END_RE = re.compile(r"^-----END ([A-Z ]+)-----$")


def serialize_binary(certificate: CrossChainCertificate) -> bytes:
    """Full binary encoding of a certificate (fields plus proof, if any)."""
    return certificate.encode()


def deserialize_binary(data: bytes) -> Certificate:
    return decode_certificate(data)


def serialize(certificate: CrossChainCertificate, line_width: Optional[int] = None) -> str:
    """
    Armor a certificate as text.

    Args:
        certificate: Certificate to serialize
        line_width: Base64 characters per line (default 64)

    Returns:
        Armored text ending with a newline
    """
    width = line_width or DEFAULT_LINE_WIDTH
    label = PEM_LABELS[certificate.certificate_type]
    body = base64.b64encode(serialize_binary(certificate)).decode("ascii")
    lines = [f"-----BEGIN {label}-----"]
    lines.extend(body[i:i + width] for i in range(0, len(body), width))
    lines.append(f"-----END {label}-----")
    return "\n".join(lines) + "\n"


def deserialize(text: Union[str, bytes]) -> Certificate:
    """
    Parse armored text back into a certificate.

    Raises:
        FramingError: Missing, unknown or mismatched markers, or a body that
            is not strict base64
        DecodeError: The binary content itself is malformed
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("ascii")
        except UnicodeDecodeError:
            raise FramingError("Armored certificate must be ASCII text")

    lines = text.strip().splitlines()
    if len(lines) < 3:
        raise FramingError("Armored certificate needs a header, a body and a footer")

    begin = _BEGIN_RE.match(lines[0])
    if begin is None:
        raise FramingError(f"Invalid header line: {lines[0][:80]!r}")
    label = begin.group(1)
    if label not in LABEL_TYPES:
        raise FramingError(f"Unknown certificate label: {label!r}")

    end = _END_RE.match(lines[-1])
    if end is None:
        raise FramingError(f"Invalid footer line: {lines[-1][:80]!r}")
    if end.group(1) != label:
        raise FramingError(f"Footer label {end.group(1)!r} does not match header label {label!r}")

    body = "".join(line.strip() for line in lines[1:-1])
    try:
        data = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FramingError(f"Invalid base64 body: {e}")
    if not data:
        raise FramingError("Empty certificate body")

    certificate = deserialize_binary(data)
    if certificate.certificate_type != LABEL_TYPES[label]:
        raise FramingError(
            f"Label {label!r} does not match certificate type {certificate.certificate_type.name}"
        )

    logger.debug(f"Deserialized {label} '{certificate.subject_id}' ({len(data)} bytes)")
    return certificate


def write_certificate(path: Union[str, Path], certificate: CrossChainCertificate,
                      line_width: Optional[int] = None) -> Path:
    """Write an armored certificate to a file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(certificate, line_width=line_width))
    logger.info(f"Wrote {PEM_LABELS[certificate.certificate_type]} to {path}")
    return path


def read_certificate(path: Union[str, Path]) -> Certificate:
    """Read an armored certificate from a file."""
    return deserialize(Path(path).read_text())


__all__ = [
    "PEM_LABELS",
    "serialize",
    "deserialize",
    "serialize_binary",
    "deserialize_binary",
    "write_certificate",
    "read_certificate",
]
