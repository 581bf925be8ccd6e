"""
Command line tools for issuing and checking cross-chain certificates.

Usage:
    bcdns-cert keygen --out root.key
    bcdns-cert issue trust-root --issuer-key root.key --name root-x --out root.pem
    bcdns-cert issue domain --issuer-key root.key --domain antchain.com \\
        --subject-key applicant.pub --out domain.pem
    bcdns-cert inspect domain.pem --json
    bcdns-cert verify domain.pem --issuer-cert root.pem
"""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .codec import read_certificate, serialize, write_certificate
from .config import CertificateConfig
from .core.certificate import CrossChainCertificate
from .core.identity import ObjectIdentity
from .core.subjects import (
    BCDNSTrustRootCredentialSubject,
    DomainNameCredentialSubject,
    DomainNameType,
    RelayerCredentialSubject,
)
from .exceptions import CertificateError
from .security.issuer import CertificateIssuer
from .security.keys import (
    generate_private_key,
    identity_fingerprint,
    load_private_key_pem,
    load_public_key,
    private_key_to_pem,
    public_key_to_identity,
    public_key_to_pem,
)
from .security.verifier import CertificateVerifier

SECONDS_PER_DAY = 24 * 3600

ISSUE_KINDS = ("trust-root", "domain", "domain-space", "relayer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bcdns-cert",
        description="Issue, inspect and verify cross-chain trust certificates"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Keygen command
    keygen_parser = subparsers.add_parser("keygen", help="Generate a private key")
    keygen_parser.add_argument("--algorithm", "-a", help="Signature algorithm the key is for")
    keygen_parser.add_argument("--out", "-o", required=True, help="Private key PEM path")
    keygen_parser.add_argument("--public-out", help="Also write the public key PEM here")
    keygen_parser.add_argument("--password-env", metavar="VAR",
                               help="Encrypt the key with the password held in this environment variable")

    # Issue command
    issue_parser = subparsers.add_parser("issue", help="Issue a signed certificate")
    issue_parser.add_argument("kind", choices=ISSUE_KINDS, help="Certificate kind")
    issue_parser.add_argument("--issuer-key", required=True, help="Issuer private key PEM")
    issue_parser.add_argument("--password-env", metavar="VAR",
                              help="Environment variable holding the issuer key password")
    issue_parser.add_argument("--subject-id", help="Certificate label (defaults to name/domain)")
    issue_parser.add_argument("--name", help="Root tag or relayer name")
    issue_parser.add_argument("--domain", help="Domain name or domain-name space")
    issue_parser.add_argument("--subject-key",
                              help="Public or private key PEM of the applicant (defaults to issuer)")
    issue_parser.add_argument("--effective", type=int, help="Effective time, unix seconds (default now)")
    issue_parser.add_argument("--days", type=int, help="Validity in days")
    issue_parser.add_argument("--extra-hex", default="", help="Extra subject data, hex encoded")
    issue_parser.add_argument("--out", "-o", help="Output file (stdout if omitted)")

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Show certificate fields")
    inspect_parser.add_argument("certificate", help="Armored certificate path")
    inspect_parser.add_argument("--json", action="store_true", help="Print JSON")

    # Verify command
    verify_parser = subparsers.add_parser("verify", help="Verify a certificate proof")
    verify_parser.add_argument("certificate", help="Armored certificate path")
    source = verify_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--issuer-key", help="Issuer public (or private) key PEM")
    source.add_argument("--issuer-cert", help="Certificate whose subject identity is the issuer key")
    verify_parser.add_argument("--at", type=int, help="Evaluation time, unix seconds (default now)")
    verify_parser.add_argument("--password-env", metavar="VAR",
                               help="Environment variable holding the --issuer-key password")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CertificateConfig.from_env()
        if args.command == "keygen":
            return cmd_keygen(args, config)
        elif args.command == "issue":
            return cmd_issue(args, config)
        elif args.command == "inspect":
            return cmd_inspect(args)
        elif args.command == "verify":
            return cmd_verify(args, config)
    except (CertificateError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


def cmd_keygen(args, config: CertificateConfig) -> int:
    """Generate a private key."""
    algorithm = args.algorithm or config.signature_algorithm
    private_key = generate_private_key(algorithm)

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(private_key_to_pem(private_key, password=_password(args)))
    out.chmod(0o600)

    if args.public_out:
        Path(args.public_out).write_bytes(public_key_to_pem(private_key.public_key()))

    identity = public_key_to_identity(private_key.public_key())
    print(f"Generated {algorithm} key: {out}")
    print(f"Identity fingerprint: {identity_fingerprint(identity)}")
    return 0


def _password(args) -> Optional[bytes]:
    """Read a key password from the environment variable named by --password-env."""
    if not args.password_env:
        return None
    value = os.environ.get(args.password_env)
    if not value:
        raise ValueError(f"Environment variable {args.password_env} is not set")
    return value.encode()


def _load_identity(path: str, password: Optional[bytes] = None) -> ObjectIdentity:
    data = Path(path).read_bytes()
    if b"PRIVATE KEY" in data:
        return public_key_to_identity(load_private_key_pem(data, password=password).public_key())
    return public_key_to_identity(load_public_key(data))


def cmd_issue(args, config: CertificateConfig) -> int:
    """Issue a certificate signed by the issuer key."""
    private_key = load_private_key_pem(Path(args.issuer_key).read_bytes(), password=_password(args))
    issuer = CertificateIssuer(private_key, config=config)

    applicant = _load_identity(args.subject_key) if args.subject_key else issuer.identity
    extra = bytes.fromhex(args.extra_hex)

    if args.kind == "trust-root":
        if not args.name:
            raise ValueError("trust-root certificates need --name")
        subject = BCDNSTrustRootCredentialSubject(name=args.name, root_identity=applicant, extra=extra)
        label = args.name
    elif args.kind in ("domain", "domain-space"):
        if not args.domain:
            raise ValueError(f"{args.kind} certificates need --domain")
        domain_type = (
            DomainNameType.DOMAIN_NAME_SPACE if args.kind == "domain-space" else DomainNameType.DOMAIN_NAME
        )
        subject = DomainNameCredentialSubject(
            version=DomainNameCredentialSubject.CURRENT_VERSION,
            domain_type=domain_type,
            domain=args.domain,
            applicant=applicant,
            extra=extra,
        )
        label = subject.domain.value
    else:
        if not args.name:
            raise ValueError("relayer certificates need --name")
        subject = RelayerCredentialSubject(
            version=RelayerCredentialSubject.CURRENT_VERSION,
            name=args.name,
            applicant=applicant,
            extra=extra,
        )
        label = args.name

    effective = args.effective if args.effective is not None else int(time.time())
    days = args.days if args.days is not None else config.default_validity_days
    certificate = issuer.issue_certificate(
        subject_id=args.subject_id or label,
        credential_subject=subject,
        effective_time=effective,
        expire_time=effective + days * SECONDS_PER_DAY,
    )

    if args.out:
        write_certificate(args.out, certificate, line_width=config.pem_line_width)
        print(f"Issued {certificate.certificate_type.name}: {args.out}")
    else:
        sys.stdout.write(serialize(certificate, line_width=config.pem_line_width))
    return 0


def certificate_to_dict(certificate: CrossChainCertificate) -> Dict[str, Any]:
    """Human-readable view of a certificate."""
    subject = certificate.credential_subject
    subject_view: Dict[str, Any] = {
        "kind": type(subject).__name__,
        "version": subject.version,
        "identity_fingerprint": identity_fingerprint(subject.subject_identity),
        "extra": subject.extra.hex(),
    }
    if isinstance(subject, DomainNameCredentialSubject):
        subject_view["domain_type"] = subject.domain_type.name
        subject_view["domain"] = subject.domain.value
    else:
        subject_view["name"] = subject.name

    view = {
        "version": certificate.version,
        "type": certificate.certificate_type.name,
        "subject_id": certificate.subject_id,
        "issuer_fingerprint": identity_fingerprint(certificate.issuer),
        "effective_time": certificate.effective_time,
        "expire_time": certificate.expire_time,
        "credential_subject": subject_view,
        "proof": None,
    }

    proof = getattr(certificate, "proof", None)
    if proof is not None:
        view["proof"] = {
            "digest_algorithm": proof.digest_algorithm,
            "digest_value": proof.digest_value.hex(),
            "signature_algorithm": proof.signature_algorithm,
            "signature_value": proof.signature_value.hex(),
        }
    return view


def cmd_inspect(args) -> int:
    """Inspect an armored certificate."""
    certificate = read_certificate(args.certificate)
    view = certificate_to_dict(certificate)

    if args.json:
        print(json.dumps(view, indent=2))
        return 0

    print(f"\n{'='*60}")
    print(f"Certificate: {Path(args.certificate).name}")
    print(f"{'='*60}")
    print(f"Type: {view['type']}")
    print(f"Subject ID: {view['subject_id']}")
    print(f"Version: {view['version']}")
    print(f"Issuer: {view['issuer_fingerprint']}")
    print(f"Valid: {view['effective_time']} .. {view['expire_time']}")
    print(f"\nCredential subject ({view['credential_subject']['kind']}):")
    for key, value in view["credential_subject"].items():
        if key != "kind":
            print(f"  {key}: {value}")
    if view["proof"]:
        print(f"\nProof: {view['proof']['digest_algorithm']} / {view['proof']['signature_algorithm']}")
    else:
        print("\nProof: none")
    return 0


def cmd_verify(args, config: CertificateConfig) -> int:
    """Verify a certificate against an issuer key."""
    certificate = read_certificate(args.certificate)

    if args.issuer_cert:
        issuer_key: Any = read_certificate(args.issuer_cert).subject_identity
    else:
        issuer_key = _load_identity(args.issuer_key, password=_password(args))

    verifier = CertificateVerifier(config=config)
    valid, details = verifier.check(certificate, issuer_key, now=args.at)

    status = "VALID" if valid else "INVALID"
    print(f"{certificate.subject_id}: {status}")
    for err in details["errors"]:
        print(f"  - {details['error_type']}: {err}")
    return 0 if valid else 1


if __name__ == "__main__":
    sys.exit(main())
