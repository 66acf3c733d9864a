"""TLS certificate helpers used by the certificate probe and certbot steps."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from cryptography import x509


class CertificateError(RuntimeError):
    """Raised when certificate material cannot be read or parsed."""


@dataclass(frozen=True)
class CertificatePaths:
    """Let's Encrypt live material for one domain."""

    certificate: Path
    key: Path
    chain: Path

    @classmethod
    def for_domain(cls, live_dir: Path, domain: str) -> CertificatePaths:
        """Return the certbot ``live`` paths for *domain*."""
        base = live_dir / domain
        return cls(
            certificate=base / "fullchain.pem",
            key=base / "privkey.pem",
            chain=base / "chain.pem",
        )


@dataclass(frozen=True)
class CertificateStatus:
    """Parsed validity window of a certificate."""

    path: Path
    subject: str
    not_valid_before: datetime
    not_valid_after: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        """Return ``True`` when *now* falls inside the validity window."""
        moment = now or datetime.now(UTC)
        return self.not_valid_before <= moment < self.not_valid_after


def inspect_certificate(path: Path) -> CertificateStatus:
    """Load the certificate at *path* and return its validity window."""
    try:
        cert = _load_certificate(path)
    except OSError as exc:
        raise CertificateError(f"Cannot read certificate {path}: {exc}") from exc
    except ValueError as exc:
        raise CertificateError(f"Cannot parse certificate {path}: {exc}") from exc

    not_before_attr = getattr(cert, "not_valid_before_utc", None)
    not_after_attr = getattr(cert, "not_valid_after_utc", None)
    if isinstance(not_before_attr, datetime) and isinstance(not_after_attr, datetime):
        not_before = not_before_attr
        not_after = not_after_attr
    else:  # pragma: no cover - compatibility fallback
        not_before = _as_utc(cert.not_valid_before)
        not_after = _as_utc(cert.not_valid_after)
    return CertificateStatus(
        path=path,
        subject=cert.subject.rfc4514_string(),
        not_valid_before=not_before,
        not_valid_after=not_after,
    )


def _load_certificate(path: Path) -> x509.Certificate:
    data = path.read_bytes()
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError:
        return x509.load_der_x509_certificate(data)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


__all__ = [
    "CertificateError",
    "CertificatePaths",
    "CertificateStatus",
    "inspect_certificate",
]
