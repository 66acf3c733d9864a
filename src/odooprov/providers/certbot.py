"""Let's Encrypt certificates through certbot's nginx plugin."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..executor import CommandExecutor, CommandNotFoundError, CommandResult
from ..tls import CertificateError, CertificatePaths

LOGGER = logging.getLogger(__name__)

SNAP_CERTBOT = Path("/snap/bin/certbot")


@dataclass(slots=True)
class CertbotProvider:
    """Install certbot, request certificates and keep them renewed."""

    executor: CommandExecutor
    live_dir: Path = Path("/etc/letsencrypt/live")
    certbot_bin: str = "/usr/bin/certbot"
    snap_bin: str = "snap"
    systemctl_bin: str = "systemctl"
    snap_certbot: Path = SNAP_CERTBOT

    def paths(self, domain: str) -> CertificatePaths:
        """Return the live certificate paths for *domain*."""
        return CertificatePaths.for_domain(self.live_dir, domain)

    def install(self, *, timeout: float | None = None) -> str:
        """Install certbot from snap and link it onto the default PATH."""
        outputs = [
            self._run([self.snap_bin, "install", "core"], timeout=timeout).stdout,
            self._run([self.snap_bin, "refresh", "core"], timeout=timeout).stdout,
            self._run([self.snap_bin, "install", "--classic", "certbot"], timeout=timeout).stdout,
        ]
        link = Path(self.certbot_bin)
        if link != self.snap_certbot and not link.exists():
            if link.is_symlink():
                link.unlink()
            link.symlink_to(self.snap_certbot)
            outputs.append(f"linked {link} -> {self.snap_certbot}")
        return "\n".join(output.strip() for output in outputs if output.strip())

    def obtain(self, domain: str, email: str, *, timeout: float | None = None) -> str:
        """Request a certificate for *domain* via the nginx authenticator.

        ``certonly`` leaves the nginx site untouched; the rendered site
        references the live paths directly.
        """
        result = self._run(
            [
                self.certbot_bin,
                "certonly",
                "--nginx",
                "-d",
                domain,
                "--non-interactive",
                "--agree-tos",
                "-m",
                email,
                "--keep-until-expiring",
            ],
            timeout=timeout,
        )
        return result.stdout

    def enable_renewal(self, timer: str, *, timeout: float | None = None) -> str:
        """Enable and start the renewal timer."""
        return self._run([self.systemctl_bin, "enable", "--now", timer], timeout=timeout).stdout

    # ------------------------------------------------------------------
    def _run(self, args: list[str], *, timeout: float | None) -> CommandResult:
        try:
            result = self.executor.run(args, timeout=timeout, check=False)
        except CommandNotFoundError as exc:
            raise CertificateError(str(exc)) from exc
        if not result.ok:
            raise CertificateError(
                f"{result.command} failed (exit {result.returncode}): {result.message}"
            )
        LOGGER.debug("%s: %s", result.command, result.stdout.strip())
        return result


__all__ = ["CertbotProvider"]
