"""Service providers for odooprov."""
from __future__ import annotations

from dataclasses import dataclass

from ..config import AppConfig
from ..executor import CommandExecutor
from .certbot import CertbotProvider
from .nginx import NginxError, NginxProvider
from .systemd import SystemdError, SystemdProvider


@dataclass(slots=True)
class Providers:
    """Providers bound to one executor and configuration."""

    nginx: NginxProvider
    systemd: SystemdProvider
    certbot: CertbotProvider

    @classmethod
    def from_config(cls, config: AppConfig, executor: CommandExecutor) -> Providers:
        """Build every provider from *config*."""
        return cls(
            nginx=NginxProvider(
                executor=executor,
                sites_available=config.nginx.sites_available,
                sites_enabled=config.nginx.sites_enabled,
                nginx_bin=config.nginx.nginx_bin,
            ),
            systemd=SystemdProvider(
                executor=executor,
                unit_dir=config.systemd.unit_dir,
                systemctl_bin=config.systemd.systemctl_bin,
            ),
            certbot=CertbotProvider(
                executor=executor,
                live_dir=config.tls.live_dir,
                certbot_bin=config.tls.certbot_bin,
                snap_bin=config.tls.snap_bin,
                systemctl_bin=config.systemd.systemctl_bin,
            ),
        )


__all__ = [
    "CertbotProvider",
    "NginxError",
    "NginxProvider",
    "Providers",
    "SystemdError",
    "SystemdProvider",
]
