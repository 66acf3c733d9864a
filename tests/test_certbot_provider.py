"""Tests for the certbot provider."""
from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeExecutor
from odooprov.providers.certbot import CertbotProvider
from odooprov.tls import CertificateError


@pytest.fixture
def provider(tmp_path: Path, fake_executor: FakeExecutor) -> CertbotProvider:
    """Return a certbot provider rooted under ``tmp_path``."""
    return CertbotProvider(
        executor=fake_executor,
        live_dir=tmp_path / "live",
        certbot_bin=str(tmp_path / "bin" / "certbot"),
        snap_bin="snap",
        systemctl_bin="systemctl",
        snap_certbot=tmp_path / "snap" / "bin" / "certbot",
    )


def test_install_uses_snap_and_links_binary(
    provider: CertbotProvider,
    fake_executor: FakeExecutor,
    tmp_path: Path,
) -> None:
    """certbot comes from snap and is linked onto the configured path."""
    (tmp_path / "bin").mkdir()

    output = provider.install(timeout=60.0)

    assert fake_executor.commands() == [
        ("snap", "install", "core"),
        ("snap", "refresh", "core"),
        ("snap", "install", "--classic", "certbot"),
    ]
    link = Path(provider.certbot_bin)
    assert link.is_symlink()
    assert link.readlink() == provider.snap_certbot
    assert "linked" in output


def test_obtain_requests_certificate_non_interactively(
    provider: CertbotProvider,
    fake_executor: FakeExecutor,
) -> None:
    """Certificates are requested through the nginx authenticator."""
    provider.obtain("erp.example.com", "ops@example.com", timeout=120.0)

    (call,) = fake_executor.calls
    assert call.args == (
        provider.certbot_bin,
        "certonly",
        "--nginx",
        "-d",
        "erp.example.com",
        "--non-interactive",
        "--agree-tos",
        "-m",
        "ops@example.com",
        "--keep-until-expiring",
    )
    assert call.timeout == 120.0


def test_obtain_failure_raises(provider: CertbotProvider, fake_executor: FakeExecutor) -> None:
    """Challenge failures surface the certbot output."""
    fake_executor.on(provider.certbot_bin, returncode=1, stderr="Challenge failed for domain")

    with pytest.raises(CertificateError, match="Challenge failed"):
        provider.obtain("erp.example.com", "ops@example.com")


def test_enable_renewal(provider: CertbotProvider, fake_executor: FakeExecutor) -> None:
    """The renewal timer is enabled and started."""
    provider.enable_renewal("snap.certbot.renew.timer")

    assert fake_executor.commands() == [
        ("systemctl", "enable", "--now", "snap.certbot.renew.timer"),
    ]
