"""Pytest configuration helpers for the test suite."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from odooprov.config import AppConfig, load_config
from odooprov.executor import (
    CommandExecutor,
    CommandFailedError,
    CommandResult,
    CommandTimeoutError,
)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip expensive tests during mutation runs."""
    if not os.environ.get("MUTANT_UNDER_TEST"):
        return
    skip_marker = pytest.mark.skip(reason="Skipped during mutation run to avoid timeouts.")
    for item in items:
        if "mutation_timeout" in item.keywords:
            item.add_marker(skip_marker)


@dataclass
class Call:
    """One command seen by :class:`FakeExecutor`."""

    args: tuple[str, ...]
    user: str | None
    timeout: float | None
    input: str | None


@dataclass
class _Response:
    prefix: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timeout: bool
    effect: Callable[[tuple[str, ...]], None] | None


class FakeExecutor(CommandExecutor):
    """Executor that records commands and answers from canned responses.

    Responses match on a command prefix; the most recently registered match
    wins. Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        """Start with no canned responses."""
        super().__init__()
        self.calls: list[Call] = []
        self._responses: list[_Response] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        timeout: bool = False,
        effect: Callable[[tuple[str, ...]], None] | None = None,
    ) -> None:
        """Register a response for commands starting with *prefix*."""
        self._responses.append(
            _Response(tuple(prefix), returncode, stdout, stderr, timeout, effect)
        )

    def commands(self) -> list[tuple[str, ...]]:
        """Return the argv of every recorded call."""
        return [call.args for call in self.calls]

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        check: bool = True,
        user: str | None = None,
        input: str | None = None,  # noqa: A002
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Record the call and return the canned response."""
        argv = tuple(str(item) for item in args)
        self.calls.append(Call(args=argv, user=user, timeout=timeout, input=input))
        response = self._match(argv)
        if response is None:
            return CommandResult(args=argv, returncode=0)
        if response.timeout:
            raise CommandTimeoutError(argv, timeout or 0.0)
        if response.effect is not None:
            response.effect(argv)
        result = CommandResult(
            args=argv,
            returncode=response.returncode,
            stdout=response.stdout,
            stderr=response.stderr,
        )
        if check and not result.ok:
            raise CommandFailedError(result)
        return result

    def _match(self, argv: tuple[str, ...]) -> _Response | None:
        for response in reversed(self._responses):
            if argv[: len(response.prefix)] == response.prefix:
                return response
        return None


def write_self_signed_cert(
    path: Path,
    *,
    common_name: str = "erp.example.com",
    valid_from: datetime | None = None,
    valid_to: datetime | None = None,
) -> Path:
    """Write a PEM self-signed certificate to *path* and return it."""
    now = datetime.now(UTC)
    valid_to = valid_to or (now + timedelta(days=90))
    valid_from = valid_from or min(now - timedelta(days=1), valid_to - timedelta(days=30))
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(valid_from)
        .not_valid_after(valid_to)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    return path


@pytest.fixture
def fake_executor() -> FakeExecutor:
    """Return an executor that never spawns processes."""
    return FakeExecutor()


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Return a configuration rooted entirely under ``tmp_path``."""
    return load_config(
        config_file=tmp_path / "missing.yml",
        env={},
        overrides={
            "logs_dir": str(tmp_path / "logs"),
            "templates_dir": str(tmp_path / "templates"),
            "odoo": {
                "home": str(tmp_path / "opt" / "odoo"),
                "config_path": str(tmp_path / "etc" / "odoo" / "odoo.conf"),
                "log_dir": str(tmp_path / "var" / "log" / "odoo"),
            },
            "nginx": {
                "sites_available": str(tmp_path / "nginx" / "sites-available"),
                "sites_enabled": str(tmp_path / "nginx" / "sites-enabled"),
                "log_dir": str(tmp_path / "var" / "log" / "nginx"),
            },
            "tls": {"live_dir": str(tmp_path / "letsencrypt" / "live")},
            "systemd": {"unit_dir": str(tmp_path / "systemd")},
        },
    )
