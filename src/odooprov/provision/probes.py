"""Read-only checks that classify the state of a resource.

Every handler answers ``present``/``absent`` for a valid query and ``error``
when the query itself cannot be answered (missing tool, unreadable path,
timeout). A missing external tool is never reported as ``absent``.
"""
from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from ..bootstrap.service_accounts import inspect_service_account
from ..executor import CommandError, CommandExecutor, CommandResult
from ..files import sha256_file
from ..tls import CertificateError, inspect_certificate
from .models import ExpectedState, ProbeResult, ProbeState, Resource, ResourceKind

LOGGER = logging.getLogger(__name__)

_ROLE_QUERY = "SELECT 1 FROM pg_roles WHERE rolname = :'role';\n"
_ACTIVE_STATES = frozenset({"active", "inactive", "failed", "activating"})

Handler = Callable[["Probe", Resource], ProbeResult]


def _present(resource: Resource, detail: str = "") -> ProbeResult:
    return ProbeResult(resource=resource, state=ProbeState.PRESENT, detail=detail)


def _absent(resource: Resource, detail: str = "") -> ProbeResult:
    return ProbeResult(resource=resource, state=ProbeState.ABSENT, detail=detail)


def _error(resource: Resource, detail: str) -> ProbeResult:
    return ProbeResult(resource=resource, state=ProbeState.ERROR, detail=detail)


@dataclass(slots=True)
class Probe:
    """Query host state for a :class:`Resource` without changing it."""

    executor: CommandExecutor
    timeout: float | None = 30.0
    postgres_user: str = "postgres"
    dpkg_query_bin: str = "dpkg-query"
    systemctl_bin: str = "systemctl"
    psql_bin: str = "psql"

    def check(self, resource: Resource) -> ProbeResult:
        """Return the observed state of *resource*; never raises."""
        handler = _HANDLERS.get(resource.kind)
        if handler is None:
            return _error(resource, f"No probe registered for {resource.kind.value} resources.")
        try:
            result = handler(self, resource)
        except CommandError as exc:
            result = _error(resource, str(exc))
        except OSError as exc:
            result = _error(resource, f"{exc.__class__.__name__}: {exc}")
        LOGGER.debug("probe %s -> %s %s", resource, result.state.value, result.detail)
        return result

    def _query(
        self,
        args: list[str],
        *,
        user: str | None = None,
        input: str | None = None,  # noqa: A002
    ) -> CommandResult:
        return self.executor.run(
            args,
            timeout=self.timeout,
            check=False,
            user=user,
            input=input,
        )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _probe_package(probe: Probe, resource: Resource) -> ProbeResult:
    names = resource.identifier.split()
    result = probe._query(
        [probe.dpkg_query_bin, "-W", "-f=${Package} ${Status}\n", *names]
    )
    # dpkg-query exits 1 when some names are unknown; anything else is a failure.
    if result.returncode not in (0, 1):
        return _error(resource, f"{result.command} failed (exit {result.returncode}): {result.message}")

    installed: set[str] = set()
    for line in result.stdout.splitlines():
        package, _, status = line.strip().partition(" ")
        if status.endswith("ok installed"):
            installed.add(package.split(":", 1)[0])
    missing = [name for name in names if name not in installed]
    if missing:
        return _absent(resource, f"not installed: {' '.join(missing)}")
    return _present(resource, f"installed: {' '.join(names)}")


def _probe_file(probe: Probe, resource: Resource) -> ProbeResult:
    path = Path(resource.identifier)
    if path.is_dir():
        return _error(resource, f"{path} is a directory")
    if not path.exists():
        if path.is_symlink():
            if resource.expected is ExpectedState.VALUE:
                return _absent(resource, f"{path} is a dangling symlink")
            return _present(resource, f"{path} exists as a dangling symlink")
        return _absent(resource, f"{path} does not exist")
    if resource.expected is ExpectedState.VALUE:
        digest = sha256_file(path)
        if digest != resource.value:
            return _absent(resource, f"{path} content differs (sha256 {digest[:12]})")
        return _present(resource, f"{path} content matches")
    return _present(resource, f"{path} exists")


def _probe_directory(probe: Probe, resource: Resource) -> ProbeResult:
    path = Path(resource.identifier)
    if path.is_dir():
        return _present(resource, f"{path} exists")
    if path.exists():
        return _error(resource, f"{path} exists but is not a directory")
    return _absent(resource, f"{path} does not exist")


def _probe_symlink(probe: Probe, resource: Resource) -> ProbeResult:
    link = Path(resource.identifier)
    if not link.is_symlink():
        if link.exists():
            return _absent(resource, f"{link} exists but is not a symlink")
        return _absent(resource, f"{link} does not exist")
    if resource.value is None:
        return _present(resource, f"{link} is a symlink")
    target = Path(resource.value)
    try:
        matches = link.resolve(strict=True) == target.resolve(strict=True)
    except FileNotFoundError:
        return _absent(resource, f"{link} is a dangling symlink")
    if not matches:
        return _absent(resource, f"{link} points to {link.readlink()}")
    return _present(resource, f"{link} -> {target}")


def _probe_user(probe: Probe, resource: Resource) -> ProbeResult:
    status = inspect_service_account(resource.identifier)
    if status.user_exists:
        return _present(resource, f"uid={status.uid} home={status.home}")
    return _absent(resource, f"user {resource.identifier} does not exist")


def _probe_service(probe: Probe, resource: Resource) -> ProbeResult:
    wanted = resource.value or "enabled"
    verb = "is-active" if wanted in _ACTIVE_STATES else "is-enabled"
    result = probe._query([probe.systemctl_bin, verb, resource.identifier])
    observed = result.stdout.strip() or result.stderr.strip()
    if result.stdout.strip() == wanted:
        return _present(resource, f"{resource.identifier} is {wanted}")
    return _absent(resource, observed or f"{resource.identifier} is not {wanted}")


def _probe_database_role(probe: Probe, resource: Resource) -> ProbeResult:
    # The role name is bound as a psql variable, never interpolated into SQL.
    result = probe._query(
        [probe.psql_bin, "-X", "-q", "-tA", "-v", f"role={resource.identifier}"],
        user=probe.postgres_user,
        input=_ROLE_QUERY,
    )
    if not result.ok:
        return _error(resource, f"{result.command} failed (exit {result.returncode}): {result.message}")
    if result.stdout.strip() == "1":
        return _present(resource, f"role {resource.identifier} exists")
    return _absent(resource, f"role {resource.identifier} does not exist")


def _probe_vcs_clone(probe: Probe, resource: Resource) -> ProbeResult:
    path = Path(resource.identifier)
    if not path.exists():
        return _absent(resource, f"{path} does not exist")
    if (path / ".git").exists():
        return _present(resource, f"{path} is a git checkout")
    return _error(resource, f"{path} exists but is not a git checkout")


def _probe_command(probe: Probe, resource: Resource) -> ProbeResult:
    resolved = shutil.which(resource.identifier)
    if resolved is None:
        return _absent(resource, f"{resource.identifier} not found on PATH")
    return _present(resource, resolved)


def _probe_certificate(probe: Probe, resource: Resource) -> ProbeResult:
    path = Path(resource.identifier)
    if not path.exists():
        return _absent(resource, f"{path} does not exist")
    try:
        status = inspect_certificate(path)
    except CertificateError as exc:
        return _error(resource, str(exc))
    if not status.is_valid():
        return _absent(resource, f"certificate expired on {status.not_valid_after.isoformat()}")
    return _present(
        resource,
        f"{status.subject} valid until {status.not_valid_after.isoformat()}",
    )


_HANDLERS: Mapping[ResourceKind, Handler] = {
    ResourceKind.PACKAGE: _probe_package,
    ResourceKind.FILE: _probe_file,
    ResourceKind.DIRECTORY: _probe_directory,
    ResourceKind.SYMLINK: _probe_symlink,
    ResourceKind.USER: _probe_user,
    ResourceKind.SERVICE: _probe_service,
    ResourceKind.DATABASE_ROLE: _probe_database_role,
    ResourceKind.VCS_CLONE: _probe_vcs_clone,
    ResourceKind.COMMAND: _probe_command,
    ResourceKind.CERTIFICATE: _probe_certificate,
}


__all__ = ["Probe"]
