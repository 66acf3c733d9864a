"""Utilities for inspecting and creating the Odoo service account."""
from __future__ import annotations

import getpass
import grp
import os
import pwd
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class ServiceAccountSpec:
    """Desired attributes for the account that runs Odoo."""

    name: str
    group: str | None = None
    system: bool = True
    home: Path | None = None
    shell: str | None = "/bin/bash"
    gecos: str = "Odoo"


@dataclass(slots=True)
class ServiceAccountStatus:
    """Current state of the account on the host."""

    user_exists: bool
    uid: int | None = None
    home: Path | None = None
    primary_group: str | None = None


def inspect_service_account(name: str) -> ServiceAccountStatus:
    """Return the current status for *name* from the passwd/group databases."""
    try:
        pw_entry = pwd.getpwnam(name)
    except KeyError:
        return ServiceAccountStatus(user_exists=False)
    try:
        primary_group: str | None = grp.getgrgid(pw_entry.pw_gid).gr_name
    except KeyError:
        primary_group = None
    return ServiceAccountStatus(
        user_exists=True,
        uid=pw_entry.pw_uid,
        home=Path(pw_entry.pw_dir),
        primary_group=primary_group,
    )


def create_account_command(spec: ServiceAccountSpec) -> list[str]:
    """Return the ``adduser`` invocation that creates *spec*.

    A group named after the user is created alongside it when ``group`` is
    unset or equal to the user name.
    """
    command = ["adduser"]
    if spec.system:
        command.append("--system")
    command.append("--quiet")
    if spec.shell:
        command.append(f"--shell={spec.shell}")
    if spec.home:
        command.append(f"--home={spec.home}")
    else:
        command.append("--no-create-home")
    command.append(f"--gecos={spec.gecos}")
    if spec.group is None or spec.group == spec.name:
        command.append("--group")
    else:
        command.append(f"--ingroup={spec.group}")
    command.append(spec.name)
    return command


def operator_account(env: Mapping[str, str] | None = None) -> str:
    """Return the login of the operator invoking the provisioner.

    ``SUDO_USER`` wins so ``sudo odooprov ...`` resolves to the human account
    rather than ``root``.
    """
    resolved = os.environ if env is None else env
    sudo_user = resolved.get("SUDO_USER", "").strip()
    if sudo_user and sudo_user != "root":
        return sudo_user
    return getpass.getuser()


__all__ = [
    "ServiceAccountSpec",
    "ServiceAccountStatus",
    "create_account_command",
    "inspect_service_account",
    "operator_account",
]
