"""Unit tests for bootstrap service account helpers."""
from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from odooprov.bootstrap import service_accounts
from odooprov.bootstrap.service_accounts import (
    ServiceAccountSpec,
    create_account_command,
    inspect_service_account,
    operator_account,
)


def _raise_key_error(*args: object, **kwargs: object) -> None:
    raise KeyError


def test_inspect_missing_account(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unknown users are reported as absent."""
    monkeypatch.setattr(service_accounts.pwd, "getpwnam", _raise_key_error)

    status = inspect_service_account("odoo")

    assert status.user_exists is False
    assert status.uid is None
    assert status.primary_group is None


def test_inspect_existing_account(monkeypatch: pytest.MonkeyPatch) -> None:
    """Existing accounts report their uid, home and primary group."""
    pw_entry = SimpleNamespace(
        pw_uid=1234,
        pw_gid=5678,
        pw_dir="/opt/odoo",
        pw_shell="/bin/bash",
    )
    group_entry = SimpleNamespace(gr_gid=5678, gr_name="staff", gr_mem=[])
    monkeypatch.setattr(service_accounts.pwd, "getpwnam", lambda name: pw_entry)
    monkeypatch.setattr(service_accounts.grp, "getgrgid", lambda gid: group_entry)

    status = inspect_service_account("odoo")

    assert status.user_exists is True
    assert status.uid == 1234
    assert status.home == Path("/opt/odoo")
    assert status.primary_group == "staff"


def test_inspect_account_with_unknown_primary_group(monkeypatch: pytest.MonkeyPatch) -> None:
    """A gid missing from the group database leaves the group unset."""
    pw_entry = SimpleNamespace(pw_uid=1234, pw_gid=5678, pw_dir="/home/alice", pw_shell="/bin/sh")
    monkeypatch.setattr(service_accounts.pwd, "getpwnam", lambda name: pw_entry)
    monkeypatch.setattr(service_accounts.grp, "getgrgid", _raise_key_error)

    status = inspect_service_account("alice")

    assert status.user_exists is True
    assert status.primary_group is None


def test_create_system_account_command() -> None:
    """System accounts get a home, a login shell and a matching group."""
    spec = ServiceAccountSpec(name="odoo", home=Path("/opt/odoo"))

    assert create_account_command(spec) == [
        "adduser",
        "--system",
        "--quiet",
        "--shell=/bin/bash",
        "--home=/opt/odoo",
        "--gecos=Odoo",
        "--group",
        "odoo",
    ]


def test_create_account_in_existing_group() -> None:
    """A different group name joins that group instead of creating one."""
    spec = ServiceAccountSpec(name="odoo", group="www-data", system=False, shell=None)

    command = create_account_command(spec)

    assert "--system" not in command
    assert "--no-create-home" in command
    assert "--ingroup=www-data" in command
    assert command[-1] == "odoo"


def test_operator_account_prefers_sudo_user() -> None:
    """``sudo`` invocations resolve to the human operator."""
    assert operator_account({"SUDO_USER": "alice"}) == "alice"


def test_operator_account_ignores_root_sudo_user(monkeypatch: pytest.MonkeyPatch) -> None:
    """A root ``SUDO_USER`` falls back to the current login."""
    monkeypatch.setattr(service_accounts.getpass, "getuser", lambda: "bob")

    assert operator_account({"SUDO_USER": "root"}) == "bob"
    assert operator_account({}) == "bob"
