"""Configuration loader tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from odooprov.config import AppConfig, ConfigError, load_config


def test_load_config_defaults_when_file_missing(tmp_path: Path) -> None:
    """Defaults apply when no config file is present."""
    config = load_config(config_file=tmp_path / "absent.yml", env={})

    assert isinstance(config, AppConfig)
    assert config.odoo.version == "17.0"
    assert config.odoo.home == Path("/opt/odoo")
    assert config.odoo.source_dir == Path("/opt/odoo/odoo")
    assert config.odoo.venv_dir == Path("/opt/odoo/odoo-venv")
    assert config.odoo.config_path == Path("/etc/odoo/odoo.conf")
    assert config.odoo.account == "system"
    assert config.ports.http == 8069
    assert config.ports.longpolling == 8072
    assert config.nginx.client_max_body_size == "10240m"
    assert config.tls.enabled is True
    assert config.tls.live_dir == Path("/etc/letsencrypt/live")
    assert config.systemd.unit_dir == Path("/etc/systemd/system")
    assert config.timeouts.network == 1800.0
    assert config.templates_dir == Path("/etc/odooprov/templates")


def test_load_config_reads_yaml_file(tmp_path: Path) -> None:
    """Values are loaded from the YAML config file."""
    cfg = tmp_path / "odooprov.yml"
    cfg.write_text(
        "odoo:\n"
        "  version: '16.0'\n"
        "  home: /srv/odoo\n"
        "  extra_pip_packages: []\n"
        "ports:\n"
        "  http: 9069\n"
        "tls:\n"
        "  enabled: false\n"
        "database:\n"
        "  host: db.internal\n"
        "  port: 5433\n",
        encoding="utf-8",
    )

    config = load_config(config_file=cfg, env={})

    assert config.config_file == cfg
    assert config.odoo.version == "16.0"
    assert config.odoo.home == Path("/srv/odoo")
    assert config.odoo.source_dir == Path("/srv/odoo/odoo")
    assert config.odoo.extra_pip_packages == ()
    assert config.ports.http == 9069
    assert config.tls.enabled is False
    assert config.database.host == "db.internal"
    assert config.database.port == 5433


def test_env_overrides_take_precedence(tmp_path: Path) -> None:
    """Environment variables override defaults and file settings."""
    cfg = tmp_path / "odooprov.yml"
    cfg.write_text("ports:\n  http: 9069\n", encoding="utf-8")
    env = {
        "ODOOPROV_PORTS__HTTP": "7069",
        "ODOOPROV_TLS__ENABLED": "false",
        "ODOOPROV_ODOO__ACCOUNT": "operator",
        "ODOOPROV_TIMEOUTS__DEFAULT": "120",
        "ODOOPROV_LOGS_DIR": str(tmp_path / "logs"),
    }

    config = load_config(config_file=cfg, env=env)

    assert config.ports.http == 7069
    assert config.tls.enabled is False
    assert config.odoo.account == "operator"
    assert config.timeouts.default == 120.0
    assert config.logs_dir == tmp_path / "logs"


def test_operator_input_env_vars_are_not_config_keys(tmp_path: Path) -> None:
    """Domain, email and password variables never reach the config tree."""
    env = {
        "ODOOPROV_DOMAIN": "erp.example.com",
        "ODOOPROV_EMAIL": "ops@example.com",
        "ODOOPROV_ADMIN_PASSWORD": "secret",
    }

    config = load_config(config_file=tmp_path / "absent.yml", env=env)

    assert "domain" not in config.to_dict()


def test_config_file_env_var_selects_file(tmp_path: Path) -> None:
    """``ODOOPROV_CONFIG_FILE`` points the loader at another file."""
    cfg = tmp_path / "custom.yml"
    cfg.write_text("nginx:\n  site_name: erp\n", encoding="utf-8")

    config = load_config(env={"ODOOPROV_CONFIG_FILE": str(cfg)})

    assert config.config_file == cfg
    assert config.nginx.site_name == "erp"


def test_overrides_win_over_environment(tmp_path: Path) -> None:
    """Programmatic overrides are applied last."""
    config = load_config(
        config_file=tmp_path / "absent.yml",
        env={"ODOOPROV_PORTS__HTTP": "7069"},
        overrides={"ports": {"http": 6069}},
    )

    assert config.ports.http == 6069
    assert config.ports.longpolling == 8072


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    """Unknown keys raise a configuration error."""
    cfg = tmp_path / "odooprov.yml"
    cfg.write_text("unexpected: true\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="unexpected"):
        load_config(config_file=cfg, env={})


def test_unknown_section_key_rejected(tmp_path: Path) -> None:
    """Unknown keys inside a section raise a configuration error."""
    with pytest.raises(ConfigError, match="Unknown nginx configuration keys: listen"):
        load_config(
            config_file=tmp_path / "absent.yml",
            env={"ODOOPROV_NGINX__LISTEN": "8080"},
        )


def test_invalid_account_mode_rejected(tmp_path: Path) -> None:
    """Only the system and operator account modes are accepted."""
    with pytest.raises(ConfigError, match="odoo.account"):
        load_config(config_file=tmp_path / "absent.yml", env={"ODOOPROV_ODOO__ACCOUNT": "root"})


def test_invalid_restart_policy_rejected(tmp_path: Path) -> None:
    """Restart policies are limited to those systemd understands."""
    with pytest.raises(ConfigError, match="restart_policy"):
        load_config(
            config_file=tmp_path / "absent.yml",
            env={"ODOOPROV_SYSTEMD__RESTART_POLICY": "sometimes"},
        )


def test_non_positive_timeout_rejected(tmp_path: Path) -> None:
    """Timeouts must be positive numbers."""
    with pytest.raises(ConfigError, match="timeouts.network"):
        load_config(
            config_file=tmp_path / "absent.yml",
            env={"ODOOPROV_TIMEOUTS__NETWORK": "0"},
        )


def test_non_mapping_file_rejected(tmp_path: Path) -> None:
    """Config files must contain a mapping at the top level."""
    cfg = tmp_path / "odooprov.yml"
    cfg.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(config_file=cfg, env={})


def test_to_dict_masks_database_password(tmp_path: Path) -> None:
    """The serialised config never exposes the database password."""
    config = load_config(
        config_file=tmp_path / "absent.yml",
        env={"ODOOPROV_DATABASE__PASSWORD": "hunter2"},
    )

    assert config.database.password == "hunter2"
    database = config.to_dict()["database"]
    assert isinstance(database, dict)
    assert database["password"] == "********"
