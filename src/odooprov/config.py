"""Configuration loader for odooprov.

Values are merged from the following sources, later ones winning:

1. Built-in defaults.
2. ``/etc/odooprov/config.yml`` (or an override path).
3. Environment variables prefixed with ``ODOOPROV_``.
4. Explicit overrides supplied programmatically (reserved for CLI flags).

Environment keys use double underscores to express nesting, e.g.::

    export ODOOPROV_ODOO__VERSION=16.0
    export ODOOPROV_TLS__ENABLED=false

Values are coerced via PyYAML's ``safe_load`` so that booleans and numbers are
parsed naturally. The resulting configuration is exposed as immutable
``dataclasses``.
"""
from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

import yaml

ENV_PREFIX = "ODOOPROV_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG_FILE"
DOMAIN_ENV_VAR = f"{ENV_PREFIX}DOMAIN"
EMAIL_ENV_VAR = f"{ENV_PREFIX}EMAIL"
ADMIN_PASSWORD_ENV_VAR = f"{ENV_PREFIX}ADMIN_PASSWORD"
# Operator input travels through these; they are never configuration keys.
RESERVED_ENV_KEYS = {
    CONFIG_ENV_VAR,
    DOMAIN_ENV_VAR,
    EMAIL_ENV_VAR,
    ADMIN_PASSWORD_ENV_VAR,
}

ALLOWED_ACCOUNT_MODES = {"system", "operator"}
ALLOWED_LOG_LEVELS = {"debug", "debug_rpc", "debug_sql", "info", "warn", "error", "critical"}
ALLOWED_RESTART_POLICIES = {"no", "always", "on-failure", "on-abnormal", "on-abort"}

DEFAULT_SYSTEM_PACKAGES = (
    "git",
    "python3-pip",
    "python3-dev",
    "python3-venv",
    "python3-wheel",
    "python3-setuptools",
    "build-essential",
    "wget",
    "libxslt1-dev",
    "libzip-dev",
    "libldap2-dev",
    "libsasl2-dev",
    "node-less",
    "libpq-dev",
    "libfreetype6-dev",
    "libjpeg-dev",
    "zlib1g-dev",
)


class ConfigError(RuntimeError):
    """Raised when configuration parsing fails."""


@dataclass(frozen=True)
class OdooConfig:
    """Where and how the Odoo application is installed."""

    version: str = "17.0"
    repo_url: str = "https://github.com/odoo/odoo.git"
    home: Path = Path("/opt/odoo")
    source_dir: Path = Path("/opt/odoo/odoo")
    venv_dir: Path = Path("/opt/odoo/odoo-venv")
    data_dir: Path = Path("/opt/odoo/.local/share/Odoo")
    config_path: Path = Path("/etc/odoo/odoo.conf")
    log_dir: Path = Path("/var/log/odoo")
    service_user: str = "odoo"
    account: str = "system"
    log_level: str = "info"
    extra_addons_paths: tuple[Path, ...] = ()
    extra_pip_packages: tuple[str, ...] = ("PyPDF2",)
    system_packages: tuple[str, ...] = DEFAULT_SYSTEM_PACKAGES

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {
            "version": self.version,
            "repo_url": self.repo_url,
            "home": str(self.home),
            "source_dir": str(self.source_dir),
            "venv_dir": str(self.venv_dir),
            "data_dir": str(self.data_dir),
            "config_path": str(self.config_path),
            "log_dir": str(self.log_dir),
            "service_user": self.service_user,
            "account": self.account,
            "log_level": self.log_level,
            "extra_addons_paths": [str(path) for path in self.extra_addons_paths],
            "extra_pip_packages": list(self.extra_pip_packages),
            "system_packages": list(self.system_packages),
        }


@dataclass(frozen=True)
class PortsConfig:
    """Ports Odoo binds locally and nginx exposes publicly."""

    http: int = 8069
    longpolling: int = 8072
    public_http: int = 80
    public_https: int = 443
    http_interface: str = "127.0.0.1"

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {
            "http": self.http,
            "longpolling": self.longpolling,
            "public_http": self.public_http,
            "public_https": self.public_https,
            "http_interface": self.http_interface,
        }


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection details; unset values fall back to the local socket."""

    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    service: str = "postgresql"
    superuser: str = "postgres"

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation (the password is masked)."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": "********" if self.password else None,
            "service": self.service,
            "superuser": self.superuser,
        }


@dataclass(frozen=True)
class NginxConfig:
    """Reverse proxy integration values."""

    sites_available: Path = Path("/etc/nginx/sites-available")
    sites_enabled: Path = Path("/etc/nginx/sites-enabled")
    site_name: str = "odoo"
    nginx_bin: str = "nginx"
    log_dir: Path = Path("/var/log/nginx")
    client_max_body_size: str = "10240m"
    proxy_timeout: int = 720

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {
            "sites_available": str(self.sites_available),
            "sites_enabled": str(self.sites_enabled),
            "site_name": self.site_name,
            "nginx_bin": self.nginx_bin,
            "log_dir": str(self.log_dir),
            "client_max_body_size": self.client_max_body_size,
            "proxy_timeout": self.proxy_timeout,
        }


@dataclass(frozen=True)
class TLSConfig:
    """Let's Encrypt certificate settings."""

    enabled: bool = True
    live_dir: Path = Path("/etc/letsencrypt/live")
    certbot_bin: str = "/usr/bin/certbot"
    snap_bin: str = "snap"
    renewal_timer: str = "snap.certbot.renew.timer"

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {
            "enabled": self.enabled,
            "live_dir": str(self.live_dir),
            "certbot_bin": self.certbot_bin,
            "snap_bin": self.snap_bin,
            "renewal_timer": self.renewal_timer,
        }


@dataclass(frozen=True)
class SystemdConfig:
    """Systemd integration configuration values."""

    unit_dir: Path = Path("/etc/systemd/system")
    unit_name: str = "odoo"
    systemctl_bin: str = "systemctl"
    restart_policy: str = "always"
    restart_sec: int = 10

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {
            "unit_dir": str(self.unit_dir),
            "unit_name": self.unit_name,
            "systemctl_bin": self.systemctl_bin,
            "restart_policy": self.restart_policy,
            "restart_sec": self.restart_sec,
        }


@dataclass(frozen=True)
class TimeoutsConfig:
    """Per-action timeouts in seconds."""

    default: float = 600.0
    network: float = 1800.0
    probe: float = 30.0

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {"default": self.default, "network": self.network, "probe": self.probe}


@dataclass(frozen=True)
class AppConfig:
    """Resolved configuration values for odooprov."""

    config_file: Path
    logs_dir: Path
    templates_dir: Path
    odoo: OdooConfig = field(default_factory=OdooConfig)
    ports: PortsConfig = field(default_factory=PortsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    nginx: NginxConfig = field(default_factory=NginxConfig)
    tls: TLSConfig = field(default_factory=TLSConfig)
    systemd: SystemdConfig = field(default_factory=SystemdConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serialisable representation of the config."""
        return {
            "config_file": str(self.config_file),
            "logs_dir": str(self.logs_dir),
            "templates_dir": str(self.templates_dir),
            "odoo": self.odoo.to_dict(),
            "ports": self.ports.to_dict(),
            "database": self.database.to_dict(),
            "nginx": self.nginx.to_dict(),
            "tls": self.tls.to_dict(),
            "systemd": self.systemd.to_dict(),
            "timeouts": self.timeouts.to_dict(),
        }


DEFAULTS: dict[str, object] = {
    "config_file": "/etc/odooprov/config.yml",
    "logs_dir": "/var/log/odooprov",
    "templates_dir": "/etc/odooprov/templates",
    "odoo": {
        "version": "17.0",
        "repo_url": "https://github.com/odoo/odoo.git",
        "home": "/opt/odoo",
        "source_dir": None,  # derived from home when absent
        "venv_dir": None,
        "data_dir": None,
        "config_path": "/etc/odoo/odoo.conf",
        "log_dir": "/var/log/odoo",
        "service_user": "odoo",
        "account": "system",
        "log_level": "info",
        "extra_addons_paths": [],
        "extra_pip_packages": ["PyPDF2"],
        "system_packages": list(DEFAULT_SYSTEM_PACKAGES),
    },
    "ports": {
        "http": 8069,
        "longpolling": 8072,
        "public_http": 80,
        "public_https": 443,
        "http_interface": "127.0.0.1",
    },
    "database": {
        "host": None,
        "port": None,
        "user": None,
        "password": None,
        "service": "postgresql",
        "superuser": "postgres",
    },
    "nginx": {
        "sites_available": "/etc/nginx/sites-available",
        "sites_enabled": "/etc/nginx/sites-enabled",
        "site_name": "odoo",
        "nginx_bin": "nginx",
        "log_dir": "/var/log/nginx",
        "client_max_body_size": "10240m",
        "proxy_timeout": 720,
    },
    "tls": {
        "enabled": True,
        "live_dir": "/etc/letsencrypt/live",
        "certbot_bin": "/usr/bin/certbot",
        "snap_bin": "snap",
        "renewal_timer": "snap.certbot.renew.timer",
    },
    "systemd": {
        "unit_dir": "/etc/systemd/system",
        "unit_name": "odoo",
        "systemctl_bin": "systemctl",
        "restart_policy": "always",
        "restart_sec": 10,
    },
    "timeouts": {
        "default": 600.0,
        "network": 1800.0,
        "probe": 30.0,
    },
}

ALLOWED_TOP_LEVEL_KEYS = set(DEFAULTS.keys())
SECTION_KEYS: dict[str, set[str]] = {
    section: set(cast(Mapping[str, object], values).keys())
    for section, values in DEFAULTS.items()
    if isinstance(values, Mapping)
}


def load_config(
    config_file: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> AppConfig:
    """Load and merge configuration sources into an :class:`AppConfig`."""
    merged: dict[str, object] = _deep_copy(DEFAULTS)
    resolved_env = dict(os.environ if env is None else env)

    config_default = _expect_str(merged["config_file"], "config_file")
    config_path = _determine_config_path(config_default, config_file, resolved_env)

    file_values = _load_yaml_file(config_path)
    if file_values:
        _deep_merge(merged, file_values)

    env_values = _build_env_overrides(resolved_env)
    if env_values:
        _deep_merge(merged, env_values)

    if overrides:
        _deep_merge(merged, dict(overrides))

    merged["config_file"] = str(config_path)

    _validate_structure(merged)

    return _build_app_config(merged)


def _determine_config_path(
    default_path: str,
    cli_override: str | os.PathLike[str] | None,
    env: Mapping[str, str],
) -> Path:
    if cli_override:
        return Path(cli_override)
    if CONFIG_ENV_VAR in env:
        return Path(env[CONFIG_ENV_VAR])
    return Path(default_path)


def _load_yaml_file(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - PyYAML owns detailed error
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level.")
    return _as_dict(data, f"file:{path}")


def _validate_structure(raw: Mapping[str, object]) -> None:
    unknown_keys = set(raw.keys()) - ALLOWED_TOP_LEVEL_KEYS
    if unknown_keys:
        joined = ", ".join(sorted(unknown_keys))
        raise ConfigError(f"Unknown configuration keys: {joined}.")

    for section, allowed in SECTION_KEYS.items():
        mapping = _as_dict(raw.get(section), section)
        unknown = set(mapping.keys()) - allowed
        if unknown:
            joined = ", ".join(sorted(unknown))
            raise ConfigError(f"Unknown {section} configuration keys: {joined}.")

    odoo_map = _as_dict(raw.get("odoo"), "odoo")
    account = odoo_map.get("account")
    if account is not None and str(account) not in ALLOWED_ACCOUNT_MODES:
        allowed_modes = ", ".join(sorted(ALLOWED_ACCOUNT_MODES))
        raise ConfigError(f"Unsupported odoo.account '{account}'. Allowed: {allowed_modes}.")
    log_level = odoo_map.get("log_level")
    if log_level is not None and str(log_level) not in ALLOWED_LOG_LEVELS:
        allowed_levels = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ConfigError(f"Unsupported odoo.log_level '{log_level}'. Allowed: {allowed_levels}.")

    systemd_map = _as_dict(raw.get("systemd"), "systemd")
    policy = systemd_map.get("restart_policy")
    if policy is not None and str(policy) not in ALLOWED_RESTART_POLICIES:
        allowed_policies = ", ".join(sorted(ALLOWED_RESTART_POLICIES))
        raise ConfigError(
            f"Unsupported systemd.restart_policy '{policy}'. Allowed: {allowed_policies}."
        )


def _build_app_config(raw: Mapping[str, object]) -> AppConfig:
    odoo_map = _as_dict(raw.get("odoo"), "odoo")
    home = _to_path(odoo_map.get("home", "/opt/odoo"))
    odoo = OdooConfig(
        version=str(odoo_map.get("version", "17.0")),
        repo_url=str(odoo_map.get("repo_url", "https://github.com/odoo/odoo.git")),
        home=home,
        source_dir=_optional_path(odoo_map.get("source_dir")) or home / "odoo",
        venv_dir=_optional_path(odoo_map.get("venv_dir")) or home / "odoo-venv",
        data_dir=_optional_path(odoo_map.get("data_dir")) or home / ".local/share/Odoo",
        config_path=_to_path(odoo_map.get("config_path", "/etc/odoo/odoo.conf")),
        log_dir=_to_path(odoo_map.get("log_dir", "/var/log/odoo")),
        service_user=_expect_str(odoo_map.get("service_user", "odoo"), "odoo.service_user"),
        account=str(odoo_map.get("account", "system")),
        log_level=str(odoo_map.get("log_level", "info")),
        extra_addons_paths=tuple(
            _to_path(item)
            for item in _as_sequence(odoo_map.get("extra_addons_paths", []), "odoo.extra_addons_paths")
        ),
        extra_pip_packages=_as_str_tuple(
            odoo_map.get("extra_pip_packages", []), "odoo.extra_pip_packages"
        ),
        system_packages=_as_str_tuple(
            odoo_map.get("system_packages", list(DEFAULT_SYSTEM_PACKAGES)), "odoo.system_packages"
        ),
    )

    ports_map = _as_dict(raw.get("ports"), "ports")
    ports = PortsConfig(
        http=_expect_int(ports_map.get("http"), "ports.http", default=8069),
        longpolling=_expect_int(ports_map.get("longpolling"), "ports.longpolling", default=8072),
        public_http=_expect_int(ports_map.get("public_http"), "ports.public_http", default=80),
        public_https=_expect_int(ports_map.get("public_https"), "ports.public_https", default=443),
        http_interface=str(ports_map.get("http_interface", "127.0.0.1")),
    )

    db_map = _as_dict(raw.get("database"), "database")
    db_port_raw = db_map.get("port")
    database = DatabaseConfig(
        host=_optional_str(db_map.get("host")),
        port=_expect_int(db_port_raw, "database.port", default=0) if db_port_raw is not None else None,
        user=_optional_str(db_map.get("user")),
        password=_optional_str(db_map.get("password")),
        service=str(db_map.get("service", "postgresql")),
        superuser=str(db_map.get("superuser", "postgres")),
    )

    nginx_map = _as_dict(raw.get("nginx"), "nginx")
    nginx = NginxConfig(
        sites_available=_to_path(nginx_map.get("sites_available", "/etc/nginx/sites-available")),
        sites_enabled=_to_path(nginx_map.get("sites_enabled", "/etc/nginx/sites-enabled")),
        site_name=str(nginx_map.get("site_name", "odoo")),
        nginx_bin=str(nginx_map.get("nginx_bin", "nginx")),
        log_dir=_to_path(nginx_map.get("log_dir", "/var/log/nginx")),
        client_max_body_size=str(nginx_map.get("client_max_body_size", "10240m")),
        proxy_timeout=_expect_int(
            nginx_map.get("proxy_timeout"), "nginx.proxy_timeout", default=720
        ),
    )

    tls_map = _as_dict(raw.get("tls"), "tls")
    tls = TLSConfig(
        enabled=_expect_bool(tls_map.get("enabled"), "tls.enabled", default=True),
        live_dir=_to_path(tls_map.get("live_dir", "/etc/letsencrypt/live")),
        certbot_bin=str(tls_map.get("certbot_bin", "/usr/bin/certbot")),
        snap_bin=str(tls_map.get("snap_bin", "snap")),
        renewal_timer=str(tls_map.get("renewal_timer", "snap.certbot.renew.timer")),
    )

    systemd_map = _as_dict(raw.get("systemd"), "systemd")
    systemd = SystemdConfig(
        unit_dir=_to_path(systemd_map.get("unit_dir", "/etc/systemd/system")),
        unit_name=str(systemd_map.get("unit_name", "odoo")),
        systemctl_bin=str(systemd_map.get("systemctl_bin", "systemctl")),
        restart_policy=str(systemd_map.get("restart_policy", "always")),
        restart_sec=_expect_int(systemd_map.get("restart_sec"), "systemd.restart_sec", default=10),
    )

    timeouts_map = _as_dict(raw.get("timeouts"), "timeouts")
    timeouts = TimeoutsConfig(
        default=_expect_positive_float(timeouts_map.get("default"), "timeouts.default", default=600.0),
        network=_expect_positive_float(
            timeouts_map.get("network"), "timeouts.network", default=1800.0
        ),
        probe=_expect_positive_float(timeouts_map.get("probe"), "timeouts.probe", default=30.0),
    )

    return AppConfig(
        config_file=_to_path(raw.get("config_file")),
        logs_dir=_to_path(raw.get("logs_dir")),
        templates_dir=_to_path(raw.get("templates_dir")),
        odoo=odoo,
        ports=ports,
        database=database,
        nginx=nginx,
        tls=tls,
        systemd=systemd,
        timeouts=timeouts,
    )


def _build_env_overrides(env: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for key, value in env.items():
        if key in RESERVED_ENV_KEYS:
            continue
        if not key.startswith(ENV_PREFIX):
            continue
        suffix = key[len(ENV_PREFIX) :]
        path_segments = [segment.lower() for segment in suffix.split("__") if segment]
        if not path_segments:
            continue
        _assign_nested(overrides, path_segments, _coerce_value(value))
    return overrides


def _assign_nested(tree: MutableMapping[str, object], path: list[str], value: object) -> None:
    current: MutableMapping[str, object] = tree
    for segment in path[:-1]:
        existing = current.get(segment)
        if existing is None:
            new_child: MutableMapping[str, object] = {}
            current[segment] = new_child
            current = new_child
            continue
        if isinstance(existing, MutableMapping):
            current = cast(MutableMapping[str, object], existing)
            continue
        raise ConfigError(
            "Environment overrides conflict with existing scalar value at "
            f"{'.'.join(path)}"
        )
    current[path[-1]] = value


def _deep_merge(target: MutableMapping[str, object], overrides: Mapping[str, object]) -> None:
    for key, value in overrides.items():
        existing = target.get(key)
        if isinstance(existing, MutableMapping) and isinstance(value, Mapping):
            _deep_merge(existing, _as_dict(value, f"merge.{key}"))
            continue
        target[key] = value


def _deep_copy(source: Mapping[str, object]) -> dict[str, object]:
    result: dict[str, object] = {}
    for key, value in source.items():
        if isinstance(value, Mapping):
            result[key] = _deep_copy(_as_dict(value, f"copy.{key}"))
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    return result


def _as_sequence(value: object, label: str) -> Sequence[object]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)):
        raise ConfigError(f"Expected {label} to be a sequence. Got {type(value).__name__}.")
    if not isinstance(value, Sequence):
        raise ConfigError(f"Expected {label} to be a sequence. Got {type(value).__name__}.")
    return value


def _as_str_tuple(value: object, label: str) -> tuple[str, ...]:
    items: list[str] = []
    for index, item in enumerate(_as_sequence(value, label)):
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"{label}[{index}] must be a non-empty string.")
        items.append(item.strip())
    return tuple(items)


def _coerce_value(raw: str) -> object:
    raw = raw.strip()
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError:  # pragma: no cover - treat as string if parsing fails
        return raw
    return parsed


def _to_path(value: object) -> Path:
    if value is None:
        raise ConfigError("Expected a filesystem path, received None.")
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise ConfigError(f"Cannot convert value {value!r} to Path.")


def _optional_path(value: object) -> Path | None:
    if value is None or value == "":
        return None
    return _to_path(value)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _expect_int(value: object | None, label: str, *, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"Expected {label} to be an integer. Got boolean {value!r}.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError as exc:
            raise ConfigError(f"Invalid integer for {label}: {value!r}.") from exc
    raise ConfigError(f"Expected {label} to be an integer. Got {type(value).__name__}.")


def _expect_bool(value: object | None, label: str, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ConfigError(f"Expected {label} to be a boolean. Got {value!r}.")


def _expect_str(value: object, key: str) -> str:
    if isinstance(value, str):
        return value
    raise ConfigError(f"Expected {key} to resolve to a string. Got {value!r}.")


def _expect_positive_float(
    value: object | None,
    label: str,
    *,
    default: float,
) -> float:
    if value is None:
        return float(default)
    if isinstance(value, bool):
        raise ConfigError(f"Expected {label} to be a number. Got boolean {value!r}.")
    if isinstance(value, (int, float)):
        numeric = float(value)
    elif isinstance(value, str):
        try:
            numeric = float(value)
        except ValueError as exc:
            raise ConfigError(f"Invalid number for {label}: {value!r}.") from exc
    else:
        raise ConfigError(
            f"Expected {label} to be numeric. Got {type(value).__name__}."
        )
    if numeric <= 0:
        raise ConfigError(f"{label} must be greater than zero. Got {numeric}.")
    return numeric


def _as_dict(value: object | None, label: str) -> dict[str, object]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"Expected {label} to be a mapping. Got {type(value).__name__}.")
    result: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise ConfigError(f"Mapping {label} must use string keys. Got {key!r}.")
        result[key] = item
    return result


__all__ = [
    "AppConfig",
    "ConfigError",
    "DatabaseConfig",
    "NginxConfig",
    "OdooConfig",
    "PortsConfig",
    "SystemdConfig",
    "TLSConfig",
    "TimeoutsConfig",
    "load_config",
]
