"""Operator parameters shared by every rendered artifact and step.

:func:`build_parameters` validates operator input once and derives every
value the reverse proxy, the service unit and the application config must
agree on. The result is immutable, so all artifacts of one run are rendered
from the same values.
"""
from __future__ import annotations

import configparser
import logging
import os
import re
import secrets
from dataclasses import dataclass, fields
from pathlib import Path

from packaging.version import InvalidVersion, Version

from .bootstrap.service_accounts import inspect_service_account, operator_account
from .config import ALLOWED_ACCOUNT_MODES, AppConfig
from .provision.errors import ValidationError
from .tls import CertificatePaths

LOGGER = logging.getLogger(__name__)

_HOSTNAME_RE = re.compile(
    r"^(?=.{1,253}$)[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)*$"
)
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Odoo 16 replaced the long-polling worker with a websocket endpoint.
WEBSOCKET_SINCE = Version("16.0")


@dataclass(slots=True, frozen=True)
class ConfigParameters:
    """Validated values every artifact is rendered from."""

    domain: str
    admin_email: str | None
    tls_enabled: bool
    ssl_certificate: Path | None
    ssl_certificate_key: Path | None
    odoo_version: str
    longpoll_path: str
    longpoll_option: str
    http_interface: str
    http_port: int
    longpolling_port: int
    public_http_port: int
    public_https_port: int
    account_mode: str
    service_user: str
    service_group: str
    odoo_home: Path
    source_dir: Path
    venv_dir: Path
    data_dir: Path
    config_path: Path
    log_dir: Path
    logfile: Path
    addons_path: str
    db_host: str | None
    db_port: int | None
    db_user: str
    db_password: str | None
    db_service: str
    admin_passwd: str
    log_level: str
    workers: int
    max_cron_threads: int
    client_max_body_size: str
    proxy_timeout: int
    nginx_log_dir: Path
    site_name: str
    unit_name: str
    restart_policy: str
    restart_sec: int

    @property
    def longpoll_flag(self) -> str:
        """Return the ``odoo-bin`` flag that sets the long-poll port."""
        return "--" + self.longpoll_option.replace("_", "-")

    @property
    def python_bin(self) -> Path:
        """Return the virtualenv interpreter."""
        return self.venv_dir / "bin" / "python3"

    @property
    def pip_bin(self) -> Path:
        """Return the virtualenv pip."""
        return self.venv_dir / "bin" / "pip"

    @property
    def odoo_bin(self) -> Path:
        """Return the Odoo launcher inside the checkout."""
        return self.source_dir / "odoo-bin"

    def as_context(self) -> dict[str, object]:
        """Return template variables; paths become strings, properties are included."""
        context: dict[str, object] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            context[item.name] = str(value) if isinstance(value, Path) else value
        context["longpoll_flag"] = self.longpoll_flag
        context["python_bin"] = str(self.python_bin)
        context["odoo_bin"] = str(self.odoo_bin)
        return context


def build_parameters(
    config: AppConfig,
    *,
    domain: str | None,
    admin_email: str | None,
    admin_passwd: str | None = None,
    tls_enabled: bool | None = None,
    account: str | None = None,
    cpu_count: int | None = None,
    operator: str | None = None,
) -> ConfigParameters:
    """Validate operator input against *config* and derive the shared parameters."""
    domain_value = (domain or "").strip().lower().rstrip(".")
    if not domain_value:
        raise ValidationError("A domain name is required.")
    if not _HOSTNAME_RE.match(domain_value):
        raise ValidationError(f"'{domain}' is not a valid domain name.")

    tls = config.tls.enabled if tls_enabled is None else tls_enabled
    email = (admin_email or "").strip() or None
    if tls and email is None:
        raise ValidationError("An email address is required to request a TLS certificate.")
    if email is not None and not _EMAIL_RE.match(email):
        raise ValidationError(f"'{admin_email}' is not a valid email address.")

    ports = config.ports
    for label, port in (
        ("ports.http", ports.http),
        ("ports.longpolling", ports.longpolling),
        ("ports.public_http", ports.public_http),
        ("ports.public_https", ports.public_https),
    ):
        if not 1 <= port <= 65535:
            raise ValidationError(f"{label} must be between 1 and 65535 (got {port}).")
    if ports.http == ports.longpolling:
        raise ValidationError(
            f"ports.http and ports.longpolling must differ (both are {ports.http})."
        )
    if tls and ports.public_http == ports.public_https:
        raise ValidationError("ports.public_http and ports.public_https must differ.")

    try:
        version = Version(config.odoo.version)
    except InvalidVersion as exc:
        raise ValidationError(f"Invalid Odoo version '{config.odoo.version}'.") from exc
    if version >= WEBSOCKET_SINCE:
        longpoll_path, longpoll_option = "/websocket", "gevent_port"
    else:
        longpoll_path, longpoll_option = "/longpolling", "longpolling_port"

    account_mode = account or config.odoo.account
    if account_mode not in ALLOWED_ACCOUNT_MODES:
        allowed = ", ".join(sorted(ALLOWED_ACCOUNT_MODES))
        raise ValidationError(f"Unsupported account mode '{account_mode}'. Allowed: {allowed}.")
    if account_mode == "system":
        service_user = config.odoo.service_user
        service_group = service_user
    else:
        service_user = operator or operator_account()
        # An existing login keeps whatever primary group it already has.
        service_group = inspect_service_account(service_user).primary_group or service_user
    if service_user == "root":
        raise ValidationError("Odoo must not run as root; choose another account.")

    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    if cpus < 1:
        raise ValidationError(f"cpu_count must be positive (got {cpus}).")

    password = (admin_passwd or "").strip() or _existing_admin_password(config.odoo.config_path)
    if not password:
        password = secrets.token_urlsafe(16)

    cert_paths = CertificatePaths.for_domain(config.tls.live_dir, domain_value) if tls else None
    addons = [config.odoo.source_dir / "addons", *config.odoo.extra_addons_paths]

    return ConfigParameters(
        domain=domain_value,
        admin_email=email,
        tls_enabled=tls,
        ssl_certificate=cert_paths.certificate if cert_paths else None,
        ssl_certificate_key=cert_paths.key if cert_paths else None,
        odoo_version=config.odoo.version,
        longpoll_path=longpoll_path,
        longpoll_option=longpoll_option,
        http_interface=ports.http_interface,
        http_port=ports.http,
        longpolling_port=ports.longpolling,
        public_http_port=ports.public_http,
        public_https_port=ports.public_https,
        account_mode=account_mode,
        service_user=service_user,
        service_group=service_group,
        odoo_home=config.odoo.home,
        source_dir=config.odoo.source_dir,
        venv_dir=config.odoo.venv_dir,
        data_dir=config.odoo.data_dir,
        config_path=config.odoo.config_path,
        log_dir=config.odoo.log_dir,
        logfile=config.odoo.log_dir / "odoo.log",
        addons_path=",".join(str(path) for path in addons),
        db_host=config.database.host,
        db_port=config.database.port,
        db_user=config.database.user or service_user,
        db_password=config.database.password,
        db_service=config.database.service,
        admin_passwd=password,
        log_level=config.odoo.log_level,
        workers=2 * cpus,
        max_cron_threads=cpus,
        client_max_body_size=config.nginx.client_max_body_size,
        proxy_timeout=config.nginx.proxy_timeout,
        nginx_log_dir=config.nginx.log_dir,
        site_name=config.nginx.site_name,
        unit_name=config.systemd.unit_name,
        restart_policy=config.systemd.restart_policy,
        restart_sec=config.systemd.restart_sec,
    )


def _existing_admin_password(path: Path) -> str | None:
    """Return ``admin_passwd`` from an existing app config so re-runs stay stable."""
    parser = configparser.ConfigParser(interpolation=None)
    try:
        read = parser.read(path, encoding="utf-8")
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        LOGGER.warning("Cannot reuse admin password from %s: %s", path, exc)
        return None
    if not read:
        return None
    value = parser.get("options", "admin_passwd", fallback="").strip()
    if not value or value.lower() == "false":
        return None
    return value


__all__ = ["ConfigParameters", "WEBSOCKET_SINCE", "build_parameters"]
