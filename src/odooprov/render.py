"""Render the reverse proxy, service unit and application config.

Rendering is pure: the same :class:`ConfigParameters` always produce the same
text, and nothing touches the host. Required fields are checked before a
template runs so a missing value is reported by name instead of producing a
broken artifact.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum

from jinja2 import TemplateNotFound, UndefinedError

from .params import ConfigParameters
from .provision.errors import MissingParameterError, ValidationError
from .templates import TemplateEngine


class TemplateKind(str, Enum):
    """Artifacts the renderer produces."""

    REVERSE_PROXY = "reverse-proxy"
    SERVICE_UNIT = "service-unit"
    APP_CONFIG = "app-config"


TEMPLATE_NAMES: Mapping[TemplateKind, str] = {
    TemplateKind.REVERSE_PROXY: "nginx/site.conf.j2",
    TemplateKind.SERVICE_UNIT: "systemd/service.j2",
    TemplateKind.APP_CONFIG: "odoo/odoo.conf.j2",
}

REQUIRED_FIELDS: Mapping[TemplateKind, tuple[str, ...]] = {
    TemplateKind.REVERSE_PROXY: (
        "domain",
        "site_name",
        "http_interface",
        "http_port",
        "longpolling_port",
        "longpoll_path",
        "public_http_port",
        "client_max_body_size",
        "proxy_timeout",
        "nginx_log_dir",
    ),
    TemplateKind.SERVICE_UNIT: (
        "domain",
        "odoo_version",
        "unit_name",
        "service_user",
        "service_group",
        "source_dir",
        "venv_dir",
        "config_path",
        "http_port",
        "longpolling_port",
        "longpoll_option",
        "db_service",
        "restart_policy",
        "restart_sec",
    ),
    TemplateKind.APP_CONFIG: (
        "admin_passwd",
        "db_user",
        "addons_path",
        "data_dir",
        "logfile",
        "log_level",
        "http_interface",
        "http_port",
        "longpolling_port",
        "longpoll_option",
        "workers",
        "max_cron_threads",
    ),
}

TLS_FIELDS = ("public_https_port", "ssl_certificate", "ssl_certificate_key")

_UNDEFINED_NAME_RE = re.compile(r"'([^']+)' is undefined")


def required_fields(kind: TemplateKind, params: ConfigParameters) -> tuple[str, ...]:
    """Return the fields *kind* needs for *params*."""
    names = REQUIRED_FIELDS[kind]
    if kind is TemplateKind.REVERSE_PROXY and params.tls_enabled:
        names = (*names, *TLS_FIELDS)
    return names


def missing_fields(kind: TemplateKind, params: ConfigParameters) -> list[str]:
    """Return required fields of *kind* that are unset or blank."""
    missing: list[str] = []
    for name in required_fields(kind, params):
        value = getattr(params, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def parse_kind(value: str | TemplateKind) -> TemplateKind:
    """Return the :class:`TemplateKind` named by *value*."""
    if isinstance(value, TemplateKind):
        return value
    try:
        return TemplateKind(value)
    except ValueError as exc:
        allowed = ", ".join(kind.value for kind in TemplateKind)
        raise ValidationError(f"Unknown template kind '{value}'. Allowed: {allowed}.") from exc


class ConfigRenderer:
    """Render each artifact kind from one parameter set."""

    def __init__(self, templates: TemplateEngine | None = None) -> None:
        """Use *templates*, or the packaged templates when omitted."""
        self.templates = templates or TemplateEngine.with_overrides(None)

    def render(self, kind: TemplateKind | str, params: ConfigParameters) -> str:
        """Return the text of *kind* rendered from *params*."""
        template_kind = parse_kind(kind)
        missing = missing_fields(template_kind, params)
        if missing:
            raise MissingParameterError(template_kind.value, missing)
        try:
            return self.templates.render_to_string(
                TEMPLATE_NAMES[template_kind], params.as_context()
            )
        except UndefinedError as exc:
            match = _UNDEFINED_NAME_RE.search(str(exc))
            name = match.group(1) if match else str(exc)
            raise MissingParameterError(template_kind.value, [name]) from exc
        except TemplateNotFound as exc:
            raise ValidationError(f"Template for {template_kind.value} not found: {exc}") from exc

    def render_all(self, params: ConfigParameters) -> dict[TemplateKind, str]:
        """Render every kind; fails on the first kind with a missing field."""
        return {kind: self.render(kind, params) for kind in TemplateKind}


def render(kind: TemplateKind | str, params: ConfigParameters) -> str:
    """Render *kind* with the packaged templates."""
    return ConfigRenderer().render(kind, params)


__all__ = [
    "ConfigRenderer",
    "REQUIRED_FIELDS",
    "TEMPLATE_NAMES",
    "TemplateKind",
    "missing_fields",
    "parse_kind",
    "render",
    "required_fields",
]
