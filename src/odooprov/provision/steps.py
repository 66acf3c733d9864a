"""The Odoo host step catalog.

Each step pairs a resource with the action that brings it into place. Every
artifact is rendered here, up front, from one parameter set, and the file
steps expect the digest of that rendering. A parameter change therefore
rewrites the artifact on the next run while an unchanged host is skipped.
"""
from __future__ import annotations

from ..bootstrap.service_accounts import ServiceAccountSpec, create_account_command
from ..config import AppConfig
from ..files import sha256_text
from ..params import ConfigParameters
from ..providers import Providers
from ..render import ConfigRenderer, TemplateKind
from .actions import (
    ActionContext,
    CallAction,
    EnsureDirectoryAction,
    RemovePathAction,
    SequenceAction,
    WriteFileAction,
    command,
    sequence,
)
from .models import ExpectedState, Resource, ResourceKind, Step

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}
REQUIREMENTS_MARKER = ".odooprov-requirements"


def _apt_install(*packages: str) -> SequenceAction:
    return sequence(
        command("apt-get", "update", env=APT_ENV),
        command("apt-get", "install", "-y", *packages, env=APT_ENV),
    )


def requirements_marker(params: ConfigParameters, config: AppConfig) -> str:
    """Return the marker content that pins the installed requirement set."""
    lines = [f"odoo {params.odoo_version}", f"source {params.source_dir}"]
    lines.extend(f"extra {package}" for package in config.odoo.extra_pip_packages)
    return "\n".join(lines) + "\n"


def build_steps(
    params: ConfigParameters,
    config: AppConfig,
    providers: Providers,
    *,
    renderer: ConfigRenderer | None = None,
) -> list[Step]:
    """Declare every step needed to provision Odoo for *params*."""
    renderer = renderer or ConfigRenderer()
    app_config = renderer.render(TemplateKind.APP_CONFIG, params)
    service_unit = renderer.render(TemplateKind.SERVICE_UNIT, params)
    reverse_proxy = renderer.render(TemplateKind.REVERSE_PROXY, params)

    nginx = providers.nginx
    systemd = providers.systemd
    certbot = providers.certbot
    user = params.service_user
    group = params.service_group
    system_account = params.account_mode == "system"
    account_steps: tuple[str, ...] = ("create-service-account",) if system_account else ()
    unit = params.unit_name
    site = params.site_name

    def restart_if_installed(context: ActionContext) -> str:
        if not systemd.unit_path(unit).exists():
            return f"{systemd.unit_name(unit)} not installed yet"
        return systemd.try_restart(unit, timeout=context.timeout).stdout

    def install_unit(context: ActionContext) -> str:
        changed = systemd.install_unit(unit, service_unit, timeout=context.timeout)
        restarted = restart_if_installed(context)
        state = "written" if changed else "unchanged"
        return f"{systemd.unit_path(unit)} {state}\n{restarted}".strip()

    def enable_service(context: ActionContext) -> str:
        return systemd.enable(unit, timeout=context.timeout).stdout

    def install_site(context: ActionContext) -> str:
        result = nginx.install_site(site, reverse_proxy, timeout=context.timeout)
        return result.summary(nginx.site_path(site))

    def enable_site(context: ActionContext) -> str:
        result = nginx.enable(site, timeout=context.timeout)
        return result.summary(nginx.enabled_path(site))

    steps: list[Step] = [
        Step(
            name="install-nginx",
            resource=Resource(ResourceKind.PACKAGE, "nginx"),
            action=_apt_install("nginx"),
            network=True,
            description="Install the nginx reverse proxy.",
        ),
        Step(
            name="install-postgresql",
            resource=Resource(ResourceKind.PACKAGE, "postgresql"),
            action=_apt_install("postgresql"),
            network=True,
            description="Install the PostgreSQL server.",
        ),
        Step(
            name="install-build-deps",
            resource=Resource(ResourceKind.PACKAGE, " ".join(config.odoo.system_packages)),
            action=_apt_install(*config.odoo.system_packages),
            network=True,
            description="Install git, Python tooling and the libraries Odoo builds against.",
        ),
        Step(
            name="enable-postgresql",
            resource=Resource(
                ResourceKind.SERVICE, params.db_service, ExpectedState.VALUE, "enabled"
            ),
            action=command(config.systemd.systemctl_bin, "enable", "--now", params.db_service),
            requires=("install-postgresql",),
            description="Start PostgreSQL now and at boot.",
        ),
    ]

    if system_account:
        spec = ServiceAccountSpec(name=user, group=group, home=params.odoo_home)
        steps.append(
            Step(
                name="create-service-account",
                resource=Resource(ResourceKind.USER, user),
                action=command(*create_account_command(spec)),
                description=f"Create the '{user}' system account.",
            )
        )

    steps.extend(
        [
            Step(
                name="create-db-role",
                resource=Resource(ResourceKind.DATABASE_ROLE, params.db_user),
                action=command(
                    "createuser",
                    "--createdb",
                    "--no-createrole",
                    "--no-superuser",
                    params.db_user,
                    user=config.database.superuser,
                ),
                requires=("enable-postgresql", *account_steps),
                description=f"Create the '{params.db_user}' PostgreSQL role.",
            ),
            Step(
                name="create-odoo-home",
                resource=Resource(ResourceKind.DIRECTORY, str(params.odoo_home)),
                action=EnsureDirectoryAction(params.odoo_home, 0o755, user, group),
                requires=account_steps,
                description="Create the Odoo home directory.",
            ),
            Step(
                name="create-log-dir",
                resource=Resource(ResourceKind.DIRECTORY, str(params.log_dir)),
                action=EnsureDirectoryAction(params.log_dir, 0o750, user, group),
                requires=account_steps,
                description="Create the Odoo log directory.",
            ),
            Step(
                name="clone-odoo",
                resource=Resource(ResourceKind.VCS_CLONE, str(params.source_dir)),
                action=command(
                    "git",
                    "clone",
                    "--depth=1",
                    f"--branch={params.odoo_version}",
                    config.odoo.repo_url,
                    str(params.source_dir),
                    user=user,
                ),
                requires=("install-build-deps", "create-odoo-home"),
                network=True,
                description=f"Clone Odoo {params.odoo_version}.",
            ),
            Step(
                name="create-virtualenv",
                resource=Resource(ResourceKind.FILE, str(params.python_bin)),
                action=command("python3", "-m", "venv", str(params.venv_dir), user=user),
                requires=("install-build-deps", "create-odoo-home"),
                description="Create the Odoo virtual environment.",
            ),
        ]
    )

    marker = requirements_marker(params, config)
    marker_path = params.venv_dir / REQUIREMENTS_MARKER
    pip = str(params.pip_bin)
    pip_actions = [
        command(pip, "install", "--upgrade", "pip", "wheel", user=user),
        command(pip, "install", "-r", str(params.source_dir / "requirements.txt"), user=user),
    ]
    if config.odoo.extra_pip_packages:
        pip_actions.append(command(pip, "install", *config.odoo.extra_pip_packages, user=user))

    steps.extend(
        [
            Step(
                name="install-python-requirements",
                resource=Resource(
                    ResourceKind.FILE, str(marker_path), ExpectedState.VALUE, sha256_text(marker)
                ),
                action=sequence(pip_actions, WriteFileAction(marker_path, marker, 0o644, user, group)),
                requires=("clone-odoo", "create-virtualenv"),
                network=True,
                description="Install Odoo's Python requirements into the virtualenv.",
            ),
            Step(
                name="write-odoo-config",
                resource=Resource(
                    ResourceKind.FILE,
                    str(params.config_path),
                    ExpectedState.VALUE,
                    sha256_text(app_config),
                ),
                action=sequence(
                    WriteFileAction(params.config_path, app_config, 0o640, user, group),
                    CallAction(restart_if_installed, f"systemctl try-restart {unit}"),
                ),
                requires=(*account_steps, "create-log-dir"),
                description="Write the Odoo application config.",
            ),
            Step(
                name="write-systemd-unit",
                resource=Resource(
                    ResourceKind.FILE,
                    str(systemd.unit_path(unit)),
                    ExpectedState.VALUE,
                    sha256_text(service_unit),
                ),
                action=CallAction(install_unit, f"install {systemd.unit_path(unit)} and reload systemd"),
                requires=("install-python-requirements", "write-odoo-config"),
                description="Install the Odoo systemd unit.",
            ),
            Step(
                name="enable-odoo-service",
                resource=Resource(
                    ResourceKind.SERVICE, systemd.unit_name(unit), ExpectedState.VALUE, "enabled"
                ),
                action=CallAction(enable_service, f"systemctl enable --now {systemd.unit_name(unit)}"),
                requires=("write-systemd-unit", "create-db-role"),
                description="Start Odoo now and at boot.",
            ),
            Step(
                name="remove-default-site",
                resource=Resource(
                    ResourceKind.FILE,
                    str(nginx.enabled_path("default")),
                    ExpectedState.ABSENT,
                ),
                action=sequence(
                    RemovePathAction(nginx.enabled_path("default")),
                    RemovePathAction(nginx.site_path("default")),
                ),
                requires=("install-nginx",),
                description="Remove nginx's default site.",
            ),
        ]
    )

    site_requires: tuple[str, ...] = ("install-nginx", "remove-default-site")
    if params.tls_enabled:
        email = params.admin_email or ""
        domain = params.domain
        steps.extend(
            [
                Step(
                    name="install-certbot",
                    resource=Resource(ResourceKind.COMMAND, config.tls.certbot_bin),
                    action=CallAction(
                        lambda context: certbot.install(timeout=context.timeout),
                        f"{config.tls.snap_bin} install --classic certbot",
                    ),
                    requires=("install-nginx",),
                    network=True,
                    description="Install certbot.",
                ),
                Step(
                    name="obtain-certificate",
                    resource=Resource(
                        ResourceKind.CERTIFICATE, str(certbot.paths(domain).certificate)
                    ),
                    action=CallAction(
                        lambda context: certbot.obtain(domain, email, timeout=context.timeout),
                        f"certbot certonly --nginx -d {domain}",
                    ),
                    requires=("install-certbot", "remove-default-site"),
                    network=True,
                    description=f"Obtain a Let's Encrypt certificate for {domain}.",
                ),
                Step(
                    name="enable-certbot-renewal",
                    resource=Resource(
                        ResourceKind.SERVICE,
                        config.tls.renewal_timer,
                        ExpectedState.VALUE,
                        "enabled",
                    ),
                    action=CallAction(
                        lambda context: certbot.enable_renewal(
                            config.tls.renewal_timer, timeout=context.timeout
                        ),
                        f"systemctl enable --now {config.tls.renewal_timer}",
                    ),
                    requires=("obtain-certificate",),
                    description="Renew the certificate automatically.",
                ),
            ]
        )
        site_requires = (*site_requires, "obtain-certificate")

    steps.extend(
        [
            Step(
                name="write-nginx-site",
                resource=Resource(
                    ResourceKind.FILE,
                    str(nginx.site_path(site)),
                    ExpectedState.VALUE,
                    sha256_text(reverse_proxy),
                ),
                action=CallAction(install_site, f"write {nginx.site_path(site)} and nginx -t"),
                requires=site_requires,
                description=f"Write the nginx site for {params.domain}.",
            ),
            Step(
                name="enable-nginx-site",
                resource=Resource(
                    ResourceKind.SYMLINK,
                    str(nginx.enabled_path(site)),
                    ExpectedState.VALUE,
                    str(nginx.site_path(site)),
                ),
                action=CallAction(enable_site, f"ln -s {nginx.site_path(site)} and reload nginx"),
                requires=("write-nginx-site", "enable-odoo-service"),
                description="Enable the nginx site.",
            ),
        ]
    )
    return steps


__all__ = ["REQUIREMENTS_MARKER", "build_steps", "requirements_marker"]
