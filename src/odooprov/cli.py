"""Typer-powered command line interface for ``odooprov``."""
from __future__ import annotations

import json
import os
import sys
import textwrap
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import (
    ADMIN_PASSWORD_ENV_VAR,
    DOMAIN_ENV_VAR,
    EMAIL_ENV_VAR,
    AppConfig,
    ConfigError,
    load_config,
)
from .executor import CommandExecutor
from .exit_codes import ExitCode
from .files import write_text_atomic
from .logging import OperationScope, StructuredLogger
from .params import ConfigParameters, build_parameters
from .providers import Providers
from .provision import (
    PreconditionError,
    Probe,
    RunResult,
    Runner,
    Step,
    StepStatus,
    TimeoutPolicy,
    ValidationError,
    plan_steps,
)
from .provision.report import serialize_plan, serialize_run
from .provision.steps import build_steps
from .render import ConfigRenderer, TemplateKind, parse_kind
from .templates import TemplateEngine

console = Console()

CONFIG_FILE_OPTION = typer.Option(
    None,
    "--config-file",
    dir_okay=False,
    help="Override the path to odooprov's YAML config file.",
)
DOMAIN_OPTION = typer.Option(
    None,
    "--domain",
    "-d",
    envvar=DOMAIN_ENV_VAR,
    help="Public domain name Odoo is served on.",
)
EMAIL_OPTION = typer.Option(
    None,
    "--email",
    "-m",
    envvar=EMAIL_ENV_VAR,
    help="Contact email for the Let's Encrypt certificate.",
)
ADMIN_PASSWORD_OPTION = typer.Option(
    None,
    "--admin-password",
    envvar=ADMIN_PASSWORD_ENV_VAR,
    help="Odoo master password (reused from the existing config or generated when omitted).",
)
NO_TLS_OPTION = typer.Option(
    False,
    "--no-tls",
    help="Serve plain HTTP and skip the certificate steps.",
)
ACCOUNT_OPTION = typer.Option(
    None,
    "--account",
    help="Run Odoo as a dedicated 'system' account or the invoking 'operator'.",
)
JSON_OPTION = typer.Option(
    False,
    "--json",
    help="Emit the result as JSON.",
)

STATUS_STYLES = {
    StepStatus.SKIPPED: "dim",
    StepStatus.SUCCEEDED: "green",
    StepStatus.FAILED: "bold red",
    StepStatus.PENDING: "yellow",
}

app = typer.Typer(
    add_completion=False,
    help=textwrap.dedent(
        """
        Idempotent Odoo host provisioning.

        Installs PostgreSQL, Odoo, a systemd unit and an nginx reverse proxy
        (optionally with a Let's Encrypt certificate). Re-running converges the
        host and skips everything already in place.
        """
    ).strip(),
)
config_app = typer.Typer(help="Inspect the resolved configuration.")
app.add_typer(config_app, name="config")


@dataclass
class RuntimeContext:
    """Aggregated runtime objects shared by commands."""

    config: AppConfig
    logger: StructuredLogger
    templates: TemplateEngine
    renderer: ConfigRenderer
    executor: CommandExecutor
    providers: Providers


def _ensure_runtime(ctx: typer.Context, config_file: Path | None) -> RuntimeContext:
    runtime = ctx.obj
    if isinstance(runtime, RuntimeContext):
        return runtime

    try:
        config = load_config(config_file=config_file)
    except ConfigError as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        raise typer.Exit(code=int(ExitCode.VALIDATION)) from exc

    logger = StructuredLogger(config.logs_dir, mirror_to_file=True)
    templates = TemplateEngine.with_overrides(config.templates_dir)
    executor = CommandExecutor()
    runtime = RuntimeContext(
        config=config,
        logger=logger,
        templates=templates,
        renderer=ConfigRenderer(templates),
        executor=executor,
        providers=Providers.from_config(config, executor),
    )
    ctx.obj = runtime
    return runtime


def _get_runtime(ctx: typer.Context) -> RuntimeContext:
    runtime = ctx.obj
    if isinstance(runtime, RuntimeContext):
        return runtime
    return _ensure_runtime(ctx, None)


@app.callback(invoke_without_command=True)
def _root(  # noqa: D401 - Typer displays help for us, docstring optional.
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the odooprov version and exit.",
    ),
    config_file: Path | None = CONFIG_FILE_OPTION,
) -> None:
    """Entry point callback invoked for every CLI execution."""
    if version:
        console.print(f"odooprov {__version__}")
        raise typer.Exit(code=0)

    _ensure_runtime(ctx, config_file)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(code=0)


def _command_error(
    op: OperationScope,
    message: str,
    *,
    rc: int = int(ExitCode.VALIDATION),
    errors: Sequence[str] | None = None,
) -> NoReturn:
    """Emit a structured error and terminate the command."""
    console.print(f"[red]{message}[/red]")
    op.error(message, errors=list(errors or [message]), rc=rc)
    raise typer.Exit(code=rc)


def _interactive() -> bool:
    return sys.stdin.isatty()


def _resolve_parameters(
    runtime: RuntimeContext,
    op: OperationScope,
    *,
    domain: str | None,
    email: str | None,
    admin_password: str | None,
    no_tls: bool,
    account: str | None,
) -> ConfigParameters:
    """Collect operator input (prompting on a terminal) and validate it."""
    tls_enabled = False if no_tls else runtime.config.tls.enabled
    if not domain and _interactive():
        domain = typer.prompt("Domain or subdomain name")
    if tls_enabled and not email and _interactive():
        email = typer.prompt("Email address for the TLS certificate")
    try:
        return build_parameters(
            runtime.config,
            domain=domain,
            admin_email=email,
            admin_passwd=admin_password,
            tls_enabled=tls_enabled,
            account=account,
        )
    except ValidationError as exc:
        _command_error(op, str(exc), rc=int(exc.exit_code))


def _plan(
    runtime: RuntimeContext,
    op: OperationScope,
    params: ConfigParameters,
) -> list[Step]:
    """Declare and order the steps; validation and graph errors end the command."""
    try:
        steps = build_steps(params, runtime.config, runtime.providers, renderer=runtime.renderer)
        ordered = plan_steps(steps)
    except (ValidationError, PreconditionError) as exc:
        _command_error(op, str(exc), rc=int(exc.exit_code))
    op.add_step("plan", status="success", detail=f"{len(ordered)} steps")
    return ordered


def _timeout_policy(
    config: AppConfig,
    timeout: float | None,
    network_timeout: float | None,
) -> TimeoutPolicy:
    return TimeoutPolicy(
        default=timeout if timeout is not None else config.timeouts.default,
        network=network_timeout if network_timeout is not None else config.timeouts.network,
        probe=config.timeouts.probe,
    )


def _render_run(result: RunResult) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Step", style="bold")
    table.add_column("Status")
    table.add_column("Resource")
    table.add_column("Detail", overflow="fold")
    for record in result.records:
        style = STATUS_STYLES.get(record.status, "")
        detail = record.error or (record.output.strip().splitlines() or [""])[-1]
        table.add_row(
            record.step,
            f"[{style}]{record.status.value}[/{style}]" if style else record.status.value,
            record.resource,
            detail,
        )
    console.print(table)

    if result.error is not None:
        console.print(
            f"[red]Step '{result.error.step}' failed ({result.error.kind}) on "
            f"{result.error.resource}:[/red]"
        )
        console.print(result.error.detail, markup=False, highlight=False)
        completed = ", ".join(result.completed_steps) or "none"
        console.print(f"Completed steps: {completed}")
    elif result.dry_run:
        pending = sum(1 for record in result.records if record.status is StepStatus.PENDING)
        console.print(f"[yellow]Dry run[/yellow]: {pending} step(s) would run.")
    else:
        console.print("[green]Host is provisioned.[/green]")


@app.command()
def provision(
    ctx: typer.Context,
    domain: str | None = DOMAIN_OPTION,
    email: str | None = EMAIL_OPTION,
    admin_password: str | None = ADMIN_PASSWORD_OPTION,
    no_tls: bool = NO_TLS_OPTION,
    account: str | None = ACCOUNT_OPTION,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Probe every step and report what would run without changing the host.",
    ),
    json_output: bool = JSON_OPTION,
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        min=1,
        help="Seconds each local action may take (overrides timeouts.default).",
    ),
    network_timeout: float | None = typer.Option(
        None,
        "--network-timeout",
        min=1,
        help="Seconds each network action may take (overrides timeouts.network).",
    ),
) -> None:
    """Provision (or converge) this host to run Odoo."""
    runtime = _get_runtime(ctx)
    with runtime.logger.operation(
        "provision",
        args={
            "domain": domain,
            "email": email,
            "no_tls": no_tls,
            "account": account,
            "dry_run": dry_run,
            "timeout": timeout,
            "network_timeout": network_timeout,
        },
        target={"kind": "host", "domain": domain},
    ) as op:
        params = _resolve_parameters(
            runtime,
            op,
            domain=domain,
            email=email,
            admin_password=admin_password,
            no_tls=no_tls,
            account=account,
        )
        if not dry_run and os.geteuid() != 0:
            _command_error(
                op,
                "Provisioning changes the host and must run as root (use sudo, or --dry-run).",
                rc=int(ExitCode.PRECONDITION),
            )
        ordered = _plan(runtime, op, params)

        policy = _timeout_policy(runtime.config, timeout, network_timeout)
        probe = Probe(
            runtime.executor,
            timeout=policy.probe,
            postgres_user=runtime.config.database.superuser,
            systemctl_bin=runtime.config.systemd.systemctl_bin,
        )
        runner = Runner(probe, runtime.executor, timeouts=policy, scope=op, dry_run=dry_run)
        result = runner.run(ordered)

        if json_output:
            console.print_json(data=serialize_run(result))
        else:
            _render_run(result)

        context = {
            "domain": params.domain,
            "completed_steps": result.completed_steps,
            "dry_run": dry_run,
        }
        if result.error is not None:
            op.error(
                str(result.error),
                errors=[result.error.detail],
                rc=result.exit_code,
                context={**context, "failed_step": result.error.step, "kind": result.error.kind},
            )
            raise typer.Exit(code=result.exit_code)

        changed = sum(1 for record in result.records if record.status is StepStatus.SUCCEEDED)
        message = "Dry run complete." if dry_run else "Host provisioned."
        op.success(message, changed=changed, context=context)


@app.command()
def plan(
    ctx: typer.Context,
    domain: str | None = DOMAIN_OPTION,
    email: str | None = EMAIL_OPTION,
    no_tls: bool = NO_TLS_OPTION,
    account: str | None = ACCOUNT_OPTION,
    json_output: bool = JSON_OPTION,
) -> None:
    """Print the ordered steps without probing or changing anything."""
    runtime = _get_runtime(ctx)
    with runtime.logger.operation(
        "plan",
        args={"domain": domain, "email": email, "no_tls": no_tls, "account": account},
        target={"kind": "host", "domain": domain},
    ) as op:
        params = _resolve_parameters(
            runtime,
            op,
            domain=domain,
            email=email,
            admin_password=None,
            no_tls=no_tls,
            account=account,
        )
        ordered = _plan(runtime, op, params)
        payload = serialize_plan(ordered)

        if json_output:
            console.print_json(data=payload)
        else:
            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("#", justify="right")
            table.add_column("Step", style="bold")
            table.add_column("Requires")
            table.add_column("Resource")
            table.add_column("Action", overflow="fold")
            for entry in payload:
                requires = entry["requires"]
                table.add_row(
                    str(entry["position"]),
                    str(entry["step"]),
                    ", ".join(requires) if isinstance(requires, list) else "",
                    f"{entry['resource']} ({entry['expected']})",
                    str(entry["action"]),
                )
            console.print(table)
        op.success("Planned steps.", changed=0, context={"steps": len(ordered)})


@app.command()
def render(
    ctx: typer.Context,
    kind: str = typer.Argument(
        ...,
        help="Artifact to render: reverse-proxy, service-unit or app-config.",
    ),
    domain: str | None = DOMAIN_OPTION,
    email: str | None = EMAIL_OPTION,
    admin_password: str | None = ADMIN_PASSWORD_OPTION,
    no_tls: bool = NO_TLS_OPTION,
    account: str | None = ACCOUNT_OPTION,
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the artifact to this path instead of stdout.",
    ),
) -> None:
    """Render one configuration artifact."""
    runtime = _get_runtime(ctx)
    with runtime.logger.operation(
        "render",
        args={"kind": kind, "domain": domain, "output": str(output) if output else None},
        target={"kind": "artifact", "name": kind},
    ) as op:
        try:
            template_kind: TemplateKind = parse_kind(kind)
        except ValidationError as exc:
            _command_error(op, str(exc), rc=int(exc.exit_code))
        params = _resolve_parameters(
            runtime,
            op,
            domain=domain,
            email=email,
            admin_password=admin_password,
            no_tls=no_tls,
            account=account,
        )
        try:
            text = runtime.renderer.render(template_kind, params)
        except ValidationError as exc:
            _command_error(op, str(exc), rc=int(exc.exit_code))

        if output is None:
            typer.echo(text, nl=False)
            op.success(f"Rendered {template_kind.value}.", changed=0)
            return

        mode = 0o640 if template_kind is TemplateKind.APP_CONFIG else 0o644
        changed = write_text_atomic(output, text, mode=mode)
        state = "written" if changed else "unchanged"
        console.print(f"{output} {state}.")
        op.success(
            f"Rendered {template_kind.value} to {output}.",
            changed=int(changed),
            context={"path": str(output)},
        )


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit configuration as JSON instead of a table.",
    ),
) -> None:
    """Display the effective configuration after merges."""
    runtime = _get_runtime(ctx)
    data = runtime.config.to_dict()

    with runtime.logger.operation(
        "config show",
        args={"json": json_output},
        target={"kind": "config"},
    ) as op:
        if json_output:
            console.print_json(data=data)
            op.success("Rendered configuration as JSON.", changed=0)
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Key", style="bold")
        table.add_column("Value")

        for key, value in data.items():
            if isinstance(value, Mapping):
                rendered = json.dumps(value, indent=2, sort_keys=True)
            else:
                rendered = str(value)
            table.add_row(key, rendered)

        console.print(table)
        op.success("Rendered configuration table.", changed=0)


def main() -> None:
    """Console script entry point."""
    app()


__all__ = ["app", "main"]
