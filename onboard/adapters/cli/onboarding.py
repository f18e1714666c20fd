"""
Onboarding CLI commands
"""
import typer
from pathlib import Path
from typing import Any, Dict, Optional

from rich.table import Table

from ...core.exceptions import OnboardError, ProbeError, ConfigError
from ...core.logging import (
    add_file_handler,
    get_logger,
    get_stdout_console,
    get_stderr_console,
    run_log_path,
)
from ...domain.config.models import EditResult
from ...domain.credentials import CredentialProvisioner, recovery_text
from ...domain.dispatch import RemoteSessionDispatcher, RemoteSessionParameters
from ...domain.plan import OnboardingPlan, PlanReport, StepOutcome, StepResult
from ...domain.plan.standard import HOST_CONFIG, KEY_OPS, REMOTE_DISPATCH, configure_hosts, standard_plan
from ...domain.workstation import EditorSetup, open_download_page
from ..config.loader import ConfigLoader, OnboardSettings, to_settings
from .connection import RemoteConnectionFactory
from .output import OutputMirror
from .prompts import RichPromptProvider

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()
prompt_provider = RichPromptProvider()

_OUTCOME_STYLE = {
    StepOutcome.APPLIED: "[green]applied[/green]",
    StepOutcome.ALREADY_SATISFIED: "[cyan]already satisfied[/cyan]",
    StepOutcome.FAILED: "[red]failed[/red]",
}


def register_onboarding_commands(app: typer.Typer) -> None:
    """Register onboarding commands on the main app"""
    app.command(name="run")(run_command)
    app.command(name="keys")(keys_command)
    app.command(name="hosts")(hosts_command)
    app.command(name="remote")(remote_command)


# ============================================================
# Helpers
# ============================================================

def _load_settings(ctx: typer.Context, overrides: Dict[str, Any]) -> OnboardSettings:
    config_path: Optional[Path] = (ctx.obj or {}).get("config_path")
    cfg = ConfigLoader().load(toml_path=config_path, cli_overrides=overrides)
    return to_settings(cfg)


def _require_user(settings: OnboardSettings) -> str:
    user = settings.user or prompt_provider.prompt("Enter your cluster username")
    user = (user or "").strip()
    if not user:
        stderr_console.print("[red]Error:[/red] Username must not be empty")
        raise typer.Exit(1)
    return user


def _password_provider(user: str, host: str):
    def ask() -> str:
        return prompt_provider.prompt(f"Password for {user}@{host}", password=True, default="")
    return ask


def _provisioner(settings: OnboardSettings, user: str) -> CredentialProvisioner:
    return CredentialProvisioner(
        connection_factory=RemoteConnectionFactory(),
        key_path=settings.key_path,
        password_provider=_password_provider(user, settings.dispatch_host),
        on_key_generated=lambda key_path: prompt_provider.info(
            f"Generated a new SSH key: {key_path}"
        ),
        on_connected=lambda host, method: prompt_provider.success(
            f"Connected to [cyan]{user}@{host}[/cyan] ({method})"
        ),
        on_key_installed=lambda result: prompt_provider.info(
            "Public key installed on the cluster"
            if result is EditResult.ADDED
            else "Public key already installed on the cluster"
        ),
    )


def _dispatcher(settings: OnboardSettings, user: str, mirror: OutputMirror) -> RemoteSessionDispatcher:
    params = dict(settings.connection_params(user), key=str(settings.key_path))
    return RemoteSessionDispatcher(
        connection_factory=RemoteConnectionFactory(),
        connection_params=params,
        session_timeout=settings.session_timeout,
        environment={"ONBOARD_SHARED_ROOT": settings.shared_root},
        on_output=mirror,
    )


def _report_failure(result: StepResult, settings: OnboardSettings, user: str) -> None:
    if isinstance(result.error, ProbeError):
        prompt_provider.panel(
            recovery_text(result.error.failure, result.error.host, user),
            title=f"Cannot reach {result.error.host}: {result.error.failure.value}",
            border_style="red",
        )
    elif result.detail:
        prompt_provider.panel(result.detail, title=f"{result.name} failed", border_style="red")


def _on_step_done(settings: OnboardSettings, user: str):
    def done(result: StepResult) -> None:
        if result.outcome is StepOutcome.FAILED:
            _report_failure(result, settings, user)
    return done


def _print_summary(report: PlanReport) -> None:
    table = Table(title="Onboarding summary")
    table.add_column("Step")
    table.add_column("Outcome")
    for result in report.results:
        table.add_row(result.name, _OUTCOME_STYLE[result.outcome])
    for name in report.skipped:
        table.add_row(name, "[dim]not run[/dim]")
    stdout_console.print(table)


def _run_single(name: str, action, settings: OnboardSettings, user: str) -> None:
    plan = OnboardingPlan(on_step_done=_on_step_done(settings, user)).add(name, action)
    report = plan.run()
    _print_summary(report)
    raise typer.Exit(report.exit_code)


def _ask(flag: Optional[bool], message: str, default: bool = False) -> bool:
    if flag is not None:
        return flag
    return prompt_provider.confirm(message, default=default)


# ============================================================
# Commands
# ============================================================

def run_command(
    ctx: typer.Context,
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Cluster username"),
    notebook: Optional[bool] = typer.Option(
        None, "--notebook/--no-notebook", help="Set a Jupyter Lab password on the cluster"
    ),
    editor: Optional[bool] = typer.Option(
        None, "--editor/--no-editor", help="Write VS Code server settings on the cluster"
    ),
    teams: Optional[bool] = typer.Option(
        None, "--teams/--no-teams", help="Open the Microsoft Teams download page"
    ),
    install_editor: Optional[bool] = typer.Option(
        None, "--install-editor/--no-install-editor",
        help="Open the VS Code download page, then install extensions and settings",
    ),
):
    """
    Full onboarding: local tools, SSH key, remote setup, SSH config

    Examples:
        onboard run
        onboard run --user alice --notebook --editor --no-teams
    """
    try:
        settings = _load_settings(ctx, {"user": user})
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)

    log_file = run_log_path(settings.log_dir)
    add_file_handler(log_file)
    mirror = OutputMirror(log_file)
    prompt_provider.info(f"Run log: {log_file}")

    try:
        # 1. Optional software downloads
        if _ask(teams, "Do you want to download Microsoft Teams?"):
            open_download_page("teams", typer.launch)

        editor_step = None
        if _ask(install_editor, "Do you want to download VS Code?"):
            open_download_page("editor", typer.launch)
            prompt_provider.prompt("Press Enter after you have installed Visual Studio Code", default="")
            editor_step = EditorSetup().run

        # 2. Remote session choices
        user_name = _require_user(settings)
        wants_notebook = _ask(notebook, "Will you be using Jupyter Lab on the cluster?")
        password = None
        if wants_notebook:
            password = prompt_provider.prompt("Choose a Jupyter Lab password", password=True, default="")
        wants_editor = _ask(
            editor, "Will you be using Visual Studio Code on the cluster?", default=editor_step is not None
        )
        session = RemoteSessionParameters(
            username=user_name,
            wants_notebook=wants_notebook,
            notebook_password=password,
            wants_editor=wants_editor,
        )
        session.validate()

        plan = standard_plan(
            provisioner=_provisioner(settings, user_name),
            connection_params=settings.connection_params(user_name),
            dispatcher=_dispatcher(settings, user_name, mirror),
            session=session,
            ssh_config=settings.ssh_config_path,
            host_entries=settings.host_entries(user_name),
            editor_step=editor_step,
            on_step_start=lambda name: stdout_console.rule(f"[bold]{name}"),
            on_step_done=_on_step_done(settings, user_name),
        )
        report = plan.run()
    except OnboardError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        mirror.close()

    _print_summary(report)
    if report.exit_code == 0:
        prompt_provider.success("Onboarding complete!")
    raise typer.Exit(report.exit_code)


def keys_command(
    ctx: typer.Context,
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Cluster username"),
):
    """Generate or reuse the local SSH key and install it on the cluster"""
    try:
        settings = _load_settings(ctx, {"user": user})
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)
    user_name = _require_user(settings)
    provisioner = _provisioner(settings, user_name)
    _run_single(KEY_OPS, lambda: provisioner.provision(settings.connection_params(user_name)), settings, user_name)


def hosts_command(
    ctx: typer.Context,
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Cluster username"),
):
    """Add the cluster hosts to ~/.ssh/config"""
    try:
        settings = _load_settings(ctx, {"user": user})
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)
    user_name = _require_user(settings)
    entries = settings.host_entries(user_name)
    _run_single(HOST_CONFIG, lambda: configure_hosts(settings.ssh_config_path, entries), settings, user_name)


def remote_command(
    ctx: typer.Context,
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Cluster username"),
    notebook: bool = typer.Option(False, "--notebook/--no-notebook", help="Set a Jupyter Lab password"),
    editor: bool = typer.Option(False, "--editor/--no-editor", help="Write VS Code server settings"),
):
    """Run the remote onboarding script (the SSH key must already work)"""
    try:
        settings = _load_settings(ctx, {"user": user})
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)
    user_name = _require_user(settings)
    password = None
    if notebook:
        password = prompt_provider.prompt("Choose a Jupyter Lab password", password=True, default="")
    session = RemoteSessionParameters(user_name, notebook, password, editor)

    mirror = OutputMirror(run_log_path(settings.log_dir))
    try:
        dispatcher = _dispatcher(settings, user_name, mirror)
        _run_single(REMOTE_DISPATCH, lambda: dispatcher.run(session), settings, user_name)
    finally:
        mirror.close()
