"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.logging import setup_logging, get_logger
from .onboarding import register_onboarding_commands

logger = get_logger(__name__)

app = typer.Typer(
    name="onboard",
    add_completion=False,
    help="Lab cluster onboarding: SSH key, remote environment, SSH config",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_onboarding_commands(app)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Extra log file path",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file (default: ~/.onboard/config.toml if present)",
    ),
):
    """
    Onboard - lab cluster onboarding

    Use subcommands to perform different operations:
    - run: full onboarding
    - keys: SSH key generation and installation
    - remote: remote environment setup
    - hosts: ~/.ssh/config entries
    """
    setup_logging(level=log_level, log_file=log_file)
    ctx.obj = {"config_path": config}


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
