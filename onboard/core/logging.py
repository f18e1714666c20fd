"""
Rich-based logging system
"""
import logging
from datetime import datetime
from typing import Optional
from pathlib import Path

from rich.logging import RichHandler
from rich.console import Console
from rich.traceback import install as install_traceback


# Global console instances
_stdout_console = Console()
_stderr_console = Console(stderr=True)

# Locals may hold the notebook password, never render them
install_traceback(show_locals=False, width=120)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> None:
    """
    Setup Rich logging system.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        rich_tracebacks: Enable rich tracebacks
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    
    rich_handler = RichHandler(
        console=_stderr_console,
        show_time=True,
        show_path=False,
        rich_tracebacks=rich_tracebacks,
        markup=False,
        show_level=True,
    )
    rich_handler.setLevel(log_level)
    root_logger.addHandler(rich_handler)
    
    # paramiko is chatty at INFO
    logging.getLogger("paramiko").setLevel(logging.WARNING)
    
    if log_file:
        add_file_handler(log_file, level=log_level)


def add_file_handler(log_file: Path, level: int = logging.DEBUG) -> logging.FileHandler:
    """Attach a plain-text file handler to the root logger"""
    log_file = Path(log_file).expanduser()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logging.getLogger().addHandler(file_handler)
    return file_handler


def run_log_path(log_dir: Path, now: Optional[datetime] = None) -> Path:
    """Path of the transcript for a single onboarding run"""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return Path(log_dir).expanduser() / f"onboard-{stamp}.log"


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance.
    
    Args:
        name: Logger name (usually __name__)
    
    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_stdout_console() -> Console:
    """Get stdout console for user-facing output"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Get stderr console for errors and logs"""
    return _stderr_console
