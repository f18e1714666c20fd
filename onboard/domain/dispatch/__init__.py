"""
Remote session dispatch domain module
"""
from .models import RemoteSessionParameters
from .session import (
    RemoteSessionDispatcher,
    build_command,
    build_stdin,
    load_remote_script,
)

__all__ = [
    "RemoteSessionParameters",
    "RemoteSessionDispatcher",
    "build_command",
    "build_stdin",
    "load_remote_script",
]
