"""
Core infrastructure layer
"""
from .client import RemoteClient, ClientConfig
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import ConnectionFactory, PromptProvider
from .utils import (
    remote_home,
    quote,
)

__all__ = [
    "RemoteClient",
    "ClientConfig",
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "ConnectionFactory",
    "PromptProvider",
    "remote_home",
    "quote",
]
