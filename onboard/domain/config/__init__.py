"""
Idempotent configuration edits
"""
from .models import EditResult, HostEntry
from .patterns import Pattern, LiteralPattern, HostBlockPattern, normalize, present
from .store import ConfigStore, FileConfigStore, MemoryConfigStore, RemoteConfigStore, as_store
from .edits import ensure_line, ensure_host, ensure_host_entry, ensure_hosts

__all__ = [
    "EditResult",
    "HostEntry",
    "Pattern",
    "LiteralPattern",
    "HostBlockPattern",
    "normalize",
    "present",
    "ConfigStore",
    "FileConfigStore",
    "MemoryConfigStore",
    "RemoteConfigStore",
    "as_store",
    "ensure_line",
    "ensure_host",
    "ensure_host_entry",
    "ensure_hosts",
]
