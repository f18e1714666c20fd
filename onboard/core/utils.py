"""
Core utility functions
"""
import shlex
from typing import TYPE_CHECKING

from .exceptions import RemoteCommandError

if TYPE_CHECKING:
    from .client import RemoteClient


# ============================================================
# Remote Shell Helpers
# ============================================================

def remote_home(client: "RemoteClient") -> str:
    """Remote $HOME of the connected user"""
    cmd = 'printf %s "$HOME"'
    out, err, code = client.exec_with_code(cmd)
    home = out.strip()
    if code != 0 or not home:
        raise RemoteCommandError(cmd, code, err or "remote $HOME is empty")
    return home


def quote(value: str) -> str:
    """Shell-quote a single word for a remote command line"""
    return shlex.quote(value)
