import os
import shutil
import subprocess
from pathlib import Path

import pytest

from onboard.core.client import ClientConfig
from onboard.core.exceptions import ConnectionError

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


# ----------------- Fakes for the SSH channel -----------------

class LocalShellClient:
    """
    Stands in for RemoteClient: runs each command with the local bash,
    HOME pointing at a temporary "remote" home directory.
    """
    def __init__(self, home: Path, user="alice", host="ml007.example.org", extra_env=None):
        self.home = home
        self.config = ClientConfig(host=host, user=user)
        self.commands = []
        self.stdin = []
        self.closed = False
        self.env = {
            "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
            "HOME": str(home),
            "USER": user,
            "LANG": "C",
        }
        self.env.update(extra_env or {})

    def exec_with_code(self, cmd, stdin_data=None, timeout=None):
        self.commands.append(cmd)
        self.stdin.append(stdin_data)
        proc = subprocess.run(
            ["bash", "-c", cmd],
            input=stdin_data if stdin_data is not None else "",
            capture_output=True,
            text=True,
            env=self.env,
            timeout=timeout or 60,
        )
        return proc.stdout, proc.stderr, proc.returncode

    def exec(self, cmd, timeout=None):
        out, err, _ = self.exec_with_code(cmd, timeout=timeout)
        return out, err

    def exec_streaming(self, cmd, stdin_data=None, on_output=None, timeout=None):
        self.commands.append(cmd)
        self.stdin.append(stdin_data)
        proc = subprocess.run(
            ["bash", "-c", cmd],
            input=stdin_data if stdin_data is not None else "",
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            env=self.env,
            timeout=timeout or 60,
        )
        if on_output and proc.stdout:
            on_output(proc.stdout)
        return proc.stdout, proc.returncode

    def close(self):
        self.closed = True


class ScriptedClient:
    """Returns canned (stdout, stderr, code) per command prefix"""
    def __init__(self, responses=None, default=("", "", 0), host="ml007.example.org", user="alice"):
        self.config = ClientConfig(host=host, user=user)
        self.responses = responses or {}
        self.default = default
        self.commands = []
        self.closed = False

    def exec_with_code(self, cmd, stdin_data=None, timeout=None):
        self.commands.append((cmd, stdin_data))
        for prefix, response in self.responses.items():
            if cmd.startswith(prefix):
                return response
        return self.default

    def exec_streaming(self, cmd, stdin_data=None, on_output=None, timeout=None):
        out, _, code = self.exec_with_code(cmd, stdin_data, timeout)
        if on_output and out:
            on_output(out)
        return out, code

    def close(self):
        self.closed = True


class FakeFactory:
    """
    Connection factory double.

    outcomes: list consumed per create() call; each item is either a client
    or an exception to raise as the cause of a ConnectionError.
    """
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, params):
        self.calls.append(dict(params))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise ConnectionError(f"Failed to connect: {outcome}") from outcome
        return outcome


@pytest.fixture
def remote_home(tmp_path: Path) -> Path:
    home = tmp_path / "remote_home"
    home.mkdir()
    return home


@pytest.fixture
def local_ssh_dir(tmp_path: Path) -> Path:
    return tmp_path / "local_home" / ".ssh"


@pytest.fixture
def small_rsa(monkeypatch):
    """Generate 2048-bit keys in tests"""
    import paramiko
    real_generate = paramiko.RSAKey.generate
    monkeypatch.setattr(paramiko.RSAKey, "generate", staticmethod(lambda bits=2048, progress_func=None: real_generate(2048)))
