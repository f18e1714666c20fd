import stat
from datetime import datetime, timezone
from pathlib import Path

import pytest

from onboard.core.exceptions import RemoteCommandError
from onboard.domain.config import (
    EditResult,
    FileConfigStore,
    HostBlockPattern,
    LiteralPattern,
    MemoryConfigStore,
    RemoteConfigStore,
    ensure_line,
)

from ..conftest import LocalShellClient, ScriptedClient, requires_bash


def test_file_store_missing_file_reads_empty(tmp_path: Path):
    store = FileConfigStore(tmp_path / "missing")
    assert store.read_lines() == []
    assert not store.contains(LiteralPattern("x"))


def test_file_store_never_rewrites_existing_lines(tmp_path: Path):
    path = tmp_path / "config"
    path.write_text("b\na\n")
    store = FileConfigStore(path)

    store.append("c\n")

    assert path.read_text() == "b\na\nc\n"


def test_existing_file_permissions_untouched(tmp_path: Path):
    path = tmp_path / "config"
    path.write_text("")
    path.chmod(0o644)

    FileConfigStore(path, private=True).append("Host x\n")

    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_archive_and_rewrite_keeps_prior_version(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text("{}\n")
    store = FileConfigStore(path)

    archive = store.archive_and_rewrite('{"a": 1}\n', now=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc))

    assert archive == tmp_path / "settings.json.bak-20260102T030405Z"
    assert archive.read_text() == "{}\n"
    assert path.read_text() == '{"a": 1}\n'


def test_archive_and_rewrite_without_prior_version(tmp_path: Path):
    path = tmp_path / "User" / "settings.json"
    assert FileConfigStore(path).archive_and_rewrite("{}\n") is None
    assert path.read_text() == "{}\n"


def test_upsert_block_on_memory_store():
    store = MemoryConfigStore()
    body = "Host ml007\n    HostName ml007.example.org\n\n"

    assert store.upsert_block(HostBlockPattern("ml007"), body) is EditResult.ADDED
    assert store.upsert_block(HostBlockPattern("ml007"), body) is EditResult.ALREADY_PRESENT
    assert store.text == body


@requires_bash
def test_remote_store_appends_once(remote_home: Path):
    client = LocalShellClient(remote_home)
    path = str(remote_home / ".ssh" / "authorized_keys")
    store = RemoteConfigStore(client, path, private=True)

    assert ensure_line(store, "ssh-rsa AAAA alice@laptop") is EditResult.ADDED
    assert ensure_line(store, "ssh-rsa AAAA alice@laptop") is EditResult.ALREADY_PRESENT

    target = remote_home / ".ssh" / "authorized_keys"
    assert target.read_text() == "ssh-rsa AAAA alice@laptop\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o600
    assert stat.S_IMODE(target.parent.stat().st_mode) == 0o700


@requires_bash
def test_remote_store_repairs_missing_newline(remote_home: Path):
    rc = remote_home / ".bashrc"
    rc.write_text("alias ll='ls -l'")
    store = RemoteConfigStore(LocalShellClient(remote_home), str(rc))

    store.append("umask g+w\n")

    assert rc.read_text() == "alias ll='ls -l'\numask g+w\n"


def test_remote_store_failed_read_counts_as_missing():
    client = ScriptedClient({"if [ -e ": ("", "cat: Permission denied", 1)})
    store = RemoteConfigStore(client, "/home/alice/.bashrc")

    assert store.contains(LiteralPattern("umask g+w")) is False


def test_remote_store_timed_out_read_counts_as_missing():
    class TimingOut(ScriptedClient):
        def exec_with_code(self, cmd, stdin_data=None, timeout=None):
            raise RemoteCommandError(cmd, -1, "timed out after 1s")

    store = RemoteConfigStore(TimingOut(), "/home/alice/.bashrc", timeout=1)
    assert store.read_lines() == []


def test_remote_store_append_failure_raises():
    client = ScriptedClient({"mkdir -p": ("", "read-only file system", 1)})
    store = RemoteConfigStore(client, "/home/alice/.bashrc")

    with pytest.raises(RemoteCommandError) as excinfo:
        store.append("umask g+w\n")

    assert excinfo.value.code == 1
    assert "read-only" in excinfo.value.stderr
