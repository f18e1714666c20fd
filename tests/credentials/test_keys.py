import stat
from pathlib import Path

import paramiko
import pytest

from onboard.core.exceptions import ProvisionError
from onboard.domain.config import EditResult
from onboard.domain.credentials import ensure_key_pair, load_key_pair, public_key_path


def _forbid_generation(monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("key generation must be skipped")
    monkeypatch.setattr(paramiko.RSAKey, "generate", staticmethod(boom))


def test_generates_key_with_tight_permissions(local_ssh_dir: Path, small_rsa):
    key_path = local_ssh_dir / "id_rsa"

    key_pair, result = ensure_key_pair(key_path)

    assert result is EditResult.ADDED
    assert key_pair.public_key.startswith("ssh-rsa ")
    assert public_key_path(key_path).read_text() == key_pair.public_key + "\n"
    assert stat.S_IMODE(key_path.stat().st_mode) == 0o600
    assert stat.S_IMODE(public_key_path(key_path).stat().st_mode) == 0o644
    assert stat.S_IMODE(local_ssh_dir.stat().st_mode) == 0o700
    paramiko.RSAKey.from_private_key_file(str(key_path))


def test_existing_key_is_reused_whatever_its_content(tmp_path: Path, monkeypatch):
    _forbid_generation(monkeypatch)
    key_path = tmp_path / "id_rsa"
    key_path.write_text("not really a key")
    public_key_path(key_path).write_text("ssh-rsa AAAAold alice@old\n")

    key_pair, result = ensure_key_pair(key_path)

    assert result is EditResult.ALREADY_PRESENT
    assert key_pair.public_key == "ssh-rsa AAAAold alice@old"
    assert key_path.read_text() == "not really a key"


def test_second_call_reuses_generated_key(local_ssh_dir: Path, small_rsa, monkeypatch):
    key_path = local_ssh_dir / "id_rsa"
    first, _ = ensure_key_pair(key_path)
    _forbid_generation(monkeypatch)

    second, result = ensure_key_pair(key_path)

    assert result is EditResult.ALREADY_PRESENT
    assert second.public_key == first.public_key


def test_missing_public_key_is_derived(local_ssh_dir: Path, small_rsa):
    key_path = local_ssh_dir / "id_rsa"
    generated, _ = ensure_key_pair(key_path)
    public_key_path(key_path).unlink()

    loaded = load_key_pair(key_path)

    # the derived key has no comment
    assert generated.public_key.startswith(loaded.public_key)
    assert public_key_path(key_path).exists()


def test_unreadable_key_without_public_half_fails(tmp_path: Path, monkeypatch):
    _forbid_generation(monkeypatch)
    key_path = tmp_path / "id_rsa"
    key_path.write_text("garbage")

    with pytest.raises(ProvisionError):
        ensure_key_pair(key_path)
    assert key_path.read_text() == "garbage"
