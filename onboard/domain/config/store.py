"""
Config stores

A ConfigStore is a line-oriented text file that is only ever appended to.
Existing lines are never reordered or deleted; the one exception is
FileConfigStore.archive_and_rewrite, which keeps the prior version next to
the file before replacing it.
"""
import os
import shutil
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union, TYPE_CHECKING

from ...core.constants import SSH_DIR_MODE, SSH_CONFIG_MODE
from ...core.exceptions import RemoteCommandError
from ...core.logging import get_logger
from ...core.utils import quote
from .models import EditResult
from .patterns import Pattern

if TYPE_CHECKING:
    from ...core.client import RemoteClient

logger = get_logger(__name__)


class ConfigStore(ABC):
    """Append-only view of a text file"""

    @abstractmethod
    def read_lines(self) -> List[str]:
        """Current lines, empty if the file does not exist"""
        pass

    @abstractmethod
    def append(self, text: str) -> None:
        """Append text at end of file, creating the file if needed"""
        pass

    def contains(self, pattern: Pattern) -> bool:
        return pattern.matches(self.read_lines())

    def upsert_block(self, key: Pattern, body: str) -> EditResult:
        """Append body unless key already matches"""
        if self.contains(key):
            return EditResult.ALREADY_PRESENT
        self.append(body)
        return EditResult.ADDED


def _with_separator(existing_tail: str, text: str) -> str:
    """Prefix text with a newline when the file does not end with one"""
    if existing_tail and not existing_tail.endswith("\n"):
        return "\n" + text
    return text


# ============================================================
# Local file
# ============================================================

class FileConfigStore(ConfigStore):
    """
    Local text file.

    Args:
        path: File path (~ is expanded)
        private: File holds credentials; a newly created file gets 0600 and
            a newly created parent directory 0700
    """

    def __init__(self, path: Union[Path, str], private: bool = False):
        self.path = Path(path).expanduser()
        self.private = private

    def __repr__(self) -> str:
        return f"FileConfigStore({str(self.path)!r}, private={self.private})"

    def read_lines(self) -> List[str]:
        try:
            return self.path.read_text(encoding="utf-8", errors="replace").splitlines()
        except FileNotFoundError:
            return []

    def _tail(self) -> str:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return ""
        with open(self.path, "rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1).decode("utf-8", errors="replace")

    def ensure_exists(self) -> bool:
        """Create the file (and parents) if missing; return True if created"""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.private:
                self.path.parent.chmod(SSH_DIR_MODE)
        if self.path.exists():
            return False
        self.path.touch(mode=SSH_CONFIG_MODE if self.private else 0o644)
        if self.private:
            self.path.chmod(SSH_CONFIG_MODE)
        return True

    def append(self, text: str) -> None:
        self.ensure_exists()
        chunk = _with_separator(self._tail(), text)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(chunk)

    def archive_and_rewrite(self, content: str, now: Optional[datetime] = None) -> Optional[Path]:
        """
        Replace the whole file, archiving the prior version first.

        Returns:
            Archive path, or None when there was nothing to archive
        """
        archive = None
        if self.path.exists():
            stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
            archive = self.path.with_name(f"{self.path.name}.bak-{stamp}")
            shutil.copy2(self.path, archive)
            logger.info(f"Archived {self.path} to {archive}")
        else:
            self.ensure_exists()
        self.path.write_text(content, encoding="utf-8")
        return archive


# ============================================================
# In-memory double
# ============================================================

class MemoryConfigStore(ConfigStore):
    """Keeps the file content in memory"""

    def __init__(self, lines: Optional[List[str]] = None):
        self.text = "".join(f"{line}\n" for line in lines or [])

    def read_lines(self) -> List[str]:
        return self.text.splitlines()

    def append(self, text: str) -> None:
        self.text += _with_separator(self.text[-1:], text)


# ============================================================
# Remote file
# ============================================================

class RemoteConfigStore(ConfigStore):
    """
    Text file on the remote host.

    Reads that fail for any reason are reported as an empty file, so a
    doubtful lookup ends in an append rather than a skipped change.
    """

    def __init__(
        self,
        client: "RemoteClient",
        path: str,
        private: bool = False,
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.path = path
        self.private = private
        self.timeout = timeout

    def _run(self, cmd: str, stdin_data: Optional[str] = None):
        return self.client.exec_with_code(cmd, stdin_data=stdin_data, timeout=self.timeout)

    def read_lines(self) -> List[str]:
        q = quote(self.path)
        cmd = f"if [ -e {q} ]; then cat -- {q}; fi"
        try:
            out, err, code = self._run(cmd)
        except RemoteCommandError as e:
            logger.warning(f"Could not read {self.path} remotely, treating as empty: {e}")
            return []
        if code != 0:
            if err.strip():
                logger.warning(f"Could not read {self.path} remotely, treating as empty: {err.strip()}")
            return []
        return out.splitlines()

    def ensure_exists(self) -> None:
        """Create parent directory and file with owner-only permissions if private"""
        parent = self.path.rsplit("/", 1)[0] or "/"
        steps = [f"mkdir -p -- {quote(parent)}", f"touch -- {quote(self.path)}"]
        if self.private:
            steps.insert(1, f"chmod 700 -- {quote(parent)}")
            steps.append(f"chmod 600 -- {quote(self.path)}")
        cmd = " && ".join(steps)
        out, err, code = self._run(cmd)
        if code != 0:
            raise RemoteCommandError(cmd, code, err)

    def append(self, text: str) -> None:
        self.ensure_exists()
        # stdin carries the text so it never shows up on the remote argv
        cmd = (
            f"p={quote(self.path)}; "
            f'if [ -n "$(tail -c 1 -- "$p")" ]; '
            f'then printf "\\n" >> "$p"; fi; cat >> "$p"'
        )
        out, err, code = self._run(cmd, stdin_data=text)
        if code != 0:
            raise RemoteCommandError(cmd, code, err)


def as_store(target: Union[ConfigStore, Path, str], private: bool = False) -> ConfigStore:
    """Accept a path wherever a store is expected"""
    if isinstance(target, ConfigStore):
        return target
    return FileConfigStore(target, private=private)
