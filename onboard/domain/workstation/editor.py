"""
Local editor setup: CLI discovery, extensions, user settings
"""
import json
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from ...core.constants import EDITOR_EXTENSIONS, REMOTE_DEFAULT_EXTENSIONS
from ...core.logging import get_logger
from ..config.store import FileConfigStore
from ..plan.models import StepOutcome

logger = get_logger(__name__)

EXTENSION_TIMEOUT = 300
DEFAULT_EXTENSIONS_KEY = "remote.SSH.defaultExtensions"


def settings_path(platform: str = sys.platform, env: Optional[Mapping[str, str]] = None,
                  home: Optional[Path] = None) -> Path:
    """Per-platform location of the editor's user settings.json"""
    env = os.environ if env is None else env
    home = home or Path.home()
    if platform == "darwin":
        return home / "Library" / "Application Support" / "Code" / "User" / "settings.json"
    if platform == "win32":
        appdata = env.get("APPDATA") or str(home / "AppData" / "Roaming")
        return Path(appdata) / "Code" / "User" / "settings.json"
    config_home = env.get("XDG_CONFIG_HOME") or str(home / ".config")
    return Path(config_home) / "Code" / "User" / "settings.json"


def cli_search_dirs(platform: str = sys.platform, env: Optional[Mapping[str, str]] = None) -> List[str]:
    """Install locations of the `code` CLI that are not always on PATH"""
    env = os.environ if env is None else env
    if platform == "darwin":
        return ["/Applications/Visual Studio Code.app/Contents/Resources/app/bin"]
    if platform == "win32":
        local = env.get("LOCALAPPDATA", "")
        return [str(Path(local) / "Programs" / "Microsoft VS Code" / "bin")] if local else []
    return ["/usr/share/code/bin", "/snap/bin"]


def find_editor_cli(platform: str = sys.platform, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    env = os.environ if env is None else env
    search = os.pathsep.join(cli_search_dirs(platform, env) + [env.get("PATH", "")])
    return shutil.which("code", path=search)


def render_settings(existing: Optional[str], extensions: Sequence[str]) -> str:
    """
    Merge the default remote extensions into existing settings.

    Unparseable content (the editor accepts comments, json does not) is
    replaced by a fresh object.
    """
    data: Dict = {}
    if existing:
        try:
            loaded = json.loads(existing)
            if isinstance(loaded, dict):
                data = loaded
        except json.JSONDecodeError:
            logger.warning("Existing editor settings are not plain JSON, starting fresh")
    data[DEFAULT_EXTENSIONS_KEY] = list(extensions)
    return json.dumps(data, indent=2) + "\n"


class EditorSetup:
    """
    Installs the desktop-side extensions and seeds user settings so every new
    SSH host receives the server-side extensions.
    """

    def __init__(
        self,
        cli: Optional[str] = None,
        settings_file: Optional[Path] = None,
        extensions: Sequence[str] = EDITOR_EXTENSIONS,
        remote_extensions: Sequence[str] = REMOTE_DEFAULT_EXTENSIONS,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.cli = cli
        self.settings_file = Path(settings_file) if settings_file else settings_path()
        self.extensions = list(extensions)
        self.remote_extensions = list(remote_extensions)
        self.runner = runner
        self.failed_extensions: List[str] = []

    def install_extensions(self) -> List[str]:
        """Install every extension; return the ones that failed"""
        self.failed_extensions = []
        cli = self.cli or find_editor_cli()
        if not cli:
            logger.error(
                "The editor CLI ('code') isn't on PATH. Run "
                "\"Shell Command: Install 'code' command in PATH\" from the editor first."
            )
            self.failed_extensions = list(self.extensions)
            return self.failed_extensions

        for ext in self.extensions:
            try:
                proc = self.runner(
                    [cli, "--install-extension", ext, "--force"],
                    capture_output=True,
                    text=True,
                    timeout=EXTENSION_TIMEOUT,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.warning(f"Installing {ext} failed: {e}")
                self.failed_extensions.append(ext)
                continue
            if proc.returncode != 0:
                logger.warning(f"Installing {ext} failed: {(proc.stderr or proc.stdout).strip()}")
                self.failed_extensions.append(ext)
            else:
                logger.info(f"Installed {ext}")
        return self.failed_extensions

    def write_settings(self) -> StepOutcome:
        store = FileConfigStore(self.settings_file)
        existing = (
            self.settings_file.read_text(encoding="utf-8", errors="replace") if self.settings_file.exists() else None
        )
        content = render_settings(existing, self.remote_extensions)
        if existing == content:
            return StepOutcome.ALREADY_SATISFIED
        store.archive_and_rewrite(content)
        logger.info(f"Editor settings written to {self.settings_file}")
        return StepOutcome.APPLIED

    def run(self) -> StepOutcome:
        failed = self.install_extensions()
        outcome = self.write_settings()
        if failed:
            return StepOutcome.FAILED
        return outcome
