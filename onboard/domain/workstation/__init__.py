"""
Local workstation tooling
"""
from .editor import EditorSetup, find_editor_cli, render_settings, settings_path
from .downloads import DOWNLOAD_PAGES, open_download_page

__all__ = [
    "EditorSetup",
    "find_editor_cli",
    "render_settings",
    "settings_path",
    "DOWNLOAD_PAGES",
    "open_download_page",
]
