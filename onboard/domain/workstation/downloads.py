"""
Download pages for tools that ship their own installers
"""
from typing import Callable

from ...core.constants import EDITOR_DOWNLOAD_URL, TEAMS_DOWNLOAD_URL
from ...core.logging import get_logger

logger = get_logger(__name__)

DOWNLOAD_PAGES = {
    "teams": TEAMS_DOWNLOAD_URL,
    "editor": EDITOR_DOWNLOAD_URL,
}


def open_download_page(tool: str, launcher: Callable[[str], int]) -> None:
    """Open the vendor download page with launcher (typer.launch in the CLI)"""
    url = DOWNLOAD_PAGES[tool]
    logger.info(f"Opening {url}")
    launcher(url)
