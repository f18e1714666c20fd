"""
Rich-based user prompts
"""
from typing import Optional
from rich.console import Console
from rich.prompt import Prompt, Confirm
from rich.panel import Panel
from rich.text import Text

from ...core.interfaces import PromptProvider
from ...core.logging import get_stdout_console


class RichPromptProvider(PromptProvider):
    """Rich-based prompt provider"""
    
    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stdout_console()
    
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        if password:
            return Prompt.ask(message, password=True, default=default, console=self.console)
        return Prompt.ask(message, default=default, console=self.console)
    
    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        return Confirm.ask(message, default=default, console=self.console)
    
    def info(self, message: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan] {message}")
    
    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")
    
    def panel(self, content: str, title: str = "", border_style: str = "blue") -> None:
        """Display content in a panel"""
        self.console.print(Panel(Text(content), title=title, border_style=border_style))
