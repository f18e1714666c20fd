"""
Config domain models
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EditResult(str, Enum):
    """Outcome of an idempotent edit"""
    ADDED = "added"
    ALREADY_PRESENT = "already present"


@dataclass(frozen=True)
class HostEntry:
    """
    One SSH client stanza.

    The alias is the identity key: a second entry with the same alias is
    never written, whatever its domain name.
    """
    alias: str
    fqdn: str
    user: str
    identity_file: Optional[str] = None

    def render(self) -> str:
        """Render the stanza followed by a blank separator line"""
        lines = [
            f"Host {self.alias}",
            f"    HostName {self.fqdn}",
            f"    User {self.user}",
        ]
        if self.identity_file:
            lines.append(f"    IdentityFile {self.identity_file}")
            lines.append("    IdentitiesOnly yes")
        return "\n".join(lines) + "\n\n"
