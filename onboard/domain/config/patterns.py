"""
Line-presence checks

All comparisons run on whitespace-normalized lines: leading and trailing
whitespace is dropped and runs of blanks collapse to a single space. The
same policy applies to single-line and host-block lookups.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .store import ConfigStore

_BLANKS = re.compile(r"[ \t]+")


def normalize(line: str) -> str:
    """Collapse blanks and strip the line"""
    return _BLANKS.sub(" ", line.strip())


class Pattern(ABC):
    """Something that can be looked up in a line-oriented file"""

    @abstractmethod
    def matches(self, lines: List[str]) -> bool:
        """Return True if an equivalent entry exists in lines"""
        pass


@dataclass(frozen=True)
class LiteralPattern(Pattern):
    """
    Fixed-string lookup, no regex metacharacters.

    With whole_line the normalized line must equal the text, otherwise the
    text may appear anywhere inside a line.
    """
    text: str
    whole_line: bool = False

    def matches(self, lines: List[str]) -> bool:
        needle = normalize(self.text)
        if not needle:
            return False
        for line in lines:
            candidate = normalize(line)
            if self.whole_line:
                if candidate == needle:
                    return True
            elif needle in candidate:
                return True
        return False


@dataclass(frozen=True)
class HostBlockPattern(Pattern):
    """
    A `Host` header naming alias, optionally followed by `HostName fqdn`.

    The alias must be one of the header's host tokens, so `ml00` does not
    match `Host ml007`.
    """
    alias: str
    fqdn: Optional[str] = None

    def matches(self, lines: List[str]) -> bool:
        for idx, line in enumerate(lines):
            if not self._is_header(line):
                continue
            if self.fqdn is None:
                return True
            following = _next_directive(lines, idx + 1)
            if following is not None and _is_directive(following, "hostname", self.fqdn):
                return True
        return False

    def _is_header(self, line: str) -> bool:
        parts = normalize(line).split(" ")
        return len(parts) > 1 and parts[0].lower() == "host" and self.alias in parts[1:]


def _next_directive(lines: List[str], start: int) -> Optional[str]:
    for line in lines[start:]:
        stripped = normalize(line)
        if stripped and not stripped.startswith("#"):
            return stripped
    return None


def _is_directive(line: str, keyword: str, value: str) -> bool:
    parts = normalize(line).split(" ", 1)
    return len(parts) == 2 and parts[0].lower() == keyword and parts[1] == value


def present(target: Union["ConfigStore", Path, str], pattern: Pattern) -> bool:
    """
    Check whether pattern is already satisfied by target.

    A missing file counts as "absent", never as an error.
    """
    from .store import as_store
    return as_store(target).contains(pattern)
