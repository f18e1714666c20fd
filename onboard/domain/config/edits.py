"""
Idempotent edits: append-if-absent lines and alias-keyed host blocks
"""
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ...core.exceptions import PreconditionError
from ...core.logging import get_logger
from .models import EditResult, HostEntry
from .patterns import HostBlockPattern, LiteralPattern
from .store import ConfigStore, as_store

logger = get_logger(__name__)

Target = Union[ConfigStore, Path, str]


def ensure_line(file: Target, line: str, private: bool = False) -> EditResult:
    """
    Append line unless an equivalent line is already present.

    Args:
        file: Store or local path
        line: Line to add, without trailing newline
        private: Tighten permissions of a newly created local file

    Returns:
        EditResult.ADDED or EditResult.ALREADY_PRESENT

    Raises:
        PreconditionError: line is blank or spans several lines
    """
    if not line.strip() or "\n" in line or "\r" in line:
        raise PreconditionError(f"Expected a single non-empty line, got {line!r}")
    store = as_store(file, private=private)
    if store.contains(LiteralPattern(line)):
        logger.debug(f"{line!r} already present in {store!r}")
        return EditResult.ALREADY_PRESENT
    store.append(line + "\n")
    logger.debug(f"Appended {line!r} to {store!r}")
    return EditResult.ADDED


def ensure_host(
    file: Target,
    alias: str,
    fqdn: str,
    user: str,
    identity_file: Optional[str] = None,
) -> EditResult:
    """Append a host block for alias unless one exists"""
    return ensure_host_entry(file, HostEntry(alias, fqdn, user, identity_file))


def ensure_host_entry(file: Target, entry: HostEntry) -> EditResult:
    store = as_store(file, private=True)
    result = store.upsert_block(HostBlockPattern(entry.alias), entry.render())
    if result is EditResult.ADDED:
        logger.info(f"Added {entry.alias} to SSH config")
    else:
        logger.info(f"{entry.alias} already in SSH config, skipping")
    return result


def ensure_hosts(file: Target, entries: Iterable[HostEntry]) -> List[EditResult]:
    store = as_store(file, private=True)
    return [ensure_host_entry(store, entry) for entry in entries]
