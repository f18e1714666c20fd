"""
Dispatch domain models
"""
from dataclasses import dataclass, field
from typing import Optional

from ...core.exceptions import PreconditionError


@dataclass(frozen=True)
class RemoteSessionParameters:
    """
    Choices forwarded to the remote onboarding session.

    Built once per run and passed by value; never written to disk.
    """
    username: str
    wants_notebook: bool = False
    notebook_password: Optional[str] = field(default=None, repr=False)
    wants_editor: bool = False

    def validate(self) -> None:
        """
        Raises:
            PreconditionError: Empty username, or notebook requested without a password
        """
        if not self.username or not self.username.strip():
            raise PreconditionError("Username must not be empty")
        if self.wants_notebook and not self.notebook_password:
            raise PreconditionError("A notebook password is required when the notebook server is requested")
