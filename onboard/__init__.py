"""
onboard - lab cluster onboarding automation

Makes repeated runs safe by only ever appending what is missing:
- SSH key pair generation and remote authorized_keys installation
- Remote account setup (PATH, package manager, notebook password, editor settings)
- SSH client config host blocks
- Local editor extensions and settings
"""

__version__ = "0.1.0"

from .core import RemoteClient, ClientConfig

from .domain.config import (
    EditResult,
    HostEntry,
    LiteralPattern,
    HostBlockPattern,
    ConfigStore,
    FileConfigStore,
    MemoryConfigStore,
    RemoteConfigStore,
    present,
    ensure_line,
    ensure_host,
)

from .domain.credentials import (
    KeyPair,
    CredentialProvisioner,
    ProbeFailure,
)

from .domain.dispatch import (
    RemoteSessionParameters,
    RemoteSessionDispatcher,
)

from .domain.plan import (
    OnboardingPlan,
    StepOutcome,
)

__all__ = [
    "__version__",
    "RemoteClient",
    "ClientConfig",
    "EditResult",
    "HostEntry",
    "LiteralPattern",
    "HostBlockPattern",
    "ConfigStore",
    "FileConfigStore",
    "MemoryConfigStore",
    "RemoteConfigStore",
    "present",
    "ensure_line",
    "ensure_host",
    "KeyPair",
    "CredentialProvisioner",
    "ProbeFailure",
    "RemoteSessionParameters",
    "RemoteSessionDispatcher",
    "OnboardingPlan",
    "StepOutcome",
]
