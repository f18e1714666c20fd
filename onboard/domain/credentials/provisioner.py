"""
Credential provisioning: local key pair, connectivity probe, remote key
"""
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ...core.client import RemoteClient
from ...core.exceptions import PreconditionError, ProbeError
from ...core.interfaces import ConnectionFactory
from ...core.logging import get_logger
from ..config.models import EditResult
from ..plan.models import StepOutcome
from .install import install_public_key
from .keys import KeyPair, ensure_key_pair
from .probe import ProbeFailure, probe

logger = get_logger(__name__)


class CredentialProvisioner:
    """
    Makes key authentication to the cluster work.

    Process:
    1. Reuse or generate the local key pair
    2. Connect, first with an existing key, then with the password
    3. Install the public key remotely if it is missing

    A failed probe is fatal; nothing later in the run can work without a
    channel.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        key_path: Path,
        password_provider: Callable[[], str],
        on_key_generated: Optional[Callable[[str], None]] = None,
        on_connected: Optional[Callable[[str, str], None]] = None,
        on_key_installed: Optional[Callable[[EditResult], None]] = None,
    ):
        """
        Args:
            connection_factory: SSH connection factory
            key_path: Private key path
            password_provider: Called at most once, only when the password is needed
            on_key_generated: Callback when a key is generated (key_path)
            on_connected: Callback when connected (host, auth method)
            on_key_installed: Callback with the remote edit result
        """
        self.connection_factory = connection_factory
        self.key_path = Path(key_path).expanduser()
        self.password_provider = password_provider
        self.on_key_generated = on_key_generated
        self.on_connected = on_connected
        self.on_key_installed = on_key_installed
        self.key_pair: Optional[KeyPair] = None

    def provision(self, params: Dict[str, Any]) -> StepOutcome:
        """
        Args:
            params: Connection parameters (host, user, port, timeout)

        Raises:
            PreconditionError: Empty password when one is needed
            ProbeError: Connectivity failure
            KeyInstallError: Remote installation failure
        """
        key_pair, generated = ensure_key_pair(self.key_path)
        self.key_pair = key_pair
        if generated is EditResult.ADDED and self.on_key_generated:
            self.on_key_generated(str(self.key_path))

        client = self._connect(params, try_key=generated is EditResult.ALREADY_PRESENT)
        try:
            installed = install_public_key(client, key_pair)
        finally:
            client.close()

        if self.on_key_installed:
            self.on_key_installed(installed)

        if EditResult.ADDED in (generated, installed):
            return StepOutcome.APPLIED
        return StepOutcome.ALREADY_SATISFIED

    def _connect(self, params: Dict[str, Any], try_key: bool) -> RemoteClient:
        if try_key:
            key_params = dict(params, key=str(self.key_path))
            key_params.pop("password", None)
            try:
                client = probe(self.connection_factory, key_params)
                self._notify_connected(params["host"], "key")
                return client
            except ProbeError as e:
                if e.failure is not ProbeFailure.AUTHENTICATION:
                    raise
                logger.info("Existing key not accepted yet, falling back to password")

        password = params.get("password") or self.password_provider()
        if not password:
            raise PreconditionError("A password is required to install the SSH key")
        password_params = dict(params, password=password)
        password_params.pop("key", None)
        client = probe(self.connection_factory, password_params)
        self._notify_connected(params["host"], "password")
        return client

    def _notify_connected(self, host: str, method: str) -> None:
        if self.on_connected:
            self.on_connected(host, method)
