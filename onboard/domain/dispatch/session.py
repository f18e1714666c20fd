"""
Remote onboarding session
"""
from importlib.resources import files
from typing import Any, Callable, Dict, Optional

from ...core.client import RemoteClient
from ...core.constants import DEFAULT_SESSION_TIMEOUT
from ...core.exceptions import DispatchError, RemoteCommandError
from ...core.interfaces import ConnectionFactory
from ...core.logging import get_logger
from ...core.utils import quote
from ..credentials.probe import probe
from ..plan.models import StepOutcome
from .models import RemoteSessionParameters

logger = get_logger(__name__)

REMOTE_SCRIPT = "scripts/onboarding_remote.sh"

# The password is read from the first stdin line so it never appears on
# the remote argv; the rest of stdin is the script body.
_BOOTSTRAP = "IFS= read -r NOTEBOOK_PASSWORD; export NOTEBOOK_PASSWORD; exec bash -s"


def load_remote_script() -> str:
    """Script body shipped with the package"""
    return files("onboard").joinpath(REMOTE_SCRIPT).read_text(encoding="utf-8")


def _choice(flag: bool) -> str:
    return "y" if flag else "n"


def build_command(
    params: RemoteSessionParameters,
    environment: Optional[Dict[str, str]] = None,
) -> str:
    """
    Build the remote command line: inline environment assignments followed
    by the bootstrap shell.
    """
    assignments = {
        "NOTEBOOK_CHOICE": _choice(params.wants_notebook),
        "EDITOR_CHOICE": _choice(params.wants_editor),
    }
    assignments.update(environment or {})
    prefix = " ".join(f"{key}={quote(value)}" for key, value in assignments.items())
    return f"{prefix} bash -c {quote(_BOOTSTRAP)}"


def build_stdin(params: RemoteSessionParameters, script: str) -> str:
    password = params.notebook_password if params.wants_notebook else ""
    if "\n" in (password or ""):
        raise DispatchError("The notebook password must be a single line")
    body = script if script.endswith("\n") else script + "\n"
    return f"{password or ''}\n{body}"


class RemoteSessionDispatcher:
    """
    Runs the onboarding script on the cluster in a single session.

    The connection is key-only and never prompts; it must already work,
    which is what credential provisioning guarantees.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        connection_params: Dict[str, Any],
        session_timeout: float = DEFAULT_SESSION_TIMEOUT,
        environment: Optional[Dict[str, str]] = None,
        on_output: Optional[Callable[[str], None]] = None,
    ):
        """
        Args:
            connection_factory: SSH connection factory
            connection_params: host, user, port, key, timeout
            session_timeout: Deadline for the whole remote session
            environment: Extra assignments passed to the remote script
            on_output: Receives remote output chunks (stdout and stderr combined)
        """
        self.connection_factory = connection_factory
        self.connection_params = dict(connection_params)
        self.connection_params.pop("password", None)
        self.session_timeout = session_timeout
        self.environment = environment or {}
        self.on_output = on_output

    def dispatch(self, params: RemoteSessionParameters, script: Optional[str] = None) -> int:
        """
        Stream the script to the remote shell and wait for it.

        Returns:
            The remote exit status (always 0; failures raise)

        Raises:
            PreconditionError: Invalid parameters
            ProbeError: The key-only connection failed
            DispatchError: Non-zero remote exit status or session timeout
        """
        params.validate()
        if not self.connection_params.get("key"):
            raise DispatchError("Remote dispatch needs a key; run credential provisioning first")

        body = script if script is not None else load_remote_script()
        cmd = build_command(params, self.environment)
        stdin_data = build_stdin(params, body)

        client: RemoteClient = probe(self.connection_factory, self.connection_params)
        try:
            logger.info(f"Running remote onboarding on {self.connection_params['host']}")
            logger.debug(f"[run] {cmd}")
            try:
                _, code = client.exec_streaming(
                    cmd,
                    stdin_data=stdin_data,
                    on_output=self.on_output,
                    timeout=self.session_timeout,
                )
            except RemoteCommandError as e:
                raise DispatchError(f"Remote onboarding did not finish: {e}", exit_code=e.code) from e
        finally:
            client.close()

        if code != 0:
            raise DispatchError(f"Remote onboarding failed with exit code {code}", exit_code=code)
        return code

    def run(self, params: RemoteSessionParameters) -> StepOutcome:
        self.dispatch(params)
        return StepOutcome.APPLIED
