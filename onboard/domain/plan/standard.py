"""
The standard onboarding run: key-ops, remote-dispatch, host-config
"""
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from ..config.edits import ensure_hosts
from ..config.models import EditResult, HostEntry
from ..credentials.provisioner import CredentialProvisioner
from ..dispatch.models import RemoteSessionParameters
from ..dispatch.session import RemoteSessionDispatcher
from .models import StepOutcome, StepResult
from .runner import OnboardingPlan

KEY_OPS = "key-ops"
REMOTE_DISPATCH = "remote-dispatch"
HOST_CONFIG = "host-config"
EDITOR_SETTINGS = "editor-settings"


def configure_hosts(ssh_config: Path, entries: Iterable[HostEntry]) -> StepOutcome:
    results = ensure_hosts(ssh_config, entries)
    if EditResult.ADDED in results:
        return StepOutcome.APPLIED
    return StepOutcome.ALREADY_SATISFIED


def standard_plan(
    provisioner: CredentialProvisioner,
    connection_params: Dict,
    dispatcher: RemoteSessionDispatcher,
    session: RemoteSessionParameters,
    ssh_config: Path,
    host_entries: Iterable[HostEntry],
    editor_step: Optional[Callable[[], StepOutcome]] = None,
    on_step_start: Optional[Callable[[str], None]] = None,
    on_step_done: Optional[Callable[[StepResult], None]] = None,
) -> OnboardingPlan:
    """
    Build the plan for a full run.

    The editor step is optional and never fatal; the three cluster steps
    are fatal, so a failed probe leaves the remote untouched by later steps.
    """
    plan = OnboardingPlan(on_step_start=on_step_start, on_step_done=on_step_done)
    entries = list(host_entries)

    if editor_step is not None:
        plan.add(EDITOR_SETTINGS, editor_step, fatal=False)
    plan.add(KEY_OPS, lambda: provisioner.provision(connection_params))
    plan.add(REMOTE_DISPATCH, lambda: dispatcher.run(session))
    plan.add(HOST_CONFIG, lambda: configure_hosts(ssh_config, entries))
    return plan
