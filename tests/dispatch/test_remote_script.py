import json
import textwrap
from pathlib import Path

import pytest

from onboard.core.exceptions import DispatchError
from onboard.domain.dispatch import RemoteSessionDispatcher, RemoteSessionParameters

from ..conftest import FakeFactory, LocalShellClient, requires_bash

pytestmark = requires_bash

CONN = {"host": "ml007.example.org", "user": "alice", "key": "/home/alice/.ssh/id_rsa"}

STUBS = {
    "mamba": """
        #!/usr/bin/env bash
        echo "mamba $*" >> "$STUB_LOG"
        case "$1 $2" in
          "shell init") printf '# >>> mamba initialize >>>\\n# <<< mamba initialize <<<\\n' >> "$HOME/.bashrc" ;;
          "config list") cat "$STUB_STATE/envs_dirs" 2>/dev/null || true ;;
          "config prepend") echo "$4" >> "$STUB_STATE/envs_dirs" ;;
        esac
    """,
    "conda": """
        #!/usr/bin/env bash
        echo "conda $*" >> "$STUB_LOG"
        printf '# >>> conda initialize >>>\\n# <<< conda initialize <<<\\n' >> "$HOME/.bashrc"
    """,
    "jupyter": """
        #!/usr/bin/env bash
        read -r first
        read -r second
        echo "jupyter $* $first $second" >> "$STUB_LOG"
        mkdir -p "$HOME/.jupyter"
        printf '{"IdentityProvider": {"hashed_password": "x"}}\\n' > "$HOME/.jupyter/jupyter_server_config.json"
    """,
    "activate": "",
}


@pytest.fixture
def cluster(tmp_path: Path, remote_home: Path):
    shared = tmp_path / "shared"
    bin_dir = shared / "miniforge3" / "bin"
    bin_dir.mkdir(parents=True)
    for name, body in STUBS.items():
        stub = bin_dir / name
        stub.write_text(textwrap.dedent(body).lstrip())
        stub.chmod(0o755)
    state = tmp_path / "state"
    state.mkdir()
    log = tmp_path / "stub.log"
    log.touch()

    client = LocalShellClient(
        remote_home,
        extra_env={"STUB_LOG": str(log), "STUB_STATE": str(state)},
    )

    def dispatch(params: RemoteSessionParameters):
        output = []
        dispatcher = RemoteSessionDispatcher(
            FakeFactory(client),
            CONN,
            environment={"ONBOARD_SHARED_ROOT": str(shared)},
            on_output=output.append,
        )
        dispatcher.dispatch(params)
        return "".join(output)

    dispatch.shared = shared
    dispatch.home = remote_home
    dispatch.log = log
    dispatch.state = state
    return dispatch


def _invocations(log: Path, prefix: str):
    return [line for line in log.read_text().splitlines() if line.startswith(prefix)]


def test_first_run_applies_everything(cluster):
    output = cluster(RemoteSessionParameters("alice", True, "hunter2", True))

    bashrc = (cluster.home / ".bashrc").read_text()
    assert f'export PATH="$PATH:{cluster.shared}/bin"' in bashrc
    assert "umask g+w" in bashrc
    assert "export PIP_REQUIRE_VIRTUALENV=true" in bashrc
    assert "mamba initialize" in bashrc and "conda initialize" in bashrc
    assert (cluster.shared / "envs" / "alice_envs").is_dir()
    assert (cluster.state / "envs_dirs").read_text() == f"{cluster.shared}/envs/alice_envs\n"
    assert _invocations(cluster.log, "jupyter") == ["jupyter lab password hunter2 hunter2"]

    settings = json.loads((cluster.home / ".vscode-server/data/Machine/settings.json").read_text())
    assert settings == {
        "python.defaultInterpreterPath": f"{cluster.shared}/miniforge3/bin/python",
        "python.condaPath": f"{cluster.shared}/miniforge3/bin/conda",
    }
    assert "Remote onboarding complete!" in output


def test_rerun_adds_nothing(cluster):
    params = RemoteSessionParameters("alice", True, "hunter2", False)
    cluster(params)
    bashrc_before = (cluster.home / ".bashrc").read_text()
    log_before = cluster.log.read_text()

    output = cluster(params)

    assert (cluster.home / ".bashrc").read_text() == bashrc_before
    new_calls = cluster.log.read_text()[len(log_before):].splitlines()
    assert not any(call.startswith(("mamba shell", "conda", "mamba config prepend", "jupyter")) for call in new_calls)
    assert "Already present" in output
    assert "Jupyter password already set." in output


def test_existing_path_line_is_reported_and_not_duplicated(cluster):
    path_line = f'export PATH="$PATH:{cluster.shared}/bin"'
    (cluster.home / ".bashrc").write_text(path_line + "\n")

    output = cluster(RemoteSessionParameters("alice"))

    assert (cluster.home / ".bashrc").read_text().count(path_line) == 1
    assert f"Already present: {path_line}" in output


def test_password_set_once_then_never_again(cluster):
    params = RemoteSessionParameters("alice", True, "hunter2", False)

    cluster(params)
    assert len(_invocations(cluster.log, "jupyter")) == 1

    cluster(params)
    assert len(_invocations(cluster.log, "jupyter")) == 1


def test_no_notebook_means_no_password(cluster):
    cluster(RemoteSessionParameters("alice", False, None, False))
    assert _invocations(cluster.log, "jupyter") == []
    assert not (cluster.home / ".vscode-server").exists()


def test_editor_settings_are_overwritten(cluster):
    settings = cluster.home / ".vscode-server/data/Machine/settings.json"
    settings.parent.mkdir(parents=True)
    settings.write_text('{"old": true}')

    cluster(RemoteSessionParameters("alice", wants_editor=True))

    assert "old" not in json.loads(settings.read_text())


def test_missing_tools_abort_with_exit_code_1(cluster):
    (cluster.shared / "miniforge3" / "bin" / "mamba").unlink()

    with pytest.raises(DispatchError) as excinfo:
        cluster(RemoteSessionParameters("alice"))

    assert excinfo.value.exit_code == 1
    assert not (cluster.home / ".bashrc").exists()
