"""
Project constants definitions
"""

# ============================================================
# Cluster Profile
# ============================================================

DEFAULT_DOMAIN = "research.partners.org"
DEFAULT_DISPATCH_ALIAS = "ml007"
DEFAULT_HOST_ALIASES = ("ml003", "ml007", "ml008")

SHARED_ROOT = "/data/pinello/SHARED_SOFTWARE"

# ============================================================
# Default Values
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_COMMAND_TIMEOUT = 30
DEFAULT_SESSION_TIMEOUT = 900

# ============================================================
# SSH Config
# ============================================================

SSH_DIR = "~/.ssh"
SSH_DIR_MODE = 0o700
SSH_CONFIG_PATH = "~/.ssh/config"
SSH_CONFIG_MODE = 0o600
DEFAULT_KEY_PATH = "~/.ssh/id_rsa"
PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644
KEY_BITS = 4096

REMOTE_AUTHORIZED_KEYS = "~/.ssh/authorized_keys"

# ============================================================
# Local State
# ============================================================

DEFAULT_CONFIG_PATH = "~/.onboard/config.toml"
DEFAULT_LOG_DIR = "~/.onboard/logs"

# ============================================================
# Workstation
# ============================================================

TEAMS_DOWNLOAD_URL = "https://www.microsoft.com/en-us/microsoft-teams/download-app"
EDITOR_DOWNLOAD_URL = "https://code.visualstudio.com/Download"

EDITOR_EXTENSIONS = (
    "ms-vscode-remote.remote-ssh",
    "ms-python.python",
    "ms-toolsai.jupyter",
    "GitHub.copilot",
)

# Pushed to every new SSH host by the editor
REMOTE_DEFAULT_EXTENSIONS = (
    "ms-python.python",
    "ms-toolsai.jupyter",
)
