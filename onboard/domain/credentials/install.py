"""
Remote authorized_keys installation
"""
from ...core.client import RemoteClient
from ...core.exceptions import KeyInstallError, RemoteCommandError
from ...core.logging import get_logger
from ...core.utils import remote_home
from ..config.models import EditResult
from ..config.patterns import LiteralPattern
from ..config.store import RemoteConfigStore
from .keys import KeyPair

logger = get_logger(__name__)


def manual_install_steps(key_pair: KeyPair, user: str, host: str) -> str:
    """Exact steps to install the key by hand"""
    return (
        "Install the key manually:\n"
        f"  1. ssh {user}@{host}\n"
        "  2. mkdir -p ~/.ssh && chmod 700 ~/.ssh\n"
        "  3. touch ~/.ssh/authorized_keys && chmod 600 ~/.ssh/authorized_keys\n"
        "  4. Append this line to ~/.ssh/authorized_keys if it is not there yet:\n"
        f"{key_pair.public_key}"
    )


def install_public_key(client: RemoteClient, key_pair: KeyPair) -> EditResult:
    """
    Add the public key to the remote ~/.ssh/authorized_keys exactly once.
    
    Args:
        client: RemoteClient instance (must be connected)
        key_pair: Local key pair
    
    Returns:
        EditResult.ADDED or EditResult.ALREADY_PRESENT
    
    Raises:
        KeyInstallError: If any remote command fails; the message carries
            the key material and the manual steps
    """
    cfg = client.config
    try:
        home = remote_home(client)
        store = RemoteConfigStore(client, f"{home}/.ssh/authorized_keys", private=True)
        store.ensure_exists()

        if store.contains(LiteralPattern(key_pair.public_key, whole_line=True)):
            logger.info(f"Public key already present in {store.path}")
            return EditResult.ALREADY_PRESENT

        store.append(key_pair.public_key + "\n")
        logger.info(f"Public key added to {store.path}")
        return EditResult.ADDED
    except RemoteCommandError as e:
        raise KeyInstallError(
            f"Failed to install the public key on {cfg.host}: {e}\n\n"
            + manual_install_steps(key_pair, cfg.user, cfg.host)
        ) from e
