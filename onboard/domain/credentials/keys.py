"""
Local key pair management
"""
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import paramiko

from ...core.constants import KEY_BITS, PRIVATE_KEY_MODE, PUBLIC_KEY_MODE, SSH_DIR_MODE
from ...core.exceptions import ProvisionError
from ...core.logging import get_logger
from ..config.models import EditResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeyPair:
    private_path: Path
    public_key: str

    @property
    def public_path(self) -> Path:
        return public_key_path(self.private_path)


def public_key_path(key_path: Path) -> Path:
    return Path(str(key_path) + ".pub")


def generate_ssh_key_pair(key_path: Path, bits: int = KEY_BITS) -> KeyPair:
    """
    Generate an RSA key pair without passphrase.
    
    Args:
        key_path: Path to private key file (public key will be key_path + '.pub')
        bits: Modulus size
    
    Returns:
        The new KeyPair
    """
    if not key_path.parent.exists():
        key_path.parent.mkdir(parents=True, exist_ok=True)
        key_path.parent.chmod(SSH_DIR_MODE)
    
    key = paramiko.RSAKey.generate(bits=bits)
    
    key.write_private_key_file(str(key_path))
    key_path.chmod(PRIVATE_KEY_MODE)
    
    public_key = f"{key.get_name()} {key.get_base64()} onboard@{socket.gethostname()}"
    pub_path = public_key_path(key_path)
    pub_path.write_text(public_key + "\n")
    pub_path.chmod(PUBLIC_KEY_MODE)
    
    return KeyPair(key_path, public_key)


def load_key_pair(key_path: Path) -> KeyPair:
    """
    Load an existing key pair.

    The public half comes from `<key>.pub`; when that file is missing it is
    derived from the private key and written out.

    Raises:
        ProvisionError: If the public key cannot be obtained
    """
    pub_path = public_key_path(key_path)
    if pub_path.exists():
        content = pub_path.read_text().strip()
        if content:
            return KeyPair(key_path, content)

    for key_cls in (paramiko.RSAKey, paramiko.Ed25519Key, paramiko.ECDSAKey):
        try:
            key = key_cls.from_private_key_file(str(key_path))
        except paramiko.PasswordRequiredException as e:
            raise ProvisionError(
                f"{key_path} is passphrase-protected and {pub_path} is missing.\n"
                f"Recreate the public key with:\n    ssh-keygen -y -f {key_path} > {pub_path}"
            ) from e
        except (paramiko.SSHException, ValueError):
            continue
        public_key = f"{key.get_name()} {key.get_base64()}"
        pub_path.write_text(public_key + "\n")
        pub_path.chmod(PUBLIC_KEY_MODE)
        logger.info(f"Derived missing public key {pub_path}")
        return KeyPair(key_path, public_key)

    raise ProvisionError(f"Cannot read the private key at {key_path} and {pub_path} is missing")


def ensure_key_pair(key_path: Path) -> Tuple[KeyPair, EditResult]:
    """
    Reuse the key at key_path if the file exists, whatever its content;
    generate one otherwise. An existing key is never overwritten.
    """
    key_path = Path(key_path).expanduser()
    if key_path.exists():
        logger.info(f"Existing SSH key found at {key_path}, reusing")
        return load_key_pair(key_path), EditResult.ALREADY_PRESENT

    logger.info(f"Generating a new {KEY_BITS}-bit RSA key at {key_path}")
    return generate_ssh_key_pair(key_path), EditResult.ADDED
