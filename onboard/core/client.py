from __future__ import annotations
import time
import socket
from dataclasses import dataclass
from typing import Callable, Optional, Literal, Tuple
import paramiko
from pathlib import Path

from .constants import DEFAULT_SSH_PORT, DEFAULT_CONNECT_TIMEOUT, DEFAULT_COMMAND_TIMEOUT
from .exceptions import ConnectionError, RemoteCommandError


@dataclass
class ClientConfig:
    host: str
    user: str
    port: int = DEFAULT_SSH_PORT
    auth_method: Literal["password", "key"] = "password"
    password: Optional[str] = None
    key_path: Optional[str] = None
    timeout: float = DEFAULT_CONNECT_TIMEOUT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT

    def __repr__(self) -> str:
        return (
            f"ClientConfig(host={self.host!r}, user={self.user!r}, port={self.port}, "
            f"auth_method={self.auth_method!r}, key_path={self.key_path!r})"
        )


class RemoteClient:
    """
    Thin wrapper around paramiko.SSHClient:
    - keeps host / user / port explicitly
    - password or key login, never interactive
    - every round trip is bounded by a timeout
    - usable as a context manager
    """
    def __init__(
        self,
        host: str,
        user: str,
        port: int = DEFAULT_SSH_PORT,
        auth_method: Literal["password", "key"] = "password",
        password: Optional[str] = None,
        key_path: Optional[str] = None,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ) -> None:
        self.config = ClientConfig(
            host=host,
            user=user,
            port=port,
            auth_method=auth_method,
            password=password,
            key_path=key_path,
            timeout=timeout,
            command_timeout=command_timeout,
        )

        self.client = paramiko.SSHClient()
        self.client.load_system_host_keys()
        self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    # --------------------
    # Connection management
    # --------------------
    def connect(self) -> None:
        cfg = self.config
        common = dict(
            hostname=cfg.host,
            port=cfg.port,
            username=cfg.user,
            timeout=cfg.timeout,
            banner_timeout=cfg.timeout,
            auth_timeout=cfg.timeout,
            allow_agent=False,
            look_for_keys=False,
        )

        if cfg.auth_method == "password":
            self.client.connect(password=cfg.password, **common)

        elif cfg.auth_method == "key":
            key = self._load_private_key(cfg.key_path)
            self.client.connect(pkey=key, **common)

        else:
            raise ValueError(f"Unsupported auth method: {cfg.auth_method}")

    def _load_private_key(self, path: Optional[str]) -> paramiko.PKey:
        """Try RSA first, then Ed25519 and ECDSA"""
        if not path:
            raise ConnectionError("Key authentication requested without a key path")
        p = Path(path).expanduser()

        for key_cls in (paramiko.RSAKey, paramiko.Ed25519Key, paramiko.ECDSAKey):
            try:
                return key_cls.from_private_key_file(str(p))
            except paramiko.PasswordRequiredException as e:
                # an AuthenticationException: the caller may fall back to a password
                raise ConnectionError(f"Private key at {p} is passphrase-protected") from e
            except (paramiko.SSHException, ValueError):
                continue
            except OSError as e:
                raise ConnectionError(f"Cannot read private key at {p}: {e}") from e
        raise ConnectionError(f"Failed to load private key at {p}") from paramiko.AuthenticationException(
            f"No usable private key at {p}"
        )

    # --------------------
    # Helpers
    # --------------------
    def exec(self, cmd: str, timeout: Optional[float] = None) -> Tuple[str, str]:
        """Run a command and return (stdout, stderr)"""
        out, err, _ = self.exec_with_code(cmd, timeout=timeout)
        return out, err

    def exec_with_code(
        self,
        cmd: str,
        stdin_data: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[str, str, int]:
        """Run a command and return (stdout, stderr, exit_code)"""
        timeout = timeout or self.config.command_timeout
        try:
            stdin, stdout, stderr = self.client.exec_command(cmd, timeout=timeout)
            if stdin_data is not None:
                stdin.write(stdin_data)
                stdin.flush()
                stdin.channel.shutdown_write()
            out = stdout.read().decode('utf-8', errors='replace')
            err = stderr.read().decode('utf-8', errors='replace')
            exit_code = stdout.channel.recv_exit_status()
        except socket.timeout as e:
            raise RemoteCommandError(cmd, -1, f"timed out after {timeout}s") from e
        return out, err, exit_code

    def exec_streaming(
        self,
        cmd: str,
        stdin_data: Optional[str] = None,
        on_output: Optional[Callable[[str], None]] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[str, int]:
        """
        Run a command with stdout and stderr combined, forwarding output as
        it arrives.

        Args:
            cmd: Command to execute
            stdin_data: Data written to the command's stdin before EOF
            on_output: Callback receiving each decoded chunk
            timeout: Deadline for the whole session in seconds

        Returns:
            (combined_output, exit_code)

        Raises:
            RemoteCommandError: If the deadline passes before the command exits
        """
        timeout = timeout or self.config.command_timeout
        deadline = time.monotonic() + timeout

        transport = self.client.get_transport()
        if transport is None or not transport.is_active():
            raise ConnectionError(f"Not connected to {self.config.host}")

        chan = transport.open_session(timeout=self.config.timeout)
        try:
            chan.set_combine_stderr(True)
            chan.exec_command(cmd)
            if stdin_data is not None:
                chan.sendall(stdin_data.encode())
            chan.shutdown_write()

            buf = []

            def _drain() -> bool:
                got = False
                while chan.recv_ready():
                    data = chan.recv(4096).decode('utf-8', errors='replace')
                    if not data:
                        break
                    got = True
                    buf.append(data)
                    if on_output:
                        on_output(data)
                return got

            while not chan.exit_status_ready():
                if not _drain():
                    if time.monotonic() > deadline:
                        raise RemoteCommandError(cmd, -1, f"timed out after {timeout}s")
                    time.sleep(0.01)

            _drain()
            return ''.join(buf), chan.recv_exit_status()
        finally:
            chan.close()

    def close(self) -> None:
        self.client.close()

    # --------------------
    # Context manager
    # --------------------
    def __enter__(self) -> RemoteClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
