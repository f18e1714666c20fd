"""
Connectivity probe and failure classification
"""
import errno
import socket
from enum import Enum
from typing import Any, Dict

import paramiko
from paramiko.ssh_exception import NoValidConnectionsError

from ...core.client import RemoteClient
from ...core.exceptions import ConnectionError, ProbeError
from ...core.interfaces import ConnectionFactory
from ...core.logging import get_logger

logger = get_logger(__name__)

_CONNECTION_ERRNOS = {
    errno.ECONNREFUSED,
    errno.ETIMEDOUT,
    errno.EHOSTUNREACH,
    errno.ENETUNREACH,
    errno.ECONNRESET,
}


class ProbeFailure(str, Enum):
    NAME_RESOLUTION = "name resolution failure"
    CONNECTION = "connection refused or timed out"
    AUTHENTICATION = "authentication failure"
    UNKNOWN = "unknown failure"


def classify(exc: BaseException) -> ProbeFailure:
    """Map a connect-time exception to exactly one failure category"""
    if isinstance(exc, socket.gaierror):
        return ProbeFailure.NAME_RESOLUTION
    if isinstance(exc, paramiko.AuthenticationException):
        return ProbeFailure.AUTHENTICATION
    if isinstance(exc, (NoValidConnectionsError, ConnectionRefusedError, socket.timeout)):
        return ProbeFailure.CONNECTION
    if isinstance(exc, paramiko.SSHException) and "banner" in str(exc).lower():
        return ProbeFailure.CONNECTION
    if isinstance(exc, OSError) and exc.errno in _CONNECTION_ERRNOS:
        return ProbeFailure.CONNECTION
    return ProbeFailure.UNKNOWN


def recovery_text(failure: ProbeFailure, host: str, user: str) -> str:
    """Diagnostic and manual-recovery instructions for a failure"""
    if failure is ProbeFailure.NAME_RESOLUTION:
        return (
            f"Could not resolve {host}.\n"
            "  - Connect to the institutional VPN and try again.\n"
            f"  - Check the name with: nslookup {host}"
        )
    if failure is ProbeFailure.CONNECTION:
        return (
            f"{host} refused the connection or did not answer in time.\n"
            "  - Make sure you are on the VPN or the internal network.\n"
            f"  - Test manually with: ssh -v {user}@{host}"
        )
    if failure is ProbeFailure.AUTHENTICATION:
        return (
            f"{host} rejected the credentials for {user}.\n"
            "  - Re-check the username and password (they are case-sensitive).\n"
            "  - If the account is new, ask the cluster administrators to enable it.\n"
            f"  - Test manually with: ssh {user}@{host}"
        )
    return (
        f"Unexpected error while connecting to {host}.\n"
        f"  - Re-run with --log-level DEBUG and test manually with: ssh -v {user}@{host}"
    )


def probe(factory: ConnectionFactory, params: Dict[str, Any]) -> RemoteClient:
    """
    Open a connection or fail with a classified ProbeError.

    Args:
        factory: Connection factory
        params: Connection parameters (host, user, port, password or key, timeout)

    Returns:
        Connected RemoteClient; the caller closes it

    Raises:
        ProbeError: On any connection failure
    """
    try:
        return factory.create(params)
    except ConnectionError as e:
        cause = e.__cause__ or e
        failure = classify(cause)
        logger.debug(f"Probe of {params['host']} failed: {cause!r}")
        raise ProbeError(failure, params["host"], str(cause)) from cause
