"""
Unified exception definitions
"""


class OnboardError(Exception):
    """Base exception class"""
    pass


class ConfigError(OnboardError):
    """Configuration error"""
    pass


class PreconditionError(OnboardError):
    """A required input is missing or empty"""
    pass


class ConnectionError(OnboardError):
    """Connection error"""
    pass


class ProbeError(ConnectionError):
    """
    Connectivity probe failed.

    Carries the classified failure so the caller can print the matching
    recovery instructions.
    """

    def __init__(self, failure, host: str, detail: str = ""):
        self.failure = failure
        self.host = host
        self.detail = detail
        super().__init__(f"{failure.value} while connecting to {host}: {detail}")


class RemoteCommandError(OnboardError):
    """Remote command returned a non-zero exit status"""

    def __init__(self, cmd: str, code: int, stderr: str = ""):
        self.cmd = cmd
        self.code = code
        self.stderr = stderr
        super().__init__(f"Remote command failed (exit {code}): {cmd}\n{stderr}".rstrip())


class ProvisionError(OnboardError):
    """Credential provisioning error"""
    pass


class KeyInstallError(ProvisionError):
    """Public key could not be installed remotely"""
    pass


class DispatchError(OnboardError):
    """Remote onboarding session failed"""

    def __init__(self, message: str, exit_code: int = 1):
        self.exit_code = exit_code
        super().__init__(message)
