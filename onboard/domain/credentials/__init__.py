"""
Credential provisioning domain module
"""
from .keys import KeyPair, ensure_key_pair, generate_ssh_key_pair, load_key_pair, public_key_path
from .probe import ProbeFailure, classify, probe, recovery_text
from .install import install_public_key, manual_install_steps
from .provisioner import CredentialProvisioner

__all__ = [
    "KeyPair",
    "ensure_key_pair",
    "generate_ssh_key_pair",
    "load_key_pair",
    "public_key_path",
    "ProbeFailure",
    "classify",
    "probe",
    "recovery_text",
    "install_public_key",
    "manual_install_steps",
    "CredentialProvisioner",
]
