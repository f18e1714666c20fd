"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, List

from ...core.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONFIG_PATH,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_DISPATCH_ALIAS,
    DEFAULT_DOMAIN,
    DEFAULT_HOST_ALIASES,
    DEFAULT_KEY_PATH,
    DEFAULT_LOG_DIR,
    DEFAULT_SESSION_TIMEOUT,
    DEFAULT_SSH_PORT,
    SHARED_ROOT,
    SSH_CONFIG_PATH,
)
from ...core.exceptions import ConfigError
from ...domain.config.models import HostEntry


@dataclass
class OnboardSettings:
    """Resolved settings for one run"""
    user: Optional[str] = None
    domain: str = DEFAULT_DOMAIN
    dispatch_alias: str = DEFAULT_DISPATCH_ALIAS
    aliases: List[str] = field(default_factory=lambda: list(DEFAULT_HOST_ALIASES))
    key_path: Path = Path(DEFAULT_KEY_PATH).expanduser()
    ssh_config_path: Path = Path(SSH_CONFIG_PATH).expanduser()
    port: int = DEFAULT_SSH_PORT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    session_timeout: float = DEFAULT_SESSION_TIMEOUT
    log_dir: Path = Path(DEFAULT_LOG_DIR).expanduser()
    shared_root: str = SHARED_ROOT

    def fqdn(self, alias: str) -> str:
        return f"{alias}.{self.domain}"

    @property
    def dispatch_host(self) -> str:
        return self.fqdn(self.dispatch_alias)

    def host_entries(self, user: str) -> List[HostEntry]:
        return [
            HostEntry(alias, self.fqdn(alias), user, str(self.key_path))
            for alias in self.aliases
        ]

    def connection_params(self, user: str) -> Dict[str, Any]:
        return {
            "host": self.dispatch_host,
            "user": user,
            "port": self.port,
            "timeout": self.connect_timeout,
            "command_timeout": self.command_timeout,
        }


class ConfigLoader:
    """Configuration loader with priority support"""
    
    def __init__(self):
        self._env_prefix = "ONBOARD_"
    
    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML configuration file"""
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        
        try:
            return tomllib.loads(path.read_text(encoding='utf-8'))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse TOML configuration {path}: {e}") from e
    
    def load_env(self, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        environ = os.environ if environ is None else environ
        config = {}
        
        env_mappings = {
            "ONBOARD_USER": "user",
            "ONBOARD_DOMAIN": "domain",
            "ONBOARD_DISPATCH_ALIAS": "dispatch_alias",
            "ONBOARD_ALIASES": "aliases",
            "ONBOARD_KEY_PATH": "key_path",
            "ONBOARD_SSH_CONFIG": "ssh_config_path",
            "ONBOARD_PORT": "port",
            "ONBOARD_CONNECT_TIMEOUT": "connect_timeout",
            "ONBOARD_COMMAND_TIMEOUT": "command_timeout",
            "ONBOARD_SESSION_TIMEOUT": "session_timeout",
            "ONBOARD_LOG_DIR": "log_dir",
            "ONBOARD_SHARED_ROOT": "shared_root",
        }
        
        for env_key, config_key in env_mappings.items():
            value = environ.get(env_key)
            if value:
                if config_key == "aliases":
                    config[config_key] = [a.strip() for a in value.split(",") if a.strip()]
                else:
                    config[config_key] = value
        
        return config
    
    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones; None values never override.
        """
        result: Dict[str, Any] = {}
        for config in configs:
            result.update({k: v for k, v in config.items() if v is not None})
        return result
    
    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
        environ: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: CLI > env > TOML
        
        Args:
            toml_path: Path to TOML configuration file; the default location
                is read only when it exists
            cli_overrides: CLI parameter overrides
            use_env: Whether to load from environment variables
            environ: Environment mapping (defaults to os.environ)
        
        Returns:
            Merged configuration dictionary
        """
        configs = []
        
        if toml_path:
            configs.append(self.load_toml(Path(toml_path).expanduser()))
        else:
            default_path = Path(DEFAULT_CONFIG_PATH).expanduser()
            if default_path.exists():
                configs.append(self.load_toml(default_path))
        
        if use_env:
            env_config = self.load_env(environ)
            if env_config:
                configs.append(env_config)
        
        if cli_overrides:
            configs.append(cli_overrides)
        
        return self.merge_configs(*configs)


def to_settings(cfg: Dict[str, Any]) -> OnboardSettings:
    """
    Build typed settings from a merged configuration dictionary.
    
    Raises:
        ConfigError: Unknown keys or values of the wrong type
    """
    settings = OnboardSettings()
    known = set(OnboardSettings.__dataclass_fields__)
    unknown = set(cfg) - known
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
    
    try:
        for key, value in cfg.items():
            if key in ("key_path", "ssh_config_path", "log_dir"):
                value = Path(str(value)).expanduser()
            elif key == "port":
                value = int(value)
            elif key.endswith("_timeout"):
                value = float(value)
                if value <= 0:
                    raise ValueError(f"{key} must be positive")
            elif key == "aliases":
                if isinstance(value, str):
                    value = [a.strip() for a in value.split(",") if a.strip()]
                value = [str(a) for a in value]
                if not value:
                    raise ValueError("aliases must not be empty")
            else:
                value = str(value)
            setattr(settings, key, value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    
    return settings
