"""
Connection factory implementation
"""
from typing import Dict, Any

from ...core.interfaces import ConnectionFactory
from ...core.client import RemoteClient
from ...core.constants import DEFAULT_COMMAND_TIMEOUT, DEFAULT_CONNECT_TIMEOUT, DEFAULT_SSH_PORT
from ...core.exceptions import ConnectionError


class RemoteConnectionFactory(ConnectionFactory):
    """RemoteClient connection factory"""
    
    def create(self, params: Dict[str, Any]) -> RemoteClient:
        """
        Create and connect SSH client.
        
        Args:
            params: Connection parameters dictionary
        
        Returns:
            Connected RemoteClient instance
        
        Raises:
            ConnectionError: If connection fails; the original exception is
                kept as __cause__ for classification
        """
        auth_method = "key" if params.get("key") else "password"
        
        client = RemoteClient(
            host=params["host"],
            user=params["user"],
            port=params.get("port", DEFAULT_SSH_PORT),
            auth_method=auth_method,
            password=params.get("password"),
            key_path=params.get("key"),
            timeout=params.get("timeout", DEFAULT_CONNECT_TIMEOUT),
            command_timeout=params.get("command_timeout", DEFAULT_COMMAND_TIMEOUT),
        )
        
        try:
            client.connect()
            return client
        except ConnectionError:
            client.close()
            raise
        except Exception as e:
            client.close()
            raise ConnectionError(f"Failed to connect: {e}") from e
