"""
Credential providers.

Token storage lives outside publishpy; these providers only expose a
single authorization value to the registry client.
"""
import os
from typing import Optional, Protocol, runtime_checkable


DEFAULT_TOKEN_ENV = 'PUBLISHPY_TOKEN'


@runtime_checkable
class CredentialProvider(Protocol):
    """Protocol for objects that supply the registry auth token."""
    
    def get_token(self) -> Optional[str]:
        """
        Returns the auth token, or None if no credential is configured.
        """
        ...


class StaticCredentialProvider:
    """Credential provider holding a token in memory."""
    
    def __init__(self, token: Optional[str] = None):
        self._token = token
    
    def get_token(self) -> Optional[str]:
        if self._token is None or not self._token.strip():
            return None
        return self._token.strip()


class EnvCredentialProvider:
    """Credential provider reading the token from an environment variable."""
    
    def __init__(self, variable: str = DEFAULT_TOKEN_ENV):
        self.variable = variable
    
    def get_token(self) -> Optional[str]:
        value = os.environ.get(self.variable, '').strip()
        return value or None
