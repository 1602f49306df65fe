"""Request builder for registry API requests."""
import json
from typing import Any, Dict

from ..config import PublishConfig
from ...auth import CredentialProvider
from ...exceptions import AuthError


class RequestBuilder:
    """Builds authenticated registry requests."""
    
    def __init__(self, config: PublishConfig, credentials: CredentialProvider):
        """Initializes request builder."""
        self.config = config
        self.credentials = credentials
    
    def build_url(self, endpoint: str) -> str:
        """Builds request URL."""
        return self.config.endpoint(endpoint)
    
    def build_auth_header(self) -> str:
        """
        Builds the Authorization header value.
        
        Raises:
            AuthError: If no token is configured
        """
        token = self.credentials.get_token()
        if not token:
            raise AuthError("An auth token is required for this command")
        return self.config.auth.header_value(token)
    
    def build_headers(self) -> Dict[str, str]:
        """Builds request headers."""
        headers = {
            'Content-Type': 'application/json',
            **self.config.extra_headers,
        }
        headers['Authorization'] = self.build_auth_header()
        return headers
    
    def build_data(self, payload: Dict[str, Any]) -> str:
        """Builds request data."""
        return json.dumps(payload)
