"""Registry API module."""
from .config import PublishConfig, SSLConfig, TimeoutConfig, AuthConfig
from .async_client import AsyncAPIClient
from .request import RequestBuilder, ApiResponse, ResponseHandler

__all__ = [
    # Client
    'AsyncAPIClient',
    
    # Configuration
    'PublishConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AuthConfig',
    
    # Requests
    'RequestBuilder',
    'ApiResponse',
    'ResponseHandler',
]
