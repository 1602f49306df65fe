"""
API configuration module.

Provides configuration for the registry API client.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from urllib.parse import urljoin
import ssl


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.

    Allows customization of SSL behavior for security requirements.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Optional[ssl.SSLContext]:
        """Create SSL context from configuration."""
        if not self.verify:
            return False  # Disable SSL verification

        context = ssl.create_default_context()

        if self.ca_file:
            context.load_verify_locations(self.ca_file)

        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )

        context.check_hostname = self.check_hostname

        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    No total timeout by default: a large part upload can legitimately take
    longer than any fixed bound.
    """
    total: Optional[float] = None
    connect: float = 30.0
    sock_read: float = 300.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class AuthConfig:
    """Authorization header scheme used for registry requests."""
    auth_type: str = 'Bearer'

    def header_value(self, token: str) -> str:
        """Build the Authorization header value for a token."""
        return f"{self.auth_type} {token}"


@dataclass
class PublishConfig:
    """
    Complete publish configuration.

    Centralizes all configuration options for the registry client.
    """
    # Registry base URL
    repository: str = 'https://thunderstore.io/'

    user_agent: str = 'publishpy/1.0.0'

    # Sub-configurations
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    # Additional headers for registry requests (not sent to upload targets)
    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Chunk reading
    block_size: int = 64 * 1024

    # Progress sampling interval in seconds
    progress_interval: float = 0.2

    # Logging
    log_level: int = 20  # logging.INFO

    # Connection pool settings
    limit_per_host: int = 10
    limit: int = 100

    def __post_init__(self):
        if not self.repository.endswith('/'):
            self.repository += '/'
        if self.block_size <= 0:
            raise ValueError("Block size must be positive")
        if self.progress_interval <= 0:
            raise ValueError("Progress interval must be positive")

    @classmethod
    def default(cls) -> 'PublishConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def insecure(cls, **kwargs) -> 'PublishConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )

    def endpoint(self, path: str) -> str:
        """Resolve an API path against the repository URL."""
        return urljoin(self.repository, path.lstrip('/'))

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        return {
            'headers': {'User-Agent': self.user_agent},
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
