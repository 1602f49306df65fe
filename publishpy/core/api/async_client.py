"""
Async registry API client.

One aiohttp session is shared by every request of a publish operation,
including the concurrent part uploads.
"""
import asyncio
import logging
import time
from typing import Dict, Optional, Any, AsyncIterator, Union
import aiohttp

from .config import PublishConfig
from .request import RequestBuilder, ApiResponse
from ..auth import CredentialProvider, EnvCredentialProvider
from ..exceptions import ProtocolError
from ..logging import get_logger


class AsyncAPIClient:
    """
    Asynchronous registry API client.

    Features:
    - Full async/await support
    - Configurable SSL and timeouts
    - Connection pooling
    - Authorization header on registry calls only (never on pre-signed URLs)

    Example:
        >>> config = PublishConfig.default()
        >>> async with AsyncAPIClient(config, credentials) as client:
        ...     response = await client.post('api/experimental/...', {...})
    """

    def __init__(
        self,
        config: Optional[PublishConfig] = None,
        credentials: Optional[CredentialProvider] = None
    ):
        """
        Initialize async API client.

        Args:
            config: Publish configuration (uses defaults if not provided)
            credentials: Token provider (reads PUBLISHPY_TOKEN if not provided)
        """
        self._config = config or PublishConfig.default()
        self._credentials = credentials or EnvCredentialProvider()
        self._builder = RequestBuilder(self._config, self._credentials)
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._closed = False

        self._logger = get_logger('publishpy.api')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> PublishConfig:
        """Get current configuration."""
        return self._config

    @property
    def builder(self) -> RequestBuilder:
        """Get the request builder."""
        return self._builder

    async def __aenter__(self) -> 'AsyncAPIClient':
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
            self._closed = False
        return self._session

    async def close(self):
        """Close client and release resources."""
        self._closed = True

        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

        if self._connector and not self._connector.closed:
            await self._connector.close()
            self._connector = None

    def require_credentials(self) -> None:
        """
        Fail fast when no token is configured.

        Raises:
            AuthError: If the credential provider returns nothing
        """
        self._builder.build_auth_header()

    async def post(self, endpoint: str, payload: Dict[str, Any]) -> ApiResponse:
        """
        POST a JSON payload to a registry endpoint.

        Args:
            endpoint: Path relative to the repository URL
            payload: JSON-serializable request body

        Returns:
            Buffered response

        Raises:
            AuthError: If no credential is configured
            ProtocolError: If the request fails at the transport level
        """
        headers = self._builder.build_headers()
        url = self._builder.build_url(endpoint)
        data = self._builder.build_data(payload)
        session = await self._ensure_session()

        start = time.time()
        self._logger.debug(f"POST {url}")
        try:
            async with session.post(url, data=data, headers=headers) as resp:
                body = await resp.text()
                response = ApiResponse(
                    status=resp.status,
                    body=body,
                    headers=dict(resp.headers)
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"POST {url} failed: {e}")
            raise ProtocolError(f"Request to {url} failed: {e}") from e

        elapsed = time.time() - start
        self._logger.debug(f"POST {url} -> {response.status} in {elapsed:.2f}s")
        return response

    async def put(
        self,
        url: str,
        data: Union[bytes, AsyncIterator[bytes]],
        headers: Optional[Dict[str, str]] = None
    ) -> ApiResponse:
        """
        PUT raw bytes to an absolute (pre-signed) URL.

        Transport errors propagate unchanged.

        Args:
            url: Upload target URL
            data: Bytes or async iterator of byte blocks
            headers: Request headers

        Returns:
            Buffered response
        """
        session = await self._ensure_session()
        async with session.put(url, data=data, headers=headers or {}) as resp:
            body = await resp.text()
            return ApiResponse(
                status=resp.status,
                body=body,
                headers=dict(resp.headers)
            )
