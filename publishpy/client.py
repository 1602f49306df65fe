"""
PublishClient - High-level client for publishing packages to a registry.

Example:
    >>> package = PackageMeta(namespace="Author", name="MyMod", communities=["riskofrain2"])
    >>> async with PublishClient(token="...") as client:
    ...     result = await client.publish("build/Author-MyMod-1.0.0.zip", package)
    ...     print(result.media_uuid)
"""
import asyncio
from pathlib import Path
from typing import Optional, Union

from .core.api import AsyncAPIClient, PublishConfig, SSLConfig, TimeoutConfig, AuthConfig
from .core.auth import CredentialProvider, EnvCredentialProvider, StaticCredentialProvider
from .core.logging import get_logger
from .core.upload import (
    UploadCoordinator,
    StateCallback,
    PackageMeta,
    PublishResult,
    UserMedia,
    ProgressRenderer
)


class PublishClient:
    """
    High-level async client for the registry's publish protocol.

    Owns one API client (and its HTTP session) for the lifetime of the
    context. Each publish() call is an independent operation with its own
    upload session.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        config: Optional[PublishConfig] = None,
        credentials: Optional[CredentialProvider] = None,
        renderer: Optional[ProgressRenderer] = None,
        state_callback: Optional[StateCallback] = None
    ):
        """
        Initialize publish client.

        Args:
            token: Auth token (takes precedence over `credentials`)
            config: Optional publish configuration
            credentials: Optional credential provider (PUBLISHPY_TOKEN by default)
            renderer: Optional progress renderer for chunk uploads
            state_callback: Optional callback invoked with (state, session) on state changes
        """
        self._config = config or PublishConfig.default()
        if token is not None:
            self._credentials: CredentialProvider = StaticCredentialProvider(token)
        else:
            self._credentials = credentials or EnvCredentialProvider()
        self._renderer = renderer
        self._state_callback = state_callback
        self._api: Optional[AsyncAPIClient] = None
        self._coordinator: Optional[UploadCoordinator] = None
        self._logger = get_logger('publishpy.client')

    @staticmethod
    def create_config(
        repository: Optional[str] = None,
        auth_type: str = 'Bearer',
        timeout: Optional[float] = None,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None
    ) -> PublishConfig:
        """
        Create publish configuration with common options.

        Args:
            repository: Registry base URL
            auth_type: Authorization scheme
            timeout: Total request timeout in seconds (None for no limit)
            verify_ssl: Whether to verify SSL certificates
            user_agent: Custom user agent string

        Returns:
            PublishConfig instance
        """
        kwargs = {}
        if repository:
            kwargs['repository'] = repository
        return PublishConfig(
            timeout=TimeoutConfig(total=timeout),
            ssl=SSLConfig(verify=verify_ssl, check_hostname=verify_ssl),
            auth=AuthConfig(auth_type=auth_type),
            user_agent=user_agent or 'publishpy/1.0.0',
            **kwargs
        )

    @property
    def config(self) -> PublishConfig:
        return self._config

    @property
    def coordinator(self) -> Optional[UploadCoordinator]:
        """Coordinator of the open client (None before connect)."""
        return self._coordinator

    async def __aenter__(self) -> 'PublishClient':
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._api is None:
            self._api = AsyncAPIClient(self._config, self._credentials)
            await self._api.__aenter__()
            self._coordinator = UploadCoordinator(
                self._api,
                config=self._config,
                renderer=self._renderer,
                state_callback=self._state_callback
            )

    async def close(self):
        """Close the client and release resources."""
        if self._api:
            await self._api.close()
            self._api = None
            self._coordinator = None

    async def upload_media(self, file_path: Union[str, Path]) -> UserMedia:
        """
        Upload a file without publishing it.

        Returns:
            Finalized media record
        """
        await self.connect()
        return await self._coordinator.upload_media(file_path)

    async def publish(self, file_path: Union[str, Path], package: PackageMeta) -> PublishResult:
        """
        Upload a file and publish it as a package.

        Args:
            file_path: Packaged artifact
            package: Package metadata

        Returns:
            PublishResult for the live package
        """
        await self.connect()
        self._logger.info(f"Publishing {file_path}")
        return await self._coordinator.publish(file_path, package)

    def publish_sync(self, file_path: Union[str, Path], package: PackageMeta) -> PublishResult:
        """
        Blocking variant of publish().

        Drives the whole operation to completion on the calling thread and
        closes the client afterwards. Must not be called from a running
        event loop.
        """
        async def run():
            async with self:
                return await self.publish(file_path, package)

        return asyncio.run(run())
