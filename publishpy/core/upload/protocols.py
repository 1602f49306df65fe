"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from typing import Protocol, Dict, Any, Tuple, Optional, AsyncIterator, Union
from pathlib import Path

from ..api.request import ApiResponse
from ..auth import CredentialProvider
from .models import ProgressEvent


class ChecksumStrategy(Protocol):
    """
    Protocol for incremental content checksums.

    A fresh hasher is created per part; blocks are fed in order, then the
    digest is taken once.
    """

    header_name: str

    def new(self) -> 'HasherProtocol':
        """Create a new incremental hasher."""
        ...

    def encode(self, digest: bytes) -> str:
        """Encode a digest as an HTTP header value."""
        ...


class HasherProtocol(Protocol):
    """Incremental hash object."""

    def update(self, data: bytes) -> Any:
        ...

    def digest(self) -> bytes:
        ...


class PartReaderProtocol(Protocol):
    """Protocol for reading a byte range of a file in blocks."""

    def iter_range(
        self,
        file_path: Path,
        offset: int,
        length: int
    ) -> AsyncIterator[bytes]:
        """
        Yield exactly `length` bytes starting at `offset`, in blocks.

        Args:
            file_path: Path to the file
            offset: Start position in bytes
            length: Number of bytes to read
        """
        ...


class FileValidatorProtocol(Protocol):
    """Protocol for file validation operations."""

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated path, file size)

        Raises:
            NotFoundError: If file doesn't exist or is not a regular file
        """
        ...


class ApiClientProtocol(Protocol):
    """Protocol for the registry API client."""

    def require_credentials(self) -> None:
        ...

    async def post(self, endpoint: str, payload: Dict[str, Any]) -> ApiResponse:
        ...

    async def put(
        self,
        url: str,
        data: Union[bytes, AsyncIterator[bytes]],
        headers: Optional[Dict[str, str]] = None
    ) -> ApiResponse:
        ...


class ProgressRenderer(Protocol):
    """Consumes progress events produced by the progress monitor."""

    def start(self, total: int) -> None:
        ...

    def update(self, event: ProgressEvent) -> None:
        ...

    def finish(self, event: ProgressEvent) -> None:
        ...


__all__ = [
    'ChecksumStrategy',
    'HasherProtocol',
    'PartReaderProtocol',
    'FileValidatorProtocol',
    'ApiClientProtocol',
    'ProgressRenderer',
    'CredentialProvider',
]
