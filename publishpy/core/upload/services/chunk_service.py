"""
Chunk upload service.

Handles uploading individual parts to their pre-signed upload targets.
"""
from pathlib import Path
from typing import AsyncIterator, Optional
import time

from ..models import Part, CompletedPart
from ..protocols import ApiClientProtocol, ChecksumStrategy, PartReaderProtocol
from ..strategies import MD5ChecksumStrategy
from .file_service import PartReader
from ...exceptions import ChunkUploadError
from ...logging import get_logger


class ChunkUploader:
    """
    Uploads one part of a file to its pre-signed URL.

    Shares the API client's HTTP session with every other part upload of
    the same session (critical for performance).

    Responsibilities:
    - Compute a streaming checksum over exactly the part's byte range
    - Stream the range to the upload target
    - Return the integrity tag issued by the target
    """

    TAG_HEADER = 'ETag'

    def __init__(
        self,
        api_client: ApiClientProtocol,
        file_path: Path,
        reader: Optional[PartReaderProtocol] = None,
        checksum: Optional[ChecksumStrategy] = None
    ):
        """
        Initialize chunk uploader.

        Args:
            api_client: Registry API client (provides the shared session)
            file_path: Source file, opened independently for every part
            reader: Optional part reader
            checksum: Optional checksum strategy (Content-MD5 by default)
        """
        self._api = api_client
        self._file_path = Path(file_path)
        self._reader = reader or PartReader()
        self._checksum = checksum or MD5ChecksumStrategy()
        self._logger = get_logger('publishpy.upload.chunk')

    @property
    def file_path(self) -> Path:
        """Returns the source file path."""
        return self._file_path

    async def compute_checksum(self, part: Part) -> str:
        """
        Compute the encoded checksum of one part.

        Args:
            part: Part to hash

        Returns:
            Header-ready checksum value

        Raises:
            ChunkUploadError: If the file is shorter than the part claims
        """
        hasher = self._checksum.new()
        try:
            async for block in self._reader.iter_range(self._file_path, part.offset, part.length):
                hasher.update(block)
        except EOFError as e:
            raise self._read_error(part, e) from e
        return self._checksum.encode(hasher.digest())

    async def upload(self, part: Part) -> CompletedPart:
        """
        Upload a single part.

        Args:
            part: Part descriptor from the upload session

        Returns:
            CompletedPart carrying the target's integrity tag

        Raises:
            ChunkUploadError: If the target rejects the part or returns no tag
            aiohttp.ClientError: If a network error occurs
        """
        chunk_size_kb = part.length / 1024
        upload_start = time.time()
        self._logger.debug(
            f"Uploading chunk {part.part_number} at offset {part.offset} ({chunk_size_kb:.1f} KB)"
        )

        checksum = await self.compute_checksum(part)
        headers = {
            self._checksum.header_name: checksum,
            'Content-Length': str(part.length),
        }
        body = PartStream(self._reader, self._file_path, part)

        try:
            response = await self._api.put(part.url, data=body.blocks(), headers=headers)
        except Exception as e:
            upload_time = time.time() - upload_start
            self._logger.error(f"Chunk {part.part_number} upload failed after {upload_time:.2f}s: {e}")
            # aiohttp wraps errors raised by the body iterator
            if body.error is not None:
                raise self._read_error(part, body.error) from body.error
            raise

        if body.error is not None:
            raise self._read_error(part, body.error) from body.error

        if not response.ok:
            self._logger.error(f"Failed to upload file chunk {part.part_number}: HTTP {response.status}")
            raise ChunkUploadError(part.part_number, status=response.status, body=response.body)

        tag = response.get_header(self.TAG_HEADER)
        if not tag:
            raise ChunkUploadError(
                part.part_number,
                status=response.status,
                body=response.body,
                message=f"Upload target returned no {self.TAG_HEADER} for chunk {part.part_number}"
            )

        upload_time = time.time() - upload_start
        speed_kbps = (chunk_size_kb / upload_time) if upload_time > 0 else 0
        self._logger.debug(
            f"Chunk {part.part_number} uploaded successfully in {upload_time:.2f}s ({speed_kbps:.1f} KB/s)"
        )
        return CompletedPart(part_number=part.part_number, etag=tag)

    @staticmethod
    def _read_error(part: Part, error: EOFError) -> ChunkUploadError:
        return ChunkUploadError(
            part.part_number,
            message=f"Failed to read file chunk {part.part_number}: {error}"
        )


class PartStream:
    """
    Request body for one part.

    Remembers a short read so the uploader can report it even when the HTTP
    client replaces the exception with its own.
    """

    def __init__(self, reader: PartReaderProtocol, file_path: Path, part: Part):
        self._reader = reader
        self._file_path = file_path
        self._part = part
        self.error: Optional[EOFError] = None

    async def blocks(self) -> AsyncIterator[bytes]:
        try:
            async for block in self._reader.iter_range(self._file_path, self._part.offset, self._part.length):
                yield block
        except EOFError as e:
            self.error = e
            raise
