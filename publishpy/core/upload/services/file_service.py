"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Tuple, Union, AsyncIterator
import aiofiles

from ...exceptions import NotFoundError
from ...logging import get_logger


class FileValidator:
    """
    Validates files before upload.

    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (absolute Path, file size in bytes)

        Raises:
            NotFoundError: If file doesn't exist or is not a regular file
        """
        path = Path(file_path).expanduser().absolute()

        if not path.exists():
            raise NotFoundError(f"File selected for publish was not found: {path}", path=str(path))

        if not path.is_file():
            raise NotFoundError(f"Path is not a file: {path}", path=str(path))

        return path, path.stat().st_size


class PartReader:
    """
    Asynchronous reader for one byte range of a file.

    Every call opens its own read-only handle, so concurrent readers of
    disjoint ranges never share a file position. Uses aiofiles for
    non-blocking I/O.
    """

    DEFAULT_BLOCK_SIZE = 64 * 1024

    def __init__(self, block_size: int = DEFAULT_BLOCK_SIZE):
        """
        Initialize part reader.

        Args:
            block_size: Maximum size of each yielded block
        """
        if block_size <= 0:
            raise ValueError("Block size must be positive")
        self.block_size = block_size
        self._logger = get_logger('publishpy.upload.file')

    async def iter_range(
        self,
        file_path: Path,
        offset: int,
        length: int
    ) -> AsyncIterator[bytes]:
        """
        Yield exactly `length` bytes starting at `offset`.

        Args:
            file_path: Path to the file
            offset: Start position in bytes
            length: Number of bytes to read

        Raises:
            EOFError: If the file ends before `length` bytes were read
        """
        remaining = length
        async with aiofiles.open(file_path, 'rb') as f:
            await f.seek(offset)
            while remaining > 0:
                block = await f.read(min(self.block_size, remaining))
                if not block:
                    raise EOFError(
                        f"Unexpected end of file at {offset + length - remaining} "
                        f"(range {offset}-{offset + length})"
                    )
                remaining -= len(block)
                yield block

        self._logger.debug(f"Read range {offset}-{offset + length} ({length} bytes)")
