"""
Custom exceptions for registry publish operations.

Every failure in the publish pipeline is unrecoverable for the current
operation; none of these are retried.
"""
from typing import Optional


class PublishError(Exception):
    """Base exception for all publish-related errors."""
    
    BODY_PREVIEW_LIMIT = 500
    
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            status: HTTP status code (if available)
            body: Response body returned by the server (if available)
        """
        self.message = message
        self.status = status
        self.body = body
        super().__init__(message)
    
    def __str__(self) -> str:
        text = self.message
        if self.status is not None:
            text += f" (status {self.status})"
        if self.body:
            preview = self.body.strip()
            if len(preview) > self.BODY_PREVIEW_LIMIT:
                preview = preview[:self.BODY_PREVIEW_LIMIT] + '...'
            text += f": {preview}"
        return text


class AuthError(PublishError):
    """Raised when no credential is configured."""
    pass


class NotFoundError(PublishError):
    """Raised when the file selected for publish does not exist."""
    
    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(message)


class ProtocolError(PublishError):
    """Raised on an unexpected status code or an unparsable response."""
    pass


class ChunkUploadError(PublishError):
    """Raised when a single part upload is rejected by its upload target."""
    
    def __init__(
        self,
        part_number: int,
        status: Optional[int] = None,
        body: Optional[str] = None,
        message: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            part_number: Number of the part that failed
            status: HTTP status code returned by the upload target
            body: Response body for diagnostics
            message: Optional custom message
        """
        self.part_number = part_number
        super().__init__(
            message or f"Failed to upload file chunk {part_number}",
            status=status,
            body=body
        )
