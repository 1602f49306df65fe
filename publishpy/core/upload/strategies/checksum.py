"""
Checksum strategies for part uploads.

The digest must cover exactly the bytes of one part, fed block by block.
"""
import base64
from abc import ABC, abstractmethod
from typing import Any
from Crypto.Hash import MD5


class BaseChecksumStrategy(ABC):
    """Abstract base class for checksum strategies."""
    
    header_name: str = ''
    
    @abstractmethod
    def new(self) -> Any:
        """Create a new incremental hasher."""
        pass
    
    def encode(self, digest: bytes) -> str:
        """Encode digest for the integrity header (base64 by default)."""
        return base64.b64encode(digest).decode('ascii')


class MD5ChecksumStrategy(BaseChecksumStrategy):
    """
    Content-MD5 checksum (RFC 1864).
    
    The header value is the base64 of the raw 16-byte MD5 digest.
    """
    
    header_name = 'Content-MD5'
    
    def new(self) -> Any:
        return MD5.new()
