"""Upload strategies module."""
from .checksum import BaseChecksumStrategy, MD5ChecksumStrategy

__all__ = [
    'BaseChecksumStrategy',
    'MD5ChecksumStrategy',
]
