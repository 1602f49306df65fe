"""
publishpy - Async Python publisher for package registries.

Usage:
    >>> from publishpy import PublishClient, PackageMeta
    >>> 
    >>> package = PackageMeta(namespace="Author", name="MyMod")
    >>> async with PublishClient(token="...") as client:
    ...     result = await client.publish("Author-MyMod-1.0.0.zip", package)
"""
import logging
from .client import PublishClient

# Configuration
from .core.api import (
    PublishConfig,
    SSLConfig,
    TimeoutConfig,
    AuthConfig,
    AsyncAPIClient
)

# Credentials
from .core.auth import CredentialProvider, StaticCredentialProvider, EnvCredentialProvider

# Upload pipeline
from .core.upload import (
    UploadCoordinator,
    ProgressMonitor,
    PackageMeta,
    PublishResult,
    PublishState,
    UserMedia,
    ProgressEvent,
    NullProgressRenderer,
    CallbackProgressRenderer,
    TextProgressRenderer,
    RichProgressRenderer
)

# Errors
from .core.exceptions import (
    PublishError,
    AuthError,
    NotFoundError,
    ProtocolError,
    ChunkUploadError
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for publishpy modules.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'publishpy',
        'publishpy.api',
        'publishpy.client',
        'publishpy.upload',
        'publishpy.upload.coordinator',
        'publishpy.upload.session',
        'publishpy.upload.chunk',
        'publishpy.upload.file',
        'publishpy.upload.progress',
        'publishpy.upload.finalize',
        'publishpy.upload.submit',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'PublishClient',
    'PublishConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AuthConfig',
    'AsyncAPIClient',
    'CredentialProvider',
    'StaticCredentialProvider',
    'EnvCredentialProvider',
    'UploadCoordinator',
    'ProgressMonitor',
    'PackageMeta',
    'PublishResult',
    'PublishState',
    'UserMedia',
    'ProgressEvent',
    'NullProgressRenderer',
    'CallbackProgressRenderer',
    'TextProgressRenderer',
    'RichProgressRenderer',
    'PublishError',
    'AuthError',
    'NotFoundError',
    'ProtocolError',
    'ChunkUploadError',
    'setup_logging',
]
