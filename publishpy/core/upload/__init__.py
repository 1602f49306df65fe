"""
Upload module for registry package publishing.

Implements the registry's two-phase protocol: initiate an upload session,
upload every part concurrently, finish the session, submit the package.
"""
from .coordinator import UploadCoordinator, PublishOperation, StateCallback
from .progress import (
    ProgressMonitor,
    NullProgressRenderer,
    CallbackProgressRenderer,
    TextProgressRenderer,
    RichProgressRenderer
)
from .models import (
    Part,
    UserMedia,
    UploadSession,
    CompletedPart,
    CompletedUpload,
    PackageUploadMetadata,
    PackageMeta,
    ProgressEvent,
    PublishState,
    PublishResult
)
from .protocols import ApiClientProtocol, ChecksumStrategy, PartReaderProtocol, ProgressRenderer

__all__ = [
    # Main classes
    'UploadCoordinator',
    'PublishOperation',
    'StateCallback',
    'ProgressMonitor',
    
    # Renderers
    'NullProgressRenderer',
    'CallbackProgressRenderer',
    'TextProgressRenderer',
    'RichProgressRenderer',
    
    # Models
    'Part',
    'UserMedia',
    'UploadSession',
    'CompletedPart',
    'CompletedUpload',
    'PackageUploadMetadata',
    'PackageMeta',
    'ProgressEvent',
    'PublishState',
    'PublishResult',
    
    # Protocols
    'ApiClientProtocol',
    'ChecksumStrategy',
    'PartReaderProtocol',
    'ProgressRenderer',
]
