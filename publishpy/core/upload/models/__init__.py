"""Upload models."""
from .upload_models import (
    FileData,
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

__all__ = [
    'FileData',
    'Part',
    'UserMedia',
    'UploadSession',
    'CompletedPart',
    'CompletedUpload',
    'PackageUploadMetadata',
    'PackageMeta',
    'ProgressEvent',
    'PublishState',
    'PublishResult'
]
