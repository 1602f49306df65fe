"""Upload services module."""
from .file_service import FileValidator, PartReader
from .session_service import SessionInitiator
from .chunk_service import ChunkUploader
from .finalize_service import SessionFinalizer
from .submit_service import PackageSubmitter

__all__ = [
    'FileValidator',
    'PartReader',
    'SessionInitiator',
    'ChunkUploader',
    'SessionFinalizer',
    'PackageSubmitter',
]
