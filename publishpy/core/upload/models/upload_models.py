"""
Data models for upload module.

Each wire message has an explicit to_dict()/from_dict() pair mapping the
registry's JSON field names.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, List, Iterable, Set


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as sent by the registry."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


def _unique(values: Iterable[str]) -> List[str]:
    """De-duplicate values preserving their first-seen order."""
    seen: Set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


@dataclass(frozen=True)
class FileData:
    """Body of the initiate-upload request."""
    filename: str
    file_size_bytes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filename': self.filename,
            'file_size_bytes': self.file_size_bytes,
        }


@dataclass(frozen=True)
class Part:
    """
    A contiguous byte range of the source file.

    Attributes:
        part_number: 1-based number defining reassembly order
        url: Pre-signed upload target
        offset: Start position in bytes
        length: Number of bytes in the part
    """
    part_number: int
    url: str
    offset: int
    length: int

    @property
    def end(self) -> int:
        """Returns the position just past the last byte of the part."""
        return self.offset + self.length

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Part':
        return cls(
            part_number=int(data['part_number']),
            url=str(data['url']),
            offset=int(data['offset']),
            length=int(data['length'])
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'part_number': self.part_number,
            'url': self.url,
            'offset': self.offset,
            'length': self.length,
        }


@dataclass
class UserMedia:
    """
    Registry-side media record.

    Attributes:
        uuid: Opaque media identifier
        filename: Name of the uploaded file
        size: Total size in bytes
        status: Lifecycle status reported by the registry
        datetime_created: Creation timestamp
        expiry: Expiry timestamp, if the session can expire
    """
    uuid: str
    filename: str
    size: int
    status: str
    datetime_created: Optional[datetime] = None
    expiry: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserMedia':
        return cls(
            uuid=str(data['uuid']),
            filename=str(data['filename']),
            size=int(data['size']),
            status=str(data['status']),
            datetime_created=_parse_datetime(data.get('datetime_created')),
            expiry=_parse_datetime(data.get('expiry'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'uuid': self.uuid,
            'filename': self.filename,
            'size': self.size,
            'status': self.status,
            'datetime_created': self.datetime_created.isoformat() if self.datetime_created else None,
            'expiry': self.expiry.isoformat() if self.expiry else None,
        }


@dataclass
class UploadSession:
    """
    An in-progress multi-part upload.

    Parts are kept ordered by part number.
    """
    user_media: UserMedia
    parts: List[Part] = field(default_factory=list)

    def __post_init__(self):
        self.parts = sorted(self.parts, key=lambda p: p.part_number)

    @property
    def uuid(self) -> str:
        return self.user_media.uuid

    @property
    def filename(self) -> str:
        return self.user_media.filename

    @property
    def size(self) -> int:
        return self.user_media.size

    def part_numbers(self) -> Set[int]:
        """Returns the set of part numbers in this session."""
        return {part.part_number for part in self.parts}

    def validate(self, expected_size: Optional[int] = None) -> None:
        """
        Check that parts cover the whole file exactly once.

        Args:
            expected_size: Local file size; defaults to the session size

        Raises:
            ValueError: If parts overlap, leave gaps or miss the total size
        """
        size = self.size if expected_size is None else expected_size
        if expected_size is not None and self.size != expected_size:
            raise ValueError(
                f"Session size {self.size} does not match file size {expected_size}"
            )
        if len(self.part_numbers()) != len(self.parts):
            raise ValueError("Duplicate part numbers in upload session")

        position = 0
        for part in self.parts:
            if part.part_number < 1:
                raise ValueError(f"Invalid part number {part.part_number}")
            if part.length <= 0:
                raise ValueError(f"Part {part.part_number} has invalid length {part.length}")
            if part.offset != position:
                raise ValueError(
                    f"Part {part.part_number} starts at {part.offset}, expected {position}"
                )
            position = part.end

        if position != size:
            raise ValueError(f"Parts cover {position} bytes, expected {size}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadSession':
        return cls(
            user_media=UserMedia.from_dict(data['user_media']),
            parts=[Part.from_dict(p) for p in data['upload_urls']]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_media': self.user_media.to_dict(),
            'upload_urls': [p.to_dict() for p in self.parts],
        }


@dataclass(frozen=True)
class CompletedPart:
    """A part confirmed by its upload target."""
    part_number: int
    etag: str

    def to_dict(self) -> Dict[str, Any]:
        return {'ETag': self.etag, 'PartNumber': self.part_number}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompletedPart':
        return cls(part_number=int(data['PartNumber']), etag=str(data['ETag']))


@dataclass
class CompletedUpload:
    """
    Every completed part of a session.

    Input order does not matter; serialization is keyed by part number.
    """
    parts: List[CompletedPart] = field(default_factory=list)

    def ordered(self) -> List[CompletedPart]:
        return sorted(self.parts, key=lambda p: p.part_number)

    def part_numbers(self) -> Set[int]:
        return {part.part_number for part in self.parts}

    def to_dict(self) -> Dict[str, Any]:
        return {'parts': [p.to_dict() for p in self.ordered()]}


@dataclass
class PackageUploadMetadata:
    """Body of the submit request."""
    author_name: str
    upload_uuid: str
    categories: List[str] = field(default_factory=list)
    communities: List[str] = field(default_factory=list)
    has_nsfw_content: bool = False

    def __post_init__(self):
        self.categories = _unique(self.categories)
        self.communities = _unique(self.communities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'author_name': self.author_name,
            'categories': list(self.categories),
            'communities': list(self.communities),
            'has_nsfw_content': self.has_nsfw_content,
            'upload_uuid': self.upload_uuid,
        }


@dataclass
class PackageMeta:
    """
    Package metadata supplied by the caller.

    Attributes:
        namespace: Author/team namespace
        name: Package name
        version: Optional version number (display only)
        categories: Category tags
        communities: Target community tags
        has_nsfw_content: NSFW flag
    """
    namespace: str
    name: str
    version: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    communities: List[str] = field(default_factory=list)
    has_nsfw_content: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.namespace}-{self.name}"

    def to_upload_metadata(self, upload_uuid: str) -> PackageUploadMetadata:
        """Combine with a finalized media UUID into submit metadata."""
        return PackageUploadMetadata(
            author_name=self.namespace,
            upload_uuid=upload_uuid,
            categories=list(self.categories),
            communities=list(self.communities),
            has_nsfw_content=self.has_nsfw_content is True
        )


@dataclass(frozen=True)
class ProgressEvent:
    """
    A progress sample.

    Attributes:
        completed: Number of finished chunk operations
        total: Number of chunk operations
        tick: Sample counter, used to rotate a spinner
    """
    completed: int
    total: int
    tick: int = 0

    @property
    def percentage(self) -> float:
        """Returns progress as percentage."""
        if self.total == 0:
            return 100.0
        return (self.completed / self.total) * 100

    @property
    def is_complete(self) -> bool:
        return self.completed >= self.total


class PublishState(Enum):
    """Lifecycle of one publish operation."""
    PENDING = 'pending'
    INITIATED = 'initiated'
    UPLOADING = 'uploading'
    ALL_PARTS_UPLOADED = 'all_parts_uploaded'
    FINALIZED = 'finalized'
    SUBMITTED = 'submitted'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self in (PublishState.SUBMITTED, PublishState.FAILED)


@dataclass(frozen=True)
class PublishResult:
    """
    Result of a successful publish.

    Attributes:
        package: Full package name (namespace-name)
        media: Finalized media record
        parts: Number of uploaded parts
        size: Uploaded file size in bytes
        state: Final state
        response: Parsed submit response
    """
    package: str
    media: UserMedia
    parts: int
    size: int
    state: PublishState = PublishState.SUBMITTED
    response: Dict[str, Any] = field(default_factory=dict)

    @property
    def media_uuid(self) -> str:
        return self.media.uuid
