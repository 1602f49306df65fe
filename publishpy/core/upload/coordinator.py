"""
Upload coordinator.

Orchestrates initiate -> upload parts -> finish -> submit using injected
services.
"""
import asyncio
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

from .models import (
    CompletedPart,
    CompletedUpload,
    PackageMeta,
    PublishResult,
    PublishState,
    UploadSession,
    UserMedia
)
from .progress import ProgressMonitor
from .protocols import ApiClientProtocol, ChecksumStrategy, PartReaderProtocol, ProgressRenderer
from .services import ChunkUploader, PackageSubmitter, PartReader, SessionFinalizer, SessionInitiator
from ..api.config import PublishConfig
from ..logging import get_logger
from ..utils import bytes_to_size

logger = get_logger('publishpy.upload.coordinator')

StateCallback = Callable[[PublishState, Optional[UploadSession]], None]


class PublishOperation:
    """
    State of one publish (or media upload) operation.

    Owns its upload session; nothing here is shared with other operations
    running on the same coordinator.
    """

    def __init__(self, state_callback: Optional[StateCallback] = None):
        self.state = PublishState.PENDING
        self.session: Optional[UploadSession] = None
        self._state_callback = state_callback

    def set_state(self, state: PublishState) -> None:
        if self.state == state:
            return
        logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state
        if self._state_callback:
            self._state_callback(state, self.session)


class UploadCoordinator:
    """
    Coordinates publish operations.

    State machine (per operation):
        PENDING -> INITIATED -> UPLOADING -> ALL_PARTS_UPLOADED
                -> FINALIZED -> SUBMITTED
    with FAILED reachable from every non-terminal state. There is no
    resume: after a failure the next call starts a brand-new session.

    Every call runs its own PublishOperation, so concurrent calls never see
    each other's session. All part uploads run as concurrent tasks sharing
    the API client's session. The first failed part aborts the operation;
    parts still in flight are left to finish on their own and their results
    are ignored.
    """

    def __init__(
        self,
        api_client: ApiClientProtocol,
        config: Optional[PublishConfig] = None,
        renderer: Optional[ProgressRenderer] = None,
        state_callback: Optional[StateCallback] = None,
        reader: Optional[PartReaderProtocol] = None,
        checksum: Optional[ChecksumStrategy] = None,
        initiator: Optional[SessionInitiator] = None,
        finalizer: Optional[SessionFinalizer] = None,
        submitter: Optional[PackageSubmitter] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            api_client: Registry API client
            config: Publish configuration
            renderer: Optional progress renderer
            state_callback: Optional callback invoked with (state, session)
                on every state change
            reader: Optional part reader
            checksum: Optional checksum strategy
            initiator: Optional session initiator
            finalizer: Optional session finalizer
            submitter: Optional package submitter
        """
        self._api = api_client
        self._config = config or PublishConfig.default()
        self._renderer = renderer
        self._state_callback = state_callback
        self._reader = reader or PartReader(self._config.block_size)
        self._checksum = checksum

        self._initiator = initiator or SessionInitiator(api_client)
        self._finalizer = finalizer or SessionFinalizer(api_client)
        self._submitter = submitter or PackageSubmitter(api_client)

        self._last: Optional[PublishOperation] = None

    @property
    def state(self) -> PublishState:
        """State of the most recently started operation."""
        return self._last.state if self._last else PublishState.PENDING

    @property
    def session(self) -> Optional[UploadSession]:
        """Upload session of the most recently started operation, once initiated."""
        return self._last.session if self._last else None

    def _begin(self) -> PublishOperation:
        operation = PublishOperation(self._state_callback)
        self._last = operation
        return operation

    async def upload_media(self, file_path: Union[str, Path]) -> UserMedia:
        """
        Upload a file and finalize it into a media record.

        Args:
            file_path: File to upload

        Returns:
            Finalized media record

        Raises:
            AuthError: If no credential is configured
            NotFoundError: If the file does not exist
            ProtocolError: On unexpected registry responses
            ChunkUploadError: If any part upload fails
        """
        operation = self._begin()
        try:
            return await self._upload_media(operation, file_path)
        except BaseException:
            operation.set_state(PublishState.FAILED)
            raise

    async def publish(self, file_path: Union[str, Path], package: PackageMeta) -> PublishResult:
        """
        Upload a file and publish it as a package.

        Args:
            file_path: Packaged artifact to publish
            package: Package metadata

        Returns:
            PublishResult for the live package

        Raises:
            AuthError: If no credential is configured
            NotFoundError: If the file does not exist
            ProtocolError: On unexpected registry responses
            ChunkUploadError: If any part upload fails
        """
        operation = self._begin()
        start = time.time()
        try:
            media = await self._upload_media(operation, file_path)
            response = await self._submitter.submit(package.to_upload_metadata(media.uuid))
            operation.set_state(PublishState.SUBMITTED)
        except BaseException:
            operation.set_state(PublishState.FAILED)
            raise

        logger.info(f"Published {package.full_name} in {time.time() - start:.2f}s")
        return PublishResult(
            package=package.full_name,
            media=media,
            parts=len(operation.session.parts),
            size=operation.session.size,
            state=operation.state,
            response=response
        )

    async def _upload_media(self, operation: PublishOperation, file_path: Union[str, Path]) -> UserMedia:
        path = Path(file_path)
        session = await self._initiator.initiate(path)
        operation.session = session
        operation.set_state(PublishState.INITIATED)

        logger.info(
            f"Uploading {session.filename} ({bytes_to_size(session.size)}) "
            f"in {len(session.parts)} chunks..."
        )
        operation.set_state(PublishState.UPLOADING)
        completed = await self._upload_parts(session, path)
        operation.set_state(PublishState.ALL_PARTS_UPLOADED)

        media = await self._finalizer.finalize(session, completed)
        operation.set_state(PublishState.FINALIZED)
        return media

    async def _upload_parts(self, session: UploadSession, path: Path) -> CompletedUpload:
        """
        Upload every part concurrently and wait for all of them.

        Returns only once every part has succeeded; the first failure is
        raised as soon as it happens.
        """
        uploader = ChunkUploader(self._api, path, reader=self._reader, checksum=self._checksum)
        upload_start = time.time()

        tasks: List[asyncio.Task] = []
        for part in session.parts:
            task = asyncio.create_task(uploader.upload(part), name=f"chunk-{part.part_number}")
            task.add_done_callback(self._observe_chunk)
            tasks.append(task)

        monitor = ProgressMonitor(tasks, interval=self._config.progress_interval)
        monitor_task = asyncio.create_task(self._watch_progress(monitor), name="upload-progress")

        try:
            results: List[CompletedPart] = await asyncio.gather(*tasks)
            await monitor_task
        finally:
            if not monitor_task.done():
                monitor_task.cancel()
                try:
                    await monitor_task
                except asyncio.CancelledError:
                    pass

        elapsed = time.time() - upload_start
        logger.info(
            f"All chunks uploaded successfully: {len(results)} chunks, "
            f"{bytes_to_size(session.size)} in {elapsed:.2f}s"
        )
        return CompletedUpload(parts=results)

    async def _watch_progress(self, monitor: ProgressMonitor) -> None:
        """Run the progress monitor; its failures never reach the upload."""
        try:
            await monitor.run(self._renderer)
        except Exception as e:
            logger.error(f"Progress reporting failed: {e}")

    @staticmethod
    def _observe_chunk(task: asyncio.Task) -> None:
        """Retrieve the outcome of a chunk task so late failures are logged, not lost."""
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"{task.get_name()} failed: {error}")
