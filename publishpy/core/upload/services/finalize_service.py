"""
Upload finalization service.

Closes a multi-part session by presenting every part's integrity tag.
"""
from ..models import CompletedUpload, UploadSession, UserMedia
from ..protocols import ApiClientProtocol
from ...api.request import ResponseHandler
from ...exceptions import ProtocolError
from ...logging import get_logger


class SessionFinalizer:
    """
    Finalizes an upload session into a durable media record.
    
    Must only be called after every part upload has finished.
    """
    
    ENDPOINT = 'api/experimental/usermedia/{uuid}/finish-upload/'
    
    def __init__(self, api_client: ApiClientProtocol):
        self._api = api_client
        self._logger = get_logger('publishpy.upload.finalize')
    
    def check(self, session: UploadSession, completed: CompletedUpload) -> None:
        """
        Verify the completed parts match the session one-to-one.
        
        Raises:
            ProtocolError: If a tag is missing or the part sets differ
        """
        missing_tags = sorted(p.part_number for p in completed.parts if not p.etag)
        if missing_tags:
            raise ProtocolError(f"Missing integrity tag for parts {missing_tags}")
        
        if len(completed.parts) != len(completed.part_numbers()):
            raise ProtocolError("Duplicate part numbers in completed upload")
        
        expected = session.part_numbers()
        actual = completed.part_numbers()
        if expected != actual:
            missing = sorted(expected - actual)
            unexpected = sorted(actual - expected)
            raise ProtocolError(
                f"Completed parts do not match session {session.uuid}: "
                f"missing {missing}, unexpected {unexpected}"
            )
    
    async def finalize(self, session: UploadSession, completed: CompletedUpload) -> UserMedia:
        """
        Submit the completed part list.
        
        Args:
            session: The open upload session
            completed: Every completed part, in any order
            
        Returns:
            The finalized media record
            
        Raises:
            ProtocolError: On missing tags, a non-success status or an
                unparsable response
        """
        self.check(session, completed)
        
        endpoint = self.ENDPOINT.format(uuid=session.uuid)
        self._logger.info(f"Finishing upload {session.uuid} ({len(completed.parts)} parts)")
        response = await self._api.post(endpoint, completed.to_dict())
        
        if not response.ok:
            self._logger.error(f"Failed to finish usermedia upload: HTTP {response.status}")
            raise ProtocolError(
                "Unexpected response from the server while finishing usermedia upload",
                status=response.status,
                body=response.body
            )
        
        data = ResponseHandler.parse_object(response, "finishing usermedia upload")
        try:
            media = UserMedia.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ProtocolError(
                f"Invalid media record returned by the registry: {e}",
                status=response.status,
                body=response.body
            ) from e
        
        self._logger.info(f"Upload {media.uuid} finalized with status {media.status}")
        return media
