"""
Upload session service.

Asks the registry to begin a multi-part upload for a local file.
"""
from pathlib import Path
from typing import Optional, Union

from ..models import FileData, UploadSession
from ..protocols import ApiClientProtocol, FileValidatorProtocol
from .file_service import FileValidator
from ...api.request import ResponseHandler
from ...exceptions import ProtocolError
from ...logging import get_logger


class SessionInitiator:
    """
    Starts an upload session.
    
    Responsibilities:
    - Validate the source file
    - Declare filename and size to the registry
    - Parse and check the returned part list
    """
    
    ENDPOINT = 'api/experimental/usermedia/initiate-upload/'
    EXPECTED_STATUS = 201
    
    def __init__(
        self,
        api_client: ApiClientProtocol,
        validator: Optional[FileValidatorProtocol] = None
    ):
        """
        Initialize session initiator.
        
        Args:
            api_client: Registry API client
            validator: Optional file validator
        """
        self._api = api_client
        self._validator = validator or FileValidator()
        self._logger = get_logger('publishpy.upload.session')
    
    async def initiate(self, file_path: Union[str, Path]) -> UploadSession:
        """
        Begin an upload for a file.
        
        Args:
            file_path: Path to the file to upload
            
        Returns:
            UploadSession whose parts cover the whole file
            
        Raises:
            AuthError: If no credential is configured
            NotFoundError: If the file does not exist
            ProtocolError: If the registry does not answer 201 Created with
                a valid session
        """
        self._api.require_credentials()
        path, file_size = self._validator.validate(file_path)
        
        request = FileData(filename=path.name, file_size_bytes=file_size)
        self._logger.info(f"Initiating upload of {path.name} ({file_size} bytes)")
        
        response = await self._api.post(self.ENDPOINT, request.to_dict())
        if response.status != self.EXPECTED_STATUS:
            self._logger.error(f"Failed to start usermedia upload: HTTP {response.status}")
            raise ProtocolError(
                "Failed to start usermedia upload",
                status=response.status,
                body=response.body
            )
        
        data = ResponseHandler.parse_object(response, "starting usermedia upload")
        try:
            session = UploadSession.from_dict(data)
            session.validate(expected_size=file_size)
        except (KeyError, TypeError, ValueError) as e:
            raise ProtocolError(
                f"Invalid upload session returned by the registry: {e}",
                status=response.status,
                body=response.body
            ) from e
        
        self._logger.info(f"Upload session {session.uuid} created with {len(session.parts)} parts")
        return session
