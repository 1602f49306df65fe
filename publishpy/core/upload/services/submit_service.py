"""
Package submission service.

Submits package metadata that references a finalized upload.
"""
from typing import Any, Dict

from ..models import PackageUploadMetadata
from ..protocols import ApiClientProtocol
from ...api.request import ResponseHandler
from ...exceptions import ProtocolError
from ...logging import get_logger


class PackageSubmitter:
    """Submits the final publish request."""
    
    ENDPOINT = 'api/experimental/submission/submit/'
    EXPECTED_STATUS = 200
    
    def __init__(self, api_client: ApiClientProtocol):
        self._api = api_client
        self._logger = get_logger('publishpy.upload.submit')
    
    async def submit(self, metadata: PackageUploadMetadata) -> Dict[str, Any]:
        """
        Publish the package.
        
        Args:
            metadata: Package metadata with the finalized media UUID
            
        Returns:
            Parsed response body ({} when the body is empty or not JSON)
            
        Raises:
            ProtocolError: If the registry answers anything but 200 OK
        """
        self._logger.info(f"Submitting package for {metadata.author_name} (upload {metadata.upload_uuid})")
        response = await self._api.post(self.ENDPOINT, metadata.to_dict())
        
        if response.status != self.EXPECTED_STATUS:
            self._logger.error(f"Package submission rejected: HTTP {response.status}")
            raise ProtocolError(
                "Unexpected response from the server while submitting package",
                status=response.status,
                body=response.body
            )
        
        if not response.body.strip():
            return {}
        try:
            return ResponseHandler.parse_object(response, "submitting package")
        except ProtocolError:
            self._logger.warning("Package submitted but the response body was not a JSON object")
            return {}
