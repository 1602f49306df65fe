"""Response handler for registry API responses."""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ...exceptions import ProtocolError


@dataclass(frozen=True)
class ApiResponse:
    """
    Buffered HTTP response.
    
    Attributes:
        status: HTTP status code
        body: Decoded response body
        headers: Response headers
    """
    status: int
    body: str = ''
    headers: Dict[str, str] = field(default_factory=dict)
    
    @property
    def ok(self) -> bool:
        """Returns True for 2xx statuses."""
        return 200 <= self.status < 300

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class ResponseHandler:
    """Handles registry API responses."""
    
    @staticmethod
    def parse_json(response: ApiResponse, context: str) -> Any:
        """
        Parses JSON response body.
        
        Raises:
            ProtocolError: If body is empty or not valid JSON
        """
        try:
            return json.loads(response.body)
        except ValueError as e:
            raise ProtocolError(
                f"Empty or invalid response while {context}: {e}",
                status=response.status,
                body=response.body
            ) from e
    
    @staticmethod
    def parse_object(response: ApiResponse, context: str) -> Dict[str, Any]:
        """Parses a JSON response body that must be an object."""
        data = ResponseHandler.parse_json(response, context)
        if not isinstance(data, dict):
            raise ProtocolError(
                f"Expected a JSON object while {context}",
                status=response.status,
                body=response.body
            )
        return data
