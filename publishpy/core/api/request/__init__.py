"""Request building and response handling for registry calls."""
from .request_builder import RequestBuilder
from .response_handler import ApiResponse, ResponseHandler

__all__ = [
    'RequestBuilder',
    'ApiResponse',
    'ResponseHandler',
]
