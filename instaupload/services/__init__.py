"""Collaborators used by the upload orchestrator."""
from .analyzer import AnalyzerService
from .converter import MediaConverter
from .decoder import ResponseDecoder
from .media import MediaService
from .request_builder import RequestBuilder
from .transport import HTTPTransport, TransportResponse

__all__ = [
    "AnalyzerService",
    "MediaConverter",
    "ResponseDecoder",
    "MediaService",
    "RequestBuilder",
    "HTTPTransport",
    "TransportResponse",
]
