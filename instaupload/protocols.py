"""
Protocols (Interfaces) for the collaborators the orchestrator drives.

Small, focused interfaces so each step can run against stub implementations.
"""
from typing import Any, Dict, Optional, Protocol, Sequence, Type, TypeVar, runtime_checkable

import httpx

from .models import Media

T = TypeVar("T")


@runtime_checkable
class IRequestBuilder(Protocol):
    """Interface for building transport-ready, signed requests."""

    def build_signed(
        self,
        method: str,
        endpoint: str,
        fields: Dict[str, Any],
        host: Optional[str] = None,
    ) -> httpx.Request:
        """Build a request whose form body is the signed JSON of ``fields``."""
        ...

    def build_multipart(
        self,
        method: str,
        endpoint: str,
        parts: Sequence[Any],
        boundary: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Request:
        """Build an unsigned multipart request with parts in the given order."""
        ...

    def build_default(self, method: str, endpoint: str, params: Optional[Dict[str, str]] = None) -> httpx.Request:
        """Build an unsigned request with device headers only."""
        ...


@runtime_checkable
class ITransport(Protocol):
    """Interface for sending requests. No retry, no timeout policy."""

    async def send(self, request: httpx.Request) -> Any:
        """Send request and return an object with ``status_code`` and ``body``."""
        ...


@runtime_checkable
class IResponseDecoder(Protocol):
    """Interface for decoding raw JSON bodies into fixed response shapes."""

    def decode(self, body: str, model: Type[T]) -> T:
        ...


@runtime_checkable
class IMediaConverter(Protocol):
    """Interface for mapping wire media into domain objects."""

    def convert(self, wire: Any) -> Media:
        ...

    def convert_album(self, response: Any) -> Media:
        ...
