"""
Multipart body encoder.

The upload endpoints expect part headers that ``httpx``'s form encoder
cannot produce (``Content-Disposition: attachment`` on an unnamed part,
explicit ``Content-Transfer-Encoding``), so bodies are rendered here
part by part, in order.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

CRLF = b"\r\n"

BINARY_HEADERS = {
    "Content-Transfer-Encoding": "binary",
    "Content-Type": "application/octet-stream",
}


@dataclass(frozen=True)
class MultipartPart:
    """One part of a multipart body. ``name`` may be None for attachment parts."""
    name: Optional[str]
    content: Union[bytes, str]
    filename: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def text(cls, name: str, value: str) -> "MultipartPart":
        return cls(name=name, content=value)

    @classmethod
    def binary(
        cls,
        name: Optional[str],
        data: bytes,
        filename: Optional[str] = None,
        disposition: Optional[str] = None,
    ) -> "MultipartPart":
        headers = dict(BINARY_HEADERS)
        if disposition is not None:
            headers["Content-Disposition"] = disposition
        return cls(name=name, content=data, filename=filename, headers=headers)

    def render_headers(self) -> bytes:
        lines: List[str] = [f"{key}: {value}" for key, value in self.headers.items()]
        if "Content-Disposition" not in self.headers:
            disposition = "form-data"
            if self.name is not None:
                disposition += f'; name="{self.name}"'
            if self.filename is not None:
                disposition += f'; filename="{self.filename}"'
            lines.append(f"Content-Disposition: {disposition}")
        return CRLF.join(line.encode("utf-8") for line in lines)

    def render_content(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")


def encode_multipart(parts: Sequence[MultipartPart], boundary: str) -> bytes:
    """Render parts into a multipart body using ``boundary``."""
    delimiter = b"--" + boundary.encode("ascii")
    chunks: List[bytes] = []
    for part in parts:
        chunks.append(delimiter + CRLF)
        chunks.append(part.render_headers() + CRLF + CRLF)
        chunks.append(part.render_content() + CRLF)
    chunks.append(delimiter + b"--" + CRLF)
    return b"".join(chunks)


def content_type(boundary: str) -> str:
    return f"multipart/form-data; boundary={boundary}"
