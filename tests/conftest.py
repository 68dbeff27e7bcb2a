"""Shared fixtures: stub transport, session context and canned responses."""
import itertools
import json
from datetime import datetime
from typing import Any, List, Optional, Tuple, Union
from urllib.parse import parse_qs

import httpx
import pytest

from instaupload.models import AndroidVersion, DeviceInfo, UploadConfig, UploadContext
from instaupload.orchestrator import UploadOrchestrator
from instaupload.services.transport import TransportResponse

Reply = Union[Tuple[int, Any], Exception]


class StubTransport:
    """Records requests and replays queued (status, body) replies."""

    def __init__(self, replies: Optional[List[Reply]] = None):
        self.replies = list(replies or [])
        self.requests: List[httpx.Request] = []

    def queue(self, status: int, body: Any = "") -> "StubTransport":
        self.replies.append((status, body))
        return self

    async def send(self, request: httpx.Request) -> TransportResponse:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if not isinstance(body, str):
            body = json.dumps(body)
        return TransportResponse(status_code=status, body=body)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]


def signed_fields(request: httpx.Request) -> dict:
    """Decode the JSON carried in a signed form body."""
    form = parse_qs(request.content.decode("utf-8"))
    signed = form["signed_body"][0]
    _, body = signed.split(".", 1)
    return json.loads(body)


def media_json(
    pk: int = 111,
    media_type: int = 1,
    caption: str = "hello",
    width: int = 1080,
    height: int = 1080,
    carousel: Optional[list] = None,
) -> dict:
    media = {
        "pk": pk,
        "id": f"{pk}_42",
        "media_type": media_type,
        "code": f"C{pk}",
        "taken_at": 1700000000,
        "caption": {"text": caption},
        "original_width": width,
        "original_height": height,
        "user": {"pk": 42, "username": "someone"},
        "image_versions2": {"candidates": [{"url": f"https://cdn/{pk}.jpg", "width": width, "height": height}]},
    }
    if media_type == 2:
        media["video_versions"] = [{"url": f"https://cdn/{pk}.mp4", "width": width, "height": height, "type": 101}]
        media["video_duration"] = 12.5
    if carousel is not None:
        media["carousel_media"] = carousel
    return media


def job_json(url: str = "https://upload.instagram.com/api/v1/upload/video/job/", job: str = "job-token") -> dict:
    return {"upload_id": "ignored", "video_upload_urls": [{"url": url, "job": job, "expires": 1.0}], "status": "ok"}


@pytest.fixture
def device() -> DeviceInfo:
    return DeviceInfo(device_guid="device-guid", android_version=AndroidVersion("7.0", "24"))


@pytest.fixture
def context(device) -> UploadContext:
    return UploadContext(device=device, csrf_token="csrf", user_pk="42", username="someone")


@pytest.fixture
def config() -> UploadConfig:
    return UploadConfig(signature_key="secret")


@pytest.fixture
def upload_ids(monkeypatch):
    """Deterministic upload ids: 1001, 1002, ... in generation order."""
    counter = itertools.count(1001)

    def _next() -> str:
        return str(next(counter))

    monkeypatch.setattr("instaupload.orchestrator.upload_session.generate_upload_id", _next)
    monkeypatch.setattr("instaupload.orchestrator.album.generate_upload_id", _next)
    return _next


FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def make_orchestrator(context, config):
    def _make(transport: StubTransport) -> UploadOrchestrator:
        return UploadOrchestrator(context, config, transport=transport, clock=lambda: FIXED_NOW)
    return _make
