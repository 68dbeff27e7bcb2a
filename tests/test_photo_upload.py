"""Tests for the single photo upload sequence."""
import io

import httpx
import pytest
from PIL import Image

from conftest import StubTransport, media_json, signed_fields
from instaupload.models import DeviceInfo, ErrorKind, ImageAsset, MediaType, UploadContext


@pytest.mark.asyncio
async def test_upload_photo_success(make_orchestrator, upload_ids):
    transport = StubTransport().queue(200, {"status": "ok"}).queue(200, {"media": media_json(), "status": "ok"})
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=b"jpeg-bytes", width=1080, height=1080), "hello")

    assert result.success is True
    media = result.value
    assert media.pk == "111"
    assert media.id == "111_42"
    assert media.caption == "hello"
    assert media.media_type == MediaType.IMAGE
    assert (media.width, media.height) == (1080, 1080)

    assert transport.paths() == ["/api/v1/upload/photo/", "/api/v1/media/configure/"]

    transfer = transport.requests[0]
    assert transfer.headers["Content-Type"] == "multipart/form-data; boundary=1001"
    assert b'Content-Disposition: form-data; name="upload_id"\r\n\r\n1001\r\n' in transfer.content
    assert b'name="photo"; filename="pending_media_1001.jpg"' in transfer.content
    assert b"Content-Transfer-Encoding: binary" in transfer.content
    assert b"jpeg-bytes" in transfer.content
    assert b"is_sidecar" not in transfer.content

    fields = signed_fields(transport.requests[1])
    assert fields["upload_id"] == "1001"
    assert fields["caption"] == "hello"
    assert fields["source_type"] == "4"
    assert fields["edits"] == {"crop_original_size": [1080, 1080], "crop_center": [0.0, -0.0], "crop_zoom": 1}
    assert fields["extra"] == {"source_width": 1080, "source_height": 1080}
    assert fields["device"]["manufacturer"] == "samsung"
    assert fields["_csrftoken"] == "csrf"
    assert fields["_uuid"] == "device-guid"


@pytest.mark.asyncio
async def test_upload_photo_transfer_failure_skips_configure(make_orchestrator, upload_ids):
    transport = StubTransport().queue(500, "server exploded")
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=b"x", width=10, height=10), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.TRANSPORT
    assert result.error.status_code == 500
    assert result.error.body == "server exploded"
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_upload_photo_configure_rejected(make_orchestrator, upload_ids):
    transport = StubTransport().queue(200, {"status": "ok"}).queue(400, {"status": "fail", "message": "bad"})
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=b"x", width=10, height=10), "c")

    assert result.success is False
    assert result.error.status_code == 400
    assert "Unexpected response" in result.error.message


@pytest.mark.asyncio
async def test_upload_photo_configure_body_not_media(make_orchestrator, upload_ids):
    transport = StubTransport().queue(200, "").queue(200, "not json at all")
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=b"x", width=10, height=10), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.DECODE
    assert result.value is None


@pytest.mark.asyncio
async def test_upload_photo_probes_missing_dimensions(make_orchestrator, upload_ids):
    buffer = io.BytesIO()
    Image.new("RGB", (320, 240)).save(buffer, format="PNG")
    transport = StubTransport().queue(200, "").queue(200, {"media": media_json(width=320, height=240)})
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=buffer.getvalue()), "c")

    assert result.success is True
    fields = signed_fields(transport.requests[1])
    assert fields["extra"] == {"source_width": 320, "source_height": 240}


@pytest.mark.asyncio
async def test_upload_photo_unreadable_image_without_dimensions(make_orchestrator, upload_ids):
    transport = StubTransport().queue(200, "")
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=b"not an image"), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.VALIDATION
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_upload_photo_unsupported_android_version(config, upload_ids):
    from instaupload.orchestrator import UploadOrchestrator

    context = UploadContext(
        device=DeviceInfo(device_guid="g", android_version=None),
        csrf_token="csrf",
        user_pk="42",
        username="someone",
    )
    transport = StubTransport().queue(200, "")
    client = UploadOrchestrator(context, config, transport=transport)

    result = await client.upload_photo(ImageAsset(data=b"x", width=1, height=1), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.VALIDATION
    assert result.error.message == "Unsupported android version"
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_upload_photo_network_error(make_orchestrator, upload_ids):
    transport = StubTransport([httpx.ConnectError("connection refused")])
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=b"x", width=1, height=1), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.TRANSPORT
    assert result.error.status_code is None
    assert "connection refused" in result.error.message


@pytest.mark.asyncio
async def test_upload_photo_empty_payload_sends_nothing(make_orchestrator, upload_ids):
    transport = StubTransport()
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(data=b"", width=1, height=1), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.VALIDATION
    assert transport.requests == []


@pytest.mark.asyncio
async def test_upload_photo_reads_file_without_touching_asset(make_orchestrator, upload_ids, tmp_path):
    photo = tmp_path / "photo.jpg"
    photo.write_bytes(b"file-bytes")
    asset = ImageAsset(path=photo, width=5, height=5)
    transport = StubTransport().queue(200, "").queue(200, {"media": media_json()})
    client = make_orchestrator(transport)

    result = await client.upload_photo(asset, "c")

    assert result.success is True
    assert b"file-bytes" in transport.requests[0].content
    assert asset.path == photo
    assert asset.data is None


@pytest.mark.asyncio
async def test_upload_photo_unexpected_exception_becomes_failure(context, config, upload_ids):
    from unittest.mock import Mock

    from instaupload.orchestrator import UploadOrchestrator

    builder = Mock()
    builder.build_multipart.side_effect = RuntimeError("boom")
    client = UploadOrchestrator(context, config, transport=StubTransport(), builder=builder)

    result = await client.upload_photo(ImageAsset(data=b"x", width=1, height=1), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.UNKNOWN
    assert result.error.message == "boom"


@pytest.mark.asyncio
async def test_upload_photo_rejects_non_image_file(make_orchestrator, upload_ids, tmp_path):
    clip = tmp_path / "clip.mov"
    clip.write_bytes(b"not a photo")
    transport = StubTransport()
    client = make_orchestrator(transport)

    result = await client.upload_photo(ImageAsset(path=clip, width=5, height=5), "c")

    assert result.success is False
    assert result.error.kind == ErrorKind.VALIDATION
    assert result.error.message == "Not a photo file: clip.mov"
    assert transport.requests == []
