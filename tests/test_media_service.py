"""Tests for single-request media operations."""
import logging

import pytest

from conftest import StubTransport, media_json, signed_fields
from instaupload.models import ErrorKind, MediaType
from instaupload.services.media import MediaService
from instaupload.services.request_builder import RequestBuilder
from instaupload.services.transport import HTTPTransport


@pytest.fixture
def service_for(context, config):
    def _make(transport: StubTransport) -> MediaService:
        return MediaService(RequestBuilder(context.device, config), transport, context)
    return _make


@pytest.mark.asyncio
async def test_get_media_returns_single_item(service_for):
    transport = StubTransport().queue(200, {"items": [media_json(pk=5)], "num_results": 1, "status": "ok"})

    result = await service_for(transport).get_media("5_42")

    assert result.success is True
    assert result.value.pk == "5"
    assert transport.requests[0].method == "GET"
    assert transport.requests[0].url.path == "/api/v1/media/5_42/info/"


@pytest.mark.asyncio
async def test_get_media_rejects_multiple_items(service_for):
    transport = StubTransport().queue(200, {"items": [media_json(pk=1), media_json(pk=2)]})

    result = await service_for(transport).get_media("1")

    assert result.error.kind == ErrorKind.PROTOCOL
    assert "wrong media count" in result.error.message


@pytest.mark.asyncio
async def test_get_media_non_200_is_unexpected_response(service_for):
    transport = StubTransport().queue(404, "missing")

    result = await service_for(transport).get_media("1")

    assert result.error.status_code == 404
    assert result.error.body == "missing"


@pytest.mark.asyncio
async def test_delete_media(service_for):
    transport = StubTransport().queue(200, {"did_delete": True, "status": "ok"})

    result = await service_for(transport).delete_media("9_42", MediaType.IMAGE)

    assert result.value is True
    request = transport.requests[0]
    assert request.url.path == "/api/v1/media/9_42/delete/"
    assert request.url.params["media_type"] == "PHOTO"
    assert signed_fields(request)["media_id"] == "9_42"


@pytest.mark.asyncio
async def test_edit_media_success_and_failure_message(service_for):
    ok = StubTransport().queue(200, {"status": "ok"})
    assert (await service_for(ok).edit_media("1", "new caption")).value is True
    assert signed_fields(ok.requests[0])["caption_text"] == "new caption"

    bad = StubTransport().queue(400, {"status": "fail", "message": "Caption too long"})
    result = await service_for(bad).edit_media("1", "x" * 5000)
    assert result.success is False
    assert result.error.message == "Caption too long"
    assert result.error.status_code == 400


@pytest.mark.asyncio
async def test_get_media_likers(service_for):
    transport = StubTransport().queue(200, {"users": [{"pk": 1, "username": "a"}, {"pk": 2, "username": "b"}], "user_count": 2})

    result = await service_for(transport).get_media_likers("1")

    assert result.value.users_count == 2
    assert [user.username for user in result.value.users] == ["a", "b"]


@pytest.mark.asyncio
async def test_get_media_likers_empty(service_for):
    transport = StubTransport().queue(200, {"users": [], "user_count": 0})

    result = await service_for(transport).get_media_likers("1")

    assert result.value.users_count == 0
    assert result.value.users == ()


@pytest.mark.asyncio
async def test_like_and_unlike(service_for):
    transport = StubTransport().queue(200, {"status": "ok"}).queue(403, "forbidden")
    service = service_for(transport)

    assert (await service.like_media("7")).value is True
    unliked = await service.unlike_media("7")

    assert unliked.error.status_code == 403
    assert transport.paths() == ["/api/v1/media/7/like/", "/api/v1/media/7/unlike/"]


@pytest.mark.asyncio
async def test_media_id_from_url_and_share_link(service_for):
    transport = (
        StubTransport()
        .queue(200, {"media_id": "123_456"})
        .queue(200, {"permalink": "https://www.instagram.com/p/abc/"})
    )
    service = service_for(transport)

    media_id = await service.get_media_id_from_url("https://www.instagram.com/p/abc/")
    link = await service.get_share_link("123_456")

    assert media_id.value == "123_456"
    assert link.value == "https://www.instagram.com/p/abc/"
    assert transport.requests[0].url.params["url"] == "https://www.instagram.com/p/abc/"


@pytest.mark.asyncio
async def test_edit_media_non_json_error_keeps_status(service_for):
    transport = StubTransport().queue(502, "<html>Bad Gateway</html>")

    result = await service_for(transport).edit_media("1", "caption")

    assert result.success is False
    assert result.error.kind == ErrorKind.TRANSPORT
    assert result.error.status_code == 502
    assert result.error.body == "<html>Bad Gateway</html>"
    assert result.error.message == "Unexpected response status: 502"


@pytest.mark.asyncio
async def test_unopened_transport_is_reported_as_failure(context, config, caplog):
    service = MediaService(RequestBuilder(context.device, config), HTTPTransport(), context)

    with caplog.at_level(logging.ERROR, logger="instaupload.services.media"):
        result = await service.get_media("1")

    assert result.success is False
    assert result.error.kind == ErrorKind.UNKNOWN
    assert "not initialized" in result.error.message
    assert "get_media crashed" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("call", [
    lambda service: service.get_media("1"),
    lambda service: service.delete_media("1", MediaType.VIDEO),
    lambda service: service.edit_media("1", "c"),
    lambda service: service.get_media_likers("1"),
    lambda service: service.like_media("1"),
    lambda service: service.unlike_media("1"),
    lambda service: service.get_media_id_from_url("https://www.instagram.com/p/abc/"),
    lambda service: service.get_share_link("1"),
])
async def test_unexpected_exceptions_never_escape(service_for, call):
    transport = StubTransport([RuntimeError("boom")])

    result = await call(service_for(transport))

    assert result.success is False
    assert result.error.kind == ErrorKind.UNKNOWN
    assert result.error.message == "boom"
