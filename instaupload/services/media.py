"""
Media Service - single-request operations on existing media.

Each call is one round trip: a non-200 status is surfaced as an
unexpected response, anything else is decoded and converted. Every method
returns a ``Result``; unexpected exceptions are logged and reported as
``ErrorKind.UNKNOWN``.
"""
import logging
from typing import Optional

import httpx

from ..errors import StepError, describe_exception
from ..models import ErrorKind, LikersList, MediaType, Result, UploadContext, UploadError
from .converter import MediaConverter
from .decoder import (
    DeleteResponse,
    LikersResponse,
    MediaListResponse,
    OembedResponse,
    PermalinkResponse,
    ResponseDecoder,
    StatusResponse,
)
from .request_builder import (
    DELETE_MEDIA_TYPES,
    OEMBED,
    media_delete,
    media_edit,
    media_info,
    media_like,
    media_likers,
    media_permalink,
    media_unlike,
)
from .transport import TransportResponse

logger = logging.getLogger(__name__)


class MediaService:
    """Fetch, edit, delete and like media by id."""

    def __init__(
        self,
        builder,
        transport,
        context: UploadContext,
        decoder: Optional[ResponseDecoder] = None,
        converter: Optional[MediaConverter] = None,
    ):
        self._builder = builder
        self._transport = transport
        self._context = context
        self._decoder = decoder or ResponseDecoder()
        self._converter = converter or MediaConverter()

    def _fields(self, **extra) -> dict:
        fields = {
            "_uuid": self._context.device.device_guid,
            "_uid": self._context.user_pk,
            "_csrftoken": self._context.csrf_token,
        }
        fields.update(extra)
        return fields

    async def _send(self, request: httpx.Request) -> TransportResponse:
        try:
            return await self._transport.send(request)
        except httpx.HTTPError as exc:
            raise StepError.transport(f"{request.method} {request.url} failed: {exc}") from exc

    async def _send_ok(self, request: httpx.Request) -> TransportResponse:
        response = await self._send(request)
        if response.status_code != 200:
            raise StepError.unexpected_response(response.status_code, response.body)
        return response

    @staticmethod
    def _crashed(operation: str, exc: Exception) -> Result:
        logger.exception(f"{operation} crashed")
        return Result.fail(UploadError(ErrorKind.UNKNOWN, describe_exception(exc)))

    async def get_media(self, media_id: str) -> Result:
        try:
            response = await self._send_ok(self._builder.build_default("GET", media_info(media_id)))
            decoded = self._decoder.decode(response.body, MediaListResponse)
            if len(decoded.items) > 1:
                message = f"Got wrong media count for request with media id={media_id}"
                logger.info(message)
                raise StepError.protocol(message, body=response.body)
            if not decoded.items:
                raise StepError.protocol(f"No media found for id={media_id}", body=response.body)
            return Result.ok(self._converter.convert(decoded.items[0]))
        except StepError as exc:
            return Result.fail(exc.error)
        except Exception as e:
            return self._crashed("get_media", e)

    async def delete_media(self, media_id: str, media_type: MediaType) -> Result:
        try:
            request = self._builder.build_signed(
                "POST",
                f"{media_delete(media_id)}?media_type={DELETE_MEDIA_TYPES[media_type]}",
                self._fields(media_id=media_id),
            )
            response = await self._send_ok(request)
            decoded = self._decoder.decode(response.body, DeleteResponse)
            return Result.ok(decoded.did_delete)
        except StepError as exc:
            return Result.fail(exc.error)
        except Exception as e:
            return self._crashed("delete_media", e)

    async def edit_media(self, media_id: str, caption: str) -> Result:
        try:
            request = self._builder.build_signed(
                "POST", media_edit(media_id), self._fields(caption_text=caption)
            )
            response = await self._send(request)
            if response.status_code == 200:
                return Result.ok(True)
            try:
                error = self._decoder.decode(response.body, StatusResponse)
            except StepError:
                return Result.unexpected_response(response.status_code, response.body)
            return Result.fail(UploadError(
                kind=ErrorKind.TRANSPORT,
                message=error.message or f"Unexpected response status: {response.status_code}",
                status_code=response.status_code,
                body=response.body,
            ))
        except StepError as exc:
            return Result.fail(exc.error)
        except Exception as e:
            return self._crashed("edit_media", e)

    async def get_media_likers(self, media_id: str) -> Result:
        try:
            response = await self._send_ok(self._builder.build_default("GET", media_likers(media_id)))
            decoded = self._decoder.decode(response.body, LikersResponse)
            if decoded.user_count < 1:
                return Result.ok(LikersList(users_count=decoded.user_count))
            users = tuple(self._converter.convert_user(user) for user in decoded.users)
            return Result.ok(LikersList(users_count=decoded.user_count, users=users))
        except StepError as exc:
            return Result.fail(exc.error)
        except Exception as e:
            return self._crashed("get_media_likers", e)

    async def like_media(self, media_id: str) -> Result:
        return await self._like_unlike("like_media", media_id, media_like(media_id))

    async def unlike_media(self, media_id: str) -> Result:
        return await self._like_unlike("unlike_media", media_id, media_unlike(media_id))

    async def _like_unlike(self, operation: str, media_id: str, endpoint: str) -> Result:
        try:
            request = self._builder.build_signed("POST", endpoint, self._fields(media_id=media_id))
            await self._send_ok(request)
            return Result.ok(True)
        except StepError as exc:
            return Result.fail(exc.error)
        except Exception as e:
            return self._crashed(operation, e)

    async def get_media_id_from_url(self, url: str) -> Result:
        try:
            request = self._builder.build_default("GET", OEMBED, params={"url": url})
            response = await self._send_ok(request)
            return Result.ok(self._decoder.decode(response.body, OembedResponse).media_id)
        except StepError as exc:
            return Result.fail(exc.error)
        except Exception as e:
            return self._crashed("get_media_id_from_url", e)

    async def get_share_link(self, media_id: str) -> Result:
        try:
            response = await self._send_ok(self._builder.build_default("GET", media_permalink(media_id)))
            return Result.ok(self._decoder.decode(response.body, PermalinkResponse).permalink)
        except StepError as exc:
            return Result.fail(exc.error)
        except Exception as e:
            return self._crashed("get_share_link", e)
