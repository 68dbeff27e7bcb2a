"""
Upload Session Manager - drives one asset through its upload protocol.

Photo: transfer -> configure.
Video: job -> binary -> thumbnail -> configure -> expose, run as an
explicit state machine. A failing step is terminal for the sequence;
nothing already sent to the server is rolled back.
"""
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

import httpx

from ..errors import StepError
from ..models import ImageAsset, Media, Result, UploadConfig, UploadContext, VideoUpload
from ..services.analyzer import AnalyzerService
from ..services.decoder import MediaItemResponse, StatusResponse, UploadJobResponse
from ..services.multipart import MultipartPart
from ..services.request_builder import MEDIA_CONFIGURE, UPLOAD_PHOTO, UPLOAD_VIDEO
from ..services.transport import TransportResponse
from . import payloads
from .session import UploadSession, VideoUploadState, generate_upload_id

logger = logging.getLogger(__name__)

Step = Callable[[UploadSession, UploadContext], Awaitable[VideoUploadState]]


class UploadSessionManager:
    """Runs single-asset photo and video upload sequences."""

    def __init__(
        self,
        builder,
        transport,
        decoder,
        converter,
        analyzer: Optional[AnalyzerService] = None,
        config: Optional[UploadConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize session manager.

        Args:
            builder: IRequestBuilder
            transport: ITransport
            decoder: IResponseDecoder
            converter: IMediaConverter
            analyzer: AnalyzerService used to resolve asset bytes
            config: Upload configuration
            clock: Source of timestamps for clip and child records
        """
        self._builder = builder
        self._transport = transport
        self._decoder = decoder
        self._converter = converter
        self._analyzer = analyzer or AnalyzerService()
        self._config = config or UploadConfig()
        self._clock = clock
        self._video_steps: Dict[VideoUploadState, Step] = {
            VideoUploadState.PENDING: self._create_job,
            VideoUploadState.CREATED: self._transfer_video,
            VideoUploadState.TRANSFERRED: self._attach_thumbnail,
            VideoUploadState.THUMBNAIL_ATTACHED: self._configure_video,
            VideoUploadState.CONFIGURED: self._expose_video,
        }

    async def send(self, request: httpx.Request) -> TransportResponse:
        try:
            return await self._transport.send(request)
        except httpx.HTTPError as exc:
            raise StepError.transport(f"{request.method} {request.url} failed: {exc}") from exc

    async def send_checked(self, request: httpx.Request) -> TransportResponse:
        """Send and abort the sequence on a non-2xx status."""
        response = await self.send(request)
        if not response.is_success:
            raise StepError.unexpected_response(response.status_code, response.body)
        return response

    # ------------------------------------------------------------------
    # Photo
    # ------------------------------------------------------------------

    async def upload_photo(self, image: ImageAsset, caption: str, context: UploadContext) -> Result:
        upload_id = generate_upload_id()
        logger.info(f"Uploading photo {upload_id}")
        try:
            data = await self.transfer_photo(image, upload_id, context)
            media = await self.configure_photo(image, data, upload_id, caption, context)
        except StepError as exc:
            logger.warning(f"Photo {upload_id} failed: {exc.error}")
            return Result.fail(exc.error)
        logger.info(f"Photo {upload_id} configured as media {media.pk}")
        return Result.ok(media)

    async def transfer_photo(
        self,
        image: ImageAsset,
        upload_id: str,
        context: UploadContext,
        is_sidecar: bool = False,
    ) -> bytes:
        """Send the image bytes under ``upload_id``; returns the bytes sent."""
        data = await self._analyzer.read_bytes(image)
        parts = payloads.upload_parts(upload_id, context, self._config, is_sidecar)
        parts.append(MultipartPart.binary("photo", data, filename=f"pending_media_{upload_id}.jpg"))
        request = self._builder.build_multipart("POST", UPLOAD_PHOTO, parts, boundary=upload_id)
        await self.send_checked(request)
        logger.debug(f"Photo {upload_id} transferred ({len(data)} bytes)")
        return data

    async def configure_photo(
        self,
        image: ImageAsset,
        data: bytes,
        upload_id: str,
        caption: str,
        context: UploadContext,
    ) -> Media:
        width, height = image.width, image.height
        if width == 0 or height == 0:
            width, height = self._analyzer.image_size(data)
        payload = payloads.photo_configure_payload(upload_id, caption, width, height, context)
        request = self._builder.build_signed("POST", MEDIA_CONFIGURE, payload)
        response = await self.send_checked(request)
        decoded = self._decoder.decode(response.body, MediaItemResponse)
        if decoded.media is None:
            raise StepError.decode("Configure response carries no media", body=response.body)
        return self._converter.convert(decoded.media)

    # ------------------------------------------------------------------
    # Video
    # ------------------------------------------------------------------

    async def upload_video(self, upload: VideoUpload, caption: str, context: UploadContext) -> Result:
        session = UploadSession(upload_id=generate_upload_id(), upload=upload, caption=caption)
        logger.info(f"Uploading video {session.upload_id}")
        await self.drive(session, context)
        if session.failed:
            return Result.fail(session.error)
        logger.info(f"Video {session.upload_id} exposed as media {session.media.pk}")
        return Result.ok(session.media)

    async def drive(
        self,
        session: UploadSession,
        context: UploadContext,
        until: VideoUploadState = VideoUploadState.EXPOSED,
    ) -> UploadSession:
        """Advance ``session`` until it reaches ``until`` or fails."""
        while session.state not in (until, VideoUploadState.FAILED):
            step = self._video_steps[session.state]
            try:
                next_state = await step(session, context)
            except StepError as exc:
                logger.warning(
                    f"Video {session.upload_id} failed after {session.state.value}: {exc.error}"
                )
                session.fail(exc.error)
                break
            logger.debug(f"Video {session.upload_id}: {session.state.value} -> {next_state.value}")
            session.advance(next_state)
        return session

    async def _create_job(self, session: UploadSession, context: UploadContext) -> VideoUploadState:
        video = session.upload.video
        if video.path is not None:
            self._analyzer.check_kind(video)
        parts = payloads.video_job_parts(session.upload_id, context, self._config, session.is_sidecar)
        request = self._builder.build_multipart("POST", UPLOAD_VIDEO, parts, boundary=session.upload_id)
        response = await self.send_checked(request)
        try:
            job = self._decoder.decode(response.body, UploadJobResponse)
        except StepError as exc:
            raise StepError.decode(
                "Failed to get response from video upload endpoint", body=response.body
            ) from exc
        if not job.video_upload_urls:
            raise StepError.protocol("Upload job returned no upload urls", body=response.body)
        session.target = job.video_upload_urls[0]
        return VideoUploadState.CREATED

    async def _transfer_video(self, session: UploadSession, context: UploadContext) -> VideoUploadState:
        video = session.upload.video
        data = await self._analyzer.read_bytes(video)
        parts = payloads.video_binary_parts(data, video.filename(session.upload_id), context, self._config)
        headers = {
            "Host": self._config.upload_host,
            "Cookie2": "$Version=1",
            "Session-ID": session.upload_id,
            "job": session.target.job,
        }
        request = self._builder.build_multipart(
            "POST", session.target.url, parts, boundary=session.upload_id, headers=headers
        )
        # The transfer body is not decoded; configure/expose are authoritative.
        await self.send_checked(request)
        return VideoUploadState.TRANSFERRED

    async def _attach_thumbnail(self, session: UploadSession, context: UploadContext) -> VideoUploadState:
        data = await self._analyzer.read_bytes(session.upload.thumbnail)
        parts = payloads.thumbnail_parts(data, session.upload_id, context, self._config, session.is_sidecar)
        request = self._builder.build_multipart("POST", UPLOAD_PHOTO, parts, boundary=session.upload_id)
        response = await self.send_checked(request)
        ack = self._decoder.decode(response.body, StatusResponse)
        if not ack.is_ok:
            raise StepError.protocol("Could not upload thumbnail", body=response.body)
        return VideoUploadState.THUMBNAIL_ATTACHED

    async def _configure_video(self, session: UploadSession, context: UploadContext) -> VideoUploadState:
        payload = payloads.video_configure_payload(
            session.upload_id, session.caption, session.upload.video, context, self._config, self._clock()
        )
        request = self._builder.build_signed("POST", MEDIA_CONFIGURE, payload, host=self._config.api_host)
        await self.send_checked(request)
        return VideoUploadState.CONFIGURED

    async def _expose_video(self, session: UploadSession, context: UploadContext) -> VideoUploadState:
        payload = payloads.expose_payload(session.upload_id, context, self._config)
        request = self._builder.build_signed("POST", MEDIA_CONFIGURE, payload, host=self._config.api_host)
        response = await self.send_checked(request)
        status = self._decoder.decode(response.body, StatusResponse)
        if not status.is_ok:
            raise StepError.protocol(status.status or "Cannot expose media", body=response.body)
        decoded = self._decoder.decode(response.body, MediaItemResponse)
        if decoded.media is None:
            raise StepError.decode("Expose response carries no media", body=response.body)
        session.media = self._converter.convert(decoded.media)
        return VideoUploadState.EXPOSED
