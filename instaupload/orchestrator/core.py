"""Core orchestrator - entry point for photo, video and album uploads."""
import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Sequence

from ..errors import describe_exception
from ..models import (
    ErrorKind,
    ImageAsset,
    Result,
    UploadConfig,
    UploadContext,
    UploadError,
    VideoUpload,
)
from ..protocols import IMediaConverter, IRequestBuilder, IResponseDecoder, ITransport
from ..services.analyzer import AnalyzerService
from ..services.converter import MediaConverter
from ..services.decoder import ResponseDecoder
from ..services.media import MediaService
from ..services.request_builder import RequestBuilder
from ..services.transport import HTTPTransport
from .album import AlbumComposer
from .upload_session import UploadSessionManager

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """
    Orchestrates media uploads using injected collaborators.

    Usage:
        async with UploadOrchestrator(context, config, cookies=cookies) as client:
            result = await client.upload_photo(ImageAsset(path=photo, width=1080, height=1080), "hello")
            if result.success:
                print(result.value.pk)

    Every public method returns a ``Result``; no exception escapes.
    """

    def __init__(
        self,
        context: UploadContext,
        config: Optional[UploadConfig] = None,
        transport: Optional[ITransport] = None,
        builder: Optional[IRequestBuilder] = None,
        decoder: Optional[IResponseDecoder] = None,
        converter: Optional[IMediaConverter] = None,
        cookies: Optional[Dict[str, str]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            context: Device and session data, read-only for every call
            config: Upload configuration
            transport: Pre-built transport; an HTTPTransport is opened otherwise
            builder: Request builder (defaults to RequestBuilder)
            decoder: Response decoder (defaults to ResponseDecoder)
            converter: Media converter (defaults to MediaConverter)
            cookies: Session cookies for the default transport
            clock: Timestamp source for clip and child records
        """
        self._context = context
        self._config = config or UploadConfig()
        self._external_transport = transport
        self._cookies = cookies
        self._transport: Optional[ITransport] = transport
        self._owned_transport: Optional[HTTPTransport] = None

        self._builder = builder or RequestBuilder(context.device, self._config)
        self._decoder = decoder or ResponseDecoder()
        self._converter = converter or MediaConverter()
        self._clock = clock

        self._sessions: Optional[UploadSessionManager] = None
        self._album: Optional[AlbumComposer] = None
        self._media: Optional[MediaService] = None
        if transport is not None:
            self._init_handlers(transport)

    def _init_handlers(self, transport: ITransport) -> None:
        self._sessions = UploadSessionManager(
            self._builder,
            transport,
            self._decoder,
            self._converter,
            AnalyzerService(),
            self._config,
            self._clock,
        )
        self._album = AlbumComposer(
            self._sessions,
            self._builder,
            self._decoder,
            self._converter,
            self._config,
            self._clock,
        )
        self._media = MediaService(self._builder, transport, self._context, self._decoder, self._converter)

    async def __aenter__(self):
        """Open the default transport when none was injected."""
        if self._external_transport is None:
            self._owned_transport = HTTPTransport(timeout=self._config.timeout, cookies=self._cookies)
            await self._owned_transport.__aenter__()
            self._transport = self._owned_transport
            self._init_handlers(self._transport)
        return self

    async def __aexit__(self, *args):
        if self._owned_transport:
            await self._owned_transport.__aexit__(*args)
            self._owned_transport = None

    @property
    def media(self) -> MediaService:
        assert self._media is not None, "UploadOrchestrator not initialized. Use 'async with' context."
        return self._media

    async def upload_photo(self, image: ImageAsset, caption: str = "") -> Result:
        """Upload a single photo and configure it."""
        assert self._sessions is not None
        try:
            return await self._sessions.upload_photo(image, caption, self._context)
        except Exception as e:
            logger.exception("Photo upload crashed")
            return Result.fail(UploadError(ErrorKind.UNKNOWN, describe_exception(e)))

    async def upload_video(self, video: VideoUpload, caption: str = "") -> Result:
        """Upload a video with its thumbnail, configure and expose it."""
        assert self._sessions is not None
        try:
            return await self._sessions.upload_video(video, caption, self._context)
        except Exception as e:
            logger.exception("Video upload crashed")
            return Result.fail(UploadError(ErrorKind.UNKNOWN, describe_exception(e)))

    async def upload_album(
        self,
        photos: Sequence[ImageAsset] = (),
        videos: Sequence[VideoUpload] = (),
        caption: str = "",
    ) -> Result:
        """Upload photos and videos as one album, photos first."""
        assert self._album is not None
        try:
            return await self._album.upload_album(photos, videos, caption, self._context)
        except Exception as e:
            logger.exception("Album upload crashed")
            return Result.fail(UploadError(ErrorKind.UNKNOWN, describe_exception(e)))
