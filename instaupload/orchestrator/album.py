"""
Album Composer - uploads photos and videos as album children and
finalizes them with a single configure call.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ..errors import StepError
from ..models import ImageAsset, Media, Result, UploadConfig, UploadContext, VideoUpload
from ..services.decoder import AlbumResponse
from ..services.request_builder import MEDIA_ALBUM_CONFIGURE
from . import payloads
from .payloads import ChildItem, PhotoChild, VideoChild
from .session import UploadSession, VideoUploadState, generate_upload_id
from .upload_session import UploadSessionManager

logger = logging.getLogger(__name__)


@dataclass
class AlbumComposition:
    """Children of one album, in submission order."""
    children: List[ChildItem] = field(default_factory=list)

    def add(self, child: ChildItem) -> None:
        self.children.append(child)

    @property
    def upload_ids(self) -> List[str]:
        return [child.upload_id for child in self.children]


class AlbumComposer:
    """
    Uploads every album child, then finalizes once.

    Children are uploaded one after another; the children payload is
    always photos then videos, each in the order the caller passed them.
    A failed child aborts the album without finalizing; children already
    transferred stay orphaned on the server.
    """

    def __init__(
        self,
        sessions: UploadSessionManager,
        builder,
        decoder,
        converter,
        config: Optional[UploadConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._sessions = sessions
        self._builder = builder
        self._decoder = decoder
        self._converter = converter
        self._config = config or UploadConfig()
        self._clock = clock

    async def upload_album(
        self,
        photos: Sequence[ImageAsset],
        videos: Sequence[VideoUpload],
        caption: str,
        context: UploadContext,
    ) -> Result:
        photos = list(photos or [])
        videos = list(videos or [])
        logger.info(f"Uploading album: {len(photos)} photos, {len(videos)} videos")
        try:
            if not photos and not videos:
                raise StepError.validation("Album needs at least one photo or video")
            composition = await self.compose(photos, videos, context)
            media = await self.configure(composition, caption, context)
        except StepError as exc:
            logger.warning(f"Album upload failed: {exc.error}")
            return Result.fail(exc.error)
        logger.info(f"Album configured as media {media.pk} with {len(media.children)} children")
        return Result.ok(media)

    async def compose(
        self,
        photos: List[ImageAsset],
        videos: List[VideoUpload],
        context: UploadContext,
    ) -> AlbumComposition:
        composition = AlbumComposition()

        for photo in photos:
            upload_id = generate_upload_id()
            await self._sessions.transfer_photo(photo, upload_id, context, is_sidecar=True)
            composition.add(PhotoChild(upload_id))

        for upload in videos:
            session = UploadSession(upload_id=generate_upload_id(), upload=upload, is_sidecar=True)
            await self._sessions.drive(session, context, until=VideoUploadState.THUMBNAIL_ATTACHED)
            if session.failed:
                raise StepError(session.error)
            composition.add(VideoChild.from_asset(session.upload_id, upload.video, self._config))

        return composition

    async def configure(self, composition: AlbumComposition, caption: str, context: UploadContext) -> Media:
        sidecar_id = generate_upload_id()
        payload = payloads.album_configure_payload(
            sidecar_id, caption, composition.children, context, self._config, self._clock()
        )
        request = self._builder.build_signed("POST", MEDIA_ALBUM_CONFIGURE, payload)
        response = await self._sessions.send_checked(request)
        decoded = self._decoder.decode(response.body, AlbumResponse)
        return self._converter.convert_album(decoded)
