"""Maps decoded wire media onto caller-facing Media objects."""
from datetime import datetime, timezone
from typing import Optional

from ..errors import StepError
from ..models import ImageCandidate, Media, MediaType, MediaUser, VideoCandidate
from .decoder import AlbumResponse, MediaItemWire, UserWire


class MediaConverter:
    """
    Converts wire media into Media.

    Implements IMediaConverter protocol. Pure: equal wire values
    always produce equal Media values.
    """

    def convert(self, wire: MediaItemWire) -> Media:
        try:
            media_type = MediaType(wire.media_type)
        except ValueError as exc:
            raise StepError.decode(f"Unknown media type: {wire.media_type}") from exc

        taken_at = None
        if wire.taken_at is not None:
            taken_at = datetime.fromtimestamp(wire.taken_at, tz=timezone.utc)

        images = ()
        if wire.image_versions2 is not None:
            images = tuple(
                ImageCandidate(url=c.url, width=c.width, height=c.height)
                for c in wire.image_versions2.candidates
            )

        videos = tuple(
            VideoCandidate(url=v.url, width=v.width, height=v.height, type=v.type)
            for v in (wire.video_versions or [])
        )

        children = tuple(self.convert(child) for child in (wire.carousel_media or []))

        return Media(
            pk=str(wire.pk),
            id=wire.id,
            media_type=media_type,
            code=wire.code,
            caption=wire.caption.text if wire.caption else "",
            width=wire.original_width,
            height=wire.original_height,
            taken_at=taken_at,
            user=self.convert_user(wire.user),
            images=images,
            videos=videos,
            video_duration=wire.video_duration,
            like_count=wire.like_count,
            comment_count=wire.comment_count,
            children=children,
        )

    def convert_album(self, response: AlbumResponse) -> Media:
        if response.media is None:
            raise StepError.decode("Album response carries no media")
        return self.convert(response.media)

    @staticmethod
    def convert_user(wire: Optional[UserWire]) -> Optional[MediaUser]:
        if wire is None:
            return None
        return MediaUser(
            pk=str(wire.pk),
            username=wire.username,
            full_name=wire.full_name,
            profile_pic_url=wire.profile_pic_url,
        )
