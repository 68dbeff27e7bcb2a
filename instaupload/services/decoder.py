"""Pydantic models for private API response bodies, and the decoder."""
from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import StepError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class WireModel(BaseModel):
    """Base for response payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UploadUrl(WireModel):
    """One-time video upload target."""

    url: str
    job: str
    expires: Optional[float] = None


class UploadJobResponse(WireModel):
    """Response to an upload job creation."""

    upload_id: Optional[str] = None
    video_upload_urls: list[UploadUrl] = Field(default_factory=list)
    status: Optional[str] = None


class StatusResponse(WireModel):
    """Thumbnail ack, expose result and generic error payload."""

    status: str = ""
    message: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status.lower() == "ok"


class CaptionWire(WireModel):
    text: str = ""


class UserWire(WireModel):
    pk: Union[int, str]
    username: str = ""
    full_name: Optional[str] = None
    profile_pic_url: Optional[str] = None


class ImageCandidateWire(WireModel):
    url: str
    width: int = 0
    height: int = 0


class ImageVersionsWire(WireModel):
    candidates: list[ImageCandidateWire] = Field(default_factory=list)


class VideoVersionWire(WireModel):
    url: str
    width: int = 0
    height: int = 0
    type: Optional[int] = None


class MediaItemWire(WireModel):
    """Single media item as returned by configure, expose and info."""

    pk: Union[int, str]
    id: str
    media_type: int
    code: Optional[str] = None
    taken_at: Optional[int] = None
    caption: Optional[CaptionWire] = None
    original_width: int = 0
    original_height: int = 0
    user: Optional[UserWire] = None
    image_versions2: Optional[ImageVersionsWire] = None
    video_versions: Optional[list[VideoVersionWire]] = None
    video_duration: Optional[float] = None
    like_count: int = 0
    comment_count: int = 0
    carousel_media: Optional[list[MediaItemWire]] = None


class MediaItemResponse(WireModel):
    media: Optional[MediaItemWire] = None
    status: str = ""


class AlbumResponse(WireModel):
    media: Optional[MediaItemWire] = None
    client_sidecar_id: Optional[str] = None
    status: str = ""


class MediaListResponse(WireModel):
    items: list[MediaItemWire] = Field(default_factory=list)
    num_results: int = 0
    status: str = ""


class LikersResponse(WireModel):
    users: list[UserWire] = Field(default_factory=list)
    user_count: int = 0
    status: str = ""


class OembedResponse(WireModel):
    media_id: str


class PermalinkResponse(WireModel):
    permalink: str


class DeleteResponse(WireModel):
    did_delete: bool = False


class ResponseDecoder:
    """
    Decodes raw JSON bodies into response models.

    Implements IResponseDecoder protocol.
    """

    def decode(self, body: Optional[str], model: Type[T]) -> T:
        if not body:
            raise StepError.decode(f"Empty response body for {model.__name__}", body=body)
        try:
            return model.model_validate_json(body)
        except ValidationError as exc:
            logger.debug(f"Failed to decode {model.__name__}: {exc}")
            raise StepError.decode(f"Could not decode {model.__name__}", body=body) from exc
