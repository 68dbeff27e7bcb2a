"""Payload builders shared by the photo, video and album sequences."""
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Union

from ..errors import StepError
from ..models import UploadConfig, UploadContext, VideoAsset
from ..services.multipart import MultipartPart

PHOTO_SOURCE_TYPE = "4"
VIDEO_SOURCE_TYPE = "3"
MEDIA_TYPE_VIDEO = "2"


def session_fields(context: UploadContext) -> Dict[str, str]:
    return {
        "_uuid": context.device.device_guid,
        "_uid": context.user_pk,
        "_csrftoken": context.csrf_token,
    }


def device_descriptor(context: UploadContext) -> Dict[str, str]:
    version = context.device.android_version
    if version is None:
        raise StepError.validation("Unsupported android version")
    return {
        "manufacturer": context.device.manufacturer,
        "model": context.device.model,
        "android_version": version.api_level,
        "android_release": version.version_number,
    }


def timestamp(now: datetime) -> str:
    return now.strftime("%Y%m%dT%H%M%S.000Z")


def upload_parts(
    upload_id: str,
    context: UploadContext,
    config: UploadConfig,
    is_sidecar: bool = False,
) -> List[MultipartPart]:
    """Form fields shared by photo and thumbnail transfers."""
    parts = [
        MultipartPart.text("upload_id", upload_id),
        MultipartPart.text("_uuid", context.device.device_guid),
        MultipartPart.text("_csrftoken", context.csrf_token),
        MultipartPart.text("image_compression", config.image_compression),
    ]
    if is_sidecar:
        parts.append(MultipartPart.text("is_sidecar", "1"))
    return parts


def video_job_parts(
    upload_id: str,
    context: UploadContext,
    config: UploadConfig,
    is_sidecar: bool = False,
) -> List[MultipartPart]:
    if is_sidecar:
        return [
            MultipartPart.text("upload_media_height", "0"),
            MultipartPart.text("is_sidecar", "1"),
            MultipartPart.text("upload_media_width", "0"),
            MultipartPart.text("_csrftoken", context.csrf_token),
            MultipartPart.text("_uuid", context.device.device_guid),
            MultipartPart.text("upload_media_duration_ms", "0"),
            MultipartPart.text("upload_id", upload_id),
            MultipartPart.text("retry_context", config.retry_context),
            MultipartPart.text("media_type", MEDIA_TYPE_VIDEO),
        ]
    return [
        MultipartPart.text("media_type", MEDIA_TYPE_VIDEO),
        MultipartPart.text("upload_id", upload_id),
        MultipartPart.text("_uuid", context.device.device_guid),
        MultipartPart.text("_csrftoken", context.csrf_token),
        MultipartPart.text("image_compression", config.image_compression),
    ]


def video_binary_parts(
    data: bytes,
    filename: str,
    context: UploadContext,
    config: UploadConfig,
) -> List[MultipartPart]:
    return [
        MultipartPart.text("_csrftoken", context.csrf_token),
        MultipartPart.text("image_compression", config.image_compression),
        MultipartPart.binary(None, data, disposition=f'attachment; filename="{filename}"'),
    ]


def thumbnail_parts(
    data: bytes,
    upload_id: str,
    context: UploadContext,
    config: UploadConfig,
    is_sidecar: bool = False,
) -> List[MultipartPart]:
    if is_sidecar:
        return [
            MultipartPart.text("is_sidecar", "1"),
            MultipartPart.text("upload_id", upload_id),
            MultipartPart.text("_uuid", context.device.device_guid),
            MultipartPart.text("_csrftoken", context.csrf_token),
            MultipartPart.text("image_compression", config.image_compression),
            MultipartPart.text("retry_context", config.retry_context),
            MultipartPart.text("media_type", MEDIA_TYPE_VIDEO),
            MultipartPart.binary("photo", data, filename=f"cover_photo_{upload_id}.jpg"),
        ]
    parts = upload_parts(upload_id, context, config)
    parts.append(MultipartPart.binary("photo", data, filename=f"pending_media_{upload_id}.jpg"))
    return parts


def photo_configure_payload(
    upload_id: str,
    caption: str,
    width: int,
    height: int,
    context: UploadContext,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = session_fields(context)
    payload.update({
        "media_folder": "Camera",
        "source_type": PHOTO_SOURCE_TYPE,
        "caption": caption,
        "upload_id": upload_id,
        "device": device_descriptor(context),
        "edits": {
            "crop_original_size": [width, height],
            "crop_center": [0.0, -0.0],
            "crop_zoom": 1,
        },
        "extra": {
            "source_width": width,
            "source_height": height,
        },
    })
    return payload


def video_configure_payload(
    upload_id: str,
    caption: str,
    video: VideoAsset,
    context: UploadContext,
    config: UploadConfig,
    now: datetime,
) -> Dict[str, Any]:
    return {
        "caption": caption,
        "upload_id": upload_id,
        "source_type": VIDEO_SOURCE_TYPE,
        "camera_position": "unknown",
        "extra": {
            "source_width": video.width,
            "source_height": video.height,
        },
        "clips": [
            {
                "length": config.clip_length,
                "creation_date": timestamp(now),
                "source_type": VIDEO_SOURCE_TYPE,
                "camera_position": "back",
            }
        ],
        "poster_frame_index": 0,
        "audio_muted": False,
        "filter_type": "0",
        "video_result": "deprecated",
        "device": device_descriptor(context),
        "_csrftoken": context.csrf_token,
        "_uuid": context.device.device_guid,
        "_uid": context.username,
    }


def expose_payload(upload_id: str, context: UploadContext, config: UploadConfig) -> Dict[str, Any]:
    payload: Dict[str, Any] = session_fields(context)
    payload.update({
        "experiment": config.expose_experiment,
        "id": context.user_pk,
        "upload_id": upload_id,
    })
    return payload


# ---------------------------------------------------------------------------
# Album children
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PhotoChild:
    """Album photo entry."""
    upload_id: str

    def to_payload(self, context: UploadContext, config: UploadConfig, now: datetime) -> Dict[str, Any]:
        return {
            "timezone_offset": config.timezone_offset,
            "source_type": int(PHOTO_SOURCE_TYPE),
            "upload_id": self.upload_id,
            "caption": "",
        }


@dataclass(frozen=True)
class VideoChild:
    """Album video entry. Dimensions are already normalized."""
    upload_id: str
    width: int
    height: int
    length: float

    @classmethod
    def from_asset(cls, upload_id: str, video: VideoAsset, config: UploadConfig) -> "VideoChild":
        width, height = config.normalize_dimensions(video.width, video.height)
        return cls(upload_id=upload_id, width=width, height=height, length=video.length)

    def to_payload(self, context: UploadContext, config: UploadConfig, now: datetime) -> Dict[str, Any]:
        return {
            "timezone_offset": config.timezone_offset,
            "caption": "",
            "upload_id": self.upload_id,
            "date_time_original": timestamp(now),
            "source_type": PHOTO_SOURCE_TYPE,
            "extra": json.dumps({"source_width": self.width, "source_height": self.height}),
            "clips": json.dumps([{"length": self.length, "source_type": PHOTO_SOURCE_TYPE}]),
            "device": json.dumps(device_descriptor(context)),
            "length": self.length,
            "poster_frame_index": 0,
            "audio_muted": False,
            "filter_type": "0",
            "video_result": "deprecated",
        }


ChildItem = Union[PhotoChild, VideoChild]


def album_configure_payload(
    sidecar_id: str,
    caption: str,
    children: List[ChildItem],
    context: UploadContext,
    config: UploadConfig,
    now: datetime,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = session_fields(context)
    payload.update({
        "caption": caption,
        "client_sidecar_id": sidecar_id,
        "upload_id": sidecar_id,
        "device": device_descriptor(context),
        "children_metadata": [child.to_payload(context, config, now) for child in children],
    })
    return payload
