"""
Models for instaupload.

Immutable dataclasses: caller-owned assets, the read-only upload context,
configuration, and the Media/Result objects handed back to callers.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple


class ResultStatus(Enum):
    """Outcome of a public operation."""
    SUCCESS = "success"
    FAILED = "failed"


class ErrorKind(Enum):
    """Failure classification surfaced to callers."""
    TRANSPORT = "transport"    # non-2xx status or network-level failure
    DECODE = "decode"          # body did not match the expected shape
    PROTOCOL = "protocol"      # an expected downstream field was missing
    VALIDATION = "validation"  # bad input or unsupported device
    UNKNOWN = "unknown"        # unexpected exception inside a sequence


@dataclass(frozen=True)
class UploadError:
    """Classified failure with the raw response when there was one."""
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    body: Optional[str] = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status={self.status_code})"
        return self.message


@dataclass(frozen=True)
class Result:
    """Immutable result of an upload or media operation."""
    status: ResultStatus
    value: Any = None
    error: Optional[UploadError] = None

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def ok(cls, value: Any) -> "Result":
        return cls(status=ResultStatus.SUCCESS, value=value)

    @classmethod
    def fail(cls, error: UploadError) -> "Result":
        return cls(status=ResultStatus.FAILED, error=error)

    @classmethod
    def unexpected_response(cls, status_code: int, body: str) -> "Result":
        return cls.fail(unexpected_response_error(status_code, body))


def unexpected_response_error(status_code: int, body: str) -> UploadError:
    return UploadError(
        kind=ErrorKind.TRANSPORT,
        message=f"Unexpected response status: {status_code}",
        status_code=status_code,
        body=body,
    )


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

def _check_source(data: Optional[bytes], path: Optional[Path]) -> None:
    if (data is None) == (path is None):
        raise ValueError("Exactly one of 'data' or 'path' must be provided")


@dataclass(frozen=True)
class ImageAsset:
    """Photo to upload: in-memory bytes or a file path, never both."""
    data: Optional[bytes] = None
    path: Optional[Path] = None
    width: int = 0
    height: int = 0

    def __post_init__(self):
        if self.path is not None and not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))
        _check_source(self.data, self.path)


@dataclass(frozen=True)
class VideoAsset:
    """Video to upload. ``length`` is the duration in seconds."""
    data: Optional[bytes] = None
    path: Optional[Path] = None
    width: int = 0
    height: int = 0
    length: float = 0.0

    def __post_init__(self):
        if self.path is not None and not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))
        _check_source(self.data, self.path)

    def filename(self, upload_id: str) -> str:
        if self.path is not None:
            return self.path.name
        return f"video_{upload_id}.mp4"


@dataclass(frozen=True)
class VideoUpload:
    """A video together with its paired thumbnail."""
    video: VideoAsset
    thumbnail: ImageAsset


# ---------------------------------------------------------------------------
# Device / session context and configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AndroidVersion:
    version_number: str   # e.g. "7.0"
    api_level: str        # e.g. "24"


@dataclass(frozen=True)
class DeviceInfo:
    """Device fingerprint sent with every request."""
    device_guid: str
    manufacturer: str = "samsung"
    model: str = "SM-G930F"
    model_identifier: str = "herolte"
    android_version: Optional[AndroidVersion] = AndroidVersion("7.0", "24")
    dpi: str = "640dpi"
    resolution: str = "1440x2560"
    cpu: str = "samsungexynos8890"


@dataclass(frozen=True)
class UploadContext:
    """
    Read-only device and session data for one logical call.

    Passed explicitly into every step; never mutated.
    """
    device: DeviceInfo
    csrf_token: str
    user_pk: str
    username: str


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for request building and uploads."""
    api_url: str = "https://i.instagram.com/api/v1/"
    api_host: str = "i.instagram.com"
    upload_host: str = "upload.instagram.com"
    signature_key: str = ""
    signature_key_version: str = "4"
    app_version: str = "35.0.0.20.96"
    locale: str = "en_US"
    timeout: int = 60
    image_compression: str = '{"lib_name":"jt","lib_version":"1.3.0","quality":"87"}'
    retry_context: str = '{"num_step_auto_retry":0,"num_reupload":0,"num_step_manual_retry":0}'
    fallback_dimension: int = 640
    timezone_offset: str = "16200"
    clip_length: float = 10.0
    expose_experiment: str = "ig_android_profile_contextual_feed"

    def normalize_dimensions(self, width: int, height: int) -> Tuple[int, int]:
        """Replace zero-sized dimensions with the fallback square."""
        if width == 0 or height == 0:
            return self.fallback_dimension, self.fallback_dimension
        return width, height


# ---------------------------------------------------------------------------
# Media domain objects
# ---------------------------------------------------------------------------

class MediaType(Enum):
    IMAGE = 1
    VIDEO = 2
    CAROUSEL = 8


@dataclass(frozen=True)
class MediaUser:
    pk: str
    username: str
    full_name: Optional[str] = None
    profile_pic_url: Optional[str] = None


@dataclass(frozen=True)
class ImageCandidate:
    url: str
    width: int
    height: int


@dataclass(frozen=True)
class VideoCandidate:
    url: str
    width: int
    height: int
    type: Optional[int] = None


@dataclass(frozen=True)
class Media:
    """
    Caller-facing media item.

    Built only from a fully decoded configure/expose/album response.
    Album items carry their children in server order.
    """
    pk: str
    id: str
    media_type: MediaType
    code: Optional[str] = None
    caption: str = ""
    width: int = 0
    height: int = 0
    taken_at: Optional[datetime] = None
    user: Optional[MediaUser] = None
    images: Tuple[ImageCandidate, ...] = ()
    videos: Tuple[VideoCandidate, ...] = ()
    video_duration: Optional[float] = None
    like_count: int = 0
    comment_count: int = 0
    children: Tuple["Media", ...] = field(default_factory=tuple)

    @property
    def is_album(self) -> bool:
        return self.media_type == MediaType.CAROUSEL


@dataclass(frozen=True)
class LikersList:
    users_count: int
    users: Tuple[MediaUser, ...] = ()
