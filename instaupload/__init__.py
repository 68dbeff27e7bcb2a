"""
instaupload - photo, video and album uploads to Instagram's private API.

Turns the platform's multi-step upload protocol into one call per media:

Usage:
    from instaupload import UploadOrchestrator, UploadContext, DeviceInfo, ImageAsset

    context = UploadContext(
        device=DeviceInfo(device_guid="..."),
        csrf_token="...",
        user_pk="123",
        username="someone",
    )
    async with UploadOrchestrator(context, cookies=cookies) as client:
        result = await client.upload_photo(ImageAsset(path="photo.jpg", width=1080, height=1080), "hello")

    # Video with thumbnail
    result = await client.upload_video(VideoUpload(video=..., thumbnail=...), "caption")

    # Album: photos first, then videos, in the given order
    result = await client.upload_album(photos, videos, "caption")

Every call returns a ``Result``; check ``result.success`` and read
``result.value`` (a ``Media``) or ``result.error`` (an ``UploadError``).
"""
from .models import (
    AndroidVersion,
    DeviceInfo,
    ErrorKind,
    ImageAsset,
    LikersList,
    Media,
    MediaType,
    MediaUser,
    Result,
    ResultStatus,
    UploadConfig,
    UploadContext,
    UploadError,
    VideoAsset,
    VideoUpload,
)
from .orchestrator import AlbumComposer, UploadOrchestrator, UploadSessionManager
from .services import HTTPTransport, MediaConverter, MediaService, RequestBuilder, ResponseDecoder
from .logging_setup import configure_logging

__version__ = "0.1.0"
__all__ = [
    # Main
    "UploadOrchestrator",
    "UploadSessionManager",
    "AlbumComposer",
    # Models
    "AndroidVersion",
    "DeviceInfo",
    "ErrorKind",
    "ImageAsset",
    "LikersList",
    "Media",
    "MediaType",
    "MediaUser",
    "Result",
    "ResultStatus",
    "UploadConfig",
    "UploadContext",
    "UploadError",
    "VideoAsset",
    "VideoUpload",
    # Services
    "HTTPTransport",
    "MediaConverter",
    "MediaService",
    "RequestBuilder",
    "ResponseDecoder",
    "configure_logging",
]
