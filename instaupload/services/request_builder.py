"""
Request Builder - builds signed, device-fingerprinted requests.

Endpoints are relative to ``UploadConfig.api_url``; absolute URLs (the
one-time video upload targets) are used as-is.
"""
import hashlib
import hmac
import json
import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from ..models import DeviceInfo, MediaType, UploadConfig
from .multipart import MultipartPart, content_type, encode_multipart

logger = logging.getLogger(__name__)

UPLOAD_PHOTO = "upload/photo/"
UPLOAD_VIDEO = "upload/video/"
MEDIA_CONFIGURE = "media/configure/"
MEDIA_ALBUM_CONFIGURE = "media/configure_sidecar/"
OEMBED = "oembed/"


def media_info(media_id: str) -> str:
    return f"media/{media_id}/info/"


def media_delete(media_id: str) -> str:
    return f"media/{media_id}/delete/"


def media_edit(media_id: str) -> str:
    return f"media/{media_id}/edit_media/"


def media_likers(media_id: str) -> str:
    return f"media/{media_id}/likers/"


def media_like(media_id: str) -> str:
    return f"media/{media_id}/like/"


def media_unlike(media_id: str) -> str:
    return f"media/{media_id}/unlike/"


def media_permalink(media_id: str) -> str:
    return f"media/{media_id}/permalink/"


DELETE_MEDIA_TYPES = {
    MediaType.IMAGE: "PHOTO",
    MediaType.VIDEO: "VIDEO",
    MediaType.CAROUSEL: "CAROUSEL",
}


def sign_payload(fields: Dict[str, Any], key: str, key_version: str) -> Dict[str, str]:
    """Return the form fields carrying the HMAC-signed JSON body."""
    body = json.dumps(fields, separators=(",", ":"))
    signature = hmac.new(key.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()
    return {
        "signed_body": f"{signature}.{body}",
        "ig_sig_key_version": key_version,
    }


def user_agent(device: DeviceInfo, config: UploadConfig) -> str:
    version = device.android_version
    android = f"{version.api_level}/{version.version_number}" if version else "0/0"
    return (
        f"Instagram {config.app_version} Android ({android}; {device.dpi}; "
        f"{device.resolution}; {device.manufacturer}; {device.model}; "
        f"{device.model_identifier}; {device.cpu}; {config.locale})"
    )


class RequestBuilder:
    """
    Builds ``httpx.Request`` objects for the private API.

    Implements IRequestBuilder protocol.
    """

    def __init__(self, device: DeviceInfo, config: Optional[UploadConfig] = None):
        self._device = device
        self._config = config or UploadConfig()
        self._base_url = httpx.URL(self._config.api_url)

    def url(self, endpoint: str) -> httpx.URL:
        return self._base_url.join(endpoint)

    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": user_agent(self._device, self._config),
            "X-IG-Capabilities": "3brTBw==",
            "X-IG-Connection-Type": "WIFI",
            "Accept-Language": self._config.locale.replace("_", "-"),
        }

    def build_default(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Request:
        return httpx.Request(method, self.url(endpoint), params=params, headers=self.default_headers())

    def build_signed(
        self,
        method: str,
        endpoint: str,
        fields: Dict[str, Any],
        host: Optional[str] = None,
    ) -> httpx.Request:
        headers = self.default_headers()
        if host:
            headers["Host"] = host
        data = sign_payload(fields, self._config.signature_key, self._config.signature_key_version)
        logger.debug(f"Signed {method} {endpoint} with {len(fields)} fields")
        return httpx.Request(method, self.url(endpoint), data=data, headers=headers)

    def build_multipart(
        self,
        method: str,
        endpoint: str,
        parts: Sequence[MultipartPart],
        boundary: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Request:
        request_headers = self.default_headers()
        request_headers.update(headers or {})
        request_headers["Content-Type"] = content_type(boundary)
        body = encode_multipart(parts, boundary)
        logger.debug(f"Multipart {method} {endpoint}: {len(parts)} parts, {len(body)} bytes")
        return httpx.Request(method, self.url(endpoint), content=body, headers=request_headers)
