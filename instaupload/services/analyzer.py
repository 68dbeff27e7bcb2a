"""
Analyzer Service - resolves asset payloads and probes image dimensions.

Uses Pillow for image headers; file reads run in a worker thread.
"""
import asyncio
import io
from pathlib import Path
from typing import Tuple, Union

from PIL import Image, UnidentifiedImageError

from ..errors import StepError
from ..models import ImageAsset, VideoAsset

VIDEO_EXTENSIONS = {'.mp4', '.mov', '.m4v', '.3gp', '.webm'}
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.heic', '.heif'}


class AnalyzerService:
    """Reads asset bytes without touching the asset itself."""

    async def read_bytes(self, asset: Union[ImageAsset, VideoAsset]) -> bytes:
        """
        Resolve an asset to bytes.

        Args:
            asset: Image or video asset (bytes or path)

        Returns:
            Raw payload

        Raises:
            StepError: payload is empty, the file cannot be read, or its
                extension does not match the asset type
        """
        if asset.data is not None:
            data = asset.data
        else:
            self.check_kind(asset)
            try:
                data = await asyncio.to_thread(asset.path.read_bytes)
            except OSError as exc:
                raise StepError.validation(f"Cannot read {asset.path}: {exc}") from exc
        if not data:
            raise StepError.validation("Asset payload is empty")
        return data

    def check_kind(self, asset: Union[ImageAsset, VideoAsset]) -> None:
        """Reject a path-backed asset whose extension does not match its type."""
        if isinstance(asset, VideoAsset):
            if not self.is_video(asset.path):
                raise StepError.validation(f"Not a video file: {asset.path.name}")
        elif not self.is_photo(asset.path):
            raise StepError.validation(f"Not a photo file: {asset.path.name}")

    def image_size(self, data: bytes) -> Tuple[int, int]:
        """Return (width, height) read from the image header."""
        try:
            with Image.open(io.BytesIO(data)) as image:
                return image.size
        except (UnidentifiedImageError, OSError) as exc:
            raise StepError.validation("Could not determine image dimensions") from exc

    @staticmethod
    def is_video(path: Path) -> bool:
        return Path(path).suffix.lower() in VIDEO_EXTENSIONS

    @staticmethod
    def is_photo(path: Path) -> bool:
        return Path(path).suffix.lower() in IMAGE_EXTENSIONS
