"""Upload ids and per-asset upload session state."""
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..models import Media, UploadError, VideoUpload
from ..services.decoder import UploadUrl

_id_lock = threading.Lock()
_last_id = 0


def generate_upload_id() -> str:
    """
    Return a fresh millisecond-timestamp upload id.

    Strictly increasing within the process, so two attempts never share one.
    """
    global _last_id
    with _id_lock:
        _last_id = max(int(time.time() * 1000), _last_id + 1)
        return str(_last_id)


class VideoUploadState(Enum):
    """Progress of one video through its dependent calls."""
    PENDING = "pending"
    CREATED = "created"                        # job and transfer target issued
    TRANSFERRED = "transferred"                # binary sent to the job url
    THUMBNAIL_ATTACHED = "thumbnail_attached"
    CONFIGURED = "configured"
    EXPOSED = "exposed"
    FAILED = "failed"


@dataclass
class UploadSession:
    """
    Ephemeral state of one video's upload sequence.

    Lives for a single call; never handed to callers.
    """
    upload_id: str
    upload: VideoUpload
    caption: str = ""
    is_sidecar: bool = False
    state: VideoUploadState = VideoUploadState.PENDING
    target: Optional[UploadUrl] = None
    media: Optional[Media] = None
    error: Optional[UploadError] = None
    history: List[VideoUploadState] = field(default_factory=list)

    def advance(self, state: VideoUploadState) -> None:
        self.history.append(self.state)
        self.state = state

    def fail(self, error: UploadError) -> None:
        self.error = error
        self.advance(VideoUploadState.FAILED)

    @property
    def failed(self) -> bool:
        return self.state == VideoUploadState.FAILED
