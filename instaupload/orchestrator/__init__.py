"""Orchestrator package - upload sequences and album composition."""
from .album import AlbumComposer
from .core import UploadOrchestrator
from .upload_session import UploadSessionManager

__all__ = ["UploadOrchestrator", "UploadSessionManager", "AlbumComposer"]
