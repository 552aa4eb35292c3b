"""Error types shared by the sync scripts."""

from pathlib import Path


class SyncError(Exception):
    """Base class for errors that abort a sync run."""


class DocumentError(SyncError):
    """A structured document (curriculum, authors, config) could not be used."""

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")
