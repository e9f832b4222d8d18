"""Filesystem storage for uploaded interview recordings."""
from __future__ import annotations

import mimetypes
import os
from pathlib import Path

from config.settings import settings

_EXTENSIONS = {
    "video/webm": ".webm",
    "audio/webm": ".webm",
    "video/mp4": ".mp4",
    "audio/mp4": ".m4a",
    "audio/mpeg": ".mp3",
    "audio/wav": ".wav",
    "video/quicktime": ".mov",
}


def _extension(media_type: str) -> str:
    base = media_type.split(";", 1)[0].strip().lower()
    return _EXTENSIONS.get(base) or mimetypes.guess_extension(base) or ".bin"


class RecordingStore:
    """Writes recordings under ``RECORDINGS_DIR/<interview id>/``.

    References returned by ``save`` are paths relative to the root so the
    session record stays valid if the directory moves.
    """

    def __init__(self, root: str | os.PathLike[str] | None = None) -> None:
        self._root = Path(root) if root is not None else None

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else Path(settings.RECORDINGS_DIR)

    def save(self, interview_id: str, data: bytes, media_type: str) -> str:
        """Persist ``data`` atomically and return its reference."""

        if os.sep in interview_id or (os.altsep and os.altsep in interview_id):
            raise ValueError(f"Invalid interview id for storage: {interview_id!r}")
        ref = f"{interview_id}/recording{_extension(media_type)}"
        path = self.root / ref
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
        return ref

    def load(self, ref: str) -> bytes:
        """Return the recording bytes; raises FileNotFoundError if absent."""

        return (self.root / ref).read_bytes()


__all__ = ["RecordingStore"]
