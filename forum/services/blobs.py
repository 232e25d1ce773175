from __future__ import annotations

import uuid
from pathlib import Path
from typing import Optional

from starlette.concurrency import run_in_threadpool

from forum.core.errors import InvalidInput
from forum.core.settings import Settings, settings

# (mime, extension, signature test); the client's filename and content type
# are never consulted
_SIGNATURES = (
    ("image/jpeg", "jpg", lambda b: b[:3] == b"\xff\xd8\xff"),
    ("image/png", "png", lambda b: b[:8] == b"\x89PNG\r\n\x1a\n"),
    ("image/gif", "gif", lambda b: b[:6] in (b"GIF87a", b"GIF89a")),
    ("image/webp", "webp", lambda b: b[:4] == b"RIFF" and b[8:12] == b"WEBP"),
)


def sniff_image(data: bytes) -> Optional[tuple[str, str]]:
    """Return ``(mime, extension)`` for an allowed image type, else None."""
    for mime, ext, matches in _SIGNATURES:
        if matches(data):
            return mime, ext
    return None


class BlobStore:
    def __init__(self, cfg: Settings = settings) -> None:
        self.root = Path(cfg.upload_dir)
        self.url_prefix = "/" + cfg.uploads_url_prefix.strip("/")
        self.max_bytes = cfg.max_upload_bytes

    def check_image(self, data: bytes) -> str:
        if not data:
            raise InvalidInput("Uploaded file is empty")
        if len(data) > self.max_bytes:
            raise InvalidInput(f"Image is too large (max {self.max_bytes // (1024 * 1024)} MiB)")
        found = sniff_image(data)
        if found is None:
            raise InvalidInput("Only JPEG, PNG, WEBP and GIF images are allowed")
        return found[1]

    def _write(self, name: str, data: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / name).write_bytes(data)

    async def save(self, data: bytes) -> str:
        """Validate and persist an image; returns its public path."""
        ext = self.check_image(data)
        name = f"{uuid.uuid4().hex}.{ext}"
        await run_in_threadpool(self._write, name, data)
        return f"{self.url_prefix}/{name}"

    async def delete(self, public_path: str) -> None:
        """Remove a file previously returned by ``save``; unknown paths are ignored."""
        prefix = self.url_prefix + "/"
        if not public_path.startswith(prefix):
            return
        name = Path(public_path[len(prefix):]).name
        await run_in_threadpool((self.root / name).unlink, missing_ok=True)
