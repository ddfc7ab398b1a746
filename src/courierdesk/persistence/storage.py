"""Blob storage for receipts and waybill uploads (Supabase Storage)."""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Any
from urllib.parse import unquote, urlparse

_SAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


class BlobStorage:
    """Thin wrapper around one storage bucket."""

    def __init__(self, client: Any, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def make_object_path(self, filename: str) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        safe_name = _SAFE_NAME.sub("_", filename).strip("_") or "file"
        return f"{timestamp}_{uuid.uuid4().hex[:8]}_{safe_name}"

    def upload(self, filename: str, payload: bytes, content_type: str = "application/octet-stream") -> str:
        path = self.make_object_path(filename)
        self._bucket().upload(path, payload, {"content-type": content_type})
        return self._bucket().get_public_url(path)

    def object_path_from_url(self, url: str) -> str:
        marker = f"/object/public/{self.bucket}/"
        path = urlparse(url).path
        if marker not in path:
            raise ValueError(f"URL does not belong to bucket '{self.bucket}': {url}")
        return unquote(path.split(marker, 1)[1])

    def delete(self, url: str) -> str:
        path = self.object_path_from_url(url)
        self._bucket().remove([path])
        return path
