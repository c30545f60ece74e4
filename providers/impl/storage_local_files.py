from __future__ import annotations

import os
from typing import Any, Dict, Optional

from providers.storage import StorageProvider


class LocalFilesStorageProvider(StorageProvider):
    """
    Local filesystem storage provider rooted at StorageSettings.local_dir.

    Keys map one-to-one onto relative paths under the root. A key that would
    resolve outside the root raises ValueError instead of being rewritten.
    """

    def __init__(self, root_dir: str) -> None:
        self.root_dir = root_dir

    def _path(self, key: str) -> str:
        root = os.path.realpath(self.root_dir)
        rel = (key or "").lstrip("/").replace("/", os.sep)
        path = os.path.realpath(os.path.join(root, rel))
        if not rel or os.path.commonpath([root, path]) != root or path == root:
            raise ValueError(f"Storage key escapes root: {key!r}")
        return path

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def get_object(self, key: str) -> bytes:
        path = self._path(key)
        with open(path, "rb") as f:
            return f.read()

    def head_object(self, key: str) -> Dict[str, Any]:
        path = self._path(key)
        st = os.stat(path)
        return {"key": key, "size": st.st_size, "mtime": st.st_mtime}

    def delete_object(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)
