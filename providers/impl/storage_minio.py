from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Optional, Dict, Any

from minio import Minio
from minio.error import S3Error

from core.settings import StorageSettings
from providers.storage import StorageProvider

_MISSING_CODES = ("NoSuchKey", "NoSuchObject")


def _strip_http(endpoint: str) -> str:
    # Minio client expects "host:port" (no scheme)
    endpoint = (endpoint or "").strip()
    endpoint = endpoint.replace("http://", "").replace("https://", "")
    return endpoint.rstrip("/")


@dataclass
class MinioStorageProvider(StorageProvider):
    """
    MinIO-backed StorageProvider for document bodies.

    Notes:
      - The bucket is created on startup when missing.
      - Missing keys surface as FileNotFoundError, same as the local provider.
    """

    endpoint: str
    bucket: str
    access_key: str
    secret_key: str
    secure: bool = False

    def __post_init__(self) -> None:
        host = _strip_http(self.endpoint)
        if not host:
            raise RuntimeError("MINIO_ENDPOINT is empty or invalid")

        self._client = Minio(
            host,
            access_key=self.access_key,
            secret_key=self.secret_key,
            secure=bool(self.secure),
        )

        try:
            if not self._client.bucket_exists(self.bucket):
                self._client.make_bucket(self.bucket)
        except Exception as e:
            raise RuntimeError(f"MinIO bucket init failed (bucket={self.bucket}): {e}") from e

    @classmethod
    def from_settings(cls, s: StorageSettings) -> "MinioStorageProvider":
        if not s.minio_access_key or not s.minio_secret_key:
            raise RuntimeError("MINIO_ACCESS_KEY / MINIO_SECRET_KEY not set")

        return cls(
            endpoint=s.minio_endpoint,
            bucket=s.minio_bucket,
            access_key=s.minio_access_key,
            secret_key=s.minio_secret_key,
            secure=s.minio_endpoint.lower().startswith("https://"),
        )

    def get_object(self, key: str) -> bytes:
        key = (key or "").lstrip("/")
        try:
            resp = self._client.get_object(self.bucket, key)
        except S3Error as e:
            if getattr(e, "code", "") in _MISSING_CODES:
                raise FileNotFoundError(key) from e
            raise
        try:
            return resp.read()
        finally:
            resp.close()
            resp.release_conn()

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        key = (key or "").lstrip("/")
        data = data or b""

        # metadata headers must be strings
        meta: Dict[str, str] = {}
        for k, v in (metadata or {}).items():
            if v is not None:
                meta[str(k)] = str(v)

        self._client.put_object(
            bucket_name=self.bucket,
            object_name=key,
            data=io.BytesIO(data),
            length=len(data),
            content_type=content_type or "application/octet-stream",
            metadata=meta or None,
        )

    def head_object(self, key: str) -> Dict[str, Any]:
        key = (key or "").lstrip("/")
        try:
            st = self._client.stat_object(self.bucket, key)
        except S3Error as e:
            if getattr(e, "code", "") in _MISSING_CODES:
                raise FileNotFoundError(key) from e
            raise
        return {"key": key, "size": st.size, "mtime": st.last_modified}

    def delete_object(self, key: str) -> None:
        key = (key or "").lstrip("/")
        try:
            self._client.remove_object(self.bucket, key)
        except S3Error as e:
            if getattr(e, "code", "") in _MISSING_CODES:
                return
            raise
