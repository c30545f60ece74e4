from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else str(v)


def _env_int(name: str, default: int) -> int:
    raw = _env(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _split_csv(value: str) -> List[str]:
    return [x.strip() for x in (value or "").split(",") if x.strip()]


# ---------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class StorageSettings:
    """
    Storage provider configuration.

    provider:
      - "local"  -> LocalFilesStorageProvider
      - "minio"  -> MinIO/S3-compatible object store provider
    """
    provider: str

    # Local
    local_dir: str = "./data"

    # S3-compatible (used when provider == "minio")
    minio_endpoint: str = "http://minio:9000"
    minio_bucket: str = "docs"
    minio_access_key: str = ""
    minio_secret_key: str = ""


@dataclass(frozen=True)
class DocsSettings:
    """
    Document repository configuration.

    manifest_path: YAML file holding the list of document metadata.
    prefix:        storage key prefix for document bodies (e.g. "docs/").
    write_token:   shared secret required on POST /documents; empty disables the check.
    """
    manifest_path: str
    prefix: str = "docs/"
    write_token: str = ""


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    log_level: str
    cors_allow_origins: List[str]


@dataclass(frozen=True)
class Settings:
    storage: StorageSettings
    docs: DocsSettings
    server: ServerSettings


# ---------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------

def _normalize_storage_provider(raw: str) -> str:
    v = (raw or "").strip().lower()
    if v in ("minio", "s3", "object_store", "objectstore"):
        return "minio"
    if v in ("local", "file", "files", "filesystem"):
        return "local"
    return "local"


def _load_storage_settings() -> StorageSettings:
    """
    Storage precedence (DO NOT break this):
      1) STORAGE_MODE (deployment/runtime truth)  <-- must win
      2) STORAGE_PROVIDER (legacy override)
      3) default local
    """
    raw_mode = (_env("STORAGE_MODE", "") or "").strip()
    raw_provider = (_env("STORAGE_PROVIDER", "") or "").strip()
    provider = _normalize_storage_provider(raw_mode or raw_provider or "local")

    local_dir = (_env("STORAGE_LOCAL_DIR", "") or _env("LOCAL_STORAGE_DIR", "") or "./data").strip()

    minio_endpoint = (_env("MINIO_ENDPOINT", "") or "http://minio:9000").strip().rstrip("/")
    minio_bucket = (_env("MINIO_BUCKET", "") or "docs").strip()
    minio_access_key = (_env("MINIO_ACCESS_KEY", "") or "").strip()
    minio_secret_key = (_env("MINIO_SECRET_KEY", "") or "").strip()

    return StorageSettings(
        provider=provider,
        local_dir=local_dir,
        minio_endpoint=minio_endpoint,
        minio_bucket=minio_bucket,
        minio_access_key=minio_access_key,
        minio_secret_key=minio_secret_key,
    )


def _normalize_prefix(raw: str) -> str:
    prefix = (raw or "").strip().strip("/")
    return f"{prefix}/" if prefix else ""


def _load_docs_settings() -> DocsSettings:
    manifest_path = (_env("DOCS_MANIFEST_PATH", "") or "./data/manifest.yaml").strip()
    prefix = _normalize_prefix(_env("DOCS_PREFIX", "docs/"))

    # Token is compared verbatim; only surrounding whitespace is dropped.
    write_token = (_env("DOCS_WRITE_TOKEN", "") or "").strip()

    return DocsSettings(
        manifest_path=manifest_path,
        prefix=prefix,
        write_token=write_token,
    )


def _load_server_settings() -> ServerSettings:
    host = (_env("HOST", "") or "0.0.0.0").strip()
    port = _env_int("PORT", 8000)
    if port <= 0:
        port = 8000

    log_level = (_env("LOG_LEVEL", "") or "INFO").strip().upper()

    origins = _split_csv(_env("CORS_ALLOW_ORIGINS", "*")) or ["*"]

    return ServerSettings(
        host=host,
        port=int(port),
        log_level=log_level,
        cors_allow_origins=origins,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        storage=_load_storage_settings(),
        docs=_load_docs_settings(),
        server=_load_server_settings(),
    )
