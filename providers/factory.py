from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.settings import Settings, get_settings
from providers.storage import StorageProvider
from providers.impl.storage_local_files import LocalFilesStorageProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Providers:
    """
    Central container for providers, attached to app.state at startup.
    """
    settings: Settings
    storage: StorageProvider


def build_storage(settings: Settings) -> StorageProvider:
    s = settings.storage
    if s.provider == "minio":
        # Imported lazily so local mode never touches the minio client.
        from providers.impl.storage_minio import MinioStorageProvider

        logger.info("Using MinIO storage endpoint=%s bucket=%s", s.minio_endpoint, s.minio_bucket)
        return MinioStorageProvider.from_settings(s)

    logger.info("Using local storage dir=%s", s.local_dir)
    return LocalFilesStorageProvider(s.local_dir)


def build_providers(settings: Optional[Settings] = None) -> Providers:
    settings = settings or get_settings()
    return Providers(settings=settings, storage=build_storage(settings))
