from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Request

from core.providers import providers_from_request
from core.settings import Settings
from documents.manifest import ManifestStore
from documents.service import DocumentService


# -----------------------------
# Canonical provider access
# -----------------------------

def get_providers(request: Request) -> Any:
    """
    Canonical runtime provider resolver.

    Source of truth: request.app.state.providers
    """
    return providers_from_request(request)


def get_app_settings(request: Request) -> Settings:
    return get_providers(request).settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


# -----------------------------
# Canonical service deps
# -----------------------------

def get_storage(request: Request) -> Any:
    """
    Canonical StorageProvider dependency.
    """
    return get_providers(request).storage


def get_manifest(request: Request) -> ManifestStore:
    """
    The process-wide ManifestStore, loaded during lifespan startup.
    """
    try:
        return request.app.state.manifest
    except AttributeError as exc:
        raise RuntimeError("Manifest not loaded on app.state (startup/lifespan not executed).") from exc


ManifestDep = Annotated[ManifestStore, Depends(get_manifest)]


def get_document_service(request: Request) -> DocumentService:
    settings = get_app_settings(request)
    return DocumentService(
        manifest=get_manifest(request),
        storage=get_storage(request),
        prefix=settings.docs.prefix,
    )


DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
