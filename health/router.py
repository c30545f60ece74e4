# health/router.py
from fastapi import APIRouter

from core.deps import ManifestDep

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    # Keep this super simple and always unauthenticated
    return {"ok": True}


@router.get("/health/manifest")
def health_manifest(manifest: ManifestDep):
    """
    Reports how many documents the in-memory manifest holds and where it lives.
    """
    return {
        "ok": True,
        "documents": len(manifest),
        "manifest": manifest.path,
    }
