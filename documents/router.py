# documents/router.py
from __future__ import annotations

import hmac
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from core.deps import DocumentServiceDep, SettingsDep
from documents.errors import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    FileNameConflictError,
    PersistenceError,
)
from documents.models import (
    CreateDocumentRequest,
    Document,
    Metadata,
    MessageResponse,
    UpsertOutcome,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def _msg(status_code: int, msg: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"msg": msg})


def _token_matches(expected: str, given: Optional[str]) -> bool:
    """
    No configured token means writes are not token-gated.
    """
    if not expected:
        return True
    return hmac.compare_digest(expected.encode("utf-8"), (given or "").encode("utf-8"))


# ---------------------------------------------------------------------
# GET /documents   - list manifest
# ---------------------------------------------------------------------

@router.get("", response_model=List[Metadata])
async def get_documents(service: DocumentServiceDep):
    logger.info("file list requested")
    return service.list_documents()


# ---------------------------------------------------------------------
# GET /documents/by-id/{doc_id}
# ---------------------------------------------------------------------

@router.get("/by-id/{doc_id}", response_model=Document)
async def get_document_by_id(doc_id: str, service: DocumentServiceDep):
    logger.info("GET id=%s", doc_id)
    try:
        return service.get_by_id(doc_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail=f"Document not found: {doc_id}")


# ---------------------------------------------------------------------
# GET /documents/{file_name}
# ---------------------------------------------------------------------

@router.get("/{file_name}", response_model=Document)
async def get_document(file_name: str, service: DocumentServiceDep):
    logger.info("GET %s", file_name)
    try:
        return service.get_by_filename(file_name)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail=f"Document not found: {file_name}")


# ---------------------------------------------------------------------
# POST /documents   - create (refuses existing ids)
# ---------------------------------------------------------------------

@router.post("", response_model=MessageResponse)
async def create_document(
    body: CreateDocumentRequest,
    service: DocumentServiceDep,
    settings: SettingsDep,
):
    logger.info("processing POST request for %s", body.fileName)

    if not _token_matches(settings.docs.write_token, body.token):
        logger.warning("POST %s rejected: token mismatch", body.fileName)
        return _msg(400, "Token does not match")

    try:
        await service.create(body.to_document())
    except DuplicateDocumentError:
        return _msg(409, "file already exists")
    except FileNameConflictError as exc:
        return _msg(409, str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    return MessageResponse(msg="OK")


# ---------------------------------------------------------------------
# PUT /documents   - insert or update by id
# ---------------------------------------------------------------------

@router.put("", response_model=MessageResponse)
async def update_document(body: Document, service: DocumentServiceDep):
    try:
        outcome = await service.upsert(body)
    except FileNameConflictError as exc:
        return _msg(409, str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    if outcome is UpsertOutcome.ADDED:
        return MessageResponse(msg=f"Added: {body.fileName}")
    return MessageResponse(msg=f"Updated: {body.fileName}")
