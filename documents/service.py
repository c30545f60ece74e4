# documents/service.py
from __future__ import annotations

import logging
from typing import List, Optional

from documents.errors import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    FileNameConflictError,
    ManifestError,
    PersistenceError,
)
from documents.files import (
    delete_document,
    fetch_document,
    read_raw,
    restore_raw,
    write_document,
)
from documents.manifest import ManifestStore
from documents.models import Document, Metadata, UpsertOutcome
from providers.storage import StorageProvider

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Keeps the manifest and the stored document bodies in step.

    Writes happen under the manifest lock: document body first, manifest
    second. A failed manifest save puts the previous body back, so the
    two never disagree after an error.
    """

    def __init__(self, manifest: ManifestStore, storage: StorageProvider, prefix: str = "docs/") -> None:
        self.manifest = manifest
        self.storage = storage
        self.prefix = prefix

    # -----------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------

    def list_documents(self) -> List[Metadata]:
        return self.manifest.records()

    def get_by_filename(self, file_name: str) -> Document:
        meta = self.manifest.find_by_filename(file_name)
        if meta is None:
            raise DocumentNotFoundError(file_name)
        return fetch_document(self.storage, meta, self.prefix)

    def get_by_id(self, doc_id: str) -> Document:
        meta = self.manifest.find_by_id(doc_id)
        if meta is None:
            raise DocumentNotFoundError(doc_id)
        return fetch_document(self.storage, meta, self.prefix)

    # -----------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------

    async def upsert(self, doc: Document) -> UpsertOutcome:
        """
        Insert `doc` when its id is new, otherwise replace the existing
        entry field-for-field.
        """
        async with self.manifest.lock:
            meta = doc.metadata
            previous = self.manifest.find_by_id(meta.id)
            self._check_file_name_owner(meta)

            if previous is None:
                self._persist(doc, self.manifest.insert(meta))
                logger.info("added: %s (id=%s)", doc.fileName, doc.id)
                return UpsertOutcome.ADDED

            self._persist(doc, self.manifest.replace(meta))
            if previous.fileName != meta.fileName:
                self._remove_stale(previous.fileName)
            logger.info("updated: %s (id=%s)", doc.fileName, doc.id)
            return UpsertOutcome.UPDATED

    async def create(self, doc: Document) -> None:
        """Insert `doc`; an existing id is refused and nothing is written."""
        async with self.manifest.lock:
            meta = doc.metadata
            if self.manifest.contains(meta.id):
                logger.info("duplicate document id=%s fileName=%s", doc.id, doc.fileName)
                raise DuplicateDocumentError(meta.id)
            self._check_file_name_owner(meta)

            self._persist(doc, self.manifest.insert(meta))
            logger.info("pushing document: %s (id=%s)", doc.fileName, doc.id)

    # -----------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------

    def _check_file_name_owner(self, meta: Metadata) -> None:
        owner: Optional[Metadata] = self.manifest.find_by_filename(meta.fileName)
        if owner is not None and owner.id != meta.id:
            logger.warning("fileName %s already used by id=%s (incoming id=%s)", meta.fileName, owner.id, meta.id)
            raise FileNameConflictError(meta.fileName, owner.id)

    def _persist(self, doc: Document, records: List[Metadata]) -> None:
        before = read_raw(self.storage, doc.fileName, self.prefix)

        try:
            write_document(self.storage, doc, self.prefix)
        except Exception as exc:
            logger.exception("Document write failed for %s", doc.fileName)
            raise PersistenceError(f"Failed to write document {doc.fileName}: {exc}") from exc

        try:
            self.manifest.commit(records)
        except ManifestError as exc:
            logger.exception("Manifest save failed after writing %s; restoring document", doc.fileName)
            try:
                restore_raw(self.storage, doc.fileName, before, self.prefix)
            except Exception:
                logger.exception("Rollback of %s failed; manifest and document may disagree", doc.fileName)
            raise PersistenceError(f"Failed to save manifest: {exc}") from exc

    def _remove_stale(self, file_name: str) -> None:
        try:
            delete_document(self.storage, file_name, self.prefix)
        except Exception:
            logger.exception("Could not remove previous document body %s", file_name)
