from __future__ import annotations


class DocumentStoreError(Exception):
    """Base class for document repository failures."""


class ManifestError(DocumentStoreError):
    """Manifest file missing, unreadable, malformed, or not writable."""


class DocumentNotFoundError(DocumentStoreError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Document not found: {key}")
        self.key = key


class DuplicateDocumentError(DocumentStoreError):
    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Document id already exists: {doc_id}")
        self.doc_id = doc_id


class FileNameConflictError(DocumentStoreError):
    def __init__(self, file_name: str, owner_id: str) -> None:
        super().__init__(f"fileName {file_name} already belongs to document {owner_id}")
        self.file_name = file_name
        self.owner_id = owner_id


class InvalidFileNameError(DocumentStoreError, ValueError):
    """fileName is empty or would address something other than a single stored file."""


class PersistenceError(DocumentStoreError):
    """A document/manifest write failed; the repository was rolled back where possible."""
