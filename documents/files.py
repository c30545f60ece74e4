"""
Document bodies in object storage.

Each document is one object keyed <prefix><fileName>, stored as Markdown with
a YAML front matter block holding its metadata:

    ---
    id: d1
    fileName: a.md
    ...
    ---
    <content>
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import yaml

from documents.errors import DocumentNotFoundError
from documents.models import Document, Metadata, check_file_name
from providers.storage import StorageProvider

logger = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "---"
CONTENT_TYPE = "text/markdown; charset=utf-8"


def document_key(file_name: str, prefix: str = "docs/") -> str:
    return f"{prefix}{check_file_name(file_name)}"


def render_document(doc: Document) -> str:
    meta = yaml.safe_dump(
        doc.metadata.to_manifest_entry(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"{FRONT_MATTER_DELIMITER}\n{meta}{FRONT_MATTER_DELIMITER}\n{doc.content}"


def split_front_matter(text: str) -> Tuple[dict, str]:
    """
    Return (front matter mapping, body).

    Text without a leading front matter block is all body.
    """
    head = f"{FRONT_MATTER_DELIMITER}\n"
    if not text.startswith(head):
        return {}, text

    end = text.find(f"\n{FRONT_MATTER_DELIMITER}\n", len(head) - 1)
    if end == -1:
        return {}, text

    raw_meta = text[len(head):end + 1]
    body = text[end + len(FRONT_MATTER_DELIMITER) + 2:]
    try:
        meta = yaml.safe_load(raw_meta) or {}
    except yaml.YAMLError:
        logger.warning("Unparseable front matter; treating whole object as content")
        return {}, text
    if not isinstance(meta, dict):
        return {}, text
    return meta, body


def read_raw(storage: StorageProvider, file_name: str, prefix: str = "docs/") -> Optional[bytes]:
    try:
        return storage.get_object(document_key(file_name, prefix))
    except FileNotFoundError:
        return None


def fetch_document(storage: StorageProvider, metadata: Optional[Metadata], prefix: str = "docs/") -> Document:
    """
    Load the stored body for `metadata` and combine it with the manifest entry.

    The manifest is authoritative for metadata; the front matter in the
    object is only used to find where the content starts.
    """
    if metadata is None:
        raise DocumentNotFoundError("<no manifest entry>")

    data = read_raw(storage, metadata.fileName, prefix)
    if data is None:
        raise DocumentNotFoundError(metadata.fileName)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Document %s is not valid UTF-8 (%s); undecodable bytes replaced", metadata.fileName, exc)
        text = data.decode("utf-8", errors="replace")

    _, content = split_front_matter(text)
    return Document(**metadata.model_dump(), content=content)


def write_document(storage: StorageProvider, doc: Document, prefix: str = "docs/") -> None:
    storage.put_object(
        key=document_key(doc.fileName, prefix),
        data=render_document(doc).encode("utf-8"),
        content_type=CONTENT_TYPE,
        metadata={"document-id": doc.id},
    )


def restore_raw(storage: StorageProvider, file_name: str, data: Optional[bytes], prefix: str = "docs/") -> None:
    """Put back bytes captured by read_raw; None means the object did not exist."""
    if data is None:
        delete_document(storage, file_name, prefix)
        return
    storage.put_object(key=document_key(file_name, prefix), data=data, content_type=CONTENT_TYPE)


def delete_document(storage: StorageProvider, file_name: str, prefix: str = "docs/") -> None:
    storage.delete_object(document_key(file_name, prefix))
