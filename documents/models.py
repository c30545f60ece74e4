from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from documents.errors import InvalidFileNameError


def check_file_name(value: str) -> str:
    """
    Reject fileNames that are not a single plain file name.

    Document bodies are stored under <prefix><fileName>, so separators or
    dot segments would let a write land outside the document prefix.
    """
    name = (value or "").strip()
    if not name or name in (".", ".."):
        raise InvalidFileNameError("fileName must not be empty")
    if "/" in name or "\\" in name or "\x00" in name:
        raise InvalidFileNameError(f"fileName must not contain path separators: {value!r}")
    return name


def _dedupe(values: Optional[List[Any]]) -> List[str]:
    out: List[str] = []
    for v in values or []:
        s = str(v)
        if s not in out:
            out.append(s)
    return out


class Metadata(BaseModel):
    """
    One manifest entry.

    Field names are the wire names used by the manifest file and the HTTP API.
    tags/categories behave as sets: duplicates dropped, first-seen order kept.
    """
    id: str
    fileName: str
    author: Optional[str] = None
    timeCreated: Optional[str] = None
    timeUpdated: Optional[str] = None
    tags: List[str] = []
    categories: List[str] = []
    title: Optional[str] = None
    subtitle: Optional[str] = None
    abstract: Optional[str] = None
    belongsTo: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_not_blank(cls, v: Any) -> str:
        # YAML reads unquoted numeric ids as ints.
        v = "" if v is None else str(v).strip()
        if not v:
            raise ValueError("id must not be empty")
        return v

    @field_validator("fileName", mode="before")
    @classmethod
    def _safe_file_name(cls, v: Any) -> str:
        try:
            return check_file_name("" if v is None else str(v))
        except InvalidFileNameError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def _as_set(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if isinstance(v, (list, tuple, set, frozenset)):
            return _dedupe(list(v))
        raise ValueError(f"expected a string or a list of strings, got {type(v).__name__}")

    @field_validator("author", "title", "subtitle", "abstract", "belongsTo", mode="before")
    @classmethod
    def _scalar_as_text(cls, v: Any) -> Optional[str]:
        # YAML reads values like 1984 or yes as int/bool.
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (bool, int, float)):
            return str(v)
        raise ValueError(f"expected a string, got {type(v).__name__}")

    @field_validator("timeCreated", "timeUpdated", mode="before")
    @classmethod
    def _timestamp_as_text(cls, v: Any) -> Optional[str]:
        # YAML turns unquoted ISO timestamps into datetime objects.
        if v is None:
            return None
        if hasattr(v, "isoformat"):
            return v.isoformat()
        return str(v)

    def to_manifest_entry(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class Document(Metadata):
    content: str = ""

    @property
    def metadata(self) -> Metadata:
        return Metadata(**self.model_dump(exclude={"content"}))


class CreateDocumentRequest(Document):
    """
    POST /documents body: a full document plus the write token.
    """
    token: Optional[str] = None

    def to_document(self) -> Document:
        return Document(**self.model_dump(exclude={"token"}))


class MessageResponse(BaseModel):
    msg: str


class UpsertOutcome(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
