from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional, Sequence

import yaml
from pydantic import ValidationError

from documents.errors import ManifestError
from documents.models import Metadata

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# YAML codec
# ---------------------------------------------------------------------

def parse_manifest(text: str) -> List[Metadata]:
    """
    Decode manifest YAML (top-level list of metadata mappings).

    An empty document is an empty manifest. Anything else that is not a
    list of valid entries raises ManifestError.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Manifest is not valid YAML: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, list):
        raise ManifestError(f"Manifest must be a list of entries, got {type(data).__name__}")

    records: List[Metadata] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ManifestError(f"Manifest entry {i} is not a mapping")
        try:
            records.append(Metadata(**item))
        except (ValidationError, TypeError) as exc:
            raise ManifestError(f"Manifest entry {i} is invalid: {exc}") from exc
    return records


def dump_manifest(records: Sequence[Metadata]) -> str:
    entries: List[Dict[str, Any]] = [r.to_manifest_entry() for r in records]
    return yaml.safe_dump(entries, sort_keys=False, allow_unicode=True, default_flow_style=False)


# ---------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------

class ManifestStore:
    """
    In-memory manifest backed by a YAML file.

    The whole sequence is rewritten on every save. Callers that mutate must
    hold `lock` for the full read-modify-write so concurrent requests do not
    lose updates.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.lock = asyncio.Lock()
        self._records: List[Metadata] = []

    def load(self) -> List[Metadata]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError as exc:
            raise ManifestError(f"Manifest file not found: {self.path}") from exc
        except OSError as exc:
            raise ManifestError(f"Manifest file unreadable: {self.path}: {exc}") from exc

        self._records = parse_manifest(text)
        logger.info("Loaded manifest %s (%d documents)", self.path, len(self._records))
        return self.records()

    def save(self, records: Sequence[Metadata]) -> None:
        """
        Overwrite the manifest file with `records`.

        Writes a temp file next to the manifest and renames it over the
        original, so readers never see a truncated file.
        """
        text = dump_manifest(records)
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".manifest-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as exc:
            raise ManifestError(f"Failed to write manifest {self.path}: {exc}") from exc
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def commit(self, records: Sequence[Metadata]) -> None:
        """Persist `records`, then make them the in-memory manifest."""
        self.save(records)
        self._records = list(records)

    # -----------------------------------------------------------------
    # Queries (linear scans)
    # -----------------------------------------------------------------

    def records(self) -> List[Metadata]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def find_by_id(self, doc_id: str) -> Optional[Metadata]:
        for r in self._records:
            if r.id == doc_id:
                return r
        return None

    def find_by_filename(self, file_name: str) -> Optional[Metadata]:
        for r in self._records:
            if r.fileName == file_name:
                return r
        return None

    def contains(self, doc_id: str) -> bool:
        return self.find_by_id(doc_id) is not None

    # -----------------------------------------------------------------
    # Pure transforms (nothing is saved)
    # -----------------------------------------------------------------

    def insert(self, m: Metadata) -> List[Metadata]:
        return self.records() + [m]

    def replace(self, m: Metadata) -> List[Metadata]:
        return [m if r.id == m.id else r for r in self._records]
