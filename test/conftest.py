import sys
from pathlib import Path

import pytest

# Modules import each other as top-level packages (core, documents, providers),
# the same way uvicorn sees them when started from the repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from core.settings import DocsSettings, ServerSettings, Settings, StorageSettings  # noqa: E402


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def manifest_path(data_dir):
    p = data_dir / "manifest.yaml"
    p.write_text("[]\n", encoding="utf-8")
    return p


@pytest.fixture
def make_settings(data_dir, manifest_path):
    def _make(write_token: str = "") -> Settings:
        return Settings(
            storage=StorageSettings(provider="local", local_dir=str(data_dir)),
            docs=DocsSettings(manifest_path=str(manifest_path), prefix="docs/", write_token=write_token),
            server=ServerSettings(host="127.0.0.1", port=8000, log_level="INFO", cors_allow_origins=["*"]),
        )

    return _make


def doc_payload(**overrides):
    payload = {
        "id": "d1",
        "fileName": "a.md",
        "author": "ada",
        "timeCreated": "2021-03-01T10:00:00Z",
        "timeUpdated": "2021-03-01T10:00:00Z",
        "tags": ["notes", "draft"],
        "categories": ["misc"],
        "title": "First",
        "subtitle": "A subtitle",
        "abstract": "Short abstract",
        "belongsTo": "root",
        "content": "hello",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payload():
    return doc_payload


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    from core.settings import get_settings

    yield
    get_settings.cache_clear()
