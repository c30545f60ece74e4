import pytest

from core.settings import get_settings


@pytest.mark.parametrize(
    "mode, provider, expected",
    [
        ("s3", "local", "minio"),
        ("filesystem", "minio", "local"),
        (None, "objectstore", "minio"),
        (None, "FILES", "local"),
        (None, None, "local"),
        ("something-else", None, "local"),
    ],
)
def test_storage_provider_resolution(monkeypatch, mode, provider, expected):
    for name, value in (("STORAGE_MODE", mode), ("STORAGE_PROVIDER", provider)):
        if value is None:
            monkeypatch.delenv(name, raising=False)
        else:
            monkeypatch.setenv(name, value)

    get_settings.cache_clear()
    assert get_settings().storage.provider == expected


def test_local_dir_falls_back_to_legacy_name(monkeypatch):
    monkeypatch.delenv("STORAGE_LOCAL_DIR", raising=False)
    monkeypatch.setenv("LOCAL_STORAGE_DIR", "/srv/docs")

    get_settings.cache_clear()
    assert get_settings().storage.local_dir == "/srv/docs"


def test_docs_defaults(monkeypatch):
    for name in ("DOCS_MANIFEST_PATH", "DOCS_PREFIX", "DOCS_WRITE_TOKEN", "CORS_ALLOW_ORIGINS", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    s = get_settings()
    assert s.docs.manifest_path == "./data/manifest.yaml"
    assert s.docs.prefix == "docs/"
    assert s.docs.write_token == ""
    assert s.server.cors_allow_origins == ["*"]
    assert s.server.port == 8000
    assert s.server.log_level == "INFO"


def test_docs_overrides(monkeypatch):
    monkeypatch.setenv("DOCS_MANIFEST_PATH", "/srv/manifest.yml")
    monkeypatch.setenv("DOCS_PREFIX", "/content/")
    monkeypatch.setenv("DOCS_WRITE_TOKEN", "  abc  ")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("PORT", "not-a-number")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    get_settings.cache_clear()
    s = get_settings()
    assert s.docs.manifest_path == "/srv/manifest.yml"
    assert s.docs.prefix == "content/"
    assert s.docs.write_token == "abc"
    assert s.server.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert s.server.port == 8000
    assert s.server.log_level == "DEBUG"


def test_empty_prefix_stores_at_root(monkeypatch):
    monkeypatch.setenv("DOCS_PREFIX", "")

    get_settings.cache_clear()
    assert get_settings().docs.prefix == ""
