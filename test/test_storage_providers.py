import pytest
from minio.error import S3Error

from providers import factory
from providers.impl import storage_minio
from providers.impl.storage_local_files import LocalFilesStorageProvider
from providers.storage import StorageProvider


def test_local_put_get_head_delete(tmp_path):
    s = LocalFilesStorageProvider(str(tmp_path))
    s.put_object("docs/a.md", b"abc", content_type="text/markdown")

    assert s.get_object("docs/a.md") == b"abc"
    assert s.head_object("docs/a.md")["size"] == 3

    s.delete_object("docs/a.md")
    s.delete_object("docs/a.md")
    with pytest.raises(FileNotFoundError):
        s.get_object("docs/a.md")


def test_local_keys_cannot_escape_root(tmp_path):
    root = tmp_path / "root"
    s = LocalFilesStorageProvider(str(root))
    with pytest.raises(ValueError):
        s.put_object("../../outside.md", b"x")
    with pytest.raises(ValueError):
        s.get_object("docs/../../outside.md")
    assert not (tmp_path / "outside.md").exists()


def test_local_keys_are_not_rewritten(tmp_path):
    s = LocalFilesStorageProvider(str(tmp_path))
    s.put_object("docs/ab.md", b"first")
    s.put_object("docs/a..b.md", b"second")

    assert s.get_object("docs/ab.md") == b"first"
    assert s.get_object("docs/a..b.md") == b"second"


def test_local_provider_satisfies_protocol(tmp_path):
    assert isinstance(LocalFilesStorageProvider(str(tmp_path)), StorageProvider)


def test_factory_builds_local_by_default(make_settings, data_dir):
    providers = factory.build_providers(make_settings())
    assert isinstance(providers.storage, LocalFilesStorageProvider)
    assert providers.storage.root_dir == str(data_dir)


# ---------------------------------------------------------------------
# MinIO provider against an in-memory fake client
# ---------------------------------------------------------------------

class _NoSuchKey(S3Error):
    code = "NoSuchKey"

    def __init__(self, key):
        Exception.__init__(self, key)

    def __str__(self):
        return f"NoSuchKey: {self.args[0]}"


class _FakeResponse:
    def __init__(self, data):
        self._data = data
        self.closed = False

    def read(self):
        return self._data

    def close(self):
        self.closed = True

    def release_conn(self):
        pass


class _FakeStat:
    def __init__(self, size):
        self.size = size
        self.last_modified = None


class _FakeMinio:
    def __init__(self, host, access_key=None, secret_key=None, secure=False):
        self.host = host
        self.secure = secure
        self.buckets = set()
        self.objects = {}

    def _missing(self, key):
        return _NoSuchKey(key)

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def make_bucket(self, bucket):
        self.buckets.add(bucket)

    def put_object(self, bucket_name, object_name, data, length, content_type=None, metadata=None):
        self.objects[object_name] = data.read(length)

    def get_object(self, bucket, key):
        if key not in self.objects:
            raise self._missing(key)
        return _FakeResponse(self.objects[key])

    def stat_object(self, bucket, key):
        if key not in self.objects:
            raise self._missing(key)
        return _FakeStat(len(self.objects[key]))

    def remove_object(self, bucket, key):
        if key not in self.objects:
            raise self._missing(key)
        del self.objects[key]


@pytest.fixture
def minio_provider(monkeypatch):
    monkeypatch.setattr(storage_minio, "Minio", _FakeMinio)
    return storage_minio.MinioStorageProvider(
        endpoint="http://minio:9000",
        bucket="docs",
        access_key="ak",
        secret_key="sk",
    )


def test_minio_creates_bucket_and_strips_scheme(minio_provider):
    assert minio_provider._client.host == "minio:9000"
    assert "docs" in minio_provider._client.buckets


def test_minio_round_trip(minio_provider):
    minio_provider.put_object("/docs/a.md", b"hello", metadata={"document-id": "d1", "skip": None})
    assert minio_provider.get_object("docs/a.md") == b"hello"
    assert minio_provider.head_object("docs/a.md")["size"] == 5


def test_minio_missing_is_file_not_found(minio_provider):
    with pytest.raises(FileNotFoundError):
        minio_provider.get_object("docs/nope.md")
    with pytest.raises(FileNotFoundError):
        minio_provider.head_object("docs/nope.md")


def test_minio_delete_is_idempotent(minio_provider):
    minio_provider.put_object("docs/a.md", b"x")
    minio_provider.delete_object("docs/a.md")
    minio_provider.delete_object("docs/a.md")
    assert "docs/a.md" not in minio_provider._client.objects


def test_minio_requires_credentials(make_settings):
    from dataclasses import replace

    s = make_settings()
    storage = replace(s.storage, provider="minio", minio_access_key="")
    with pytest.raises(RuntimeError):
        storage_minio.MinioStorageProvider.from_settings(storage)
