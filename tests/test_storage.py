from unittest.mock import MagicMock

import pytest

from adaptador import storage
from adaptador.errors import StorageError
from adaptador.storage import GCSStorage, InMemoryStorage


def _gcs():
    client = MagicMock()
    blob = client.bucket.return_value.blob.return_value
    return GCSStorage(bucket_name="apostilas-bucket", client=client), client, blob


def test_memory_storage_put_get_download():
    store = InMemoryStorage()

    stored = store.put("adapted/a.pdf", b"%PDF-1.7", "application/pdf")

    assert stored.url == "memory://adapted/a.pdf"
    assert stored.size == 8
    assert store.download("adapted/a.pdf") == b"%PDF-1.7"
    assert store.content_type("adapted/a.pdf") == "application/pdf"
    assert store.get_url("adapted/a.pdf", expiration_minutes=5).startswith("memory://adapted/a.pdf")


def test_memory_storage_missing_key():
    store = InMemoryStorage()
    with pytest.raises(StorageError):
        store.download("nao/existe.pdf")
    with pytest.raises(StorageError):
        store.get_url("nao/existe.pdf")


def test_gcs_put_uploads_bytes_with_content_type():
    gcs, client, blob = _gcs()

    stored = gcs.put("adapted/a.docx", b"conteudo", "application/octet-stream")

    client.bucket.assert_called_with("apostilas-bucket")
    client.bucket.return_value.blob.assert_called_with("adapted/a.docx")
    blob.upload_from_string.assert_called_once_with(b"conteudo", content_type="application/octet-stream")
    assert stored.url == "gs://apostilas-bucket/adapted/a.docx"
    assert stored.size == 8


def test_gcs_signed_url():
    gcs, _, blob = _gcs()
    blob.generate_signed_url.return_value = "https://storage.googleapis.com/signed"

    assert gcs.get_url("adapted/a.pdf", expiration_minutes=10) == "https://storage.googleapis.com/signed"
    kwargs = blob.generate_signed_url.call_args.kwargs
    assert kwargs["version"] == "v4"
    assert kwargs["method"] == "GET"
    assert kwargs["expiration"].total_seconds() == 600


def test_gcs_download():
    gcs, _, blob = _gcs()
    blob.download_as_bytes.return_value = b"original"

    assert gcs.download("materials/aula.pdf") == b"original"


@pytest.mark.parametrize("operation", [
    lambda gcs: gcs.put("k", b"x", "application/pdf"),
    lambda gcs: gcs.get_url("k"),
    lambda gcs: gcs.download("k"),
])
def test_gcs_failures_become_storage_errors(operation):
    gcs, _, blob = _gcs()
    blob.upload_from_string.side_effect = ConnectionError("network down")
    blob.generate_signed_url.side_effect = ConnectionError("network down")
    blob.download_as_bytes.side_effect = ConnectionError("network down")

    with pytest.raises(StorageError):
        operation(gcs)


def test_gcs_requires_bucket(monkeypatch):
    monkeypatch.setattr(storage, "GCS_BUCKET_NAME", None)
    with pytest.raises(ValueError):
        GCSStorage()
