"""
Tests for store/ (blob_store.py, http_store.py, catalog_io.py)

Covers:
- InMemoryBlobStore / LocalBlobStore get/put/list semantics
- HttpBlobStore against a fake session (404, retries, auth header, prefix list)
- catalog_io: key template, empty-on-missing, LoadFailure, publish
"""

from __future__ import annotations

import importlib

import pytest
import requests

blob = importlib.import_module("shade_catalog.store.blob_store")
http_store = importlib.import_module("shade_catalog.store.http_store")
catalog_io = importlib.import_module("shade_catalog.store.catalog_io")
settings = importlib.import_module("shade_catalog.settings")
errors = importlib.import_module("shade_catalog.errors")
taxonomy_mod = importlib.import_module("shade_catalog.taxonomy")


# ──────────────────────────────────────────────────────────────────────────────
# Local stores
# ──────────────────────────────────────────────────────────────────────────────
def test_in_memory_store_copies_in_and_out():
    doc = {"a": [1, 2]}
    store = blob.InMemoryBlobStore()
    store.put("x/doc.json", doc)
    doc["a"].append(3)
    fetched = store.get("x/doc.json")
    assert fetched == {"a": [1, 2]}
    fetched["a"].clear()
    assert store.get("x/doc.json") == {"a": [1, 2]}


def test_in_memory_store_missing_and_list():
    store = blob.InMemoryBlobStore({"b/2.json": 2, "b/1.json": 1, "c/1.json": 3})
    assert store.get("nope") is None
    assert store.list("b/") == ["b/1.json", "b/2.json"]
    assert isinstance(store, blob.BlobStore)


def test_local_store_round_trip(tmp_path):
    store = blob.LocalBlobStore(tmp_path)
    store.put("brands/Acme/doc.json", {"name": "Ballet", "hex": "#ffb6c1"})
    assert store.get("brands/Acme/doc.json") == {"name": "Ballet", "hex": "#ffb6c1"}
    assert (tmp_path / "brands" / "Acme" / "doc.json").is_file()
    assert store.get("brands/Acme/missing.json") is None
    assert store.list("brands/") == ["brands/Acme/doc.json"]
    assert store.list("other/") == []


def test_local_store_refuses_keys_outside_root(tmp_path):
    store = blob.LocalBlobStore(tmp_path / "root")
    with pytest.raises(ValueError):
        store.get("../escape.json")


def test_local_store_list_on_missing_root(tmp_path):
    assert blob.LocalBlobStore(tmp_path / "absent").list("") == []


# ──────────────────────────────────────────────────────────────────────────────
# HTTP store
# ──────────────────────────────────────────────────────────────────────────────
class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(http_store.time, "sleep", lambda s: None)


def _store(responses, **kw):
    session = FakeSession(responses)
    return http_store.HttpBlobStore("https://blobs.example/", session=session, **kw), session


def test_http_get_returns_document_and_sends_token():
    store, session = _store([DummyResponse(200, {"ok": True})], token="secret")
    assert store.get("find_products/a b.json") == {"ok": True}
    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://blobs.example/find_products/a%20b.json"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"


def test_http_get_missing_is_none():
    store, _ = _store([DummyResponse(404)])
    assert store.get("nope.json") is None


def test_http_retries_transient_statuses():
    store, session = _store(
        [DummyResponse(503), DummyResponse(502), DummyResponse(200, [1])], retries=2
    )
    assert store.get("doc.json") == [1]
    assert len(session.calls) == 3


def test_http_retries_connection_errors_then_raises():
    store, session = _store(
        [requests.ConnectionError("down"), requests.ConnectionError("still down")], retries=1
    )
    with pytest.raises(requests.ConnectionError):
        store.get("doc.json")
    assert len(session.calls) == 2


def test_http_gives_up_after_last_retry_status():
    store, _ = _store([DummyResponse(500), DummyResponse(500)], retries=1)
    with pytest.raises(requests.HTTPError):
        store.get("doc.json")


def test_http_client_errors_are_not_retried():
    store, session = _store([DummyResponse(403)], retries=3)
    with pytest.raises(requests.HTTPError):
        store.put("doc.json", {"a": 1})
    assert len(session.calls) == 1


def test_http_put_sends_json():
    store, session = _store([DummyResponse(204)])
    store.put("doc.json", {"a": 1})
    method, url, kwargs = session.calls[0]
    assert method == "PUT"
    assert url == "https://blobs.example/doc.json"
    assert kwargs["json"] == {"a": 1}


def test_http_list_filters_by_prefix():
    payload = {"keys": ["brands/b.json", "brands/a.json", "other/c.json"]}
    store, session = _store([DummyResponse(200, payload)])
    assert store.list("brands/") == ["brands/a.json", "brands/b.json"]
    assert session.calls[0][2]["params"] == {"prefix": "brands/"}


def test_http_store_needs_base_url():
    with pytest.raises(ValueError):
        http_store.HttpBlobStore("")


def test_get_http_store_reads_settings(monkeypatch):
    monkeypatch.setattr(settings, "BLOB_STORE_URL", "")
    assert http_store.get_http_store() is None

    monkeypatch.setattr(settings, "BLOB_STORE_URL", "https://blobs.example")
    monkeypatch.setattr(settings, "BLOB_STORE_TOKEN", "t")
    store = http_store.get_http_store()
    assert store.base_url == "https://blobs.example"
    assert store.token == "t"


# ──────────────────────────────────────────────────────────────────────────────
# Catalog I/O
# ──────────────────────────────────────────────────────────────────────────────
def test_catalog_key_template():
    assert (
        catalog_io.catalog_key("lip-gloss")
        == "find_products/product_database/lip-gloss/categorised_LMD.json"
    )
    assert catalog_io.catalog_key("blush", "catalogs/{category}.json") == "catalogs/blush.json"


def test_load_existing_missing_is_empty():
    t = catalog_io.load_existing(blob.InMemoryBlobStore(), "lip-gloss")
    assert t.is_empty()


def test_load_existing_wraps_store_errors():
    class Broken(blob.InMemoryBlobStore):
        def get(self, key):
            raise OSError("disk gone")

    with pytest.raises(errors.LoadFailure) as exc:
        catalog_io.load_existing(Broken(), "lip-gloss")
    assert "disk gone" in str(exc.value)


def test_load_existing_rejects_non_object():
    store = blob.InMemoryBlobStore({catalog_io.catalog_key("blush"): "text"})
    with pytest.raises(errors.LoadFailure):
        catalog_io.load_existing(store, "blush")


def test_publish_then_load():
    t = taxonomy_mod.Taxonomy()
    t.insert(
        taxonomy_mod.ShadeEntry("Acme", "Gloss", "Ballet", "#ffb6c1", 1200, "", "lip-gloss"),
        "perfect-pinks",
        "1000",
        "L",
    )
    store = blob.InMemoryBlobStore()
    key = catalog_io.publish(store, "lip-gloss", t)
    assert key == catalog_io.catalog_key("lip-gloss")
    assert catalog_io.load_existing(store, "lip-gloss") == t
