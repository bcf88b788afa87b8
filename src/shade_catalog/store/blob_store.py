"""
blob_store.py
=============

Does: Define the key-value JSON document store the catalog talks to
      (get / put / list) and two local implementations:
        - InMemoryBlobStore: dict-backed, for tests and dry runs;
        - LocalBlobStore: one JSON file per key under a root directory.
Used By: Catalog I/O (load/publish) and catalog source discovery.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

__all__ = ["BlobStore", "InMemoryBlobStore", "LocalBlobStore"]

logger = logging.getLogger(__name__)


@runtime_checkable
class BlobStore(Protocol):
    """
    Structural contract for the object store collaborator.

    - get(key): parsed JSON document, or None when the key does not exist.
    - put(key, document): store the whole document (last write wins).
    - list(prefix): every key starting with prefix.
    """

    def get(self, key: str) -> Any | None: ...
    def put(self, key: str, document: Any) -> None: ...
    def list(self, prefix: str) -> list[str]: ...


class InMemoryBlobStore:
    """Does: Keep documents in a dict; values are deep-copied in and out."""

    def __init__(self, documents: dict[str, Any] | None = None):
        self._lock = threading.Lock()
        self._docs: dict[str, Any] = copy.deepcopy(documents or {})

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._docs:
                return None
            return copy.deepcopy(self._docs[key])

    def put(self, key: str, document: Any) -> None:
        with self._lock:
            self._docs[key] = copy.deepcopy(document)

    def list(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(k for k in self._docs if k.startswith(prefix))


class LocalBlobStore:
    """Does: Map keys to JSON files under root (key 'a/b.json' → root/a/b.json)."""

    def __init__(self, root: str | Path, *, encoding: str = "utf-8"):
        self.root = Path(root).resolve()
        self.encoding = encoding

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        try:
            path.relative_to(self.root)
        except ValueError as e:
            raise ValueError(f"Key escapes store root: {key!r}") from e
        return path

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.is_file():
            return None
        with path.open("r", encoding=self.encoding) as f:
            return json.load(f)

    def put(self, key: str, document: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        with tmp.open("w", encoding=self.encoding) as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        tmp.replace(path)  # no partial-write visibility
        logger.debug("Wrote %s", path)

    def list(self, prefix: str) -> list[str]:
        if not self.root.is_dir():
            return []
        keys = (p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file())
        return sorted(k for k in keys if k.startswith(prefix) and not k.endswith(".tmp"))
