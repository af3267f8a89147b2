from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from src.portal.config import settings


logger = logging.getLogger("storage")


class DocumentStore(ABC):
    """Key-value storage holding one serialized document per key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the raw document stored under ``key``, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous document."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the document under ``key`` if present."""


class InMemoryDocumentStore(DocumentStore):
    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._documents.get(key)

    def set(self, key: str, value: str) -> None:
        self._documents[key] = value

    def delete(self, key: str) -> None:
        self._documents.pop(key, None)


class JsonFileDocumentStore(DocumentStore):
    """Stores each document as ``<key>.json`` inside a directory."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._base: Path = directory or settings.store_dir
        self._base.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._base / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._base.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            try:
                path.unlink()
            except OSError:
                logger.error("Failed to delete document %s at %s", key, path)
                raise


def build_document_store() -> DocumentStore:
    if settings.store_backend == "file":
        return JsonFileDocumentStore()
    return InMemoryDocumentStore()


document_store: DocumentStore = build_document_store()
