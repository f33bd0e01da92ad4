"""
JSON blob store for crawl output and prepared content.

Keys are slash-separated; the first segment is the partition
("news/2024-annual-report"). FileBlobStore maps each key to a
pretty-printed UTF-8 JSON file under its root directory.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class BlobStore(ABC):
    """Key-value store of JSON documents."""

    @abstractmethod
    def write(self, key: str, data: Any) -> None:
        """Store data under key, replacing any previous value."""

    @abstractmethod
    def read(self, key: str) -> Any:
        """Load the value of key. Raises KeyError if absent."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if key is present."""

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """Return sorted keys under prefix ("news" lists "news/...")."""

    @abstractmethod
    def ensure_partition(self, partition: str) -> None:
        """Create a partition so it can be written to."""


class FileBlobStore(BlobStore):
    """
    Directory-backed blob store.

    Usage:
        store = FileBlobStore("scraped-data")
        store.write("news/my-article", record)
        store.list_keys("news")  # ["news/my-article"]
    """

    SUFFIX = ".json"

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        key = key.strip("/")
        if not key or ".." in key.split("/"):
            raise ValueError(f"Invalid key: {key!r}")
        return self.root / f"{key}{self.SUFFIX}"

    def write(self, key: str, data: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.debug("blob_written", key=key)

    def read(self, key: str) -> Any:
        path = self._path(key)
        if not path.exists():
            raise KeyError(key)

        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def list_keys(self, prefix: str = "") -> list[str]:
        base = self.root / prefix.strip("/") if prefix.strip("/") else self.root
        if not base.is_dir():
            return []

        keys = []
        for path in base.rglob(f"*{self.SUFFIX}"):
            relative = path.relative_to(self.root).as_posix()
            keys.append(relative[: -len(self.SUFFIX)])

        return sorted(keys)

    def ensure_partition(self, partition: str) -> None:
        (self.root / partition.strip("/")).mkdir(parents=True, exist_ok=True)
