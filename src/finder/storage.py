"""Local persisted state for tool usage counts.

The finder never touches a storage backend directly: it receives a
KeyValueStore and reads/writes one key holding a mapping of tool name to count.

- InMemoryStore: process-local, used in tests and with --stateless runs
- JsonFileStore: one JSON document on disk, one entry per key
- ToolFrequency: read counts, rank a vocabulary, increment after a submission
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Protocol

from src.utils.logger import logger


class KeyValueStore(Protocol):
    """Port for client-local persisted state."""

    def read(self, key: str) -> Dict[str, int]:
        """Return the mapping stored under key, or {} on any failure."""
        ...

    def write(self, key: str, mapping: Mapping[str, int]) -> None:
        ...


def sanitize_counts(raw: Any) -> Dict[str, int]:
    """Keep only `str -> non-negative int` entries of a decoded payload."""
    if not isinstance(raw, dict):
        return {}
    counts: Dict[str, int] = {}
    for name, count in raw.items():
        # bool is an int subclass but never a valid count
        if isinstance(name, str) and isinstance(count, int) and not isinstance(count, bool) and count >= 0:
            counts[name] = count
    return counts


class InMemoryStore:
    def __init__(self, initial: Mapping[str, Mapping[str, int]] | None = None) -> None:
        self._data: Dict[str, Dict[str, int]] = {key: dict(value) for key, value in (initial or {}).items()}

    def read(self, key: str) -> Dict[str, int]:
        return dict(self._data.get(key, {}))

    def write(self, key: str, mapping: Mapping[str, int]) -> None:
        self._data[key] = dict(mapping)


class JsonFileStore:
    """KeyValueStore backed by a single JSON file.

    Reads never raise: a missing, unreadable or malformed file is an empty store.
    Writes replace the file atomically and keep the other keys in it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load_document(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read local state {self.path}: {e}")
            return {}

        if not isinstance(document, dict):
            logger.warning(f"Ignoring malformed local state {self.path}")
            return {}
        return document

    def read(self, key: str) -> Dict[str, int]:
        return sanitize_counts(self._load_document().get(key))

    def write(self, key: str, mapping: Mapping[str, int]) -> None:
        document = self._load_document()
        document[key] = dict(mapping)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise


class ToolFrequency:
    """How often each predefined cooking tool has been submitted."""

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self.store = store
        self.key = key

    def load(self) -> Dict[str, int]:
        return sanitize_counts(self.store.read(self.key))

    def rank(self, vocabulary: Iterable[str]) -> List[str]:
        """Sort the vocabulary by descending count.

        sorted() is stable, so tools with equal counts keep their vocabulary order.
        """
        counts = self.load()
        return sorted(vocabulary, key=lambda tool: -counts.get(tool, 0))

    def increment(self, tools: Iterable[str]) -> Dict[str, int]:
        """Add one to the count of every tool and persist the merged mapping.

        The stored mapping is re-read right before writing so counts written by
        another client since load() are kept.
        """
        counts = self.load()
        for tool in dict.fromkeys(tools):
            counts[tool] = counts.get(tool, 0) + 1

        try:
            self.store.write(self.key, counts)
        except OSError as e:
            logger.warning(f"Could not persist tool frequency: {e}")
        else:
            logger.debug(f"Tool frequency updated: {counts}")
        return counts
