"""Disk-backed persistence for the word store.

This module turns a :class:`WordStore` into a JSON document and back, and
adds a small gateway that owns one store file.

- Default location: `FLASHWORDS_STORE` env var, else `<data_dir>/store.json`
  (`data_dir` comes from settings / `FLASHWORDS_DATA_DIR`).
- Content: a JSON object mirroring :class:`StoreDocument` (ids, names, child
  order, learning state and list metadata).
- Writes go to a sibling temp file that is then renamed over the target, so
  an interrupted save never leaves half a store behind.

Usage
-----
>>> gateway = StoreFile()          # uses default path
>>> store = gateway.load()         # empty store if the file does not exist
>>> path = gateway.save(store)     # returns the written path
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from flashwords.core.contracts.document import StoreDocument
from flashwords.core.errors import StoreFormatError
from flashwords.core.settings import get_logger, load_settings

from .memory import WordStore

logger = get_logger(__name__)


def _default_path() -> Path:
    """Return the default store file path."""
    override = os.getenv("FLASHWORDS_STORE")
    return Path(override) if override else load_settings().store_path


def dumps(store: WordStore) -> str:
    """Serialize ``store`` to its JSON document text."""
    return store.to_document().model_dump_json(indent=2) + "\n"


def loads(text: str | bytes) -> WordStore:
    """Rebuild a store from :func:`dumps` output.

    Raises
    ------
    StoreFormatError
        If the text is not a valid, internally consistent store document.
    """
    try:
        doc = StoreDocument.model_validate_json(text)
    except ValidationError as exc:
        count = exc.error_count()
        raise StoreFormatError(f"invalid store document ({count} errors):\n{exc}") from exc
    return WordStore.from_document(doc)


class StoreFile:
    """Load and save one word store as a JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path if path is not None else _default_path()

    def load(self) -> WordStore:
        """Read the store; a missing or empty file yields a fresh empty store."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.info("no store at %s, starting empty", self.path)
            return WordStore()
        if not raw.strip():
            return WordStore()
        store = loads(raw)
        logger.debug("loaded %s (rev %d, %d lists)", self.path, store.revision, len(store))
        return store

    def save(self, store: WordStore) -> Path:
        """Write ``store`` to disk atomically and return the file path."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = dumps(store)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("saved %s (rev %d)", self.path, store.revision)
        return self.path


__all__ = ["StoreFile", "dumps", "loads"]
