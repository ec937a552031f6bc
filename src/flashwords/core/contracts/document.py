"""Persisted store envelope shared by the JSON loader and writer.

This module defines the single Pydantic v2 model written to disk:

- `StoreDocument`: a typed envelope carrying `kind`, semantic `version`, the
  store `revision` and every folder and list of the arena (terms included,
  with their learning state).

Versioning
----------
We use a semantic *schema* version string in `version` (e.g., "1.0.0").
Backward-compatible additive changes bump the *minor* version; breaking
changes bump the *major* version, and the `kind` suffix (`.v1`) follows the
major version. Documents with an unknown major version are rejected.

Notes
-----
- Ids, names, child order and learning state must all survive a round trip;
  the loader relies on the referential checks below instead of repairing data.
- TSV is the lossy exchange format; this document is the lossless one.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator

from .folder import Folder, is_valid_name
from .word_list import WordList

# ---- Shared small types ------------------------------------------------------

Semver = Annotated[
    str,
    Field(
        pattern=r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:[-+][0-9A-Za-z\.-]+)?$",
        description="Semantic version (MAJOR.MINOR.PATCH), optional pre-release/build.",
    ),
]

STORE_KIND = "flashwords.store.v1"
STORE_VERSION = "1.0.0"


class StoreDocument(BaseModel):
    """Lossless on-disk form of a :class:`~flashwords.core.store.memory.WordStore`."""

    kind: str = Field(default=STORE_KIND, description="Short machine label, 'flashwords.store.v1'")
    version: Semver = Field(default=STORE_VERSION, description="Schema version (semver)")
    saved_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="UTC timestamp when the document was produced.",
    )

    root_id: str = Field(min_length=1)
    revision: int = Field(default=0, ge=0, description="Store revision at save time")
    folders: list[Folder] = Field(default_factory=list)
    lists: list[WordList] = Field(default_factory=list)

    @field_validator("kind")
    @classmethod
    def _known_kind(cls, v: str) -> str:
        """Only the v1 store layout is understood."""
        if v != STORE_KIND:
            raise ValueError(f"unsupported document kind {v!r}, expected {STORE_KIND!r}")
        return v

    @field_validator("version")
    @classmethod
    def _same_major(cls, v: str) -> str:
        if v.split(".", 1)[0] != STORE_VERSION.split(".", 1)[0]:
            raise ValueError(f"unsupported schema version {v}")
        return v

    @model_validator(mode="after")
    def _check_references(self) -> StoreDocument:
        """Every id reference must point at exactly one entity of the right kind."""
        folders = {f.id: f for f in self.folders}
        lists = {wl.id: wl for wl in self.lists}
        if len(folders) != len(self.folders) or len(lists) != len(self.lists):
            raise ValueError("duplicate entity ids")
        if folders.keys() & lists.keys():
            raise ValueError("folder and list ids overlap")
        root = folders.get(self.root_id)
        if root is None or not root.is_root:
            raise ValueError(f"root folder {self.root_id!r} missing or has a parent")

        for entity in (*self.folders, *self.lists):
            if entity.id != self.root_id and not is_valid_name(entity.name):
                raise ValueError(f"{entity.id!r} has an invalid name {entity.name!r}")

        for folder in self.folders:
            if folder.id != self.root_id and folder.parent_id not in folders:
                raise ValueError(f"folder {folder.id!r} has unknown parent {folder.parent_id!r}")
            child_ids = [*folder.folder_ids, *folder.list_ids]
            if len(set(child_ids)) != len(child_ids):
                raise ValueError(f"folder {folder.id!r} lists a child twice")
            for child_id in folder.folder_ids:
                child = folders.get(child_id)
                if child is None or child.parent_id != folder.id:
                    raise ValueError(f"folder {folder.id!r} lists foreign child {child_id!r}")
            for list_id in folder.list_ids:
                wl = lists.get(list_id)
                if wl is None or wl.folder_id != folder.id:
                    raise ValueError(f"folder {folder.id!r} lists foreign list {list_id!r}")
            # Folders and lists share one namespace per parent.
            names = [folders[i].name for i in folder.folder_ids]
            names += [lists[i].name for i in folder.list_ids]
            if len(set(names)) != len(names):
                raise ValueError(f"folder {folder.id!r} has children sharing a name")
        # Reachability from the root rules out cycles and orphans.
        seen: set[str] = set()
        stack = [self.root_id]
        while stack:
            current = stack.pop()
            if current in seen:
                raise ValueError(f"folder {current!r} is reachable twice")
            seen.add(current)
            stack.extend(folders[current].folder_ids)
        if len(seen) != len(folders):
            raise ValueError("some folders are not reachable from the root")

        for wl in self.lists:
            owner = folders.get(wl.folder_id)
            if owner is None or wl.id not in owner.list_ids:
                raise ValueError(f"list {wl.id!r} is not owned by {wl.folder_id!r}")
            if len(wl.term_ids()) != len(wl.terms):
                raise ValueError(f"list {wl.id!r} has duplicate term ids")
        return self


__all__ = ["STORE_KIND", "STORE_VERSION", "Semver", "StoreDocument"]
