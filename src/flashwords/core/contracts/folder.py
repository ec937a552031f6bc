"""Folder: a named node of the store's folder tree.

Children are stored as id references (``folder_ids``/``list_ids``) and the
parent as ``parent_id``; the entities themselves live in the store's arena.
The root folder is the only one with ``parent_id is None``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

PATH_SEP = "/"


def is_valid_name(name: str) -> bool:
    """Names are trimmed, non-empty and free of the path separator."""
    return bool(name) and name == name.strip() and PATH_SEP not in name


class Folder(BaseModel):
    """A container of sub-folders and lists."""

    id: str = Field(min_length=1)
    name: str
    parent_id: str | None = Field(default=None, description="None only for the root.")
    folder_ids: list[str] = Field(default_factory=list)
    list_ids: list[str] = Field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_empty(self) -> bool:
        return not self.folder_ids and not self.list_ids


__all__ = ["PATH_SEP", "Folder", "is_valid_name"]
