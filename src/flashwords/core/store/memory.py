"""
In-memory word store: an arena of folders and lists keyed by id.

This module implements the mutable model the CLI and the session engine work
on. It provides:

- CRUD for folders, lists and terms (``create_*``, ``rename_*``, ``move_*``,
  ``delete_*``, ``add_term``/``update_term``/``delete_term``).
- TSV import/export (``import_tsv``/``export_tsv``) through the codec.
- Read-only lookups that raise :class:`NotFound` instead of returning a
  default (``find_*``, ``resolve``), plus tree traversal helpers.
- Conversion to and from the persisted :class:`StoreDocument`.

Design Goals
------------
- **Arena, not pointers**: folders refer to children and parents by id only,
  so there is exactly one owner per entity and no reference cycles.
- **All-or-nothing**: every operation validates first and mutates last, so a
  raised error leaves the store exactly as it was.
- **Observability**: every mutation bumps ``revision`` and logs at DEBUG.
"""

from __future__ import annotations

import uuid
from collections.abc import Container, Iterable, Iterator

from flashwords.core.codec import tsv
from flashwords.core.contracts.document import StoreDocument
from flashwords.core.contracts.folder import PATH_SEP, Folder, is_valid_name
from flashwords.core.contracts.term import Term
from flashwords.core.contracts.word_list import WordList
from flashwords.core.errors import (
    DuplicateName,
    InvalidName,
    NotFound,
    SessionAlreadyActive,
    TreeError,
)
from flashwords.core.settings import get_logger

logger = get_logger(__name__)


def _new_id(taken: Container[str]) -> str:
    """Return a short random hex id not present in ``taken``."""
    while True:
        candidate = uuid.uuid4().hex[:8]
        if candidate not in taken:
            return candidate


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not is_valid_name(cleaned):
        raise InvalidName(name)
    return cleaned


class WordStore:
    """
    Root container owning the folder tree, its lists and their terms.

    Attributes
    ----------
    _folders : dict[str, Folder]
        Every folder, the root included, by id.
    _lists : dict[str, WordList]
        Every word list by id.
    _rev : int
        Monotonically increasing revision counter (bumps on every mutation).
    active_session_id : str | None
        Id of the practice session currently in progress, if any.
    """

    __slots__ = ("_folders", "_lists", "_rev", "_root_id", "active_session_id")

    def __init__(self) -> None:
        root = Folder(id=_new_id(()), name="")
        self._folders: dict[str, Folder] = {root.id: root}
        self._lists: dict[str, WordList] = {}
        self._rev: int = 0
        self._root_id: str = root.id
        self.active_session_id: str | None = None

    # ------------------------------- Internals ------------------------------

    def _taken_ids(self) -> set[str]:
        return self._folders.keys() | self._lists.keys()

    def _bump(self, what: str) -> None:
        self._rev += 1
        logger.debug("rev %d: %s", self._rev, what)

    def _ensure_free(self, folder: Folder, name: str, *, ignore: str | None = None) -> None:
        """Raise :class:`DuplicateName` if a child of ``folder`` uses ``name``."""
        for child_id in folder.folder_ids:
            if child_id != ignore and self._folders[child_id].name == name:
                raise DuplicateName(name, self.path_of(folder.id) or PATH_SEP)
        for list_id in folder.list_ids:
            if list_id != ignore and self._lists[list_id].name == name:
                raise DuplicateName(name, self.path_of(folder.id) or PATH_SEP)

    def _subtree_ids(self, folder_id: str) -> list[str]:
        return [f.id for f in self.walk(folder_id)]

    def _parent(self, folder: Folder) -> Folder:
        if folder.parent_id is None:
            raise TreeError("the root folder has no parent")
        return self._folders[folder.parent_id]

    # ------------------------------- Lookups --------------------------------

    @property
    def revision(self) -> int:
        return self._rev

    @property
    def root(self) -> Folder:
        return self._folders[self._root_id]

    def find_folder(self, folder_id: str) -> Folder:
        """Return the folder registered under ``folder_id``."""
        try:
            return self._folders[folder_id]
        except KeyError:
            raise NotFound("folder", folder_id) from None

    def find_list(self, list_id: str) -> WordList:
        """Return the word list registered under ``list_id``."""
        try:
            return self._lists[list_id]
        except KeyError:
            raise NotFound("list", list_id) from None

    def find_term(self, list_id: str, term_id: str) -> Term:
        """Return term ``term_id`` of list ``list_id``."""
        return self.find_list(list_id).term(term_id)

    def folders(self) -> tuple[Folder, ...]:
        """All folders in tree order (root first)."""
        return tuple(self.walk(self._root_id))

    def lists(self) -> tuple[WordList, ...]:
        """All lists in tree order."""
        return tuple(self.lists_in(self._root_id))

    def children(self, folder_id: str) -> tuple[list[Folder], list[WordList]]:
        """Return the direct sub-folders and lists of ``folder_id``."""
        folder = self.find_folder(folder_id)
        return (
            [self._folders[i] for i in folder.folder_ids],
            [self._lists[i] for i in folder.list_ids],
        )

    def walk(self, folder_id: str) -> Iterator[Folder]:
        """Yield ``folder_id`` and every folder below it, depth-first."""
        stack = [self.find_folder(folder_id)]
        while stack:
            folder = stack.pop()
            yield folder
            stack.extend(self._folders[i] for i in reversed(folder.folder_ids))

    def lists_in(self, scope_id: str) -> list[WordList]:
        """Return the lists covered by ``scope_id`` (a list id or a folder id).

        For a folder, a folder's own lists come before those of its
        sub-folders, each in insertion order.
        """
        if scope_id in self._lists:
            return [self._lists[scope_id]]
        return [self._lists[i] for folder in self.walk(scope_id) for i in folder.list_ids]

    def iter_terms(self, scope_id: str) -> Iterator[tuple[WordList, Term]]:
        """Yield ``(list, term)`` for every term reachable from ``scope_id``."""
        for wl in self.lists_in(scope_id):
            for term in wl.terms:
                yield wl, term

    def term_count(self, scope_id: str) -> int:
        return sum(len(wl.terms) for wl in self.lists_in(scope_id))

    def resolve(self, path: str) -> Folder | WordList:
        """Map a ``/``-separated name path to a folder or list.

        The empty path (or ``/``) is the root folder. Every segment but the
        last must name a folder.
        """
        parts = [p.strip() for p in path.split(PATH_SEP) if p.strip()]
        node: Folder | WordList = self.root
        for depth, part in enumerate(parts):
            if not isinstance(node, Folder):
                raise NotFound("folder", PATH_SEP.join(parts[:depth]))
            subfolders, lists = self.children(node.id)
            match: Folder | WordList | None = next((f for f in subfolders if f.name == part), None)
            if match is None:
                match = next((wl for wl in lists if wl.name == part), None)
            if match is None:
                raise NotFound("entry", PATH_SEP.join(parts[: depth + 1]))
            node = match
        return node

    def path_of(self, entity_id: str) -> str:
        """Inverse of :meth:`resolve`; the root maps to ``""``."""
        names: list[str] = []
        if entity_id in self._lists:
            wl = self._lists[entity_id]
            names.append(wl.name)
            folder_id: str | None = wl.folder_id
        else:
            folder_id = self.find_folder(entity_id).id
        while folder_id is not None and folder_id != self._root_id:
            folder = self._folders[folder_id]
            names.append(folder.name)
            folder_id = folder.parent_id
        return PATH_SEP.join(reversed(names))

    # ------------------------------- Folders --------------------------------

    def create_folder(self, parent_id: str, name: str) -> Folder:
        """Create a sub-folder ``name`` under ``parent_id``."""
        parent = self.find_folder(parent_id)
        name = _clean_name(name)
        self._ensure_free(parent, name)

        folder = Folder(id=_new_id(self._taken_ids()), name=name, parent_id=parent.id)
        self._folders[folder.id] = folder
        parent.folder_ids.append(folder.id)
        self._bump(f"create folder {folder.id} {name!r}")
        return folder

    def rename_folder(self, folder_id: str, name: str) -> Folder:
        folder = self.find_folder(folder_id)
        if folder.is_root:
            raise TreeError("the root folder cannot be renamed")
        name = _clean_name(name)
        self._ensure_free(self._parent(folder), name, ignore=folder.id)
        folder.name = name
        self._bump(f"rename folder {folder.id} -> {name!r}")
        return folder

    def move_folder(self, folder_id: str, new_parent_id: str) -> Folder:
        """Re-parent ``folder_id`` under ``new_parent_id``.

        Raises
        ------
        TreeError
            When moving the root, or moving a folder into its own subtree.
        """
        folder = self.find_folder(folder_id)
        target = self.find_folder(new_parent_id)
        if folder.is_root:
            raise TreeError("the root folder cannot be moved")
        if target.id in self._subtree_ids(folder.id):
            raise TreeError(f"cannot move {folder.name!r} into its own subtree")
        if target.id == folder.parent_id:
            return folder
        self._ensure_free(target, folder.name)

        self._parent(folder).folder_ids.remove(folder.id)
        target.folder_ids.append(folder.id)
        folder.parent_id = target.id
        self._bump(f"move folder {folder.id} -> {target.id}")
        return folder

    def delete_folder(self, folder_id: str) -> int:
        """Delete a folder and everything below it; return the number of lists removed."""
        folder = self.find_folder(folder_id)
        if folder.is_root:
            raise TreeError("the root folder cannot be deleted")

        doomed = self._subtree_ids(folder.id)
        removed = 0
        for fid in doomed:
            for list_id in self._folders[fid].list_ids:
                del self._lists[list_id]
                removed += 1
        for fid in doomed:
            del self._folders[fid]
        self._parent(folder).folder_ids.remove(folder.id)
        self._bump(f"delete folder {folder.id} ({len(doomed)} folders, {removed} lists)")
        return removed

    # ------------------------------- Lists ----------------------------------

    def create_list(
        self,
        folder_id: str,
        name: str,
        terms: Iterable[tuple[str, str]] = (),
        *,
        term_lang: str | None = None,
        def_lang: str | None = None,
    ) -> WordList:
        """Create list ``name`` in ``folder_id`` holding ``terms`` in order.

        Every term starts with a zero streak and zero attempts.
        """
        folder = self.find_folder(folder_id)
        name = _clean_name(name)
        self._ensure_free(folder, name)

        pairs = list(terms)
        # Rejects fields the list could never be exported with.
        tsv.serialize(pairs)
        term_ids: set[str] = set()
        built: list[Term] = []
        for question, answer in pairs:
            term = Term(id=_new_id(term_ids), question=question, answer=answer)
            term_ids.add(term.id)
            built.append(term)

        wl = WordList(
            id=_new_id(self._taken_ids()),
            name=name,
            folder_id=folder.id,
            terms=built,
            term_lang=term_lang,
            def_lang=def_lang,
        )
        self._lists[wl.id] = wl
        folder.list_ids.append(wl.id)
        self._bump(f"create list {wl.id} {name!r} ({len(built)} terms)")
        return wl

    def import_tsv(
        self,
        folder_id: str,
        name: str,
        raw: str | bytes,
        *,
        term_lang: str | None = None,
        def_lang: str | None = None,
    ) -> WordList:
        """Parse ``raw`` as TSV and store it as a new list.

        Raises the codec's :class:`MalformedRecord`/:class:`EncodingError`
        before anything is created.
        """
        pairs = tsv.parse(raw)
        return self.create_list(folder_id, name, pairs, term_lang=term_lang, def_lang=def_lang)

    def export_tsv(self, list_id: str) -> str:
        """Render a list as TSV; learning state is not exported."""
        return tsv.serialize(self.find_list(list_id).pairs())

    def rename_list(self, list_id: str, name: str) -> WordList:
        wl = self.find_list(list_id)
        name = _clean_name(name)
        self._ensure_free(self._folders[wl.folder_id], name, ignore=wl.id)
        wl.name = name
        wl.touch()
        self._bump(f"rename list {wl.id} -> {name!r}")
        return wl

    def move_list(self, list_id: str, folder_id: str) -> WordList:
        wl = self.find_list(list_id)
        target = self.find_folder(folder_id)
        if target.id == wl.folder_id:
            return wl
        self._ensure_free(target, wl.name)

        self._folders[wl.folder_id].list_ids.remove(wl.id)
        target.list_ids.append(wl.id)
        wl.folder_id = target.id
        self._bump(f"move list {wl.id} -> {target.id}")
        return wl

    def delete_list(self, list_id: str) -> WordList:
        wl = self.find_list(list_id)
        self._folders[wl.folder_id].list_ids.remove(wl.id)
        del self._lists[wl.id]
        self._bump(f"delete list {wl.id}")
        return wl

    # ------------------------------- Terms ----------------------------------

    def add_term(self, list_id: str, question: str, answer: str) -> Term:
        """Append a new term to ``list_id``."""
        wl = self.find_list(list_id)
        tsv.serialize([(question, answer)])
        term = Term(id=_new_id(wl.term_ids()), question=question, answer=answer)
        wl.terms.append(term)
        wl.touch()
        self._bump(f"add term {wl.id}/{term.id}")
        return term

    def update_term(
        self,
        list_id: str,
        term_id: str,
        *,
        question: str | None = None,
        answer: str | None = None,
        reset_progress: bool = False,
    ) -> Term:
        """Edit the text of a term; ``reset_progress`` zeroes its learning state."""
        wl = self.find_list(list_id)
        term = wl.term(term_id)
        new_q = term.question if question is None else question
        new_a = term.answer if answer is None else answer
        tsv.serialize([(new_q, new_a)])

        term.question, term.answer = new_q, new_a
        if reset_progress:
            term.reset_progress()
        wl.touch()
        self._bump(f"update term {wl.id}/{term.id}")
        return term

    def delete_term(self, list_id: str, term_id: str) -> Term:
        wl = self.find_list(list_id)
        term = wl.term(term_id)
        wl.terms.remove(term)
        wl.touch()
        self._bump(f"delete term {wl.id}/{term.id}")
        return term

    def note_progress(self, list_id: str) -> None:
        """Record that the learning state of a list's terms changed."""
        self.find_list(list_id).touch()
        self._bump(f"progress on {list_id}")

    # ------------------------------- Sessions -------------------------------

    def claim_session(self, session_id: str) -> None:
        """Register ``session_id`` as the store's single active session."""
        if self.active_session_id is not None and self.active_session_id != session_id:
            raise SessionAlreadyActive(self.active_session_id)
        self.active_session_id = session_id

    def release_session(self, session_id: str) -> None:
        if self.active_session_id == session_id:
            self.active_session_id = None

    # ------------------------------- Documents ------------------------------

    def to_document(self) -> StoreDocument:
        """Return a detached, lossless snapshot of the store."""
        return StoreDocument(
            root_id=self._root_id,
            revision=self._rev,
            folders=[f.model_copy(deep=True) for f in self.folders()],
            lists=[wl.model_copy(deep=True) for wl in self.lists()],
        )

    @classmethod
    def from_document(cls, doc: StoreDocument) -> WordStore:
        """Rebuild a store from a validated document (entities are copied)."""
        store = cls.__new__(cls)
        store._folders = {f.id: f.model_copy(deep=True) for f in doc.folders}
        store._lists = {wl.id: wl.model_copy(deep=True) for wl in doc.lists}
        store._rev = doc.revision
        store._root_id = doc.root_id
        store.active_session_id = None
        return store

    # ------------------------------- Dunders --------------------------------

    def __len__(self) -> int:
        return len(self._lists)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WordStore):
            return NotImplemented
        return (
            self._root_id == other._root_id
            and self._folders == other._folders
            and self._lists == other._lists
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:  # pragma: no cover - trivial representation
        return f"WordStore(folders={len(self._folders)}, lists={len(self._lists)}, rev={self._rev})"


__all__ = ["PATH_SEP", "WordStore"]
