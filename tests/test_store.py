"""Tests for the in-memory word store (folders, lists, terms, paths)."""

from __future__ import annotations

import pytest

from flashwords.core.codec import tsv
from flashwords.core.contracts.folder import Folder
from flashwords.core.contracts.word_list import WordList
from flashwords.core.errors import (
    DuplicateName,
    InvalidName,
    MalformedRecord,
    NotFound,
    SessionAlreadyActive,
    TreeError,
)
from flashwords.core.store.memory import WordStore


@pytest.fixture()  # type: ignore[misc]
def store() -> WordStore:
    """A store with ``/lang/french`` holding two terms."""
    s = WordStore()
    lang = s.create_folder(s.root.id, "lang")
    s.import_tsv(lang.id, "french", "chat\tcat\nchien\tdog\n", term_lang="fr", def_lang="en")
    return s


def test_new_store_has_only_root() -> None:
    """A fresh store is a single empty root folder."""
    s = WordStore()
    assert s.root.is_root and s.root.is_empty
    assert len(s) == 0
    assert s.revision == 0
    assert s.path_of(s.root.id) == ""


def test_import_creates_list_with_fresh_learning_state(store: WordStore) -> None:
    """Imported terms keep file order and start unseen."""
    wl = store.resolve("lang/french")
    assert isinstance(wl, WordList)
    assert wl.pairs() == [("chat", "cat"), ("chien", "dog")]
    assert all(t.seen_count == 0 and t.correct_streak == 0 for t in wl.terms)
    assert len(wl.term_ids()) == 2
    assert wl.speaks("FR") and not wl.speaks("de")


def test_export_equals_normalized_import() -> None:
    """Export of an imported list is the canonical form of the input."""
    s = WordStore()
    raw = "a\tb\r\n\r\n  \nc d\t e \r\n"
    wl = s.import_tsv(s.root.id, "x", raw)
    assert s.export_tsv(wl.id) == tsv.normalize(raw)


def test_failed_import_creates_nothing(store: WordStore) -> None:
    """A malformed file leaves the store untouched."""
    rev = store.revision
    with pytest.raises(MalformedRecord) as info:
        store.import_tsv(store.root.id, "bad", "ok\tfine\nbroken\n")
    assert info.value.line_no == 2
    assert store.revision == rev
    assert [wl.name for wl in store.lists()] == ["french"]


def test_duplicate_names_rejected_and_siblings_unchanged(store: WordStore) -> None:
    """Names are unique among a folder's folders and lists together."""
    lang = store.resolve("lang")
    assert isinstance(lang, Folder)
    before = store.children(lang.id)

    with pytest.raises(DuplicateName):
        store.create_folder(lang.id, "french")
    with pytest.raises(DuplicateName):
        store.import_tsv(lang.id, "french", "a\tb")
    assert store.children(lang.id) == before

    # Same name in another folder is fine.
    other = store.create_folder(store.root.id, "other")
    store.create_list(other.id, "french")


@pytest.mark.parametrize("name", ["", "   ", "a/b"])  # type: ignore[misc]
def test_invalid_names(name: str) -> None:
    """Empty names and path separators are refused."""
    s = WordStore()
    with pytest.raises(InvalidName):
        s.create_folder(s.root.id, name)


def test_names_are_trimmed() -> None:
    """Surrounding whitespace is not part of a name."""
    s = WordStore()
    f = s.create_folder(s.root.id, "  verbs ")
    assert f.name == "verbs"


def test_delete_folder_is_recursive(store: WordStore) -> None:
    """Sub-folders, lists and terms below a deleted folder are gone."""
    lang = store.resolve("lang")
    deep = store.create_folder(lang.id, "deep")
    inner = store.create_list(deep.id, "inner", [("q", "a")])
    french = store.resolve("lang/french")

    removed = store.delete_folder(lang.id)

    assert removed == 2
    assert store.root.is_empty
    assert len(store) == 0
    assert store.term_count(store.root.id) == 0
    for ident in (inner.id, french.id):
        with pytest.raises(NotFound):
            store.find_list(ident)
    with pytest.raises(NotFound):
        store.find_folder(deep.id)


def test_root_is_protected(store: WordStore) -> None:
    """The root cannot be deleted, renamed or moved."""
    root = store.root.id
    lang = store.resolve("lang")
    with pytest.raises(TreeError):
        store.delete_folder(root)
    with pytest.raises(TreeError):
        store.rename_folder(root, "x")
    with pytest.raises(TreeError):
        store.move_folder(root, lang.id)


def test_move_folder(store: WordStore) -> None:
    """Folders move between parents, never into their own subtree."""
    lang = store.resolve("lang")
    sub = store.create_folder(lang.id, "sub")
    dest = store.create_folder(store.root.id, "dest")

    with pytest.raises(TreeError):
        store.move_folder(lang.id, sub.id)
    with pytest.raises(TreeError):
        store.move_folder(lang.id, lang.id)

    store.move_folder(lang.id, dest.id)
    assert store.path_of(sub.id) == "dest/lang/sub"
    assert lang.id not in store.root.folder_ids

    store.create_folder(store.root.id, "lang")
    with pytest.raises(DuplicateName):
        store.move_folder(lang.id, store.root.id)


def test_rename_and_move_list(store: WordStore) -> None:
    """Lists can be renamed and moved; name clashes are errors."""
    wl = store.resolve("lang/french")
    store.create_list(store.root.id, "french")

    with pytest.raises(DuplicateName):
        store.move_list(wl.id, store.root.id)
    store.rename_list(wl.id, "fr")
    store.move_list(wl.id, store.root.id)

    assert store.path_of(wl.id) == "fr"
    assert store.resolve("/fr") is wl
    assert store.resolve("lang").is_empty  # type: ignore[union-attr]


def test_resolve_and_lookups(store: WordStore) -> None:
    """Paths resolve to entries; unknown paths and ids raise NotFound."""
    assert store.resolve("") is store.root
    assert store.resolve("/") is store.root
    with pytest.raises(NotFound):
        store.resolve("lang/german")
    with pytest.raises(NotFound):
        store.resolve("lang/french/deeper")
    with pytest.raises(NotFound):
        store.find_folder("nope")
    with pytest.raises(NotFound):
        store.find_term(store.resolve("lang/french").id, "nope")


def test_scope_walks_subtree_in_order(store: WordStore) -> None:
    """A folder scope covers its own lists first, then its sub-folders'."""
    lang = store.resolve("lang")
    sub = store.create_folder(lang.id, "sub")
    store.create_list(sub.id, "deep", [("x", "y")])
    store.create_list(lang.id, "spanish", [("gato", "cat")])

    names = [wl.name for wl in store.lists_in(store.root.id)]
    assert names == ["french", "spanish", "deep"]
    assert store.term_count(lang.id) == 4
    assert store.term_count(sub.id) == 1
    wl = store.resolve("lang/french")
    assert [wl.name for wl in store.lists_in(wl.id)] == ["french"]


def test_term_editing(store: WordStore) -> None:
    """Terms can be added, edited and removed; learning state survives edits."""
    wl = store.resolve("lang/french")
    assert isinstance(wl, WordList)
    term = store.add_term(wl.id, "oiseau", "bird")
    term.record_correct()

    store.update_term(wl.id, term.id, answer="the bird")
    assert store.find_term(wl.id, term.id).as_pair() == ("oiseau", "the bird")
    assert term.seen_count == 1

    store.update_term(wl.id, term.id, reset_progress=True)
    assert (term.seen_count, term.correct_streak) == (0, 0)

    with pytest.raises(MalformedRecord):
        store.add_term(wl.id, "tab\there", "x")
    with pytest.raises(MalformedRecord):
        store.update_term(wl.id, term.id, question="two\nlines")

    store.delete_term(wl.id, term.id)
    assert term.id not in wl.term_ids()
    assert len(wl.terms) == 2


def test_every_mutation_bumps_revision() -> None:
    """The revision counter tracks unsaved changes."""
    s = WordStore()
    f = s.create_folder(s.root.id, "a")
    wl = s.create_list(f.id, "l")
    s.add_term(wl.id, "q", "a")
    assert s.revision == 3


def test_single_active_session() -> None:
    """Only one session may hold the store at a time."""
    s = WordStore()
    s.claim_session("one")
    s.claim_session("one")
    with pytest.raises(SessionAlreadyActive):
        s.claim_session("two")
    s.release_session("two")
    assert s.active_session_id == "one"
    s.release_session("one")
    s.claim_session("two")
