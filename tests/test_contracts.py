# tests/test_contracts.py
"""Validation rules of the Pydantic contracts (terms, folders, store document)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from flashwords.core.contracts.document import StoreDocument
from flashwords.core.contracts.folder import Folder
from flashwords.core.contracts.session import PracticeOptions, SessionSummary, TermOutcome
from flashwords.core.contracts.term import Term
from flashwords.core.contracts.word_list import WordList
from flashwords.core.errors import NotFound


def test_term_streak_never_exceeds_seen() -> None:
    """The streak/attempt invariant is enforced on construction."""
    with pytest.raises(ValidationError):
        Term(id="t", question="q", answer="a", correct_streak=2, seen_count=1)

    term = Term(id="t", question="q", answer="a")
    term.record_correct()
    term.record_correct()
    term.record_incorrect()
    assert (term.correct_streak, term.seen_count) == (0, 3)


def test_word_list_lookup() -> None:
    """Unknown term ids raise NotFound."""
    term = Term(id="t", question="q", answer="a")
    wl = WordList(id="l", name="words", folder_id="r", terms=[term])
    assert wl.term("t").answer == "a"
    with pytest.raises(NotFound):
        wl.term("x")


def test_practice_options_bounds() -> None:
    """Rotation and mastery must be at least one."""
    with pytest.raises(ValidationError):
        PracticeOptions(rotation_distance=0)
    with pytest.raises(ValidationError):
        PracticeOptions(mastery_threshold=0)
    assert PracticeOptions(max_reinsertions=0).max_reinsertions == 0


def test_summary_accuracy_and_missed() -> None:
    """Derived summary figures come from the per-term outcomes."""
    outcomes = [
        TermOutcome(
            list_id="l", term_id="a", question="q", answer="a", attempts=1, correct_answers=1,
            mastered=True,
        ),
        TermOutcome(
            list_id="l", term_id="b", question="q", answer="a", attempts=3, mastered=False
        ),
    ]
    summary = SessionSummary(
        session_id="s",
        seed=1,
        state="finished",
        completed=True,
        pool_size=2,
        attempted=2,
        correct=1,
        outcomes=outcomes,
    )
    assert summary.accuracy == pytest.approx(0.25)
    assert [o.term_id for o in summary.missed] == ["b"]


def _tree(*, cyclic: bool = False) -> list[Folder]:
    root = Folder(id="r", name="", folder_ids=["a"])
    a = Folder(id="a", name="a", parent_id="r", folder_ids=["b"])
    b = Folder(id="b", name="b", parent_id="a", folder_ids=["a"] if cyclic else [])
    return [root, a, b]


def test_document_accepts_consistent_tree() -> None:
    doc = StoreDocument(root_id="r", folders=_tree())
    assert {f.id for f in doc.folders} == {"r", "a", "b"}


def test_document_rejects_cycles_and_orphans() -> None:
    """Every folder must be reachable from the root exactly once."""
    with pytest.raises(ValidationError):
        StoreDocument(root_id="r", folders=_tree(cyclic=True))

    orphan = Folder(id="o", name="o", parent_id="r")
    with pytest.raises(ValidationError):
        StoreDocument(root_id="r", folders=[*_tree(), orphan])


def test_document_rejects_duplicate_term_ids() -> None:
    """Term ids are unique within their list."""
    root = Folder(id="r", name="", list_ids=["l"])
    terms = [Term(id="t", question="q", answer="a"), Term(id="t", question="x", answer="y")]
    with pytest.raises(ValidationError):
        StoreDocument(
            root_id="r",
            folders=[root],
            lists=[WordList(id="l", name="l", folder_id="r", terms=terms)],
        )
