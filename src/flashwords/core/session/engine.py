"""
Practice-session engine: pool rotation, judging and learning-state updates.

Lifecycle
---------
``NOT_STARTED --start()--> IN_PROGRESS --pool exhausted / end()--> FINISHED``

1. **Start**: collect every term reachable from the scope (a list, or a
   folder and its whole subtree) in tree order, shuffle it with a
   ``random.Random(seed)`` and register the session on the store. The seed
   is kept on the session, so replaying it over the same store yields the
   same pool.
2. **Loop**: ``next_term()`` shows the term under the cursor without moving
   it; ``submit_answer()`` judges the typed text, updates the live
   :class:`Term` in the store and moves the cursor on. Missed terms are
   re-inserted ``rotation_distance`` slots after the slot they held, at most
   ``max_reinsertions`` times per term.
3. **End**: ``end()`` releases the store and reports a
   :class:`SessionSummary`. Progress already written to terms stays.

Only one session may be in progress per store; a second ``start()`` fails
with :class:`SessionAlreadyActive` until the first one ends.
"""

from __future__ import annotations

import random
import uuid

from flashwords.core.contracts.folder import Folder
from flashwords.core.contracts.session import (
    Direction,
    Judgment,
    PracticeOptions,
    SessionState,
    SessionSummary,
    TermOutcome,
    TermRef,
)
from flashwords.core.contracts.term import Term
from flashwords.core.contracts.word_list import WordList
from flashwords.core.errors import (
    EmptyScope,
    InvalidSessionState,
    NotFound,
    SessionAlreadyActive,
    SessionComplete,
)
from flashwords.core.session.judgement import judge
from flashwords.core.settings import get_logger
from flashwords.core.store.memory import WordStore

logger = get_logger(__name__)

Scope = str | Folder | WordList


def _scope_id(scope: Scope) -> str:
    return scope if isinstance(scope, str) else scope.id


class PracticeSession:
    """One practice run over a scope of a :class:`WordStore`.

    Parameters
    ----------
    store : WordStore
        The store whose terms are practised and updated in place.
    scope : str | Folder | WordList
        A list, or a folder meaning every list in its subtree.
    options : PracticeOptions | None
        Rotation, limits and judging policy; defaults come from settings.
    seed : int | None
        Shuffle seed; a fresh random one is drawn when omitted.
    """

    def __init__(
        self,
        store: WordStore,
        scope: Scope,
        options: PracticeOptions | None = None,
        *,
        seed: int | None = None,
    ) -> None:
        self.id: str = uuid.uuid4().hex[:8]
        self.store = store
        self.scope_id = _scope_id(scope)
        self.options = options if options is not None else PracticeOptions.from_settings()
        self.seed: int = seed if seed is not None else random.SystemRandom().getrandbits(32)
        self.state: SessionState = SessionState.NOT_STARTED

        self._pool: list[TermRef] = []
        self._cursor: int = 0
        self._pool_size: int = 0
        self._results: dict[TermRef, TermOutcome] = {}
        self._streaks: dict[TermRef, int] = {}

    # ------------------------------- Introspection --------------------------

    @property
    def pool(self) -> tuple[TermRef, ...]:
        return tuple(self._pool)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def pool_size(self) -> int:
        """Number of cards the session started with (two per term for ``both``)."""
        return self._pool_size

    @property
    def remaining(self) -> int:
        return max(0, len(self._pool) - self._cursor)

    @property
    def done(self) -> int:
        """Distinct cards resolved so far (mastered or out of retries)."""
        return sum(1 for o in self._results.values() if o.mastered is not None)

    def outcome(self, ref: TermRef) -> TermOutcome:
        try:
            return self._results[ref]
        except KeyError:
            raise NotFound("term", f"{ref.list_id}/{ref.term_id}") from None

    @property
    def current_ref(self) -> TermRef | None:
        """The card under the cursor, ``None`` outside a running pool."""
        if self.state is not SessionState.IN_PROGRESS or self._cursor >= len(self._pool):
            return None
        return self._pool[self._cursor]

    def prompt(self, term: Term) -> str:
        """Text to show for ``term`` in this session's direction."""
        return term.answer if self._is_reversed(term) else term.question

    def expected(self, term: Term) -> str:
        """Text the user has to type for ``term``."""
        return term.question if self._is_reversed(term) else term.answer

    # ------------------------------- Transitions ----------------------------

    def start(self) -> PracticeSession:
        """Build the pool and enter ``IN_PROGRESS``.

        Raises
        ------
        SessionAlreadyActive
            If the store already has a session in progress.
        NotFound
            If the scope id is unknown.
        EmptyScope
            If the scope holds no terms; nothing is registered then.
        """
        if self.state is not SessionState.NOT_STARTED:
            raise InvalidSessionState(f"session {self.id} was already started")
        if self.store.active_session_id is not None:
            raise SessionAlreadyActive(self.store.active_session_id)

        refs: list[TermRef] = []
        for wl, term in self.store.iter_terms(self.scope_id):
            for reverse in self._sides():
                ref = TermRef(wl.id, term.id, reverse)
                refs.append(ref)
                self._results[ref] = TermOutcome(
                    list_id=wl.id,
                    term_id=term.id,
                    reverse=reverse,
                    question=term.question,
                    answer=term.answer,
                )
        if not refs:
            self._results.clear()
            raise EmptyScope(self.scope_id)

        # Shuffling a list in tree order keeps equal seeds reproducible.
        if self.options.shuffle:
            random.Random(self.seed).shuffle(refs)

        self.store.claim_session(self.id)
        self._pool = refs
        self._pool_size = len(refs)
        self.state = SessionState.IN_PROGRESS
        logger.info(
            "session %s started on %s: %d cards, seed=%d",
            self.id,
            self.scope_id,
            self._pool_size,
            self.seed,
        )
        return self

    def next_term(self) -> Term:
        """Return the term under the cursor; the cursor does not move.

        Terms deleted from the store since the session started are dropped
        from the pool on the way.

        Raises
        ------
        SessionComplete
            Once the pool is exhausted (the session is then ``FINISHED``).
        """
        if self.state is SessionState.NOT_STARTED:
            raise InvalidSessionState(f"session {self.id} has not been started")
        if self.state is SessionState.FINISHED:
            raise SessionComplete(f"session {self.id} is finished")

        while self._cursor < len(self._pool):
            ref = self._pool[self._cursor]
            try:
                return self.store.find_term(ref.list_id, ref.term_id)
            except NotFound:
                logger.debug("session %s: dropping deleted term %s", self.id, ref)
                del self._pool[self._cursor]
        self._finish()
        raise SessionComplete(f"session {self.id} is finished")

    def submit_answer(self, term: Term | TermRef, typed: str) -> Judgment:
        """Judge ``typed`` for the current term and update its learning state.

        ``term`` must be the term returned by :meth:`next_term` (or its ref).

        On ``CORRECT`` the streak and attempt count go up and the cursor
        moves on. On ``INCORRECT`` the streak resets, the attempt count goes
        up, the cursor moves on and the term is re-inserted further down the
        pool unless it already used up its re-insertions, in which case it is
        marked as not mastered.
        """
        current = self.next_term()
        slot = self._cursor
        ref = self._pool[slot]
        if isinstance(term, TermRef):
            if term != ref:
                raise InvalidSessionState(f"{term} is not the current term {ref}")
        elif term is not current:
            raise InvalidSessionState(f"term {term.id!r} is not the current term {ref}")

        expected = current.question if ref.reverse else current.answer
        judgment = judge(typed, expected, self.options.strictness)
        outcome = self._results[ref]
        outcome.attempts += 1
        outcome.last_judgment = judgment
        self._cursor += 1

        if judgment is Judgment.CORRECT:
            current.record_correct()
            outcome.correct_answers += 1
            streak = self._streaks[ref] = self._streaks.get(ref, 0) + 1
            if streak >= self.options.mastery_threshold:
                outcome.mastered = True
            else:
                self._reinsert(ref, slot)
        else:
            current.record_incorrect()
            self._streaks[ref] = 0
            if outcome.reinsertions < self.options.max_reinsertions:
                outcome.reinsertions += 1
                self._reinsert(ref, slot)
            else:
                outcome.mastered = False

        self.store.note_progress(ref.list_id)
        logger.debug("session %s: %s -> %s", self.id, ref, judgment)
        if self._cursor >= len(self._pool):
            self._finish()
        return judgment

    def end(self) -> SessionSummary:
        """Stop the session (if still running) and summarize it."""
        completed = self.state is SessionState.FINISHED
        if self.state is SessionState.IN_PROGRESS:
            logger.info("session %s ended early at %d/%d", self.id, self._cursor, len(self._pool))
            self._finish()
        return self.summary(completed=completed)

    def summary(self, *, completed: bool | None = None) -> SessionSummary:
        """Snapshot of the per-term outcomes so far."""
        outcomes = [o.model_copy() for o in self._results.values()]
        return SessionSummary(
            session_id=self.id,
            seed=self.seed,
            state=self.state,
            completed=self.state is SessionState.FINISHED if completed is None else completed,
            pool_size=self._pool_size,
            attempted=sum(1 for o in outcomes if o.attempts > 0),
            correct=sum(1 for o in outcomes if o.mastered is True),
            outcomes=outcomes,
        )

    # ------------------------------- Internals ------------------------------

    def _sides(self) -> tuple[bool, ...]:
        direction = self.options.direction
        if direction is Direction.BOTH:
            return (False, True)
        return (direction is Direction.REVERSE,)

    def _is_reversed(self, term: Term) -> bool:
        direction = self.options.direction
        if direction is not Direction.BOTH:
            return direction is Direction.REVERSE
        # Outside the current card a term is shown forward.
        ref = self.current_ref
        return ref is not None and ref.term_id == term.id and ref.reverse

    def _reinsert(self, ref: TermRef, slot: int) -> None:
        index = min(slot + self.options.rotation_distance, len(self._pool))
        self._pool.insert(index, ref)

    def _finish(self) -> None:
        if self.state is SessionState.FINISHED:
            return
        self.state = SessionState.FINISHED
        self.store.release_session(self.id)
        logger.info("session %s finished", self.id)


def start_session(
    store: WordStore,
    scope: Scope,
    options: PracticeOptions | None = None,
    *,
    seed: int | None = None,
) -> PracticeSession:
    """Create and start a :class:`PracticeSession` in one call."""
    return PracticeSession(store, scope, options, seed=seed).start()


def end_session(session: PracticeSession) -> SessionSummary:
    """Module-level alias of :meth:`PracticeSession.end`."""
    return session.end()


__all__ = ["PracticeSession", "Scope", "end_session", "start_session"]
