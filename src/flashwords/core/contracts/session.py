"""
Session contracts: options, judgments and summaries of a practice run.

This module defines the data structures exchanged between the session engine
and its callers:

- :class:`PracticeOptions`: the knobs of one run (rotation, limits, policy).
- :class:`TermRef`: a stable pointer to a term inside the store.
- :class:`TermOutcome` / :class:`SessionSummary`: the "backward-looking"
  report returned by ``end_session``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field

from flashwords.core.settings import Settings, load_settings

# --------------------------------------------------------------------------- #
# Enumerations
# --------------------------------------------------------------------------- #


class Judgment(StrEnum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


class SessionState(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Strictness(StrEnum):
    """How typed answers are compared with the stored one.

    - ``exact``: verbatim, case and whitespace included.
    - ``normal``: trimmed, case-insensitive.
    - ``lenient``: ``normal`` plus optional parenthesised parts and
      comma/slash separated alternatives.
    """

    EXACT = "exact"
    NORMAL = "normal"
    LENIENT = "lenient"


class Direction(StrEnum):
    """Which side of the card is shown; the other side is expected.

    ``both`` puts every term in the pool twice, once each way.
    """

    FORWARD = "forward"
    REVERSE = "reverse"
    BOTH = "both"


# --------------------------------------------------------------------------- #
# Data Model: Options (Forward-looking)
# --------------------------------------------------------------------------- #


class PracticeOptions(BaseModel):
    """
    Parameters of a single practice session.

    Parameters
    ----------
    rotation_distance:
        A missed term is re-inserted this many slots after the one it
        occupied (1 means "ask again right away").
    max_reinsertions:
        How often a single term may be re-inserted after misses within one
        session; once exhausted the term is left as not mastered.
    mastery_threshold:
        Correct answers in a row needed within the session before a term is
        done. Below it, a correctly answered term is rotated back in without
        using up a re-insertion.
    strictness:
        Judging policy, see :class:`Strictness`.
    direction:
        Ask questions (``forward``), answers (``reverse``) or each term both
        ways (``both``).
    shuffle:
        Shuffle the pool with the session seed; otherwise keep tree order.
    """

    rotation_distance: int = Field(default=3, ge=1)
    max_reinsertions: int = Field(default=3, ge=0)
    mastery_threshold: int = Field(default=1, ge=1)
    strictness: Strictness = Strictness.NORMAL
    direction: Direction = Direction.FORWARD
    shuffle: bool = True

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, **overrides: object
    ) -> PracticeOptions:
        """Build options from the configured defaults, then apply ``overrides``.

        ``None`` overrides are ignored so CLI flags can be passed through as-is.
        """
        s = settings if settings is not None else load_settings()
        data: dict[str, object] = {
            "rotation_distance": s.rotation_distance,
            "max_reinsertions": s.max_reinsertions,
            "mastery_threshold": s.mastery_threshold,
            "strictness": s.strictness,
        }
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)


@dataclass(frozen=True, slots=True)
class TermRef:
    """Locates a card of the pool: a term in the store and the way it is asked."""

    list_id: str
    term_id: str
    reverse: bool = False


# --------------------------------------------------------------------------- #
# Data Model: Summary (Backward-looking)
# --------------------------------------------------------------------------- #


class TermOutcome(BaseModel):
    """What happened to one card (a term asked one way) during a session."""

    list_id: str
    term_id: str
    reverse: bool = False
    question: str
    answer: str
    attempts: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    reinsertions: int = Field(default=0, ge=0)
    last_judgment: Judgment | None = None
    mastered: bool | None = Field(
        default=None,
        description="True once the term is done, False when retries ran out, None if unresolved.",
    )


class SessionSummary(BaseModel):
    """Report returned by ``end_session``; ``attempted <= pool_size`` always holds."""

    session_id: str
    seed: int
    state: SessionState
    completed: bool = Field(description="False when the session was ended before the pool ran out.")
    pool_size: int = Field(ge=0, description="Number of cards in the pool at start.")
    attempted: int = Field(ge=0, description="Distinct cards answered at least once.")
    correct: int = Field(ge=0, description="Distinct cards mastered this session.")
    outcomes: list[TermOutcome] = Field(default_factory=list)

    @property
    def missed(self) -> list[TermOutcome]:
        return [o for o in self.outcomes if o.mastered is False]

    @property
    def accuracy(self) -> float:
        """Share of correct answers among all submitted answers."""
        total = sum(o.attempts for o in self.outcomes)
        return sum(o.correct_answers for o in self.outcomes) / total if total else 0.0


__all__ = [
    "Direction",
    "Judgment",
    "PracticeOptions",
    "SessionState",
    "SessionSummary",
    "Strictness",
    "TermOutcome",
    "TermRef",
]
