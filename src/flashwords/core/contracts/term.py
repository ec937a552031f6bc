"""Term: one question/answer flashcard plus its learning state."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class Term(BaseModel):
    """A single flashcard owned by exactly one :class:`WordList`.

    ``correct_streak`` counts consecutive correct answers and resets on a miss;
    ``seen_count`` counts every judged attempt. A streak can therefore never
    exceed the number of attempts.
    """

    id: str = Field(min_length=1, description="Identifier, unique within the owning list.")
    question: str = Field(description="Prompt side of the card (the 'term').")
    answer: str = Field(description="Expected side of the card (the 'definition').")
    correct_streak: int = Field(default=0, ge=0)
    seen_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _streak_within_seen(self) -> Term:
        if self.correct_streak > self.seen_count:
            raise ValueError(
                f"correct_streak ({self.correct_streak}) exceeds seen_count ({self.seen_count})"
            )
        return self

    def record_correct(self) -> None:
        """Count a correct attempt."""
        self.seen_count += 1
        self.correct_streak += 1

    def record_incorrect(self) -> None:
        """Count a missed attempt and reset the streak."""
        self.seen_count += 1
        self.correct_streak = 0

    def reset_progress(self) -> None:
        self.seen_count = 0
        self.correct_streak = 0

    def as_pair(self) -> tuple[str, str]:
        """Return the TSV view of this term."""
        return self.question, self.answer


__all__ = ["Term"]
