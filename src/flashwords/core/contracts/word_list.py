"""WordList: a named, ordered collection of terms inside one folder."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from flashwords.core.errors import NotFound

from .term import Term


def _now() -> datetime:
    return datetime.now(UTC)


class WordList(BaseModel):
    """A list of terms; term order is the order used for TSV export.

    ``term_lang``/``def_lang`` are optional language codes ("fr", "en", ...)
    used to filter listings, ``created_at``/``last_modified`` are UTC stamps
    maintained by the store.
    """

    id: str = Field(min_length=1)
    name: str
    folder_id: str = Field(description="Id of the owning folder.")
    terms: list[Term] = Field(default_factory=list)

    term_lang: str | None = Field(default=None, description="Language of the questions.")
    def_lang: str | None = Field(default=None, description="Language of the answers.")
    created_at: datetime = Field(default_factory=_now)
    last_modified: datetime = Field(default_factory=_now)

    def term(self, term_id: str) -> Term:
        """Return the term with ``term_id`` or raise :class:`NotFound`."""
        for term in self.terms:
            if term.id == term_id:
                return term
        raise NotFound("term", f"{self.name}/{term_id}")

    def term_ids(self) -> set[str]:
        return {t.id for t in self.terms}

    def pairs(self) -> list[tuple[str, str]]:
        """Return ``(question, answer)`` for every term, in list order."""
        return [t.as_pair() for t in self.terms]

    def touch(self) -> None:
        """Bump ``last_modified`` to now."""
        self.last_modified = _now()

    def speaks(self, lang: str) -> bool:
        """True if either side of the list is in ``lang`` (case-insensitive)."""
        wanted = lang.casefold()
        langs = (self.term_lang, self.def_lang)
        return any(v is not None and v.casefold() == wanted for v in langs)


__all__ = ["WordList"]
