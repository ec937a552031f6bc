"""Error taxonomy shared by the codec, the word store and the session engine.

Every failure raised by the core derives from :class:`FlashwordsError`, so the
CLI can catch one type and report ``kind`` plus message. None of these errors
is fatal: operations validate before mutating, so the store is left in its
prior state whenever one is raised.

Hierarchy
---------
- ``CodecError``: ``MalformedRecord``, ``EncodingError`` (carry a 1-based line)
- store level: ``DuplicateName``, ``NotFound``, ``InvalidName``, ``TreeError``
- engine level: ``EmptyScope``, ``SessionAlreadyActive``, ``SessionComplete``,
  ``InvalidSessionState``
- persistence: ``StoreFormatError``
"""

from __future__ import annotations


class FlashwordsError(Exception):
    """Base class for all recoverable flashwords failures."""

    @property
    def kind(self) -> str:
        """Short label for the rendering layer (the class name)."""
        return type(self).__name__


# ----- Codec -------------------------------------------------------------------


class CodecError(FlashwordsError):
    """A TSV payload could not be decoded or parsed."""

    def __init__(self, line_no: int, message: str) -> None:
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no


class MalformedRecord(CodecError):
    """A record does not consist of exactly two tab-separated fields."""

    def __init__(self, line_no: int, line: str, reason: str) -> None:
        super().__init__(line_no, reason)
        self.line = line


class EncodingError(CodecError):
    """The raw input is not valid UTF-8 text."""

    def __init__(self, line_no: int, reason: str) -> None:
        super().__init__(line_no, f"invalid UTF-8 ({reason})")


# ----- Store -------------------------------------------------------------------


class DuplicateName(FlashwordsError):
    """A sibling folder or list already uses the requested name."""

    def __init__(self, name: str, parent: str) -> None:
        super().__init__(f"{name!r} already exists in {parent!r}")
        self.name = name
        self.parent = parent


class NotFound(FlashwordsError):
    """No entity of ``entity`` kind is registered under ``ident``."""

    def __init__(self, entity: str, ident: str) -> None:
        super().__init__(f"no {entity} {ident!r}")
        self.entity = entity
        self.ident = ident


class InvalidName(FlashwordsError):
    """Names must be non-empty and may not contain the path separator."""

    def __init__(self, name: str) -> None:
        super().__init__(f"invalid name {name!r}")
        self.name = name


class TreeError(FlashwordsError):
    """The operation would detach the root or create a cycle."""


# ----- Session -----------------------------------------------------------------


class EmptyScope(FlashwordsError):
    """The chosen scope contains no terms to practice."""

    def __init__(self, scope_id: str) -> None:
        super().__init__(f"nothing to practice in {scope_id!r}")
        self.scope_id = scope_id


class SessionAlreadyActive(FlashwordsError):
    """Another session is still in progress on the same store."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"session {session_id!r} is still in progress")
        self.session_id = session_id


class SessionComplete(FlashwordsError):
    """The pool is exhausted; the session is finished."""


class InvalidSessionState(FlashwordsError):
    """The call does not fit the session's current state or cursor."""


# ----- Persistence -------------------------------------------------------------


class StoreFormatError(FlashwordsError):
    """A persisted store document could not be read back."""


__all__ = [
    "CodecError",
    "DuplicateName",
    "EmptyScope",
    "EncodingError",
    "FlashwordsError",
    "InvalidName",
    "InvalidSessionState",
    "MalformedRecord",
    "NotFound",
    "SessionAlreadyActive",
    "SessionComplete",
    "StoreFormatError",
    "TreeError",
]
