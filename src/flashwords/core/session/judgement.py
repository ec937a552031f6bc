"""Answer judging: the single place where typed input is compared to a card.

Every caller (session engine, CLI previews, tests) goes through :func:`judge`
so the matching policy can be tuned in one spot via :class:`Strictness`.

Policies
--------
- ``exact``   : ``typed == expected``.
- ``normal``  : both sides trimmed, compared with ``str.casefold``.
- ``lenient`` : ``normal`` against any of these candidate spellings of the
  expected answer:

  * the answer itself, its ``,``/``/``-separated alternatives, and the
    alternatives re-joined with ``", "``;
  * each of those with parenthesised text dropped (``"Such (optional)"``
    accepts ``"Such"``);
  * each of those with parentheses and spaces removed.

Examples
--------
>>> judge("  Cat ", "cat")
<Judgment.CORRECT: 'correct'>
>>> judge("sofa", "bank, sofa", Strictness.LENIENT)
<Judgment.CORRECT: 'correct'>
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from flashwords.core.contracts.session import Judgment, Strictness

_ALTERNATIVES = re.compile(r"[,/]")
_PARENS = re.compile(r"\(.*\)")


def _fold(text: str) -> str:
    return text.strip().casefold()


def _spellings(expected: str) -> Iterator[str]:
    """Yield the candidate spellings ``lenient`` accepts for ``expected``."""
    alternatives = [a.strip() for a in _ALTERNATIVES.split(expected) if a.strip()]
    for candidate in (expected, *alternatives, ", ".join(alternatives)):
        candidate = candidate.strip()
        yield candidate
        yield _PARENS.sub("", candidate).strip()
        yield re.sub(r"[() ]", "", candidate)


def matches(
    typed: str, expected: str, strictness: Strictness | str = Strictness.NORMAL
) -> bool:
    """Return True if ``typed`` is an acceptable answer for ``expected``.

    ``strictness`` may be a plain policy name (``"exact"``...); unknown names
    raise ``ValueError``.
    """
    strictness = Strictness(strictness)
    if strictness is Strictness.EXACT:
        return typed == expected
    if strictness is Strictness.NORMAL:
        return _fold(typed) == _fold(expected)
    wanted = _fold(typed)
    return any(wanted == _fold(s) for s in _spellings(expected))


def judge(
    typed: str, expected: str, strictness: Strictness | str = Strictness.NORMAL
) -> Judgment:
    """Judge one typed answer; see the module docstring for the policies."""
    return Judgment.CORRECT if matches(typed, expected, strictness) else Judgment.INCORRECT


__all__ = ["judge", "matches"]
