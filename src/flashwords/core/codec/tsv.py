"""TSV codec: turn ``question<TAB>answer`` lines into pairs and back.

Format
------
- One record per line, exactly one tab per record.
- ``\\r\\n``, ``\\r`` and ``\\n`` all terminate a line.
- Blank lines (empty, or only non-tab whitespace) are skipped.
- Field content is data: leading/trailing spaces are kept verbatim.
- A field can never contain a tab or a line break.

API
---
- ``parse(raw)``: strict parse, raises on the first bad line.
- ``iter_records(raw)``: lenient parse, yields errors in place of pairs.
- ``serialize(pairs)``: the inverse of ``parse``.
- ``normalize(raw)``: the canonical text ``serialize(parse(raw))`` produces.
- ``decode(raw_bytes)``: UTF-8 decoding with line-numbered errors.

Examples
--------
>>> parse("chat\\tcat\\n\\nchien\\tdog")
[('chat', 'cat'), ('chien', 'dog')]
>>> serialize([("chat", "cat")])
'chat\\tcat\\n'
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from flashwords.core.errors import EncodingError, MalformedRecord

Pair = tuple[str, str]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_BLANK = re.compile(r"[^\S\t]*")
_BOM = "\ufeff"


def _line_of(data: bytes | str, offset: int) -> int:
    """Return the 1-based line number containing ``offset``."""
    if isinstance(data, bytes):
        return data.count(b"\n", 0, offset) + 1
    return data.count("\n", 0, offset) + 1


def decode(raw: bytes) -> str:
    """Decode ``raw`` as UTF-8, dropping a leading byte-order mark.

    Raises
    ------
    EncodingError
        If ``raw`` is not valid UTF-8; the error names the offending line.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EncodingError(_line_of(raw, exc.start), exc.reason) from exc
    return text[1:] if text.startswith(_BOM) else text


def _as_text(raw: str | bytes) -> str:
    """Text passes through as-is; only raw bytes lose a leading byte-order mark."""
    if isinstance(raw, bytes):
        return decode(raw)
    try:
        # Lone surrogates sneak in through surrogateescape'd file names/pipes.
        raw.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(_line_of(raw, exc.start), exc.reason) from exc
    return raw


def _lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_no, line)`` for every non-blank line of ``text``."""
    for idx, line in enumerate(_LINE_BREAK.split(text), start=1):
        if _BLANK.fullmatch(line):
            continue
        yield idx, line


def iter_records(raw: str | bytes) -> Iterator[tuple[int, Pair | MalformedRecord]]:
    """Yield one ``(line_no, pair-or-error)`` per non-blank line.

    This is the lenient entry point used by "skip malformed lines" imports:
    bad lines come back as :class:`MalformedRecord` values instead of being
    raised, so the caller decides whether to report, skip or abort.
    Encoding problems are still raised, since no line is trustworthy then.
    """
    for line_no, line in _lines(_as_text(raw)):
        fields = line.split("\t")
        if len(fields) != 2:
            reason = f"expected 2 tab-separated fields, found {len(fields)}"
            yield line_no, MalformedRecord(line_no, line, reason)
            continue
        yield line_no, (fields[0], fields[1])


def parse(raw: str | bytes) -> list[Pair]:
    """Parse TSV text into ``(question, answer)`` pairs, in input order.

    Raises
    ------
    MalformedRecord
        On the first line that does not hold exactly one tab.
    EncodingError
        If ``raw`` is not valid text.
    """
    pairs: list[Pair] = []
    for _, record in iter_records(raw):
        if isinstance(record, MalformedRecord):
            raise record
        pairs.append(record)
    return pairs


def serialize(pairs: Iterable[Pair]) -> str:
    """Render pairs as TSV: one ``question<TAB>answer\\n`` line per pair.

    Raises
    ------
    MalformedRecord
        If a field holds a tab or a line break; such a pair has no TSV form.
    """
    out: list[str] = []
    for idx, (question, answer) in enumerate(pairs, start=1):
        for value in (question, answer):
            if "\t" in value or "\n" in value or "\r" in value:
                raise MalformedRecord(
                    idx, f"{question!r}/{answer!r}", "field contains a tab or line break"
                )
        out.append(f"{question}\t{answer}\n")
    return "".join(out)


def normalize(raw: str) -> str:
    """Canonicalize line endings and drop blank lines.

    ``normalize(t) == serialize(parse(t))`` for every well-formed ``t``.
    """
    lines = [line for _, line in _lines(raw)]
    return "".join(f"{line}\n" for line in lines)


__all__ = ["Pair", "decode", "iter_records", "normalize", "parse", "serialize"]
