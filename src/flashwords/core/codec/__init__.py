"""Wire codecs for importing and exporting word lists.

Currently exposed:

- TSV (``question<TAB>answer`` per line), implemented in ``tsv.py``.
"""

from __future__ import annotations

from .tsv import Pair, decode, iter_records, normalize, parse, serialize

__all__ = ["Pair", "decode", "iter_records", "normalize", "parse", "serialize"]
