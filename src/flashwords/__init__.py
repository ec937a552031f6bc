"""flashwords: practice term/definition lists from the terminal.

The package is split into a pure core (``flashwords.core``) holding the word
store, the TSV codec and the practice-session engine, and a Typer/Rich command
line in ``flashwords.cli`` that drives it.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
