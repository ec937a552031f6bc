"""Core package initializer for flashwords.

Downstream code imports from the submodules directly, e.g.:
    from flashwords.core.store.memory import WordStore
    from flashwords.core.session.engine import start_session
"""

from __future__ import annotations

__all__ = ["__doc__"]
