"""Practice-session engine for flashwords.

Currently exposed:

- :class:`PracticeSession` / :func:`start_session` : the rotation state
  machine, implemented in ``engine.py``.
- :func:`judge` : the answer matching policy, implemented in ``judgement.py``.
"""

from __future__ import annotations

from .engine import PracticeSession, end_session, start_session
from .judgement import judge, matches

__all__ = ["PracticeSession", "end_session", "judge", "matches", "start_session"]
