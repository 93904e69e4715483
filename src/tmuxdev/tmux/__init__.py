"""
Tmux session registry for tmuxdev.

This package wraps the tmux server behind a small adapter:
- Existence checks and session listing (queries never fail)
- Detached session creation running the development server
- Foreground attach with detach-aware exit handling
- Session termination
"""

from ..utils.logging import SessionCreationError, SessionKillError, TmuxError
from .service import AttachOutcome, TmuxService, exact_target, translate_attach_exit

__all__ = [
    "AttachOutcome",
    "SessionCreationError",
    "SessionKillError",
    "TmuxError",
    "TmuxService",
    "exact_target",
    "translate_attach_exit",
]
