"""Logging utilities for tmux operations."""

import logging
from typing import Any

tmux_logger = logging.getLogger("tmuxdev.tmux")


def log_session_operation(
    operation: str, session_name: str, status: str, context: dict[str, Any] | None = None
) -> None:
    """Log session operation."""
    message = f"Session {operation} {status} - {session_name}"
    if context:
        message += f" - {context}"

    if status == "error":
        tmux_logger.error(message)
    else:
        tmux_logger.info(message)


def log_session_attach(session_name: str) -> None:
    """Log session attachment."""
    tmux_logger.info(f"Session attached - {session_name}")


def log_session_detach(session_name: str, returncode: int) -> None:
    """Log the end of an attach, whether by detach or by tmux exiting."""
    tmux_logger.info(f"Session detached - {session_name} (exit status: {returncode})")


def log_session_list(sessions: list[str]) -> None:
    """Log session listing."""
    tmux_logger.debug(f"Sessions listed - count: {len(sessions)}")
