"""
Tmux session registry adapter.

Queries (existence, listing) never raise: any failure talking to tmux reads
as "no such session". Mutations (create, send, kill) raise ``TmuxError``
subclasses. Attach hands the terminal to tmux and never raises for a
non-zero exit; see ``translate_attach_exit``.
"""

import shlex
import subprocess  # nosec B404
from enum import Enum
from pathlib import Path

import click
import libtmux
from libtmux.exc import LibTmuxException

from ..config import LaunchMode, TmuxdevConfig
from ..utils.logging import (
    LogContext,
    SessionCreationError,
    SessionKillError,
    TmuxError,
    audit_log,
)
from .logging_utils import (
    log_session_attach,
    log_session_detach,
    log_session_list,
    log_session_operation,
    tmux_logger,
)


class AttachOutcome(Enum):
    """How a foreground attach ended."""

    DETACHED = "detached"
    EXITED_WITH_ERROR = "exited-with-error"


def translate_attach_exit(returncode: int) -> AttachOutcome:
    """Map the exit status of ``tmux attach-session`` to an outcome.

    tmux exits 0 when the user detaches. Any other status means tmux itself
    reported a problem (session vanished, nested client, no terminal). This
    is the only place where such a status is downgraded: callers treat both
    outcomes as a normal end of the attach.
    """
    if returncode == 0:
        return AttachOutcome.DETACHED
    return AttachOutcome.EXITED_WITH_ERROR


def exact_target(session_name: str) -> str:
    """Return a ``-t`` target that matches only this session name.

    A bare name is resolved by tmux as a prefix or pattern, so ``app`` could
    select ``app-main``. The ``=`` prefix requests an exact match, the same
    lookup ``has-session`` uses through libtmux.
    """
    return f"={session_name}"


class TmuxService:
    """Adapter over the tmux server for named development sessions."""

    def __init__(
        self,
        config: TmuxdevConfig | None = None,
        server: libtmux.Server | None = None,
    ):
        """Initialize tmux service.

        Args:
            config: Settings for the dev command, launch mode and echoing
            server: libtmux server to talk to; the default socket if omitted
        """
        self._config = config or TmuxdevConfig()
        self._server = server if server is not None else libtmux.Server()
        self._verbose = self._config.verbose

    @property
    def verbose(self) -> bool:
        return self._verbose

    def _trace(self, *args: str) -> None:
        """Record a tmux invocation, echoing it when verbose."""
        command = shlex.join(["tmux", *args])
        tmux_logger.debug(f"Running {command}")
        if self._verbose:
            click.echo(click.style(f"$ {command}", dim=True), err=True)

    def exists(self, session_name: str) -> bool:
        """Check if a tmux session exists.

        Args:
            session_name: Name of session to check

        Returns:
            True if a live session has exactly this name
        """
        self._trace("has-session", "-t", session_name)
        try:
            return bool(self._server.has_session(session_name))
        except (LibTmuxException, OSError) as e:
            tmux_logger.debug(f"has-session failed for {session_name}: {e}")
            return False

    def list_all(self) -> list[str]:
        """List the names of all live tmux sessions.

        Returns:
            Session names in tmux order; empty when no server is running
        """
        self._trace("list-sessions", "-F", "#{session_name}")
        try:
            names = [s.session_name for s in self._server.sessions if s.session_name]
        except (LibTmuxException, OSError) as e:
            tmux_logger.debug(f"list-sessions failed: {e}")
            return []

        log_session_list(names)
        return names

    @audit_log("create session", LogContext.TMUX)
    def create(self, session_name: str, start_directory: Path | None = None) -> None:
        """Create a detached session running the development server.

        Args:
            session_name: Name for the new session
            start_directory: Directory the session starts in

        Raises:
            SessionCreationError: If tmux refuses or is unavailable
        """
        dev_command = self._config.dev_command
        send_keys = self._config.launch_mode == LaunchMode.SEND_KEYS

        args = ["new-session", "-d", "-s", session_name]
        if start_directory:
            args += ["-c", str(start_directory)]
        if not send_keys:
            args.append(dev_command)
        self._trace(*args)

        log_session_operation("create", session_name, "starting")
        try:
            self._server.new_session(
                session_name=session_name,
                attach=False,
                start_directory=str(start_directory) if start_directory else None,
                window_command=None if send_keys else dev_command,
            )
        except (LibTmuxException, OSError) as e:
            log_session_operation("create", session_name, "error", {"error": str(e)})
            raise SessionCreationError(
                f"Failed to create session {session_name}: {e}",
                session_name=session_name,
            ) from e

        if send_keys:
            try:
                self.send_command(session_name, dev_command)
            except TmuxError as e:
                raise SessionCreationError(
                    f"Session {session_name} created but the command could not be started: {e}",
                    session_name=session_name,
                ) from e

        log_session_operation("create", session_name, "success")

    def send_command(self, session_name: str, command: str) -> None:
        """Type a command followed by Enter into the session's active pane.

        Raises:
            TmuxError: If the session or its pane cannot be found
        """
        self._trace("send-keys", "-t", session_name, command, "Enter")
        try:
            session = self._server.sessions.get(session_name=session_name, default=None)
            if session is None:
                raise TmuxError(
                    f"Session {session_name} does not exist", session_name=session_name
                )
            session.active_window.active_pane.send_keys(command, enter=True)
        except (LibTmuxException, OSError) as e:
            raise TmuxError(
                f"Failed to send command to {session_name}: {e}",
                session_name=session_name,
            ) from e

    def attach(self, session_name: str) -> AttachOutcome:
        """Attach the current terminal to a session until it detaches or ends.

        Args:
            session_name: Name of session to attach to

        Returns:
            The translated outcome; never raises for tmux's own exit status
        """
        target = exact_target(session_name)
        self._trace("attach-session", "-t", target)
        log_session_attach(session_name)
        try:
            completed = subprocess.run(  # nosec B603 B607
                ["tmux", "attach-session", "-t", target], check=False
            )
        except OSError as e:
            tmux_logger.warning(f"Could not run tmux attach for {session_name}: {e}")
            return AttachOutcome.EXITED_WITH_ERROR

        log_session_detach(session_name, completed.returncode)
        return translate_attach_exit(completed.returncode)

    @audit_log("kill session", LogContext.TMUX)
    def kill(self, session_name: str) -> None:
        """Terminate a session.

        Raises:
            SessionKillError: If the session no longer exists or tmux fails
        """
        target = exact_target(session_name)
        self._trace("kill-session", "-t", target)
        try:
            self._server.kill_session(target)
        except (LibTmuxException, OSError) as e:
            log_session_operation("kill", session_name, "error", {"error": str(e)})
            raise SessionKillError(
                f"Failed to kill session {session_name}: {e}",
                session_name=session_name,
            ) from e

        log_session_operation("kill", session_name, "success")
