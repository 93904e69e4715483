"""
Session lifecycle state machine.

One controller call handles one invocation: it resolves the identifier,
checks the registry once, then creates, attaches, lists for selection, or
kills, asking the user for confirmation where a step changes state.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from ..tmux.service import AttachOutcome
from ..utils.logging import LogContext, SessionCreationError, SessionKillError, get_logger
from .resolver import EnvironmentResolver

logger = get_logger(__name__, LogContext.LIFECYCLE)


class Confirmation(Enum):
    """Answer to a yes/no prompt."""

    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"

    @property
    def confirmed(self) -> bool:
        return self is Confirmation.CONFIRMED


class ActionChoice(str, Enum):
    """Menu actions offered in interactive mode."""

    ATTACH_CURRENT = "attach-current"
    CREATE_CURRENT = "create-current"
    SELECT_EXISTING = "select-existing"
    KILL_SESSION = "kill-session"
    EXIT = "exit"


class LifecycleState(Enum):
    """States the controller moves through during one invocation."""

    RESOLVING = "resolving"
    DECIDING = "deciding"
    CREATING = "creating"
    ATTACHING = "attaching"
    SELECTING = "selecting"
    KILLING = "killing"
    EXITING = "exiting"
    DONE = "done"


@dataclass
class MenuOption:
    """A menu entry shown to the user."""

    action: ActionChoice
    label: str


@dataclass
class SessionSnapshot:
    """Resolved identity of the current directory and its liveness."""

    folder: str
    identifier: str
    exists: bool


class SessionRegistry(Protocol):
    def exists(self, session_name: str) -> bool: ...

    def list_all(self) -> list[str]: ...

    def create(self, session_name: str, start_directory: Path | None = None) -> None: ...

    def attach(self, session_name: str) -> AttachOutcome: ...

    def kill(self, session_name: str) -> None: ...


class Prompter(Protocol):
    """Interactive questions. ``None`` and ``CANCELLED`` mean the user aborted."""

    def choose_action(self, options: list[MenuOption]) -> ActionChoice | None: ...

    def select_session(self, message: str, sessions: list[str]) -> str | None: ...

    def confirm(self, message: str, default: bool) -> Confirmation: ...


class Notifier(Protocol):
    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LifecycleController:
    """Drives create/attach/select/kill flows for the current directory."""

    def __init__(
        self,
        resolver: EnvironmentResolver,
        registry: SessionRegistry,
        prompter: Prompter,
        notifier: Notifier,
        dev_command: str = "pnpm dev",
    ):
        """Initialize the controller.

        Args:
            resolver: Source of the session identifier
            registry: tmux adapter used for all queries and mutations
            prompter: Asks the user menus, selections and confirmations
            notifier: Prints progress and result messages
            dev_command: Shown in progress messages when a session is created
        """
        self.resolver = resolver
        self.registry = registry
        self.prompter = prompter
        self.notifier = notifier
        self.dev_command = dev_command
        self.state: LifecycleState | None = None
        self.history: list[LifecycleState] = []

    def _transition(self, state: LifecycleState) -> None:
        previous = self.state.value if self.state else "idle"
        logger.debug(f"Lifecycle {previous} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _begin(self) -> SessionSnapshot:
        self.history = []
        self._transition(LifecycleState.RESOLVING)
        snapshot = self.snapshot()
        logger.set_session_name(snapshot.identifier)
        self._transition(LifecycleState.DECIDING)
        return snapshot

    def _finish(self) -> None:
        self._transition(LifecycleState.DONE)

    def snapshot(self) -> SessionSnapshot:
        """Resolve the identifier and check whether its session is live."""
        identifier = self.resolver.resolve_identifier()
        return SessionSnapshot(
            folder=self.resolver.folder_name(),
            identifier=identifier,
            exists=self.registry.exists(identifier),
        )

    # Steps

    def _create(self, session_name: str) -> bool:
        self._transition(LifecycleState.CREATING)
        self.notifier.success(
            f"Creating new tmux session '{session_name}' and starting {self.dev_command}..."
        )
        try:
            self.registry.create(session_name)
        except SessionCreationError as e:
            logger.error(f"Session creation failed: {e.message}")
            self.notifier.error(f"Failed to create session '{session_name}': {e.message}")
            return False
        self.notifier.info(f"Development server started in tmux session '{session_name}'")
        return True

    def _attach(self, session_name: str) -> None:
        self._transition(LifecycleState.ATTACHING)
        self.notifier.success(f"Attaching to tmux session '{session_name}'...")
        outcome = self.registry.attach(session_name)
        if outcome is AttachOutcome.EXITED_WITH_ERROR:
            logger.debug(f"Attach to {session_name} ended with a non-zero status")

    def _create_and_attach(self, session_name: str) -> None:
        if self._create(session_name):
            self._attach(session_name)

    def _cancelled(self) -> None:
        logger.info("Prompt cancelled by user")
        self._transition(LifecycleState.EXITING)
        self.notifier.warning("Exiting...")

    def _reattach_hint(self, session_name: str) -> None:
        self.notifier.warning(f"To attach later, run: tmux attach-session -t '{session_name}'")
        self.notifier.warning("To detach from the session, press: Ctrl+B then D")

    # Direct mode

    def start(self) -> None:
        """Attach to the current session, creating it first if needed."""
        snapshot = self._begin()
        if snapshot.exists:
            self.notifier.warning(
                f"Session '{snapshot.identifier}' already exists. Attaching..."
            )
            self._attach(snapshot.identifier)
        else:
            self._create_and_attach(snapshot.identifier)
        self._finish()

    def attach_only(self) -> None:
        """Attach to the current session; offer to create it when missing."""
        snapshot = self._begin()
        if snapshot.exists:
            self._attach(snapshot.identifier)
            self._finish()
            return

        self.notifier.error(f"Session '{snapshot.identifier}' does not exist.")
        answer = self.prompter.confirm("Would you like to start it?", default=True)
        if answer.confirmed:
            self._create_and_attach(snapshot.identifier)
        else:
            self._cancelled()
        self._finish()

    # Menu mode

    def menu_options(self, snapshot: SessionSnapshot, sessions: list[str]) -> list[MenuOption]:
        """Build the menu from one existence check and one session listing."""
        if snapshot.exists:
            options = [
                MenuOption(
                    ActionChoice.ATTACH_CURRENT,
                    f"Attach to current branch session ({snapshot.identifier})",
                )
            ]
        else:
            options = [
                MenuOption(
                    ActionChoice.CREATE_CURRENT,
                    f"Start new session for current directory ({snapshot.identifier})",
                )
            ]

        if sessions:
            options.append(
                MenuOption(ActionChoice.SELECT_EXISTING, "Select from existing sessions")
            )
            options.append(MenuOption(ActionChoice.KILL_SESSION, "Kill a session"))

        options.append(MenuOption(ActionChoice.EXIT, "Exit"))
        return options

    def menu(self) -> None:
        """Present the action menu and carry out the chosen action."""
        snapshot = self._begin()
        sessions = self.registry.list_all()
        options = self.menu_options(snapshot, sessions)

        action = self.prompter.choose_action(options)
        if action is None:
            self._cancelled()
        elif action not in {option.action for option in options}:
            raise ValueError(f"Action {action} was not offered")
        elif action is ActionChoice.ATTACH_CURRENT:
            self._attach(snapshot.identifier)
        elif action is ActionChoice.CREATE_CURRENT:
            self._menu_create(snapshot.identifier)
        elif action is ActionChoice.SELECT_EXISTING:
            self._menu_select(sessions)
        elif action is ActionChoice.KILL_SESSION:
            self._menu_kill(sessions)
        else:
            self._transition(LifecycleState.EXITING)
            self.notifier.info("Goodbye!")
        self._finish()

    def _menu_create(self, session_name: str) -> None:
        if not self._create(session_name):
            return

        answer = self.prompter.confirm(
            "Would you like to attach to the session now?", default=True
        )
        if answer.confirmed:
            self._attach(session_name)
        else:
            self._reattach_hint(session_name)

    def _menu_select(self, sessions: list[str]) -> None:
        self._transition(LifecycleState.SELECTING)
        selected = self.prompter.select_session("Select a session to attach to:", sessions)
        if selected is None:
            self._cancelled()
            return
        self._attach(selected)

    def _menu_kill(self, sessions: list[str]) -> None:
        self._transition(LifecycleState.SELECTING)
        target = self.prompter.select_session("Select a session to kill:", sessions)
        if target is None:
            self._cancelled()
            return

        answer = self.prompter.confirm(
            f"Are you sure you want to kill session '{target}'?", default=False
        )
        if not answer.confirmed:
            self.notifier.info(f"Session '{target}' left running")
            return

        self._transition(LifecycleState.KILLING)
        try:
            self.registry.kill(target)
        except SessionKillError as e:
            logger.error(f"Session kill failed: {e.message}")
            self.notifier.error(f"Failed to kill session '{target}': {e.message}")
            return
        self.notifier.success(f"Killed session '{target}'")
