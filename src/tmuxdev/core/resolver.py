"""Session identifier resolution from the working directory and git branch."""

import os
from collections.abc import Callable
from pathlib import Path

# Let GitPython import even when no git executable is installed; branch
# lookups then fail with GitCommandNotFound, which is handled below.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from git import Repo  # noqa: E402
from git.exc import GitError  # noqa: E402

from ..utils.logging import LogContext, get_logger  # noqa: E402

logger = get_logger(__name__, LogContext.ENVIRONMENT)

DEFAULT_FALLBACK_NAME = "tmuxdev"


def read_current_branch(path: str) -> str:
    """Return the checked-out branch for the repository containing ``path``.

    Mirrors ``git branch --show-current``: a detached HEAD yields an empty
    string. Raises ``GitError`` or ``OSError`` when ``path`` is not inside a
    repository or git is unavailable.
    """
    repo = Repo(path, search_parent_directories=True)
    try:
        return repo.git.branch("--show-current").strip()
    finally:
        repo.close()


class EnvironmentResolver:
    """Derives the session identifier for the invoking environment.

    Nothing is cached: every call re-reads the working directory and the
    branch, so a long-lived caller sees branch switches.
    """

    def __init__(
        self,
        fallback_name: str = DEFAULT_FALLBACK_NAME,
        cwd_provider: Callable[[], str] = os.getcwd,
        branch_reader: Callable[[str], str] = read_current_branch,
    ):
        """Initialize the resolver.

        Args:
            fallback_name: Identifier used when the folder name is unavailable
            cwd_provider: Returns the current working directory
            branch_reader: Returns the branch name for a directory
        """
        self.fallback_name = fallback_name
        self._cwd_provider = cwd_provider
        self._branch_reader = branch_reader

    def _working_directory(self) -> str | None:
        try:
            return self._cwd_provider()
        except OSError as e:
            logger.debug(f"Working directory unavailable: {e}")
            return None

    def folder_name(self) -> str:
        """Last segment of the working directory, or the fallback name."""
        cwd = self._working_directory()
        name = Path(cwd).name if cwd else ""
        return name or self.fallback_name

    def branch_name(self) -> str | None:
        """Current git branch, or None outside a repository."""
        cwd = self._working_directory()
        if not cwd:
            return None

        try:
            branch = self._branch_reader(cwd)
        except (GitError, OSError, ValueError) as e:
            logger.debug(f"No git branch detected for {cwd}: {e}")
            return None

        return branch.strip() or None

    def resolve_identifier(self) -> str:
        """Return ``folder`` or ``folder-branch`` for the current environment."""
        folder = self.folder_name()
        branch = self.branch_name()

        identifier = f"{folder}-{branch}" if branch else folder
        logger.debug(
            f"Resolved session identifier {identifier}", folder=folder, branch=branch
        )
        return identifier
