"""tmuxdev: tmux session manager for development servers."""

__version__ = "0.1.0"

from .core.lifecycle import LifecycleController
from .core.resolver import EnvironmentResolver
from .tmux.service import TmuxService

__all__ = ["EnvironmentResolver", "LifecycleController", "TmuxService", "__version__"]
