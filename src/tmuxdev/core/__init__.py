"""Session identity resolution and lifecycle control."""

from .lifecycle import (
    ActionChoice,
    Confirmation,
    LifecycleController,
    LifecycleState,
    MenuOption,
    SessionSnapshot,
)
from .resolver import EnvironmentResolver

__all__ = [
    "ActionChoice",
    "Confirmation",
    "EnvironmentResolver",
    "LifecycleController",
    "LifecycleState",
    "MenuOption",
    "SessionSnapshot",
]
