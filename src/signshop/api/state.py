"""
Shared application state for the API routers.

Tests swap the state through `app.dependency_overrides[get_state]`.
"""
from typing import Optional

from ..state import AppState

_state: Optional[AppState] = None


def get_state() -> AppState:
    """Get the process-wide AppState, building it on first use."""
    global _state
    if _state is None:
        _state = AppState.create()
    return _state
