"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import State

from wcoresolver.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from wcoresolver.interfaces.composition import Components


class AppState(State):
    """FastAPI application state.

    ``components`` is populated by composition.py::lifespan().
    """

    config: AppConfig
    components: Components
