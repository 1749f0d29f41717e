"""
State Store: AppState persistence
Capital Allocation Framework

The pipeline works on an in-memory AppState; a StateStore saves and loads
it as a whole. JsonStateStore writes the pydantic JSON dump to one file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, Union

from pydantic import ValidationError

from capital_agents.exceptions import OutputWriteError, StateLoadError, StateNotFoundError
from capital_agents.schemas.app_state import AppState

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    def save(self, state: AppState) -> None: ...

    def load(self) -> AppState: ...


class JsonStateStore:
    """AppState snapshot in a single JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, state: AppState) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(f"Could not write state to {self.path}: {e}") from e
        logger.info(f"[StateStore] Saved state to {self.path}")

    def load(self) -> AppState:
        if not self.path.is_file():
            raise StateNotFoundError(f"No saved state at {self.path}")
        try:
            json_str = self.path.read_text(encoding="utf-8")
            state = AppState.model_validate_json(json_str)
        except (OSError, ValidationError) as e:
            raise StateLoadError(f"Could not load state from {self.path}: {e}") from e
        logger.info(
            f"[StateStore] Loaded state from {self.path} "
            f"({len(state.validated_projects)} projects, {len(state.opportunities)} opportunities)"
        )
        return state
