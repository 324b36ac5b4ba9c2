"""
Grid state persistence.

States are stored one file per virtual desktop:
``<state_dir>/desktop-<index>.json``. The grid engine itself never
persists anything; this store only serializes the plain GridState data
it produces.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ..errors import StateLoadError
from ..models.grid import GridState

logger = logging.getLogger(__name__)

_STATE_FILE_PATTERN = re.compile(r"^desktop-([0-9]+)\.json$")


class GridStateStore:
    """
    Manages grid state persistence

    States are stored in: <state_dir>/desktop-<index>.json
    """

    def __init__(self, state_dir: Path):
        """
        Args:
            state_dir: Directory holding state files (created on first save)
        """
        self.state_dir = Path(state_dir)

    def path_for(self, desktop_index: int) -> Path:
        return self.state_dir / f"desktop-{desktop_index}.json"

    def save(self, state: GridState) -> Path:
        """Write a state atomically (temp file + rename).

        Returns:
            Path to the saved file
        """
        self.state_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.path_for(state.desktop_index)

        fd, tmp_path = tempfile.mkstemp(dir=self.state_dir, prefix=".desktop-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(state.model_dump(mode="json"), f, indent=2)
            os.replace(tmp_path, filepath)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info(f"Saved grid state: {filepath} ({len(state.assignments)} assignments)")
        return filepath

    def load(self, desktop_index: int) -> Optional[GridState]:
        """Load a desktop's state, or None if it was never saved.

        Raises:
            StateLoadError: File exists but is not a valid grid state
        """
        filepath = self.path_for(desktop_index)
        if not filepath.exists():
            logger.debug(f"No stored grid state: {filepath}")
            return None

        try:
            with open(filepath, "r") as f:
                data = json.load(f)
            return GridState.model_validate(data)
        except json.JSONDecodeError as e:
            raise StateLoadError(str(filepath), f"invalid JSON: {e}") from e
        except ValidationError as e:
            raise StateLoadError(str(filepath), f"invalid grid state: {e.error_count()} errors") from e

    def delete(self, desktop_index: int) -> bool:
        """Remove a stored state. Returns False if there was none."""
        filepath = self.path_for(desktop_index)
        if not filepath.exists():
            return False
        filepath.unlink()
        logger.info(f"Deleted grid state: {filepath}")
        return True

    def list_desktops(self) -> List[int]:
        """Desktop indices with a stored state, ascending."""
        if not self.state_dir.exists():
            return []
        indices = []
        for path in self.state_dir.iterdir():
            match = _STATE_FILE_PATTERN.match(path.name)
            if match:
                indices.append(int(match.group(1)))
        return sorted(indices)
