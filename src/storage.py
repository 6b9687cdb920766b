"""Persistence helpers (load/save) for the task forest.

The whole forest lives under one logical key, stored as a JSON file named
after the key. Anything that is not a non-empty list of groups is treated
as absent, and the caller falls back to the default lanes.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from board import Board, IdFactory, default_forest
from errors import DuplicateId, PersistenceFailure

logger = logging.getLogger(__name__)

STORAGE_KEY = 'task-manager-data-v3'
DATA_DIR = Path(__file__).parent.parent / 'data'

ForestData = List[Dict[str, Any]]


class Storage:
    def __init__(self, data_dir: Union[str, Path, None] = None, key: str = STORAGE_KEY):
        self.path: Path = Path(data_dir or DATA_DIR) / f'{key}.json'

    def load(self) -> Optional[ForestData]:
        """Return the stored list of group dicts, or None when missing,
        unreadable, malformed or empty."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning('Ignoring unreadable store %s: %s', self.path, exc)
            return None
        if not isinstance(data, list) or not data:
            logger.warning('Ignoring store %s: expected a non-empty list', self.path)
            return None
        return data

    def save(self, data: ForestData) -> None:
        """Persist the forest (pretty-printed) via a temp file and rename.

        Raises PersistenceFailure; the in-memory forest is never touched.
        """
        tmp = self.path.with_suffix('.json.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4, ensure_ascii=False)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                tmp.unlink(missing_ok=True)
            except OSError as cleanup:
                logger.warning('Could not remove %s: %s', tmp, cleanup)
            raise PersistenceFailure(f'Could not save {self.path}: {exc}') from exc


def load_board(storage: Storage, id_factory: Optional[IdFactory] = None) -> Board:
    """Board from stored data, or from the default lanes when the stored
    value is absent or cannot be rebuilt into a valid forest."""
    data = storage.load()
    if data is not None:
        try:
            return Board.from_data(data, id_factory=id_factory)
        except (ValueError, TypeError, AttributeError, DuplicateId) as exc:
            logger.warning('Stored forest rejected, using defaults: %s', exc)
    return Board(default_forest(id_factory), id_factory=id_factory)
