"""
Edit History Module
Keeps recently edited valid documents in a JSON file:
- Newest first, capped at ``max_items``
- Entries older than ``max_days`` are dropped on load
- Identical content is stored once
"""

import json
import logging
import os
import tempfile
import threading
import time
import uuid
from pathlib import Path
from typing import List, Optional
from pydantic import ValidationError
from .config import HISTORY_PATH, HISTORY_MAX_DAYS, HISTORY_MAX_ITEMS, HISTORY_MIN_LENGTH
from .models import HistoryItem
from .parser import parse_json

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class HistoryStore:
    def __init__(
        self,
        path: Path = HISTORY_PATH,
        max_days: int = HISTORY_MAX_DAYS,
        max_items: int = HISTORY_MAX_ITEMS,
        min_length: int = HISTORY_MIN_LENGTH,
    ):
        self.path = Path(path)
        self.max_days = max_days
        self.max_items = max_items
        self.min_length = min_length
        # load/add/delete are read-modify-write cycles on one file
        self._lock = threading.RLock()

    def _read(self) -> List[HistoryItem]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return [HistoryItem(**entry) for entry in raw]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning("Ignoring unreadable history file %s: %s", self.path, e)
            return []

    def _write(self, items: List[HistoryItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [item.model_dump() for item in items]
        # Write beside the target and swap it in, so an interrupted write never truncates history
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp.write(json.dumps(payload, ensure_ascii=False))
            tmp_path = Path(tmp.name)
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def load(self) -> List[HistoryItem]:
        """Return saved items, newest first, pruning expired ones."""
        with self._lock:
            items = self._read()
            cutoff = _now_ms() - self.max_days * DAY_MS
            fresh = [item for item in items if item.timestamp > cutoff]
            if len(fresh) != len(items):
                logger.info("Pruned %d expired history entries", len(items) - len(fresh))
                self._write(fresh)
            return fresh

    def add(self, content: str) -> Optional[HistoryItem]:
        """
        Save ``content`` if it is a valid, non-empty document not already stored.

        Returns:
            The new item, or None when nothing was saved
        """
        if len(content) <= self.min_length:
            return None
        outcome = parse_json(content)
        if not outcome.valid or outcome.data is None:
            return None

        with self._lock:
            items = self.load()
            if any(item.content == content for item in items):
                return None

            item = HistoryItem(id=uuid.uuid4().hex[:9], timestamp=_now_ms(), content=content)
            self._write([item, *items][:self.max_items])
            return item

    def get(self, item_id: str) -> Optional[HistoryItem]:
        return next((item for item in self.load() if item.id == item_id), None)

    def delete(self, item_id: str) -> bool:
        with self._lock:
            items = self.load()
            remaining = [item for item in items if item.id != item_id]
            if len(remaining) == len(items):
                return False
            self._write(remaining)
            return True

    def clear(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)
