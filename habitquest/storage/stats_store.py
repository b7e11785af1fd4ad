"""
Stats Store

Owns the two persisted documents of a user's gamification state:
- the aggregate stats ledger (UserStats)
- the completion history (FIFO list of CompletionEvent, capped)

Reads favour availability: a missing, unreadable or corrupt document yields
a fresh zero state. Writes favour correctness: write failures propagate as
StorageWriteError so the caller can retry or tell the user.
"""

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError as PydanticValidationError

from habitquest.config import HISTORY_KEY, HISTORY_LIMIT, STATS_KEY
from habitquest.exceptions import StorageReadError, StorageWriteError, ValidationError
from habitquest.models.gamification import CompletionEvent, UserStats
from habitquest.storage.backends import KeyValueBackend

logger = logging.getLogger(__name__)


class StatsStore:
    """
    Stats ledger and completion history over an injected backend

    Read-modify-write sequences should go through transaction(), which holds
    a per-store re-entrant lock.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        stats_key: str = STATS_KEY,
        history_key: str = HISTORY_KEY,
        history_limit: int = HISTORY_LIMIT
    ):
        self.backend = backend
        self.stats_key = stats_key
        self.history_key = history_key
        self.history_limit = history_limit
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Stats ledger
    # ------------------------------------------------------------------

    def _read_document(self, key: str) -> Optional[Any]:
        """Read and decode a JSON document; None if missing or unusable"""
        try:
            raw = self.backend.get(key)
        except StorageReadError:
            logger.warning(f"Falling back to empty state for '{key}' after read failure")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt JSON stored under '{key}', ignoring it: {e}")
            return None

    def _write_document(self, key: str, document: Any) -> None:
        try:
            serialized = json.dumps(document)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Could not serialize document for '{key}'", key=key, cause=e)
        self.backend.set(key, serialized)

    def load(self) -> UserStats:
        """
        Load the stats ledger, initializing a zero state on first access

        Never raises for read problems; corrupt or invalid documents are
        replaced by a fresh UserStats.
        """
        with self._lock:
            document = self._read_document(self.stats_key)

            if document is None:
                stats = UserStats()
                try:
                    self.save(stats)
                except StorageWriteError:
                    logger.warning("Could not persist initial stats; continuing in memory")
                return stats

            try:
                return UserStats.model_validate(document)
            except PydanticValidationError as e:
                logger.warning(f"Invalid stats document under '{self.stats_key}', starting fresh: {e.error_count()} error(s)")
                return UserStats()

    def save(self, stats: UserStats) -> None:
        """
        Persist the stats ledger

        Raises:
            StorageWriteError: The backend rejected the write
        """
        with self._lock:
            self._write_document(self.stats_key, stats.model_dump(mode="json", by_alias=True))

    @contextmanager
    def transaction(self) -> Iterator[UserStats]:
        """
        Read-modify-write the ledger under the store lock

        Example:
            with store.transaction() as stats:
                stats.total_completions += 1

        The ledger is saved only if the block completes without raising. If
        the block or the ledger save fails, the history document is put back
        to what it was when the transaction started.
        """
        with self._lock:
            stats = self.load()
            history_before = self._read_document(self.history_key)
            try:
                yield stats
                self.save(stats)
            except Exception:
                self._restore_history(history_before)
                raise

    def _restore_history(self, document: Optional[Any]) -> None:
        if self._read_document(self.history_key) == document:
            return
        try:
            if document is None:
                self.backend.delete(self.history_key)
            else:
                self._write_document(self.history_key, document)
            logger.warning(f"Rolled back '{self.history_key}' after a failed transaction")
        except StorageWriteError:
            logger.error(f"Could not roll back '{self.history_key}'; history may be ahead of stats")

    # ------------------------------------------------------------------
    # Completion history
    # ------------------------------------------------------------------

    def load_history(self) -> List[CompletionEvent]:
        """Completion history, oldest first; invalid entries are skipped"""
        with self._lock:
            document = self._read_document(self.history_key)
            if document is None:
                return []
            if not isinstance(document, list):
                logger.warning(f"History under '{self.history_key}' is not a list, ignoring it")
                return []

            history = []
            for entry in document:
                try:
                    history.append(CompletionEvent.model_validate(entry))
                except PydanticValidationError:
                    logger.warning(f"Skipping invalid history entry: {entry!r}")
            return history

    def save_history(self, history: List[CompletionEvent]) -> None:
        """Persist history, keeping only the newest history_limit entries"""
        with self._lock:
            trimmed = history[-self.history_limit:]
            self._write_document(
                self.history_key,
                [event.model_dump(mode="json", by_alias=True) for event in trimmed],
            )

    def append_history(self, event: CompletionEvent) -> List[CompletionEvent]:
        """
        Append an event, evicting the oldest entries beyond the cap

        Returns:
            The history as persisted
        """
        with self._lock:
            history = self.load_history()
            history.append(event)
            if len(history) > self.history_limit:
                evicted = len(history) - self.history_limit
                history = history[evicted:]
                logger.debug(f"Evicted {evicted} oldest history entries")
            self.save_history(history)
            return history

    # ------------------------------------------------------------------
    # Reset / backup
    # ------------------------------------------------------------------

    def reset(self) -> UserStats:
        """Clear stats and history back to the initial state"""
        with self._lock:
            self.backend.delete(self.stats_key)
            self.backend.delete(self.history_key)
            stats = UserStats()
            self.save(stats)
            logger.info("Gamification stats reset")
            return stats

    def export_stats(self) -> Dict[str, Any]:
        """
        Snapshot for backup

        Returns:
            {'stats': dict, 'history': list, 'exportDate': ISO timestamp}
        """
        with self._lock:
            return {
                "stats": self.load().model_dump(mode="json", by_alias=True),
                "history": [event.model_dump(mode="json", by_alias=True) for event in self.load_history()],
                "exportDate": datetime.now(timezone.utc).isoformat(),
            }

    def import_stats(self, backup: Dict[str, Any]) -> None:
        """
        Restore a backup produced by export_stats

        Both documents are validated before anything is written; a section
        missing from the backup is left untouched.

        Raises:
            ValidationError: The backup does not describe valid documents
            StorageWriteError: The backend rejected the write
        """
        if not isinstance(backup, dict):
            raise ValidationError(
                "Backup must be a JSON object",
                field="backup",
                value=type(backup).__name__,
            )

        stats = None
        history = None

        try:
            if backup.get("stats") is not None:
                stats = UserStats.model_validate(backup["stats"])
            if backup.get("history") is not None:
                history = [CompletionEvent.model_validate(entry) for entry in backup["history"]]
        except (PydanticValidationError, TypeError) as e:
            raise ValidationError("Backup data is not valid", field="backup", cause=e)

        with self._lock:
            if stats is not None:
                self.save(stats)
            if history is not None:
                self.save_history(history)

        logger.info(
            f"Imported backup (stats: {stats is not None}, "
            f"history entries: {len(history) if history is not None else 0})"
        )
