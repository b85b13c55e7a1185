import os
import re
import json
import hashlib
import time
import logging
import tempfile
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Callable, Optional
from pydantic import ValidationError

from verity.core.config import settings
from verity.schemas.analysis import AnalysisResult, CacheState

logger = logging.getLogger(__name__)

SAFE_SESSION_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")


class ResultCache:
    """Single-slot, time-boxed store for the active analysis of one session.

    The slot is persisted as JSON under a fixed storage key. An entry older
    than the TTL, or one that cannot be read back, is purged instead of
    returned.
    """

    def __init__(
        self,
        directory: Path,
        storage_key: str = settings.CACHE_STORAGE_KEY,
        ttl_seconds: float = settings.CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache and load any persisted result.

        Args:
            directory: Session directory holding the persisted entry
            storage_key: File stem of the persisted entry
            ttl_seconds: Maximum age of a result
            clock: Source of the current time in epoch seconds
        """
        self.directory = Path(directory)
        self.path = self.directory / f"{storage_key}.json"
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._result = self._load()

    def set_result(self, result: AnalysisResult) -> AnalysisResult:
        """Make a result the active one, replacing any previous result.

        Returns:
            The stored result, stamped with the current time
        """
        stamped = result.model_copy(update={"timestamp": self.clock()})
        with self._lock:
            self._write(stamped)
            self._result = stamped
        logger.info(f"Stored analysis result in {self.path}")
        return stamped

    def get_result(self) -> Optional[AnalysisResult]:
        """Return the active result, or None when empty or expired."""
        with self._lock:
            if self._state() == CacheState.EXPIRED:
                logger.info("Cached analysis result expired")
                self._purge()
            return self._result

    def clear_result(self) -> None:
        with self._lock:
            self._purge()

    def is_expired(self) -> bool:
        """True when there is no result or the active one has outlived the TTL."""
        with self._lock:
            return self._state() != CacheState.FRESH

    def state(self) -> CacheState:
        with self._lock:
            return self._state()

    def _state(self) -> CacheState:
        if self._result is None:
            return CacheState.EMPTY
        if self.clock() - (self._result.timestamp or 0) >= self.ttl_seconds:
            return CacheState.EXPIRED
        return CacheState.FRESH

    def _load(self) -> Optional[AnalysisResult]:
        if not self.path.exists():
            return None
        try:
            result = AnalysisResult.model_validate_json(self.path.read_text(encoding="utf-8"))
            if result.timestamp is None:
                raise ValueError("Missing timestamp")
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Discarding unreadable cached result {self.path}: {str(e)}")
            self._remove_file()
            return None

        if self.clock() - result.timestamp >= self.ttl_seconds:
            logger.info(f"Discarding expired cached result {self.path}")
            self._remove_file()
            return None
        return result

    def _write(self, result: AnalysisResult) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(result.model_dump(mode="json"), f)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _purge(self) -> None:
        self._result = None
        self._remove_file()

    def _remove_file(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Error removing cached result {self.path}: {str(e)}")


class ResultCacheRegistry:
    """Hands out one :class:`ResultCache` per session.

    At most ``max_sessions`` caches are kept in memory, least recently used
    first out. An evicted session's result stays on disk and is reloaded
    on its next request.
    """

    def __init__(
        self,
        base_dir: Path = settings.CACHE_DIR,
        storage_key: str = settings.CACHE_STORAGE_KEY,
        ttl_seconds: float = settings.CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        max_sessions: int = settings.CACHE_MAX_SESSIONS,
    ):
        self.base_dir = Path(base_dir)
        self.storage_key = storage_key
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.max_sessions = max_sessions
        self._caches: "OrderedDict[str, ResultCache]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def normalize_session_id(session_id: Optional[str]) -> str:
        """Directory name for a session, distinct for distinct ids.

        Safe ids are used as they are. Anything else is hashed; the digest
        is longer than any safe id, so the two forms never collide.
        """
        if not session_id:
            return "default"
        if SAFE_SESSION_ID.fullmatch(session_id):
            return session_id
        return "h-" + hashlib.sha256(session_id.encode("utf-8")).hexdigest()

    def for_session(self, session_id: Optional[str]) -> ResultCache:
        key = self.normalize_session_id(session_id)
        with self._lock:
            cache = self._caches.get(key)
            if cache is None:
                cache = ResultCache(
                    self.base_dir / key,
                    storage_key=self.storage_key,
                    ttl_seconds=self.ttl_seconds,
                    clock=self.clock,
                )
                self._caches[key] = cache
            self._caches.move_to_end(key)
            while len(self._caches) > self.max_sessions:
                evicted, _ = self._caches.popitem(last=False)
                logger.debug(f"Evicted session cache {evicted}")
            return cache

    def __len__(self) -> int:
        return len(self._caches)
