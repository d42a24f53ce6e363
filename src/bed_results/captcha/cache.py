"""Bounded, time-expiring cache of solved captchas."""

import hashlib
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

DEFAULT_TTL_SECONDS = 5 * 60


def hash_image(image: bytes) -> str:
    """Content hash used as the cache key."""
    return hashlib.sha256(image).hexdigest()


@dataclass(frozen=True)
class CaptchaCacheEntry:
    image_hash: str
    solved_text: str
    confidence: float
    solved_at: float


class CaptchaCache:
    """Captcha solutions keyed by image hash.

    Entries older than ``ttl_seconds`` are never served. When the cache grows
    past ``max_entries`` the oldest entries are evicted first.

    Args:
        max_entries: Upper bound on stored entries.
        ttl_seconds: Lifetime of an entry.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_entries: int = 100,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CaptchaCacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CaptchaCacheEntry, now: float) -> bool:
        return now - entry.solved_at > self.ttl_seconds

    def get(self, image_hash: str) -> Optional[CaptchaCacheEntry]:
        """Return the live entry for ``image_hash``; expired entries are dropped."""
        with self._lock:
            entry = self._entries.get(image_hash)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()):
                del self._entries[image_hash]
                return None
            return entry

    def put(self, image_hash: str, text: str, confidence: float) -> CaptchaCacheEntry:
        """Insert or overwrite an entry, then enforce TTL and size bounds."""
        with self._lock:
            entry = CaptchaCacheEntry(
                image_hash=image_hash,
                solved_text=text,
                confidence=confidence,
                solved_at=self._clock(),
            )
            self._entries[image_hash] = entry
            self._prune()
            return entry

    def _prune(self) -> None:
        now = self._clock()
        for key in [k for k, e in self._entries.items() if self._is_expired(e, now)]:
            del self._entries[key]

        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            oldest = sorted(self._entries.values(), key=lambda e: e.solved_at)[:overflow]
            for entry in oldest:
                del self._entries[entry.image_hash]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
