import threading
import time
from typing import Dict, Optional, Tuple

from loguru import logger as logging

from picwall.config import IMAGE_URL_CACHE_SECONDS
from picwall.utils.storage import generate_view_url, normalize_key

IMAGE_URL_CACHE_MAX_ENTRIES = 10000


class ImageUrlCache:
    """
    In-process map of object key -> presigned URL.

    Entries live ``ttl`` seconds. Expired entries are swept on every write and
    the oldest entries are dropped once ``max_entries`` is reached.
    """

    def __init__(self, ttl: int = IMAGE_URL_CACHE_SECONDS, max_entries: int = IMAGE_URL_CACHE_MAX_ENTRIES,
                 clock=time.time):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            url, stored_at = entry
            if self._clock() - stored_at >= self.ttl:
                self._entries.pop(key, None)
                return None
            return url

    def set(self, key: str, url: str):
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries.pop(key, None)
            # dicts keep insertion order, so the first keys are the oldest
            while len(self._entries) >= self.max_entries:
                self._entries.pop(next(iter(self._entries)))
            self._entries[key] = (url, now)

    def _sweep(self, now: float):
        expired = [key for key, (_, stored_at) in self._entries.items() if now - stored_at >= self.ttl]
        for key in expired:
            del self._entries[key]

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        return len(self._entries)


url_cache = ImageUrlCache()


def resolve_image_url(key: str, cache: ImageUrlCache = url_cache) -> str:
    key = normalize_key(key)
    cached = cache.get(key)
    if cached:
        logging.debug("Using cached URL for key: {}", key)
        return cached

    logging.debug("Generating view URL for image key: {}", key)
    url = generate_view_url(key)
    cache.set(key, url)
    return url
