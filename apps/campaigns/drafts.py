import logging
import threading

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)


class FormDraft:
    """
    In-progress form state kept in the cache.

    ``update`` marks the draft dirty and (re)arms a single autosave timer;
    ``flush`` writes immediately, ``discard`` drops both the pending timer
    and the stored copy. Used as a context manager the draft is flushed on
    a clean exit and left untouched when the block raises.
    """

    def __init__(self, key, defaults=None, autosave_delay=None, timeout=None, cache_backend=None):
        self.key = key
        self.defaults = dict(defaults or {})
        self.autosave_delay = (
            settings.FORM_DRAFT_AUTOSAVE_DELAY if autosave_delay is None else autosave_delay
        )
        self.timeout = settings.FORM_DRAFT_TIMEOUT if timeout is None else timeout
        self.cache = cache_backend or cache
        self.data = dict(self.defaults)
        self.is_dirty = False
        self.last_saved = None
        self._timer = None
        self._lock = threading.RLock()

    @property
    def cache_key(self):
        return f"form-draft:{self.key}"

    def load(self):
        saved = self.cache.get(self.cache_key)
        if saved:
            saved = dict(saved)
            self.last_saved = saved.pop('_lastSaved', None)
            self.data = {**self.defaults, **saved}
            logger.debug(f"Restored form draft {self.key}")
        return self.data

    def has_saved_data(self):
        return self.cache.get(self.cache_key) is not None

    def update(self, **fields):
        with self._lock:
            self.data.update(fields)
            self.is_dirty = True
            self._schedule()

    def _schedule(self):
        self._cancel_timer()
        self._timer = threading.Timer(self.autosave_delay, self.flush)
        self._timer.daemon = True
        self._timer.start()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def flush(self):
        """Write pending changes now. Returns True when something was saved."""
        with self._lock:
            self._cancel_timer()
            if not self.is_dirty:
                return False
            saved_at = timezone.now().isoformat()
            self.cache.set(self.cache_key, {**self.data, '_lastSaved': saved_at}, self.timeout)
            self.last_saved = saved_at
            self.is_dirty = False
            logger.debug(f"Saved form draft {self.key}")
            return True

    def discard(self):
        with self._lock:
            self._cancel_timer()
            self.cache.delete(self.cache_key)
            self.data = dict(self.defaults)
            self.is_dirty = False
            self.last_saved = None
            logger.debug(f"Discarded form draft {self.key}")

    def __enter__(self):
        self.load()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.flush()
        else:
            with self._lock:
                self._cancel_timer()
        return False
