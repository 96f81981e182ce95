"""Host-driven location source"""
import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from guidance.core.interfaces import LocationSource, FixCallback, ErrorCallback
from guidance.core.data_types import LocationFix, LocationError, LocationOptions

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    handle: int
    on_fix: FixCallback
    on_error: ErrorCallback
    options: LocationOptions


class ManualLocationSource(LocationSource):
    """
    Location source fed by its host through push_fix() / push_error()
    
    Used where the platform pushes positions into the process (web
    clients, bridges from other services) and in tests. Only active
    subscriptions are kept; cancelling one forgets its callbacks.
    """
    
    def __init__(self):
        self._active: Dict[int, Subscription] = {}
        self._handles = itertools.count(1)
        self._lock = threading.Lock()
    
    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._active)
    
    def start(self, on_fix: FixCallback, on_error: ErrorCallback,
              options: Optional[LocationOptions] = None) -> int:
        with self._lock:
            subscription = Subscription(next(self._handles), on_fix, on_error, options or LocationOptions())
            self._active[subscription.handle] = subscription
        logger.debug(f"Manual subscription #{subscription.handle} started")
        return subscription.handle
    
    def cancel(self, handle: int):
        with self._lock:
            subscription = self._active.pop(handle, None)
            if subscription is None:
                logger.warning(f"Cancel of unknown subscription {handle!r}")
                return
        logger.debug(f"Manual subscription #{handle} cancelled")
    
    def push_fix(self, fix: LocationFix):
        """Deliver a fix to every active subscription whose maximum age it satisfies"""
        with self._lock:
            targets = list(self._active.values())
        age = (datetime.now() - fix.timestamp).total_seconds()
        for subscription in targets:
            maximum_age = subscription.options.maximum_age_s
            if maximum_age > 0 and age > maximum_age:
                logger.debug(f"Stale fix ({age:.1f}s old) skipped for subscription #{subscription.handle}")
                continue
            subscription.on_fix(fix)
    
    def push_error(self, error: LocationError):
        """Deliver an error to every active subscription"""
        with self._lock:
            targets = list(self._active.values())
        for subscription in targets:
            subscription.on_error(error)
