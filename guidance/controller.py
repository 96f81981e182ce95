"""Navigation session owner: subscription lifecycle and snapshot publication"""
import logging
import threading
from typing import Hashable, List, Optional, Sequence, Tuple

from .core.interfaces import LocationSource, StateObserver
from .core.data_types import (
    Waypoint, LocationFix, LocationError, LocationErrorCode, LocationOptions,
    NavigationState
)
from .algorithms.instructions import ARRIVAL_THRESHOLD_M
from .engine import NavigationEngine, validate_path

logger = logging.getLogger(__name__)


class NavigationController:
    """
    Drives a NavigationEngine from a LocationSource
    
    The controller holds the enable switch and the path. A session runs
    while navigation is enabled and the path is non-empty; each session
    gets a fresh NavigationEngine and exactly one subscription on the
    location source. Callbacks are bound to the session that created
    them, so fixes delivered after a session ended are dropped instead of
    published.
    
    Usage:
        controller = NavigationController(source, waypoints)
        controller.add_observer(observer)
        controller.enable()
        ...
        controller.disable()
    """
    
    def __init__(self,
                 source: LocationSource,
                 waypoints: Sequence[Waypoint] = (),
                 options: Optional[LocationOptions] = None,
                 arrival_threshold: float = ARRIVAL_THRESHOLD_M,
                 retain_heading: bool = True):
        """
        Args:
            source: Platform location provider
            waypoints: Initial path (may be empty)
            options: Subscription preferences passed to the source
            arrival_threshold: Waypoint arrival radius in meters
            retain_heading: Carry the last heading into the next session
        """
        self.source = source
        self.options = options or LocationOptions()
        self.arrival_threshold = arrival_threshold
        self.retain_heading = retain_heading
        
        self._waypoints: Tuple[Waypoint, ...] = validate_path(waypoints)
        self._engine = NavigationEngine(self._waypoints, arrival_threshold)
        self._observers: List[StateObserver] = []
        
        self._enabled = False
        self._generation = 0
        self._active_generation: Optional[int] = None
        self._handle: Optional[Hashable] = None
        self._dropped_fixes = 0
        
        # Re-entrant so observers may read controller state while being notified
        self._lock = threading.RLock()
    
    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------
    
    @property
    def state(self) -> NavigationState:
        with self._lock:
            return self._engine.state
    
    @property
    def enabled(self) -> bool:
        return self._enabled
    
    @property
    def is_subscribed(self) -> bool:
        with self._lock:
            return self._handle is not None
    
    @property
    def waypoints(self) -> Tuple[Waypoint, ...]:
        return self._waypoints
    
    @property
    def session_id(self) -> Optional[int]:
        return self._active_generation
    
    @property
    def dropped_fix_count(self) -> int:
        return self._dropped_fixes
    
    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    
    def add_observer(self, observer: StateObserver):
        with self._lock:
            self._observers.append(observer)
    
    def remove_observer(self, observer: StateObserver):
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)
    
    # ------------------------------------------------------------------
    # Engine inputs
    # ------------------------------------------------------------------
    
    def enable(self):
        """Turn navigation on; subscribes if the path is non-empty"""
        with self._lock:
            self._enabled = True
        logger.info("Navigation enabled")
        self._sync_subscription()
    
    def disable(self):
        """Turn navigation off; cancels the subscription immediately"""
        with self._lock:
            self._enabled = False
        logger.info("Navigation disabled")
        self._sync_subscription()
    
    def set_waypoints(self, waypoints: Sequence[Waypoint]):
        """
        Replace the path
        
        A non-empty path resets the snapshot and starts a new session (when
        enabled). An empty path ends the running session and publishes the empty-path instruction.
        """
        path = validate_path(waypoints)
        handle = None
        with self._lock:
            self._waypoints = path
            if self._active_generation is not None:
                handle = self._end_session_locked()
            if not path:
                self._engine.set_waypoints(path)
                self._publish(self._engine.report_empty_path())
            else:
                # Snapshot of the previous path must not outlive it
                self._engine = self._new_engine_locked()
                if not self._enabled:
                    self._publish(self._engine.state)
        
        if handle is not None:
            self._cancel(handle)
        logger.info(f"🗺️  Path set with {len(path)} waypoint(s)")
        self._sync_subscription()
    
    def shutdown(self):
        self.disable()
        with self._lock:
            self._observers.clear()
    
    # ------------------------------------------------------------------
    # Subscription lifecycle
    # ------------------------------------------------------------------
    
    def _sync_subscription(self):
        """Subscribe or cancel so that a subscription exists iff enabled with a path"""
        start_generation = None
        cancel_handle = None
        
        with self._lock:
            wanted = self._enabled and bool(self._waypoints)
            if wanted and self._active_generation is None:
                start_generation = self._begin_session_locked()
            elif not wanted and self._active_generation is not None:
                cancel_handle = self._end_session_locked()
        
        if cancel_handle is not None:
            self._cancel(cancel_handle)
        if start_generation is not None:
            self._start(start_generation)
    
    def _new_engine_locked(self) -> NavigationEngine:
        heading = self._engine.heading if self.retain_heading else None
        return NavigationEngine(self._waypoints, self.arrival_threshold, initial_heading=heading)
    
    def _begin_session_locked(self) -> int:
        self._engine = self._new_engine_locked()
        heading = self._engine.heading
        self._generation += 1
        self._active_generation = self._generation
        logger.info(f"🚀 Navigation session #{self._generation} started "
                    f"({len(self._waypoints)} waypoints, heading carried: {heading})")
        self._publish(self._engine.state)
        return self._generation
    
    def _end_session_locked(self) -> Optional[Hashable]:
        logger.info(f"Navigation session #{self._active_generation} ended")
        handle = self._handle
        self._active_generation = None
        self._handle = None
        return handle
    
    def _start(self, generation: int):
        def on_fix(fix: LocationFix):
            self._handle_fix(generation, fix)
        
        def on_error(error: LocationError):
            self._handle_error(generation, error)
        
        try:
            handle = self.source.start(on_fix, on_error, self.options)
        except Exception as e:
            logger.error(f"Failed to start location subscription: {e}", exc_info=True)
            with self._lock:
                if self._active_generation == generation:
                    self._active_generation = None
                    error = LocationError(LocationErrorCode.POSITION_UNAVAILABLE, str(e))
                    self._publish(self._engine.report_location_error(error))
            return
        
        with self._lock:
            if self._active_generation == generation:
                self._handle = handle
                logger.debug(f"Location subscription {handle!r} bound to session #{generation}")
                return
        
        # Session ended while the source was starting
        self._cancel(handle)
    
    def _cancel(self, handle: Hashable):
        try:
            self.source.cancel(handle)
            logger.debug(f"Location subscription {handle!r} cancelled")
        except Exception as e:
            logger.error(f"Failed to cancel location subscription {handle!r}: {e}")
    
    # ------------------------------------------------------------------
    # Source callbacks
    # ------------------------------------------------------------------
    
    def _handle_fix(self, generation: int, fix: LocationFix):
        with self._lock:
            if generation != self._active_generation:
                self._dropped_fixes += 1
                logger.debug(f"Dropped fix from ended session #{generation}")
                for observer in list(self._observers):
                    try:
                        observer.on_fix_dropped(fix)
                    except Exception as e:
                        logger.error(f"Observer error: {e}")
                return
            
            self._publish(self._engine.process_fix(fix))
    
    def _handle_error(self, generation: int, error: LocationError):
        with self._lock:
            if generation != self._active_generation:
                logger.debug(f"Ignored location error from ended session #{generation}: {error.message}")
                return
            
            for observer in list(self._observers):
                try:
                    observer.on_location_error(error)
                except Exception as e:
                    logger.error(f"Observer error: {e}")
            
            self._publish(self._engine.report_location_error(error))
    
    def _publish(self, state: NavigationState):
        for observer in list(self._observers):
            try:
                observer.on_state_update(state)
            except Exception as e:
                logger.error(f"Observer error: {e}")
