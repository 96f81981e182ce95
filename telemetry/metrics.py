"""Telemetry and metrics collection for navigation sessions"""
from dataclasses import dataclass, field
from typing import List, Optional
from datetime import datetime
import statistics
import threading

from guidance.core.interfaces import StateObserver
from guidance.core.data_types import LocationError, LocationFix, NavigationState
from guidance.algorithms.geo_utils import GeoUtils
from guidance.engine import EMPTY_PATH_MESSAGE


@dataclass
class NavigationMetrics:
    """Metrics for guidance session tracking"""
    
    # Fix handling
    fixes_processed: int = 0
    fixes_dropped: int = 0
    location_errors: int = 0
    empty_path_updates: int = 0
    heading_unavailable_fixes: int = 0
    
    # Progress
    waypoints_reached: int = 0
    destination_arrivals: int = 0
    distance_walked: float = 0.0  # meters
    
    # Accuracy
    average_accuracy: float = 0.0  # meters, as reported by the source
    accuracy_samples: List[float] = field(default_factory=list)
    
    # Session info
    session_start: datetime = field(default_factory=datetime.now)
    
    def add_fix(self, accuracy: float, step_distance: float, heading_known: bool):
        """Record a processed fix"""
        self.fixes_processed += 1
        self.distance_walked += step_distance
        if not heading_known:
            self.heading_unavailable_fixes += 1
        if accuracy > 0:
            self.accuracy_samples.append(accuracy)
            self.average_accuracy = statistics.mean(self.accuracy_samples)
    
    def add_waypoint_reached(self):
        self.waypoints_reached += 1
    
    def add_destination_arrival(self):
        self.destination_arrivals += 1
    
    def add_location_error(self):
        self.location_errors += 1
    
    def add_dropped_fix(self):
        self.fixes_dropped += 1
    
    def add_empty_path_update(self):
        self.empty_path_updates += 1
    
    def to_dict(self) -> dict:
        """Convert metrics to dictionary"""
        return {
            'fixes_processed': self.fixes_processed,
            'fixes_dropped': self.fixes_dropped,
            'location_errors': self.location_errors,
            'empty_path_updates': self.empty_path_updates,
            'heading_unavailable_fixes': self.heading_unavailable_fixes,
            'waypoints_reached': self.waypoints_reached,
            'destination_arrivals': self.destination_arrivals,
            'distance_walked_m': round(self.distance_walked, 2),
            'average_accuracy_m': round(self.average_accuracy, 2),
            'session_start': self.session_start.isoformat(),
            'session_duration_s': (datetime.now() - self.session_start).total_seconds()
        }


class MetricsObserver(StateObserver):
    """Feeds NavigationMetrics from published snapshots"""
    
    def __init__(self, metrics: Optional[NavigationMetrics] = None):
        self.metrics = metrics or NavigationMetrics()
        self._last_fix: Optional[LocationFix] = None
        self._previous: Optional[NavigationState] = None
        self._lock = threading.Lock()
    
    def on_state_update(self, state: NavigationState):
        with self._lock:
            fix = state.current_location
            if fix is not None and fix is not self._last_fix:
                step = 0.0
                if self._last_fix is not None:
                    step = GeoUtils.distance_meters(self._last_fix.coordinate, fix.coordinate)
                self.metrics.add_fix(fix.accuracy, step, state.user_heading is not None)
                
                # Rising edges only; the arrival flags are recomputed each fix
                previous = self._previous
                if state.arrived_at_next and not (previous and previous.arrived_at_next):
                    self.metrics.add_waypoint_reached()
                if state.arrived_at_destination and not (previous and previous.arrived_at_destination):
                    self.metrics.add_destination_arrival()
                self._last_fix = fix
            elif state.instruction == EMPTY_PATH_MESSAGE:
                self.metrics.add_empty_path_update()
            
            self._previous = state
    
    def on_location_error(self, error: LocationError):
        with self._lock:
            self.metrics.add_location_error()
    
    def on_fix_dropped(self, fix: LocationFix):
        with self._lock:
            self.metrics.add_dropped_fix()
    
    def snapshot(self) -> dict:
        with self._lock:
            return self.metrics.to_dict()
