"""Per-session navigation state machine"""
import logging
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from .core.data_types import (
    Waypoint, LocationFix, LocationError, NavigationState, NavigationStatus
)
from .algorithms.geo_utils import GeoUtils
from .algorithms.locator import find_nearest
from .algorithms.instructions import generate_instruction, ARRIVAL_THRESHOLD_M

logger = logging.getLogger(__name__)

EMPTY_PATH_MESSAGE = "No path nodes available"


def validate_path(waypoints: Sequence[Waypoint]) -> Tuple[Waypoint, ...]:
    """Check that waypoints are Waypoint instances in strictly increasing order"""
    path = tuple(waypoints)
    previous_order = None
    for index, waypoint in enumerate(path):
        if not isinstance(waypoint, Waypoint):
            raise TypeError(f"Path entry {index} is {type(waypoint).__name__}, expected Waypoint")
        if previous_order is not None and waypoint.order <= previous_order:
            raise ValueError(f"Path entry {index} has order {waypoint.order} "
                             f"after {previous_order}; order must be strictly increasing")
        previous_order = waypoint.order
    return path


class NavigationEngine:
    """
    Guidance state machine for one navigation session
    
    Pure and synchronous: each call to process_fix() computes a complete
    NavigationState from the fix, the path and the last known heading,
    stores it and returns it. Nothing is published here; the owner of the
    session (NavigationController) decides who sees the snapshot.
    
    Heading is sticky across fixes. The arrival flags are not: they are
    recomputed from scratch on every fix.
    """
    
    def __init__(self,
                 waypoints: Sequence[Waypoint] = (),
                 arrival_threshold: float = ARRIVAL_THRESHOLD_M,
                 initial_heading: Optional[float] = None):
        """
        Args:
            waypoints: Ordered path, read-only for the session
            arrival_threshold: Radius in meters to consider a waypoint reached
            initial_heading: Heading carried over from a previous session
        """
        if arrival_threshold <= 0:
            raise ValueError(f"arrival_threshold must be positive, got {arrival_threshold}")
        
        self.arrival_threshold = arrival_threshold
        self._waypoints = validate_path(waypoints)
        self._heading = initial_heading
        self._state = NavigationState(user_heading=initial_heading)
    
    @property
    def state(self) -> NavigationState:
        return self._state
    
    @property
    def heading(self) -> Optional[float]:
        return self._heading
    
    @property
    def waypoints(self) -> Tuple[Waypoint, ...]:
        return self._waypoints
    
    def set_waypoints(self, waypoints: Sequence[Waypoint]):
        """Replace the path; the current snapshot is kept until the next fix"""
        self._waypoints = validate_path(waypoints)
        logger.debug(f"Path replaced: {len(self._waypoints)} waypoint(s)")
    
    def report_empty_path(self) -> NavigationState:
        """Flag a missing path in the instruction, leaving numeric fields as they were"""
        self._state = replace(self._state, instruction=EMPTY_PATH_MESSAGE)
        return self._state
    
    def report_location_error(self, error: LocationError) -> NavigationState:
        """Show a location-source failure without invalidating the last snapshot"""
        logger.warning(f"Location error ({error.code.value}): {error.message}")
        self._state = replace(self._state, instruction=f"Location error: {error.message}")
        return self._state
    
    def process_fix(self, fix: LocationFix) -> NavigationState:
        """
        Recompute the navigation snapshot for a new location fix
        
        Args:
            fix: Location sample from the platform
            
        Returns:
            The new NavigationState
        """
        if not self._waypoints:
            return self.report_empty_path()
        
        # Negative heading means the device could not determine it
        if fix.heading is not None and fix.heading >= 0:
            self._heading = fix.heading
        
        nearest_index = find_nearest(fix.coordinate, self._waypoints)
        last_index = len(self._waypoints) - 1
        next_index = min(nearest_index + 1, last_index)
        target = self._waypoints[next_index]
        
        distance = GeoUtils.distance_meters(fix.coordinate, target.coordinate)
        bearing_to_next = GeoUtils.bearing_degrees(fix.coordinate, target.coordinate)
        
        if self._heading is not None:
            relative_bearing = GeoUtils.normalize_bearing_delta(bearing_to_next - self._heading)
        else:
            relative_bearing = 0.0
        
        arrived_at_next = distance < self.arrival_threshold
        arrived_at_destination = next_index == last_index and arrived_at_next
        
        instruction = generate_instruction(relative_bearing, distance, target, self.arrival_threshold)
        
        previous = self._state
        if arrived_at_next and not previous.arrived_at_next:
            logger.info(f"✅ Reached waypoint #{next_index + 1}/{len(self._waypoints)} "
                        f"(order {target.order}, {distance:.1f}m)")
        if arrived_at_destination and not previous.arrived_at_destination:
            logger.info("🏁 Destination reached")
        elif previous.arrived_at_destination and not arrived_at_destination:
            logger.info(f"Moved away from destination ({distance:.1f}m)")
        
        logger.debug(f"Fix ({fix.coordinate.latitude:.6f}, {fix.coordinate.longitude:.6f}) "
                     f"nearest={nearest_index} next={next_index} dist={distance:.1f}m "
                     f"bearing={bearing_to_next:.1f}° relative={relative_bearing:.1f}°")
        
        self._state = NavigationState(
            current_location=fix,
            nearest_index=nearest_index,
            next_index=next_index,
            distance_m=distance,
            relative_bearing=relative_bearing,
            user_heading=self._heading,
            instruction=instruction,
            arrived_at_next=arrived_at_next,
            arrived_at_destination=arrived_at_destination,
            status=NavigationStatus.ARRIVED if arrived_at_destination else NavigationStatus.TRACKING
        )
        return self._state
