"""Nearest-waypoint lookup"""
from typing import Optional, Sequence

from ..core.data_types import Coordinate, Waypoint
from .geo_utils import GeoUtils


def find_nearest(location: Coordinate, waypoints: Sequence[Waypoint]) -> Optional[int]:
    """
    Index of the waypoint closest to location
    
    Linear scan; ties resolve to the lowest index.
    
    Returns:
        Index into waypoints, or None for an empty list
    """
    if not waypoints:
        return None
    
    nearest_index = 0
    min_distance = GeoUtils.distance_meters(location, waypoints[0].coordinate)
    
    for index in range(1, len(waypoints)):
        distance = GeoUtils.distance_meters(location, waypoints[index].coordinate)
        if distance < min_distance:
            min_distance = distance
            nearest_index = index
    
    return nearest_index
