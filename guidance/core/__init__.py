"""Guidance core interfaces and data structures"""
from .interfaces import LocationSource, StateObserver
from .data_types import (
    Coordinate, Waypoint, WaypointKind, Landmark, LocationFix,
    LocationError, LocationErrorCode, LocationOptions,
    NavigationState, NavigationStatus, RouteInstruction
)

__all__ = [
    'LocationSource',
    'StateObserver',
    'Coordinate',
    'Waypoint',
    'WaypointKind',
    'Landmark',
    'LocationFix',
    'LocationError',
    'LocationErrorCode',
    'LocationOptions',
    'NavigationState',
    'NavigationStatus',
    'RouteInstruction'
]
