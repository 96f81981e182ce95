"""Data structures for the guidance engine"""
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum
from datetime import datetime


INITIAL_INSTRUCTION = "Initializing navigation..."


class WaypointKind(Enum):
    """Kind tag of a path node"""
    WAYPOINT = "waypoint"
    TURN = "turn"
    LANDMARK = "landmark"
    TRANSITION = "transition"


class NavigationStatus(Enum):
    """Engine lifecycle status"""
    UNINITIALIZED = "uninitialized"
    TRACKING = "tracking"
    ARRIVED = "arrived"


class LocationErrorCode(Enum):
    """Failure categories reported by a location source"""
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Coordinate:
    """WGS84 coordinate in decimal degrees"""
    latitude: float
    longitude: float

    def to_dict(self):
        return {'latitude': self.latitude, 'longitude': self.longitude}


@dataclass(frozen=True)
class Landmark:
    """Named landmark attached to a waypoint"""
    name: str
    description: str = ""

    def to_dict(self):
        return {'name': self.name, 'description': self.description}


@dataclass(frozen=True)
class Waypoint:
    """One ordered stop along a resolved route"""
    coordinate: Coordinate
    order: int
    kind: WaypointKind = WaypointKind.WAYPOINT
    instruction_text: Optional[str] = None
    landmark: Optional[Landmark] = None
    floor: Optional[int] = None
    is_indoor: bool = False
    node_id: Optional[str] = None
    route_id: Optional[str] = None
    description: str = ""
    heading: Optional[float] = None  # degrees, informational

    def to_dict(self):
        return {
            'id': self.node_id,
            'route_id': self.route_id,
            'coordinates': self.coordinate.to_dict(),
            'order': self.order,
            'type': self.kind.value,
            'description': self.description,
            'heading': self.heading,
            'instruction_text': self.instruction_text,
            'landmark': self.landmark.to_dict() if self.landmark else None,
            'floor': self.floor,
            'is_indoor': self.is_indoor
        }


@dataclass(frozen=True)
class LocationFix:
    """One device location sample"""
    coordinate: Coordinate
    accuracy: float = 0.0  # meters, informational only
    heading: Optional[float] = None  # degrees 0-360, None when unknown
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self):
        return {
            'latitude': self.coordinate.latitude,
            'longitude': self.coordinate.longitude,
            'accuracy': self.accuracy,
            'heading': self.heading,
            'timestamp': self.timestamp.isoformat()
        }


@dataclass(frozen=True)
class LocationError:
    """Failure delivered by a location source to its error callback"""
    code: LocationErrorCode
    message: str


@dataclass(frozen=True)
class LocationOptions:
    """Subscription preferences handed to a location source"""
    high_accuracy: bool = True
    timeout_s: float = 4.0
    maximum_age_s: float = 0.0  # 0 = no staleness filtering


@dataclass(frozen=True)
class NavigationState:
    """Immutable navigation snapshot republished on every accepted update"""
    current_location: Optional[LocationFix] = None
    nearest_index: Optional[int] = None
    next_index: Optional[int] = None
    distance_m: float = 0.0
    relative_bearing: float = 0.0  # -180..180, negative = left
    user_heading: Optional[float] = None
    instruction: str = INITIAL_INSTRUCTION
    arrived_at_next: bool = False
    arrived_at_destination: bool = False
    status: NavigationStatus = NavigationStatus.UNINITIALIZED

    def to_dict(self):
        return {
            'current_location': self.current_location.to_dict() if self.current_location else None,
            'nearest_index': self.nearest_index,
            'next_index': self.next_index,
            'distance_m': self.distance_m,
            'relative_bearing': self.relative_bearing,
            'user_heading': self.user_heading,
            'instruction': self.instruction,
            'arrived_at_next': self.arrived_at_next,
            'arrived_at_destination': self.arrived_at_destination,
            'status': self.status.value
        }


@dataclass(frozen=True)
class RouteInstruction:
    """Turn-by-turn entry derived from a path"""
    order: int
    text: str
    kind: WaypointKind
    heading: Optional[float] = None
    landmark: Optional[Landmark] = None

    def to_dict(self):
        return {
            'order': self.order,
            'text': self.text,
            'type': self.kind.value,
            'heading': self.heading,
            'landmark': self.landmark.to_dict() if self.landmark else None
        }
