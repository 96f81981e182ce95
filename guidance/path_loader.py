"""
Path-node ingestion

Turns loosely-shaped path-node records (as stored by the route database,
camelCase or snake_case keys) into a validated, order-sorted tuple of
Waypoint objects. Anything the engine cannot use is rejected here with a
PathParseError naming the record and field.
"""
import json
import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .core.data_types import Coordinate, Waypoint, WaypointKind, Landmark, RouteInstruction

logger = logging.getLogger(__name__)


class PathParseError(ValueError):
    """Raised when a path-node record cannot be turned into a Waypoint"""
    
    def __init__(self, message: str, index: Optional[int] = None, field: Optional[str] = None):
        self.index = index
        self.field = field
        location = ""
        if index is not None:
            location = f"record {index}"
            if field:
                location += f", field '{field}'"
            location += ": "
        super().__init__(f"{location}{message}")


def _get(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def _number(value: Any, index: int, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PathParseError(f"expected a number, got {value!r}", index, field)
    if math.isnan(value) or math.isinf(value):
        raise PathParseError(f"invalid value {value!r}", index, field)
    return float(value)


def _integer(value: Any, index: int, field: str) -> int:
    number = _number(value, index, field)
    if not number.is_integer():
        raise PathParseError(f"expected an integer, got {value!r}", index, field)
    return int(number)


def _optional_text(value: Any, index: int, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise PathParseError(f"expected a string, got {value!r}", index, field)
    return value or None


def parse_coordinate(value: Any, index: int) -> Coordinate:
    if not isinstance(value, Mapping):
        raise PathParseError("missing coordinates", index, "coordinates")
    
    latitude = _number(value.get('latitude'), index, "coordinates.latitude")
    longitude = _number(value.get('longitude'), index, "coordinates.longitude")
    
    if not -90.0 <= latitude <= 90.0:
        raise PathParseError(f"latitude {latitude} out of range", index, "coordinates.latitude")
    if not -180.0 <= longitude <= 180.0:
        raise PathParseError(f"longitude {longitude} out of range", index, "coordinates.longitude")
    
    return Coordinate(latitude, longitude)


def parse_waypoint(record: Any, index: int = 0) -> Waypoint:
    """
    Parse one path-node record
    
    Args:
        record: Mapping with at least coordinates and order
        index: Position of the record in its batch, used in error messages
        
    Returns:
        Waypoint
        
    Raises:
        PathParseError: On any missing or malformed field
    """
    if not isinstance(record, Mapping):
        raise PathParseError(f"expected an object, got {type(record).__name__}", index)
    
    coordinate = parse_coordinate(_get(record, 'coordinates', 'coordinate'), index)
    
    order_value = record.get('order')
    if order_value is None:
        raise PathParseError("missing order", index, "order")
    order = _integer(order_value, index, "order")
    
    kind_value = record.get('type', WaypointKind.WAYPOINT.value)
    try:
        kind = WaypointKind(kind_value)
    except ValueError:
        raise PathParseError(f"unknown type {kind_value!r}", index, "type") from None
    
    landmark = None
    landmark_value = record.get('landmark')
    if landmark_value is not None:
        if not isinstance(landmark_value, Mapping) or not isinstance(landmark_value.get('name'), str):
            raise PathParseError("landmark must have a name", index, "landmark")
        landmark = Landmark(
            name=landmark_value['name'],
            description=_optional_text(landmark_value.get('description'), index, "landmark.description") or ""
        )
    
    floor_value = record.get('floor')
    floor = _integer(floor_value, index, "floor") if floor_value is not None else None
    
    is_indoor = _get(record, 'isIndoor', 'is_indoor')
    if is_indoor is None:
        is_indoor = False
    elif not isinstance(is_indoor, bool):
        raise PathParseError(f"expected a boolean, got {is_indoor!r}", index, "isIndoor")
    
    heading_value = record.get('heading')
    heading = _number(heading_value, index, "heading") if heading_value is not None else None
    
    node_id = _get(record, 'id', 'node_id')
    
    return Waypoint(
        coordinate=coordinate,
        order=order,
        kind=kind,
        instruction_text=_optional_text(_get(record, 'instructionText', 'instruction_text'),
                                        index, "instructionText"),
        landmark=landmark,
        floor=floor,
        is_indoor=is_indoor,
        node_id=str(node_id) if node_id is not None else None,
        route_id=_optional_text(_get(record, 'routeId', 'route_id'), index, "routeId"),
        description=_optional_text(record.get('description'), index, "description") or "",
        heading=heading
    )


def parse_path(records: Iterable[Any]) -> Tuple[Waypoint, ...]:
    """
    Parse a batch of path-node records into an ordered path
    
    Records are sorted by their order field; duplicate order values are
    rejected.
    
    Raises:
        PathParseError: On the first malformed record
    """
    if isinstance(records, (str, bytes, Mapping)):
        raise PathParseError("expected a list of path-node records")
    
    waypoints = [parse_waypoint(record, index) for index, record in enumerate(records)]
    waypoints.sort(key=lambda waypoint: waypoint.order)
    
    for previous, current in zip(waypoints, waypoints[1:]):
        if previous.order == current.order:
            raise PathParseError(f"duplicate order {current.order}")
    
    logger.debug(f"Parsed path with {len(waypoints)} node(s)")
    return tuple(waypoints)


def load_path_file(filepath: str) -> Tuple[Waypoint, ...]:
    """
    Load path-node records from a JSON file
    
    The file holds either a list of records or an object with a "nodes"
    (or "pathNodes") list.
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise PathParseError(f"invalid JSON in {filepath}: {e}") from e
    
    if isinstance(data, Mapping):
        data = _get(data, 'nodes', 'pathNodes')
        if data is None:
            raise PathParseError(f"{filepath} has no 'nodes' list")
    
    waypoints = parse_path(data)
    logger.info(f"Loaded path with {len(waypoints)} node(s) from {filepath}")
    return waypoints


def route_instructions(waypoints: Iterable[Waypoint]) -> List[RouteInstruction]:
    """Turn-by-turn list: turn nodes and nodes that carry their own instruction text"""
    return [
        RouteInstruction(
            order=waypoint.order,
            text=waypoint.instruction_text or waypoint.description,
            kind=waypoint.kind,
            heading=waypoint.heading,
            landmark=waypoint.landmark
        )
        for waypoint in waypoints
        if waypoint.kind == WaypointKind.TURN or waypoint.instruction_text
    ]


def path_to_dicts(waypoints: Iterable[Waypoint]) -> List[Dict[str, Any]]:
    return [waypoint.to_dict() for waypoint in waypoints]
