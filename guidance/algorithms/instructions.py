"""Human-readable movement instructions"""
import math
from typing import Optional

from ..core.data_types import Waypoint

ARRIVAL_THRESHOLD_M = 15.0
REACHED_MESSAGE = "You have reached the waypoint"

TURN_THRESHOLD_DEG = 45.0
SLIGHT_THRESHOLD_DEG = 15.0


def base_phrase(relative_bearing: float) -> str:
    """Turn phrase for a signed relative bearing; exactly +-45 counts as slight"""
    if relative_bearing < -TURN_THRESHOLD_DEG:
        return "Turn left"
    if relative_bearing > TURN_THRESHOLD_DEG:
        return "Turn right"
    if relative_bearing < -SLIGHT_THRESHOLD_DEG:
        return "Slight left"
    if relative_bearing > SLIGHT_THRESHOLD_DEG:
        return "Slight right"
    return "Continue straight"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def distance_suffix(distance: float) -> str:
    """Nearest 10 m above 100 m, nearest meter below, nothing at 0"""
    if distance > 100:
        return f" in {_round_half_up(distance / 10.0) * 10}m"
    if distance > 0:
        return f" in {_round_half_up(distance)}m"
    return ""


def generate_instruction(relative_bearing: float,
                         distance: float,
                         waypoint: Optional[Waypoint],
                         arrival_threshold: float = ARRIVAL_THRESHOLD_M) -> str:
    """
    Compose the display instruction for the target waypoint
    
    Args:
        relative_bearing: Signed angle to target (-180..180, negative = left)
        distance: Meters to target
        waypoint: Target waypoint, its overrides shape the text
        arrival_threshold: Radius under which the waypoint counts as reached
        
    Returns:
        Instruction string, e.g. "Slight right toward Library (Floor 2) in 40m"
    """
    if distance < arrival_threshold:
        return REACHED_MESSAGE
    
    instruction = base_phrase(relative_bearing)
    
    if waypoint is not None:
        # Custom text replaces the turn phrase
        if waypoint.instruction_text:
            instruction = waypoint.instruction_text
        
        if waypoint.landmark is not None:
            instruction += f" toward {waypoint.landmark.name}"
        
        if waypoint.is_indoor and waypoint.floor is not None:
            instruction += f" (Floor {waypoint.floor})"
    
    return instruction + distance_suffix(distance)
