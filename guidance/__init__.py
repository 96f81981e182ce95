"""Pedestrian waypoint guidance"""
from .engine import NavigationEngine
from .controller import NavigationController
from .path_loader import PathParseError, parse_path, load_path_file, route_instructions

__all__ = [
    'NavigationEngine',
    'NavigationController',
    'PathParseError',
    'parse_path',
    'load_path_file',
    'route_instructions'
]
