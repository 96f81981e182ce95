"""Location sources for the guidance engine"""
from .manual import ManualLocationSource
from .replay import ReplayLocationSource, load_fixes, simulate_walk
from .nmea import NMEALocationSource, NMEAFixConverter
from .factory import create_location_source

__all__ = [
    'ManualLocationSource',
    'ReplayLocationSource',
    'NMEALocationSource',
    'NMEAFixConverter',
    'create_location_source',
    'load_fixes',
    'simulate_walk'
]
