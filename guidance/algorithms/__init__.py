"""Guidance algorithms"""
from .geo_utils import GeoUtils
from .locator import find_nearest
from .instructions import generate_instruction, base_phrase, ARRIVAL_THRESHOLD_M

__all__ = ['GeoUtils', 'find_nearest', 'generate_instruction', 'base_phrase', 'ARRIVAL_THRESHOLD_M']
