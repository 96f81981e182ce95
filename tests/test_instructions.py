"""
Unit tests for nearest-waypoint lookup and instruction composition
"""
import unittest

from guidance.algorithms.locator import find_nearest
from guidance.algorithms.instructions import (
    base_phrase, distance_suffix, generate_instruction, REACHED_MESSAGE
)
from guidance.core.data_types import Coordinate, Landmark, Waypoint


def waypoint(lat, lon, order, **kwargs):
    return Waypoint(coordinate=Coordinate(lat, lon), order=order, **kwargs)


class TestFindNearest(unittest.TestCase):
    
    def test_empty_path(self):
        self.assertIsNone(find_nearest(Coordinate(0, 0), []))
    
    def test_single_waypoint(self):
        self.assertEqual(find_nearest(Coordinate(10, 10), [waypoint(0, 0, 1)]), 0)
    
    def test_picks_closest(self):
        path = [waypoint(0, 0, 1), waypoint(0, 0.001, 2), waypoint(0, 0.002, 3)]
        self.assertEqual(find_nearest(Coordinate(0, 0.0011), path), 1)
        self.assertEqual(find_nearest(Coordinate(0, 0.0025), path), 2)
    
    def test_tie_resolves_to_lowest_index(self):
        path = [waypoint(0, -0.001, 1), waypoint(0, 0.001, 2)]
        self.assertEqual(find_nearest(Coordinate(0, 0), path), 0)
    
    def test_duplicate_coordinates_resolve_to_first(self):
        path = [waypoint(0, 0.001, 1), waypoint(0, 0.001, 2), waypoint(0, 0.001, 3)]
        self.assertEqual(find_nearest(Coordinate(0, 0), path), 0)


class TestBasePhrase(unittest.TestCase):
    
    def test_bands(self):
        self.assertEqual(base_phrase(0), "Continue straight")
        self.assertEqual(base_phrase(15), "Continue straight")
        self.assertEqual(base_phrase(-15), "Continue straight")
        self.assertEqual(base_phrase(16), "Slight right")
        self.assertEqual(base_phrase(-16), "Slight left")
        self.assertEqual(base_phrase(46), "Turn right")
        self.assertEqual(base_phrase(-46), "Turn left")
        self.assertEqual(base_phrase(180), "Turn right")
        self.assertEqual(base_phrase(-180), "Turn left")
    
    def test_exact_45_is_slight(self):
        self.assertEqual(base_phrase(45), "Slight right")
        self.assertEqual(base_phrase(-45), "Slight left")


class TestDistanceSuffix(unittest.TestCase):
    
    def test_rounding(self):
        self.assertEqual(distance_suffix(111.19), " in 110m")
        self.assertEqual(distance_suffix(115.0), " in 120m")
        self.assertEqual(distance_suffix(100.0), " in 100m")
        self.assertEqual(distance_suffix(42.5), " in 43m")
        self.assertEqual(distance_suffix(42.4), " in 42m")
    
    def test_zero_distance_has_no_suffix(self):
        self.assertEqual(distance_suffix(0.0), "")


class TestGenerateInstruction(unittest.TestCase):
    
    def test_reached_below_threshold(self):
        self.assertEqual(generate_instruction(90, 14.9, waypoint(0, 0, 1)), REACHED_MESSAGE)
    
    def test_threshold_is_exclusive(self):
        self.assertEqual(generate_instruction(0, 15.0, waypoint(0, 0, 1)), "Continue straight in 15m")
    
    def test_custom_threshold(self):
        self.assertEqual(generate_instruction(0, 20.0, None, arrival_threshold=25.0), REACHED_MESSAGE)
    
    def test_no_waypoint(self):
        self.assertEqual(generate_instruction(-60, 50.0, None), "Turn left in 50m")
    
    def test_custom_text_replaces_phrase(self):
        target = waypoint(0, 0, 1, instruction_text="Take the stairs")
        self.assertEqual(generate_instruction(-90, 30.0, target), "Take the stairs in 30m")
    
    def test_landmark_and_floor(self):
        target = waypoint(0, 0, 1, landmark=Landmark("Library"), floor=2, is_indoor=True)
        self.assertEqual(generate_instruction(20, 40.0, target), "Slight right toward Library (Floor 2) in 40m")
    
    def test_floor_ignored_outdoors(self):
        target = waypoint(0, 0, 1, floor=3, is_indoor=False)
        self.assertEqual(generate_instruction(0, 40.0, target), "Continue straight in 40m")
    
    def test_indoor_without_floor(self):
        target = waypoint(0, 0, 1, is_indoor=True)
        self.assertEqual(generate_instruction(0, 40.0, target), "Continue straight in 40m")
    
    def test_all_overrides(self):
        target = waypoint(0, 0, 1, instruction_text="Enter the building",
                          landmark=Landmark("Main Hall"), floor=0, is_indoor=True)
        self.assertEqual(generate_instruction(170, 250.0, target),
                         "Enter the building toward Main Hall (Floor 0) in 250m")


if __name__ == '__main__':
    unittest.main()
