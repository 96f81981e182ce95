"""
Unit tests for path-node ingestion
"""
import json
import os
import tempfile
import unittest

from guidance.path_loader import (
    PathParseError, parse_waypoint, parse_path, load_path_file, route_instructions, path_to_dicts
)
from guidance.core.data_types import WaypointKind

SAMPLE_PATH = os.path.join(os.path.dirname(__file__), '..', 'examples', 'sample_path.json')


def record(order, lat=52.0, lon=21.0, **extra):
    data = {'coordinates': {'latitude': lat, 'longitude': lon}, 'order': order}
    data.update(extra)
    return data


class TestParseWaypoint(unittest.TestCase):
    
    def test_minimal_record(self):
        waypoint = parse_waypoint(record(3))
        self.assertEqual(waypoint.order, 3)
        self.assertEqual(waypoint.coordinate.latitude, 52.0)
        self.assertEqual(waypoint.kind, WaypointKind.WAYPOINT)
        self.assertIsNone(waypoint.instruction_text)
        self.assertFalse(waypoint.is_indoor)
    
    def test_camel_and_snake_case(self):
        camel = parse_waypoint(record(1, instructionText="Go up", isIndoor=True, routeId="r1"))
        snake = parse_waypoint(record(1, instruction_text="Go up", is_indoor=True, route_id="r1"))
        self.assertEqual(camel, snake)
    
    def test_empty_instruction_text_is_none(self):
        self.assertIsNone(parse_waypoint(record(1, instructionText="")).instruction_text)
    
    def test_missing_coordinates(self):
        with self.assertRaises(PathParseError) as ctx:
            parse_waypoint({'order': 1}, index=4)
        self.assertEqual(ctx.exception.index, 4)
        self.assertEqual(ctx.exception.field, "coordinates")
    
    def test_latitude_out_of_range(self):
        with self.assertRaises(PathParseError) as ctx:
            parse_waypoint(record(1, lat=91.0))
        self.assertEqual(ctx.exception.field, "coordinates.latitude")
    
    def test_non_numeric_longitude(self):
        with self.assertRaises(PathParseError) as ctx:
            parse_waypoint(record(1, lon="21.0"))
        self.assertEqual(ctx.exception.field, "coordinates.longitude")
    
    def test_missing_order(self):
        data = record(1)
        del data['order']
        with self.assertRaises(PathParseError) as ctx:
            parse_waypoint(data)
        self.assertEqual(ctx.exception.field, "order")
    
    def test_fractional_order(self):
        with self.assertRaises(PathParseError):
            parse_waypoint(record(1.5))
    
    def test_unknown_type(self):
        with self.assertRaises(PathParseError) as ctx:
            parse_waypoint(record(1, type="elevator"))
        self.assertEqual(ctx.exception.field, "type")
    
    def test_landmark_without_name(self):
        with self.assertRaises(PathParseError) as ctx:
            parse_waypoint(record(1, landmark={'description': 'no name'}))
        self.assertEqual(ctx.exception.field, "landmark")
    
    def test_non_boolean_indoor_flag(self):
        with self.assertRaises(PathParseError):
            parse_waypoint(record(1, isIndoor="yes"))
    
    def test_error_is_value_error(self):
        self.assertTrue(issubclass(PathParseError, ValueError))


class TestParsePath(unittest.TestCase):
    
    def test_sorted_by_order(self):
        path = parse_path([record(3), record(1), record(2)])
        self.assertEqual([w.order for w in path], [1, 2, 3])
    
    def test_duplicate_order(self):
        with self.assertRaises(PathParseError):
            parse_path([record(1), record(1)])
    
    def test_error_names_record_index(self):
        with self.assertRaises(PathParseError) as ctx:
            parse_path([record(1), record(2), {'order': 3}])
        self.assertEqual(ctx.exception.index, 2)
    
    def test_rejects_mapping(self):
        with self.assertRaises(PathParseError):
            parse_path({'nodes': []})
    
    def test_empty(self):
        self.assertEqual(parse_path([]), ())


class TestLoadPathFile(unittest.TestCase):
    
    def test_sample_path(self):
        path = load_path_file(SAMPLE_PATH)
        self.assertEqual(len(path), 4)
        self.assertEqual(path[1].kind, WaypointKind.TURN)
        self.assertEqual(path[1].landmark.name, "Fountain")
        self.assertEqual(path[2].instruction_text, "Enter the science building")
        self.assertTrue(path[3].is_indoor)
        self.assertEqual(path[3].floor, 2)
        self.assertEqual(path[0].route_id, "library-to-lab")
    
    def test_path_nodes_key_and_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            nodes_file = os.path.join(tmp, 'path.json')
            with open(nodes_file, 'w', encoding='utf-8') as f:
                json.dump({'pathNodes': [record(2), record(1)]}, f)
            self.assertEqual([w.order for w in load_path_file(nodes_file)], [1, 2])
            
            bad_file = os.path.join(tmp, 'bad.json')
            with open(bad_file, 'w', encoding='utf-8') as f:
                f.write("{not json")
            with self.assertRaises(PathParseError):
                load_path_file(bad_file)
            
            no_nodes = os.path.join(tmp, 'empty.json')
            with open(no_nodes, 'w', encoding='utf-8') as f:
                json.dump({'routeId': 'x'}, f)
            with self.assertRaises(PathParseError):
                load_path_file(no_nodes)


class TestRouteInstructions(unittest.TestCase):
    
    def test_turns_and_custom_text(self):
        instructions = route_instructions(load_path_file(SAMPLE_PATH))
        self.assertEqual([i.order for i in instructions], [2, 3])
        self.assertEqual(instructions[0].text, "Turn right at the fountain")
        self.assertEqual(instructions[0].heading, 90)
        self.assertEqual(instructions[1].text, "Enter the science building")
    
    def test_path_to_dicts(self):
        dicts = path_to_dicts(load_path_file(SAMPLE_PATH))
        self.assertEqual(dicts[0]['id'], "n1")
        self.assertEqual(dicts[3]['type'], "landmark")
        self.assertEqual(dicts[3]['coordinates']['latitude'], 52.40705)


if __name__ == '__main__':
    unittest.main()
