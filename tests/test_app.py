"""
Unit tests for the Flask web adapter
"""
import json
import os
import unittest
from unittest.mock import Mock

from app import create_app, validate_coordinates
from guidance.controller import NavigationController
from location.manual import ManualLocationSource
from telemetry.metrics import MetricsObserver

SAMPLE_PATH = os.path.join(os.path.dirname(__file__), '..', 'examples', 'sample_path.json')


def load_sample_nodes():
    with open(SAMPLE_PATH, encoding='utf-8') as f:
        return json.load(f)['nodes']


class TestValidateCoordinates(unittest.TestCase):
    
    def test_valid(self):
        self.assertEqual(validate_coordinates(52.4, 16.9), (True, None))
    
    def test_invalid(self):
        self.assertFalse(validate_coordinates("52.4", 16.9)[0])
        self.assertFalse(validate_coordinates(True, 16.9)[0])
        self.assertFalse(validate_coordinates(float('nan'), 16.9)[0])
        self.assertFalse(validate_coordinates(91, 16.9)[0])
        self.assertFalse(validate_coordinates(52.4, -181)[0])


class TestNavigationAPI(unittest.TestCase):
    """Test API endpoints against a controller fed by a manual source"""
    
    def setUp(self):
        self.source = ManualLocationSource()
        self.controller = NavigationController(self.source)
        self.metrics = MetricsObserver()
        self.controller.add_observer(self.metrics)
        self.app = create_app(self.controller, self.metrics)
        self.client = self.app.test_client()
    
    def _load_sample_path(self):
        return self.client.post('/api/navigation/path', json={'nodes': load_sample_nodes()})
    
    def test_no_session_secret(self):
        self.assertIsNone(self.app.config['SECRET_KEY'])
        self.assertIs(self.app.extensions['navigation_controller'], self.controller)
    
    def test_health(self):
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['status'], 'ok')
    
    def test_initial_state(self):
        data = self.client.get('/api/navigation/state').get_json()
        self.assertEqual(data['instruction'], "Initializing navigation...")
        self.assertFalse(data['enabled'])
        self.assertIsNone(data['session_id'])
    
    def test_set_and_get_path(self):
        response = self._load_sample_path()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['count'], 4)
        
        data = self.client.get('/api/navigation/path').get_json()
        self.assertEqual(data['count'], 4)
        self.assertEqual(data['nodes'][1]['landmark']['name'], "Fountain")
        self.assertEqual([i['order'] for i in data['instructions']], [2, 3])
    
    def test_invalid_path_returns_400(self):
        nodes = load_sample_nodes()
        nodes[2]['coordinates']['latitude'] = 123.0
        response = self.client.post('/api/navigation/path', json={'nodes': nodes})
        self.assertEqual(response.status_code, 400)
        data = response.get_json()
        self.assertEqual(data['index'], 2)
        self.assertEqual(data['field'], "coordinates.latitude")
    
    def test_path_requires_nodes(self):
        self.assertEqual(self.client.post('/api/navigation/path', json={}).status_code, 400)
        self.assertEqual(self.client.post('/api/navigation/path', json={'route': 'x'}).status_code, 400)
    
    def test_enable_push_fix_and_disable(self):
        self._load_sample_path()
        response = self.client.post('/api/navigation/enable')
        self.assertTrue(response.get_json()['subscribed'])
        
        response = self.client.post('/api/location/fix',
                                    json={'latitude': 52.4064, 'longitude': 16.9252, 'heading': 0})
        self.assertEqual(response.status_code, 200)
        state = response.get_json()['state']
        self.assertEqual(state['nearest_index'], 0)
        self.assertEqual(state['next_index'], 1)
        self.assertEqual(state['instruction'], "Continue straight toward Fountain in 67m")
        
        response = self.client.post('/api/navigation/disable')
        self.assertFalse(response.get_json()['enabled'])
        self.assertFalse(self.controller.is_subscribed)
    
    def test_push_invalid_fix(self):
        response = self.client.post('/api/location/fix', json={'latitude': 'north', 'longitude': 16.9})
        self.assertEqual(response.status_code, 400)
        response = self.client.post('/api/location/fix',
                                    json={'latitude': 52.4, 'longitude': 16.9, 'heading': 'east'})
        self.assertEqual(response.status_code, 400)
    
    def test_push_location_error(self):
        self._load_sample_path()
        self.client.post('/api/navigation/enable')
        response = self.client.post('/api/location/error',
                                    json={'code': 'permission_denied', 'message': 'User denied Geolocation'})
        self.assertEqual(response.get_json()['state']['instruction'], "Location error: User denied Geolocation")
        self.assertEqual(self.metrics.snapshot()['location_errors'], 1)
    
    def test_unknown_error_code(self):
        response = self.client.post('/api/location/error', json={'code': 'eclipse'})
        self.assertEqual(response.status_code, 400)
    
    def test_push_rejected_for_other_sources(self):
        app = create_app(NavigationController(Mock()))
        client = app.test_client()
        response = client.post('/api/location/fix', json={'latitude': 52.4, 'longitude': 16.9})
        self.assertEqual(response.status_code, 409)
    
    def test_metrics(self):
        self.assertEqual(self.client.get('/api/metrics').get_json()['fixes_processed'], 0)
        client = create_app(NavigationController(self.source)).test_client()
        self.assertEqual(client.get('/api/metrics').status_code, 404)
    
    def test_unknown_endpoint(self):
        self.assertEqual(self.client.get('/api/nothing').status_code, 404)
        self.assertEqual(self.client.get('/api/navigation/enable').status_code, 405)


if __name__ == '__main__':
    unittest.main()
