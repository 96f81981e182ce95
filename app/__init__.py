from flask import Flask, jsonify, request
from datetime import datetime
import logging
import math
import os
from typing import Optional

from guidance.controller import NavigationController
from guidance.core.data_types import (
    Coordinate, LocationFix, LocationError, LocationErrorCode
)
from guidance.path_loader import PathParseError, parse_path, route_instructions, path_to_dicts
from location.manual import ManualLocationSource
from telemetry.metrics import MetricsObserver

logger = logging.getLogger(__name__)


def validate_coordinates(lat, lon):
    """
    Validate GPS coordinates
    
    Args:
        lat: Latitude value
        lon: Longitude value
    
    Returns:
        tuple: (is_valid: bool, error_message: str or None)
    """
    # Type check
    if isinstance(lat, bool) or isinstance(lon, bool) or \
            not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False, "Coordinates must be numbers"
    
    # NaN/Inf check
    if math.isnan(lat) or math.isnan(lon):
        return False, "Invalid coordinate values (NaN)"
    
    if math.isinf(lat) or math.isinf(lon):
        return False, "Invalid coordinate values (Infinity)"
    
    # Range check
    if not (-90 <= lat <= 90):
        return False, "Latitude must be between -90 and 90"
    
    if not (-180 <= lon <= 180):
        return False, "Longitude must be between -180 and 180"
    
    return True, None


def create_app(controller: NavigationController, metrics: Optional[MetricsObserver] = None):
    """
    Flask application factory
    
    Args:
        controller: Navigation controller the endpoints drive
        metrics: Optional metrics observer already attached to the controller
    """
    app = Flask(__name__)
    
    app.config.update(DEBUG=os.getenv('FLASK_DEBUG', 'False').lower() == 'true')
    app.extensions['navigation_controller'] = controller
    app.extensions['navigation_metrics'] = metrics
    
    _register_routes(app, controller, metrics)
    _register_error_handlers(app)
    
    return app


def _register_error_handlers(app):
    """Register global error handlers"""
    
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Endpoint not found"}), 404
    
    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405
    
    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500
    
    @app.errorhandler(PathParseError)
    def path_error(error):
        logger.warning(f"Rejected path: {error}")
        return jsonify({"error": str(error), "index": error.index, "field": error.field}), 400


def _register_routes(app, controller: NavigationController, metrics: Optional[MetricsObserver]):
    """Register Flask routes"""
    
    @app.route('/api/health')
    def api_health():
        return jsonify({
            "status": "ok",
            "enabled": controller.enabled,
            "subscribed": controller.is_subscribed,
            "waypoints": len(controller.waypoints),
            "timestamp": datetime.now().isoformat()
        })
    
    @app.route('/api/navigation/state')
    def api_navigation_state():
        """Current navigation snapshot"""
        state = controller.state.to_dict()
        state["enabled"] = controller.enabled
        state["session_id"] = controller.session_id
        return jsonify(state)
    
    @app.route('/api/navigation/enable', methods=['POST'])
    def api_enable_navigation():
        controller.enable()
        return jsonify({
            "success": True,
            "enabled": True,
            "subscribed": controller.is_subscribed,
            "message": "Navigation enabled" if controller.waypoints else "Navigation enabled - no path loaded"
        })
    
    @app.route('/api/navigation/disable', methods=['POST'])
    def api_disable_navigation():
        controller.disable()
        return jsonify({"success": True, "enabled": False, "message": "Navigation disabled"})
    
    @app.route('/api/navigation/path', methods=['GET'])
    def api_get_path():
        waypoints = controller.waypoints
        return jsonify({
            "nodes": path_to_dicts(waypoints),
            "count": len(waypoints),
            "instructions": [entry.to_dict() for entry in route_instructions(waypoints)]
        })
    
    @app.route('/api/navigation/path', methods=['POST'])
    def api_set_path():
        """Load a new path; body {"nodes": [...]} with path-node records"""
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({"error": "No data provided"}), 400
        
        nodes = data.get('nodes')
        if nodes is None:
            return jsonify({"error": "nodes list is required"}), 400
        
        # PathParseError is mapped to 400 by the error handler
        waypoints = parse_path(nodes)
        controller.set_waypoints(waypoints)
        return jsonify({
            "success": True,
            "count": len(waypoints),
            "message": f"Path set with {len(waypoints)} node(s)"
        })
    
    @app.route('/api/location/fix', methods=['POST'])
    def api_push_fix():
        """Forward a device position to a manual location source"""
        source = controller.source
        if not isinstance(source, ManualLocationSource):
            return jsonify({"error": "Location source does not accept pushed fixes"}), 409
        
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({"error": "No data provided"}), 400
        
        lat = data.get('latitude')
        lon = data.get('longitude')
        valid, error = validate_coordinates(lat, lon)
        if not valid:
            return jsonify({"error": error, "success": False}), 400
        
        heading = data.get('heading')
        accuracy = data.get('accuracy', 0.0)
        try:
            heading = float(heading) if heading is not None else None
            accuracy = float(accuracy)
        except (ValueError, TypeError):
            return jsonify({"error": "heading and accuracy must be valid numbers"}), 400
        
        # Optional ISO 8601 capture time, checked against the maximum age option
        timestamp = data.get('timestamp')
        try:
            timestamp = datetime.fromisoformat(timestamp) if timestamp else datetime.now()
        except (ValueError, TypeError):
            return jsonify({"error": "timestamp must be an ISO 8601 string"}), 400
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone().replace(tzinfo=None)
        
        source.push_fix(LocationFix(Coordinate(float(lat), float(lon)),
                                    accuracy=accuracy, heading=heading, timestamp=timestamp))
        return jsonify({"success": True, "state": controller.state.to_dict()})
    
    @app.route('/api/location/error', methods=['POST'])
    def api_push_location_error():
        """Forward a device geolocation failure to a manual location source"""
        source = controller.source
        if not isinstance(source, ManualLocationSource):
            return jsonify({"error": "Location source does not accept pushed errors"}), 409
        
        data = request.get_json(silent=True) or {}
        try:
            code = LocationErrorCode(data.get('code', LocationErrorCode.POSITION_UNAVAILABLE.value))
        except ValueError:
            return jsonify({"error": f"Unknown error code '{data.get('code')}'"}), 400
        
        source.push_error(LocationError(code, str(data.get('message', 'Unknown error'))))
        return jsonify({"success": True, "state": controller.state.to_dict()})
    
    @app.route('/api/metrics')
    def api_metrics():
        if metrics is None:
            return jsonify({"error": "Metrics not enabled"}), 404
        return jsonify(metrics.snapshot())
