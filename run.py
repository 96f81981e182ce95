#!/usr/bin/env python3
import sys
import logging
import signal
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import (
    ConfigurationError, get_navigation_config, get_location_config, get_app_config
)
from guidance.controller import NavigationController
from guidance.core.data_types import LocationOptions
from guidance.path_loader import PathParseError, load_path_file
from location.factory import create_location_source
from telemetry.metrics import MetricsObserver
from telemetry.session_recorder import SessionRecorder
from app import create_app


def setup_logging(debug: bool = False, log_to_file: bool = False):
    """Setup logging configuration"""
    log_level = logging.DEBUG if debug else logging.INFO
    
    handlers = [logging.StreamHandler(sys.stdout)]
    
    if log_to_file:
        log_dir = PROJECT_ROOT / 'logs'
        log_dir.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(log_dir / 'wayguide.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)
    
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    # Reduce noisy third-party loggers
    logging.getLogger('pynmeagps').setLevel(logging.ERROR)
    logging.getLogger('werkzeug').setLevel(logging.WARNING)


def build_controller(nav_config: dict, location_config: dict, app_config: dict):
    """
    Wire location source, controller and telemetry observers
    
    Returns:
        (controller, metrics_observer)
    """
    logger = logging.getLogger(__name__)
    
    waypoints = ()
    if nav_config["path_file"]:
        try:
            waypoints = load_path_file(nav_config["path_file"])
        except PathParseError as e:
            logger.error(f"❌ Path file rejected: {e}")
    
    options = LocationOptions(
        high_accuracy=nav_config["high_accuracy"],
        timeout_s=nav_config["timeout_s"],
        maximum_age_s=nav_config["maximum_age_s"]
    )
    
    controller = NavigationController(
        create_location_source(location_config),
        waypoints,
        options=options,
        arrival_threshold=nav_config["arrival_threshold"],
        retain_heading=nav_config["retain_heading"]
    )
    
    metrics = MetricsObserver()
    controller.add_observer(metrics)
    
    if app_config["session_log_dir"]:
        controller.add_observer(SessionRecorder(app_config["session_log_dir"]))
    
    return controller, metrics


def setup_signal_handlers(controller):
    """Setup graceful shutdown signal handlers"""
    def signal_handler(signum, frame):
        logging.info(f"Received signal {signum}, shutting down gracefully...")
        controller.shutdown()
        logging.info("Shutdown complete")
        sys.exit(0)
    
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main():
    """Main application entry point"""
    try:
        app_config = get_app_config()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    
    setup_logging(app_config["debug"], app_config["log_to_file"])
    logger = logging.getLogger(__name__)
    logger.info("Wayguide starting...")
    
    if not (PROJECT_ROOT / '.env').exists():
        logger.warning("⚠️  .env file not found - using defaults")
    
    try:
        nav_config = get_navigation_config()
        location_config = get_location_config()
        controller, metrics = build_controller(nav_config, location_config, app_config)
    except (ConfigurationError, OSError, ValueError) as e:
        logger.error(f"Cannot start application: {e}")
        sys.exit(1)
    
    setup_signal_handlers(controller)
    app = create_app(controller, metrics)
    
    if controller.waypoints:
        controller.enable()
    else:
        logger.info("No path loaded - POST one to /api/navigation/path, then enable navigation")
    
    host, port = app_config["host"], app_config["port"]
    logger.info(f"🌐 Serving guidance API on http://{host}:{port}")
    try:
        app.run(host=host, port=port, debug=app_config["debug"], threaded=True, use_reloader=False)
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    finally:
        controller.shutdown()


if __name__ == "__main__":
    main()
