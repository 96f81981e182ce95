import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

LOCATION_SOURCES = ("nmea", "replay", "manual")


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default: str, cast, errors: list):
    raw = os.getenv(name, default).strip()
    try:
        return cast(raw)
    except ValueError:
        errors.append(f"{name} must be a valid {cast.__name__}, got '{raw}'")
        return cast(default)


def get_navigation_config() -> dict:
    """Guidance engine settings; raises ConfigurationError on invalid values"""
    errors = []
    
    arrival_threshold = _env_number("NAV_ARRIVAL_THRESHOLD_M", "15", float, errors)
    if arrival_threshold <= 0:
        errors.append(f"NAV_ARRIVAL_THRESHOLD_M must be positive, got {arrival_threshold}")
    
    update_interval_ms = _env_number("NAV_UPDATE_INTERVAL_MS", "2000", int, errors)
    if update_interval_ms <= 0:
        errors.append(f"NAV_UPDATE_INTERVAL_MS must be positive, got {update_interval_ms}")
    
    maximum_age = _env_number("NAV_MAXIMUM_AGE_S", "0", float, errors)
    if maximum_age < 0:
        errors.append(f"NAV_MAXIMUM_AGE_S cannot be negative, got {maximum_age}")
    
    if errors:
        error_msg = "Navigation configuration invalid:\n" + "\n".join(f"  - {err}" for err in errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg)
    
    path_file = os.getenv("NAV_PATH_FILE", "").strip()
    if path_file and not os.path.exists(path_file):
        logger.warning(f"NAV_PATH_FILE '{path_file}' does not exist - starting without a path")
        path_file = ""
    
    return {
        "arrival_threshold": arrival_threshold,
        "update_interval_ms": update_interval_ms,
        # Subscription timeout is twice the nominal update interval
        "timeout_s": update_interval_ms * 2 / 1000.0,
        "high_accuracy": _env_bool("NAV_HIGH_ACCURACY", "true"),
        "maximum_age_s": maximum_age,
        "retain_heading": _env_bool("NAV_RETAIN_HEADING", "true"),
        "path_file": path_file,
    }


def get_location_config() -> dict:
    """Location source settings; raises ConfigurationError on invalid values"""
    errors = []
    
    source = os.getenv("LOCATION_SOURCE", "nmea").strip().lower()
    if source not in LOCATION_SOURCES:
        errors.append(f"LOCATION_SOURCE must be one of {', '.join(LOCATION_SOURCES)}, got '{source}'")
    
    baudrate = _env_number("GPS_BAUDRATE", "9600", int, errors)
    timeout = _env_number("GPS_TIMEOUT", "3.0", float, errors)
    replay_interval = _env_number("REPLAY_INTERVAL_S", "1.0", float, errors)
    
    replay_file = os.getenv("REPLAY_FILE", "").strip()
    if source == "replay" and not replay_file:
        errors.append("REPLAY_FILE is required when LOCATION_SOURCE=replay")
    
    if errors:
        error_msg = "Location configuration invalid:\n" + "\n".join(f"  - {err}" for err in errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg)
    
    return {
        "source": source,
        "port": os.getenv("GPS_PORT", "/dev/ttyS0"),
        "baudrate": baudrate,
        "timeout": timeout,
        "replay_file": replay_file,
        "replay_interval": replay_interval,
    }


def get_app_config() -> dict:
    """Web adapter and runtime settings"""
    errors = []
    port = _env_number("FLASK_PORT", "5002", int, errors)
    if errors:
        raise ConfigurationError("\n".join(errors))
    
    return {
        "host": os.getenv("FLASK_HOST", "0.0.0.0"),
        "port": port,
        "debug": _env_bool("FLASK_DEBUG", "false"),
        "log_to_file": _env_bool("LOG_TO_FILE", "false"),
        "session_log_dir": os.getenv("SESSION_LOG_DIR", "").strip(),
    }
