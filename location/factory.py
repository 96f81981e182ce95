from guidance.core.interfaces import LocationSource
from location.manual import ManualLocationSource
from location.nmea import NMEALocationSource
from location.replay import ReplayLocationSource, load_fixes


def create_location_source(location_config: dict) -> LocationSource:
    kind = location_config.get('source', 'nmea')
    
    if kind == 'nmea':
        return NMEALocationSource(
            port=location_config['port'],
            baudrate=location_config['baudrate'],
            timeout=location_config['timeout']
        )
    
    if kind == 'replay':
        return ReplayLocationSource(
            load_fixes(location_config['replay_file']),
            interval_s=location_config['replay_interval']
        )
    
    if kind == 'manual':
        return ManualLocationSource()
    
    raise ValueError(f"Unknown location source '{kind}'")
