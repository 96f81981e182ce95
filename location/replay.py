"""Replays recorded or simulated fixes on a background thread"""
import itertools
import json
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from guidance.core.interfaces import LocationSource, FixCallback, ErrorCallback
from guidance.core.data_types import Coordinate, LocationFix, LocationOptions, Waypoint
from guidance.algorithms.geo_utils import GeoUtils

logger = logging.getLogger(__name__)


def load_fixes(filepath: str) -> List[LocationFix]:
    """
    Load fixes from a JSON list of {latitude, longitude, accuracy?, heading?, timestamp?}
    
    Timestamps are ISO 8601 strings; missing ones default to load time.
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        records = json.load(f)
    
    fixes = []
    for record in records:
        timestamp = record.get('timestamp')
        fixes.append(LocationFix(
            coordinate=Coordinate(float(record['latitude']), float(record['longitude'])),
            accuracy=float(record.get('accuracy', 0.0)),
            heading=float(record['heading']) if record.get('heading') is not None else None,
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now()
        ))
    logger.info(f"Loaded {len(fixes)} fix(es) from {filepath}")
    return fixes


def simulate_walk(waypoints: Sequence[Waypoint], step_m: float = 5.0,
                  accuracy: float = 3.0) -> List[LocationFix]:
    """
    Fixes along straight legs between consecutive waypoints
    
    Each fix carries the leg bearing as heading, as a compass would.
    """
    if step_m <= 0:
        raise ValueError(f"step_m must be positive, got {step_m}")
    
    fixes = []
    for start, end in zip(waypoints, waypoints[1:]):
        leg_length = GeoUtils.distance_meters(start.coordinate, end.coordinate)
        bearing = GeoUtils.bearing_degrees(start.coordinate, end.coordinate)
        travelled = 0.0
        while travelled < leg_length:
            position = GeoUtils.destination_point(start.coordinate, bearing, travelled)
            fixes.append(LocationFix(position, accuracy=accuracy, heading=bearing))
            travelled += step_m
    
    if waypoints:
        last_heading = fixes[-1].heading if fixes else None
        fixes.append(LocationFix(waypoints[-1].coordinate, accuracy=accuracy, heading=last_heading))
    return fixes


class ReplayLocationSource(LocationSource):
    """Delivers a fixed list of fixes at a steady interval, one thread per subscription"""
    
    def __init__(self, fixes: Sequence[LocationFix], interval_s: float = 1.0, loop: bool = False):
        self.fixes = list(fixes)
        self.interval_s = interval_s
        self.loop = loop
        self._workers: Dict[int, threading.Thread] = {}
        self._stop_events: Dict[int, threading.Event] = {}
        self._handles = itertools.count(1)
        self._lock = threading.Lock()
    
    def start(self, on_fix: FixCallback, on_error: ErrorCallback,
              options: Optional[LocationOptions] = None) -> int:
        handle = next(self._handles)
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._replay_loop,
            args=(on_fix, stop_event),
            daemon=True,
            name=f"LocationReplay-{handle}"
        )
        with self._lock:
            self._stop_events[handle] = stop_event
            self._workers[handle] = thread
        thread.start()
        logger.info(f"▶️  Replay #{handle} started ({len(self.fixes)} fixes, every {self.interval_s}s)")
        return handle
    
    def cancel(self, handle: int):
        with self._lock:
            stop_event = self._stop_events.pop(handle, None)
            thread = self._workers.pop(handle, None)
        if stop_event is None:
            logger.warning(f"Cancel of unknown replay {handle!r}")
            return
        
        stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval_s + 1.0)
        logger.info(f"⏹️  Replay #{handle} stopped")
    
    def wait(self, handle: int, timeout: Optional[float] = None) -> bool:
        """Block until replay handle finished; True if it did"""
        with self._lock:
            thread = self._workers.get(handle)
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()
    
    def _replay_loop(self, on_fix: FixCallback, stop_event: threading.Event):
        while not stop_event.is_set():
            for fix in self.fixes:
                if stop_event.is_set():
                    return
                try:
                    on_fix(replace(fix, timestamp=datetime.now()))
                except Exception as e:
                    logger.error(f"Replay callback error: {e}")
                if stop_event.wait(self.interval_s):
                    return
            if not self.loop:
                return
