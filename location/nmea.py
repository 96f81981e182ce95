"""NMEA 0183 receiver as a location source (pyserial + pynmeagps)"""
import itertools
import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import serial
from pynmeagps import NMEAReader

from guidance.core.interfaces import LocationSource, FixCallback, ErrorCallback
from guidance.core.data_types import (
    Coordinate, LocationFix, LocationError, LocationErrorCode, LocationOptions
)

logger = logging.getLogger(__name__)

UERE_M = 5.0  # user equivalent range error; accuracy ~ HDOP * UERE
MIN_COG_SPEED_KNOTS = 0.5  # course over ground is noise below walking pace
GGA_FALLBACK_S = 5.0  # emit RMC positions when no GGA arrived for this long
RECONNECT_INTERVAL_S = 2.0


def _field(msg: Any, name: str) -> Optional[float]:
    value = getattr(msg, name, None)
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


class NMEAFixConverter:
    """
    Turns parsed NMEA messages into LocationFix objects
    
    GGA carries position and HDOP, RMC/VTG carry course over ground.
    A fix is emitted for each valid GGA, with the latest course as
    heading; RMC positions are used only when GGA has gone quiet.
    """
    
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._heading: Optional[float] = None
        self._last_gga_time: Optional[float] = None
    
    def _update_course(self, course: Optional[float], speed_knots: Optional[float]):
        if course is not None and speed_knots is not None and speed_knots >= MIN_COG_SPEED_KNOTS:
            self._heading = course % 360
        elif speed_knots is not None and speed_knots < MIN_COG_SPEED_KNOTS:
            self._heading = None
    
    def convert(self, msg: Any) -> Optional[LocationFix]:
        msg_id = getattr(msg, 'msgID', None)
        
        if msg_id == 'GGA':
            quality = _field(msg, 'quality')
            lat, lon = _field(msg, 'lat'), _field(msg, 'lon')
            if not quality or lat is None or lon is None:
                logger.debug("📡 GGA without fix")
                return None
            self._last_gga_time = self._clock()
            hdop = _field(msg, 'HDOP')
            return LocationFix(
                coordinate=Coordinate(lat, lon),
                accuracy=hdop * UERE_M if hdop is not None else 0.0,
                heading=self._heading,
                timestamp=datetime.now()
            )
        
        if msg_id == 'RMC':
            self._update_course(_field(msg, 'cog'), _field(msg, 'spd'))
            if getattr(msg, 'status', 'V') != 'A':
                return None
            gga_recent = (self._last_gga_time is not None and
                          self._clock() - self._last_gga_time <= GGA_FALLBACK_S)
            lat, lon = _field(msg, 'lat'), _field(msg, 'lon')
            if gga_recent or lat is None or lon is None:
                return None
            return LocationFix(Coordinate(lat, lon), accuracy=0.0,
                               heading=self._heading, timestamp=datetime.now())
        
        if msg_id == 'VTG':
            self._update_course(_field(msg, 'cogt'), _field(msg, 'sogn'))
        
        return None


class NMEALocationSource(LocationSource):
    """
    GNSS receiver on a serial port
    
    Each subscription runs a reader thread that opens the port, parses
    NMEA with pynmeagps and calls back with fixes. Serial failures and
    silence longer than options.timeout_s are reported through the error
    callback; the thread keeps retrying until cancelled.
    """
    
    def __init__(self, port: str, baudrate: int = 9600, timeout: float = 3.0,
                 stream_factory: Optional[Callable[[], Any]] = None):
        """
        Args:
            port: Serial device, e.g. /dev/ttyS0
            baudrate: Serial speed
            timeout: Serial read timeout in seconds
            stream_factory: Override for opening the byte stream (defaults to serial.Serial)
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self._stream_factory = stream_factory or self._open_serial
        self._workers: Dict[int, threading.Thread] = {}
        self._stop_events: Dict[int, threading.Event] = {}
        self._handles = itertools.count(1)
        self._lock = threading.Lock()
    
    def _open_serial(self):
        return serial.Serial(port=self.port, baudrate=self.baudrate, timeout=self.timeout)
    
    def start(self, on_fix: FixCallback, on_error: ErrorCallback,
              options: Optional[LocationOptions] = None) -> int:
        handle = next(self._handles)
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._reader_loop,
            args=(on_fix, on_error, options or LocationOptions(), stop_event),
            daemon=True,
            name=f"NMEAReader-{handle}"
        )
        with self._lock:
            self._stop_events[handle] = stop_event
            self._workers[handle] = thread
        thread.start()
        logger.info(f"🔌 NMEA subscription #{handle} on {self.port} @ {self.baudrate} baud")
        return handle
    
    def cancel(self, handle: int):
        with self._lock:
            stop_event = self._stop_events.pop(handle, None)
            thread = self._workers.pop(handle, None)
        if stop_event is None:
            logger.warning(f"Cancel of unknown NMEA subscription {handle!r}")
            return
        
        stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.timeout + 1.0)
        logger.info(f"NMEA subscription #{handle} cancelled")
    
    @staticmethod
    def _deliver(callback, payload):
        try:
            callback(payload)
        except Exception as e:
            logger.error(f"NMEA callback error: {e}", exc_info=True)
    
    def _reader_loop(self, on_fix: FixCallback, on_error: ErrorCallback,
                     options: LocationOptions, stop_event: threading.Event):
        converter = NMEAFixConverter()
        last_fix_time = time.monotonic()
        timeout_reported = False
        
        while not stop_event.is_set():
            try:
                stream = self._stream_factory()
            except (serial.SerialException, OSError) as e:
                logger.error(f"❌ Cannot open GNSS receiver on {self.port}: {e}")
                self._deliver(on_error, LocationError(LocationErrorCode.POSITION_UNAVAILABLE, str(e)))
                stop_event.wait(RECONNECT_INTERVAL_S)
                continue
            
            reader = NMEAReader(stream)
            try:
                while not stop_event.is_set():
                    try:
                        raw_data, parsed_data = reader.read()
                    except (serial.SerialException, OSError):
                        raise
                    except Exception as e:
                        # checksum and format errors from pynmeagps
                        logger.debug(f"NMEA parse error: {e}")
                        continue
                    
                    fix = converter.convert(parsed_data) if parsed_data is not None else None
                    now = time.monotonic()
                    
                    if fix is not None:
                        last_fix_time = now
                        timeout_reported = False
                        self._deliver(on_fix, fix)
                    elif not timeout_reported and now - last_fix_time > options.timeout_s:
                        timeout_reported = True
                        logger.warning(f"⚠️ No GNSS fix for {options.timeout_s:.1f}s")
                        self._deliver(on_error, LocationError(LocationErrorCode.TIMEOUT,
                                                             f"No position within {options.timeout_s:.1f}s"))
                    
                    if raw_data is None:
                        # read timed out or stream exhausted
                        stop_event.wait(0.05)
            except (serial.SerialException, OSError) as e:
                logger.error(f"GNSS serial error: {e}")
                self._deliver(on_error, LocationError(LocationErrorCode.POSITION_UNAVAILABLE, str(e)))
                stop_event.wait(RECONNECT_INTERVAL_S)
            finally:
                close = getattr(stream, 'close', None)
                if close is not None:
                    close()
