"""
Session Recorder - appends published navigation snapshots to a JSON-lines file
"""

import json
import os
import logging
import threading
from datetime import datetime
from typing import Optional

from guidance.core.interfaces import StateObserver
from guidance.core.data_types import LocationError, NavigationState

logger = logging.getLogger(__name__)


class SessionRecorder(StateObserver):
    """Writes one JSON line per published snapshot; I/O errors are logged, not raised"""
    
    def __init__(self, log_directory: str = "logs", session_id: Optional[str] = None):
        self.log_directory = log_directory
        self.session_id = session_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.records_written = 0
        self._lock = threading.Lock()
        
        os.makedirs(self.log_directory, exist_ok=True)
        logger.info(f"Recording navigation session {self.session_id} to {self.filepath}")
    
    @property
    def filepath(self) -> str:
        return os.path.join(self.log_directory, f"nav_session_{self.session_id}.jsonl")
    
    def on_state_update(self, state: NavigationState):
        self._append({"event": "state", **state.to_dict()})
    
    def on_location_error(self, error: LocationError):
        self._append({"event": "location_error", "code": error.code.value, "message": error.message})
    
    def _append(self, entry: dict):
        entry = {"recorded_at": datetime.now().isoformat(), **entry}
        try:
            with self._lock:
                with open(self.filepath, 'a', encoding='utf-8') as f:
                    f.write(json.dumps(entry, ensure_ascii=False) + "\n")
                self.records_written += 1
        except (IOError, TypeError, ValueError) as e:
            logger.error(f"Failed to write session record: {e}")
