"""Session telemetry"""
from .metrics import NavigationMetrics, MetricsObserver
from .session_recorder import SessionRecorder

__all__ = ['NavigationMetrics', 'MetricsObserver', 'SessionRecorder']
