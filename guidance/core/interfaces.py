"""Guidance engine collaborator interfaces"""
from abc import ABC, abstractmethod
from typing import Callable, Hashable, Optional
from .data_types import LocationFix, LocationError, LocationOptions, NavigationState


FixCallback = Callable[[LocationFix], None]
ErrorCallback = Callable[[LocationError], None]


class LocationSource(ABC):
    """
    Subscription-style platform location provider

    A source may deliver callbacks from its own thread. After cancel()
    returns, the source should stop delivering, but consumers must still
    tolerate callbacks that were already in flight.
    """

    @abstractmethod
    def start(self, on_fix: FixCallback, on_error: ErrorCallback,
              options: Optional[LocationOptions] = None) -> Hashable:
        """Begin delivering fixes; returns a handle for cancel()"""
        pass

    @abstractmethod
    def cancel(self, handle: Hashable):
        """Stop the subscription identified by handle"""
        pass


class StateObserver(ABC):
    """Receives every published navigation snapshot"""

    @abstractmethod
    def on_state_update(self, state: NavigationState):
        pass

    def on_location_error(self, error: LocationError):
        """Called before the error snapshot is published"""
        pass

    def on_fix_dropped(self, fix: LocationFix):
        """Called for fixes that arrive after their session ended"""
        pass
