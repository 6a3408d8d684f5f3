"""
Controller - Observable Theme State

Wraps ConfigService with a Loading / Ready / Error state machine and
notifies subscribers of every transition.
"""

from .controller import ConfigController
from .state import ControllerState, Error, Loading, Ready

__all__ = ["ConfigController", "ControllerState", "Error", "Loading", "Ready"]
