"""
Mantras planning API.

FastAPI backend exposing the execution coordinator.
"""

from mantras.api.dependencies import get_coordinator
from mantras.api.main import app

__all__ = ["app", "get_coordinator"]
