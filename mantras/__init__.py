"""
Mantras - planning engine for AI-assistant tooling.

Breaks user requests into dependency-linked tasks and tracks their
execution.
"""

__version__ = "0.1.0"
__author__ = "Mantras Team"

from mantras.planning.coordinator import ExecutionCoordinator

__all__ = ["ExecutionCoordinator", "__version__"]
