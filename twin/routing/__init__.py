"""Question routing module."""

from .orchestrator import TwinOrchestrator
from .router import Router

__all__ = ["Router", "TwinOrchestrator"]
