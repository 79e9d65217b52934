"""Command-driven rule engine."""

from .engine import EngineState, EngineStatus, RuleEngine
from .sink import InterceptionSink, NullSink

__all__ = ["EngineState", "EngineStatus", "InterceptionSink", "NullSink", "RuleEngine"]
