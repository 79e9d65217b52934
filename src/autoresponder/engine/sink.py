"""Interception substrate collaborators."""

from typing import Protocol, Sequence, Tuple

from ..compiler.models import CompiledRule


class InterceptionSink(Protocol):
    """Consumer of compiled rule sets (e.g. a proxy or browser hook)."""

    def replace_rules(self, compiled: Sequence[CompiledRule]) -> None:
        """Drop every active rule, then install `compiled`."""
        ...


class NullSink:
    """Keeps the last installed rule set in memory and does nothing else."""

    def __init__(self):
        self.active: Tuple[CompiledRule, ...] = ()
        self.replace_count = 0

    def replace_rules(self, compiled: Sequence[CompiledRule]) -> None:
        self.active = tuple(compiled)
        self.replace_count += 1
