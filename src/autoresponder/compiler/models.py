"""Compiled rule set produced by a compilation pass."""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Tuple

from ..encoding.content import to_data_url
from ..matching.matcher import Matcher
from ..ops.event_log import LogAction, LogEntry


@dataclass(frozen=True)
class CompiledRule:
    """A rule ready for matching; rebuilt on every pass, never patched."""

    id: int
    priority: int
    matcher: Matcher
    resource_types: FrozenSet[str]
    mime_type: str
    encoded_payload: str
    pattern: str = ""
    response_type: str = ""

    @property
    def data_url(self) -> str:
        """Redirect target handed to the interception substrate."""
        return to_data_url(self.mime_type, self.encoded_payload)


@dataclass(frozen=True)
class CompilationResult:
    compiled: Tuple[CompiledRule, ...] = ()
    diagnostics: List[LogEntry] = field(default_factory=list)

    @property
    def errors(self) -> List[LogEntry]:
        return [d for d in self.diagnostics if d.action == LogAction.ERROR]
