"""Pick the compiled rule that applies to a request."""

from typing import TYPE_CHECKING, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from ..rules.models import ResourceType, normalize_resource_type

if TYPE_CHECKING:
    from ..compiler.models import CompiledRule


class RequestDescriptor(BaseModel):
    """The parts of an outgoing request that rules are matched on."""

    url: str = Field(..., description="Full request URL")
    resource_type: str = Field(default=ResourceType.OTHER.value, description="Request kind")

    @field_validator("resource_type", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_resource_type(value)


def evaluate(
    compiled: Sequence["CompiledRule"],
    request: RequestDescriptor,
) -> Optional["CompiledRule"]:
    """
    Find the compiled rule that handles a request.

    Candidates must match the URL and accept the request's resource kind.
    Highest priority wins; among equal priorities the rule compiled first
    (lowest id) wins.

    Returns:
        The winning CompiledRule, or None when nothing applies
    """
    winner: Optional["CompiledRule"] = None
    for rule in compiled:
        if request.resource_type not in rule.resource_types:
            continue
        if not rule.matcher.test(request.url):
            continue
        if winner is None or (rule.priority, -rule.id) > (winner.priority, -winner.id):
            winner = rule
    return winner
