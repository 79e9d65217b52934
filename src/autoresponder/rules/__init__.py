"""Rule model, validation and templates."""

from .models import (
    ALL_RESOURCE_TYPES,
    MatchType,
    ResourceType,
    ResponseType,
    Rule,
    RuleInput,
    TransportTag,
)
from .validation import check_rule, derive_transport_pattern, transport_tag_for, validate_rule

__all__ = [
    "ALL_RESOURCE_TYPES",
    "MatchType",
    "ResourceType",
    "ResponseType",
    "Rule",
    "RuleInput",
    "TransportTag",
    "check_rule",
    "derive_transport_pattern",
    "transport_tag_for",
    "validate_rule",
]
