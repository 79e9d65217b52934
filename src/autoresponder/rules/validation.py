"""Save-time validation: turn a RuleInput into a persisted Rule."""

import re
from typing import Optional

from ..errors import RuleValidationError, ValidationCode
from ..utils.time import utc_now_z
from .models import MatchType, Rule, RuleInput, TransportTag

WILDCARD = "*"


def derive_transport_pattern(pattern: str, match_type: MatchType) -> str:
    """
    Wrap a user pattern in wildcards according to its match type.

    Wildcard characters already present in the pattern are kept as-is.
    """
    match_type = MatchType(match_type)
    if match_type == MatchType.PREFIX:
        return pattern + WILDCARD
    if match_type == MatchType.SUFFIX:
        return WILDCARD + pattern
    if match_type == MatchType.CONTAINS:
        return WILDCARD + pattern + WILDCARD
    # exact, wildcard and regex are taken verbatim
    return pattern


def transport_tag_for(match_type: MatchType) -> TransportTag:
    if MatchType(match_type) == MatchType.REGEX:
        return TransportTag.REGEX
    return TransportTag.URL_FILTER


def _check_regex(pattern: str) -> None:
    try:
        re.compile(pattern)
    except re.error as exc:
        raise RuleValidationError(
            ValidationCode.INVALID_REGEX,
            f"Invalid regular expression: {exc}",
        ) from exc


def validate_rule(rule_input: RuleInput, existing: Optional[Rule] = None) -> Rule:
    """
    Validate an edited rule and build its persisted form.

    Args:
        rule_input: Rule as entered in the editor
        existing: The rule being replaced, when editing; its createdAt is kept

    Returns:
        Rule ready to be stored

    Raises:
        RuleValidationError: EmptyPattern, EmptyContent or InvalidRegex
    """
    pattern = rule_input.pattern.strip()
    if not pattern:
        raise RuleValidationError(ValidationCode.EMPTY_PATTERN, "URL pattern is required")
    if not rule_input.response_content:
        raise RuleValidationError(ValidationCode.EMPTY_CONTENT, "Response content is required")

    if rule_input.match_type == MatchType.REGEX:
        _check_regex(pattern)

    now = utc_now_z()
    created_at = existing.created_at if existing is not None and existing.created_at else now

    return Rule(
        url_pattern=derive_transport_pattern(pattern, rule_input.match_type),
        original_pattern=pattern,
        match_type=transport_tag_for(rule_input.match_type),
        input_match_type=rule_input.match_type,
        response_type=rule_input.response_type.strip().lower() or "html",
        response_content=rule_input.response_content,
        resource_types=rule_input.resource_types,
        priority=rule_input.priority,
        enabled=rule_input.enabled,
        note=rule_input.note.strip(),
        created_at=created_at,
        updated_at=now,
    )


def check_rule(rule: Rule) -> Rule:
    """
    Re-check the save-time invariants on an already built Rule.

    Raises:
        RuleValidationError: EmptyPattern, EmptyContent or InvalidRegex
    """
    if not rule.url_pattern.strip():
        raise RuleValidationError(ValidationCode.EMPTY_PATTERN, "URL pattern is required")
    if not rule.response_content:
        raise RuleValidationError(ValidationCode.EMPTY_CONTENT, "Response content is required")
    if rule.match_type == TransportTag.REGEX:
        _check_regex(rule.url_pattern)
    return rule
