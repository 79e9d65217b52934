"""Compile an ordered rule list into a CompiledRule set."""

from collections.abc import Mapping
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from ..encoding.content import encode
from ..errors import CompileError, SnapshotError
from ..matching.matcher import compile_matcher
from ..ops.event_log import LogAction, LogEntry
from ..rules.models import ALL_RESOURCE_TYPES, Rule
from ..utils.logging import get_logger
from .models import CompilationResult, CompiledRule

logger = get_logger(__name__)


def _raw_field(raw: Any, name: str, alias: str, default: Any = None) -> Any:
    if isinstance(raw, Rule):
        return getattr(raw, name)
    return raw.get(alias, raw.get(name, default))


def _coerce_rule(raw: Any) -> Rule:
    """Accept Rule instances and stored camelCase records."""
    if isinstance(raw, Rule):
        return raw
    return Rule.model_validate(dict(raw))


def _error_entry(pattern: Optional[str], detail: str) -> LogEntry:
    return LogEntry(action=LogAction.ERROR, pattern=pattern, detail=detail)


def _compile_one(rule: Rule, rule_id: int) -> CompiledRule:
    matcher = compile_matcher(rule.url_pattern, rule.match_type)
    mime_type, payload = encode(rule.response_content, rule.response_type or "html")
    resource_types = frozenset(rule.resource_types) if rule.resource_types else ALL_RESOURCE_TYPES
    return CompiledRule(
        id=rule_id,
        priority=rule.priority,
        matcher=matcher,
        resource_types=resource_types,
        mime_type=mime_type,
        encoded_payload=payload,
        pattern=rule.url_pattern,
        response_type=rule.response_type,
    )


def compile_rules(rules: Sequence[Any], *, enabled: bool = True) -> CompilationResult:
    """
    Compile the current rule list.

    Disabled rules and rules without pattern or content are skipped. Each
    remaining rule is compiled on its own: a failure skips just that rule
    and records an Error entry. Surviving rules get ids 1..N in list order
    and a Registered entry each.

    Args:
        rules: Rule objects or stored rule records, in list order
        enabled: Global switch; when False nothing is compiled

    Returns:
        CompilationResult with the compiled rules and diagnostics

    Raises:
        SnapshotError: If `rules` is not a list of records
    """
    if not isinstance(rules, (list, tuple)):
        raise SnapshotError(f"Rule snapshot must be a list, got {type(rules).__name__}")

    if not enabled:
        logger.info("Disabled - all rules removed")
        return CompilationResult()

    compiled: List[CompiledRule] = []
    diagnostics: List[LogEntry] = []

    for raw in rules:
        if not isinstance(raw, (Rule, Mapping)):
            detail = f"Rule record must be an object, got {type(raw).__name__}"
            logger.error(detail)
            diagnostics.append(_error_entry(None, detail))
            continue
        pattern = _raw_field(raw, "url_pattern", "urlPattern")
        if not pattern or not _raw_field(raw, "response_content", "responseContent"):
            continue

        try:
            rule = _coerce_rule(raw)
            # stored flags like "false" only become booleans after coercion
            if not rule.enabled or not rule.is_compilable():
                continue
            compiled_rule = _compile_one(rule, len(compiled) + 1)
        except (CompileError, ValidationError, ValueError, TypeError) as exc:
            logger.error(f'Error creating rule for pattern "{pattern}": {exc}')
            diagnostics.append(_error_entry(str(pattern), str(exc)))
            continue

        compiled.append(compiled_rule)
        diagnostics.append(
            LogEntry(
                action=LogAction.REGISTERED,
                pattern=rule.url_pattern,
                rule_id=compiled_rule.id,
                match_type=rule.match_type.value,
                response_type=rule.response_type,
            )
        )

    logger.info(f"{len(compiled)} rules activated")
    return CompilationResult(compiled=tuple(compiled), diagnostics=diagnostics)
