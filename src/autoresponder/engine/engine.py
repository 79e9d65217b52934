"""Rule engine: serialized commands over an immutable rule/compiled snapshot.

Every mutating command runs on a single worker thread, one at a time. A
command builds the new rule list, compiles it, persists it and hands the
compiled set to the interception sink; only when all of that succeeds is
the new state published. Reads never wait on the queue and always see the
last published state.
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..compiler.compiler import compile_rules
from ..compiler.models import CompiledRule
from ..database.rule_store import RuleStore
from ..errors import EngineSystemError, PersistenceError, RuleIndexError, SinkError, SnapshotError
from ..matching.evaluator import RequestDescriptor, evaluate
from ..ops.event_log import MAX_LOG_ENTRIES, EventLog, LogAction, LogEntry
from ..rules.models import Rule, RuleInput
from ..rules.validation import check_rule, validate_rule
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from .sink import InterceptionSink, NullSink

logger = get_logger(__name__)

T = TypeVar("T")
RuleLike = Union[Rule, RuleInput]

DUPLICATE_NOTE_SUFFIX = " (copy)"


@dataclass(frozen=True)
class EngineState:
    rules: Tuple[Rule, ...] = ()
    enabled: bool = True
    compiled: Tuple[CompiledRule, ...] = ()


class EngineStatus(BaseModel):
    enabled: bool
    rule_count: int
    active_rule_count: int = 0
    compiled_count: int = 0

    @property
    def badge(self) -> str:
        """Toolbar badge text: OFF, blank, or the number of active rules."""
        if not self.enabled:
            return "OFF"
        if self.active_rule_count == 0:
            return ""
        return str(self.active_rule_count)


def _parse_records(records: Sequence[Any], source: str) -> Tuple[List[Rule], List[LogEntry]]:
    """Turn stored/imported records into Rules, reporting the ones that do not parse."""
    rules: List[Rule] = []
    errors: List[LogEntry] = []
    for record in records:
        if isinstance(record, Rule):
            rules.append(record)
            continue
        pattern = record.get("urlPattern") if isinstance(record, Mapping) else None
        try:
            if not isinstance(record, Mapping):
                raise ValueError(f"Rule record must be an object, got {type(record).__name__}")
            rules.append(Rule.model_validate(dict(record)))
        except (ValidationError, ValueError) as exc:
            logger.warning(f"Dropping unreadable {source} rule {pattern!r}: {exc}")
            errors.append(LogEntry(action=LogAction.ERROR, pattern=pattern, detail=f"{source}: {exc}"))
    return rules, errors


def _is_importable(record: Any) -> bool:
    if isinstance(record, Rule):
        return bool(record.url_pattern and record.response_content)
    return isinstance(record, Mapping) and bool(record.get("urlPattern")) and bool(record.get("responseContent"))


class RuleEngine:
    """
    Owns the rule list, the global switch, the compiled set and the event log.

    Args:
        store: Persistence collaborator for the rule list and enabled flag
        sink: Interception substrate receiving every compiled set
        log_capacity: Maximum number of log entries kept

    Raises:
        EngineSystemError: If the stored snapshot cannot be loaded
    """

    def __init__(
        self,
        store: RuleStore,
        sink: Optional[InterceptionSink] = None,
        log_capacity: int = MAX_LOG_ENTRIES,
    ):
        self._store = store
        self._sink = sink if sink is not None else NullSink()
        self._log = EventLog(log_capacity)
        self._state = EngineState()
        self._queue = ThreadPoolExecutor(max_workers=1, thread_name_prefix="autoresponder-commands")
        try:
            self._run(self._load)
        except Exception:
            self._queue.shutdown(wait=False)
            raise

    # --- lifecycle ---

    def close(self) -> None:
        self._queue.shutdown(wait=True)

    def __enter__(self) -> "RuleEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- reads ---

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def compiled(self) -> Tuple[CompiledRule, ...]:
        return self._state.compiled

    def get_rules(self) -> List[Rule]:
        return list(self._state.rules)

    def get_status(self) -> EngineStatus:
        state = self._state
        return EngineStatus(
            enabled=state.enabled,
            rule_count=len(state.rules),
            active_rule_count=sum(1 for rule in state.rules if rule.enabled),
            compiled_count=len(state.compiled),
        )

    def get_logs(self) -> List[LogEntry]:
        return self._log.list()

    def export_rules(self) -> List[Dict[str, Any]]:
        return [rule.to_record() for rule in self._state.rules]

    # --- commands ---

    def save_rules(self, rules: Sequence[Rule]) -> None:
        """Replace the whole rule list."""
        new_rules = [check_rule(rule) for rule in rules]
        self._run(self._commit_rules, new_rules)

    def clear_rules(self) -> None:
        self._run(self._commit_rules, [])

    def add_rule(self, rule: RuleLike) -> List[Rule]:
        def command() -> List[Rule]:
            new_rule = self._to_rule(rule)
            return self._commit_rules([*self._state.rules, new_rule])

        return self._run(command)

    def update_rule(self, index: int, rule: RuleLike) -> List[Rule]:
        def command() -> List[Rule]:
            rules = list(self._state.rules)
            existing = rules[self._check_index(index)]
            new_rule = self._to_rule(rule, existing)
            stamps = {"updated_at": utc_now_z()}
            if new_rule.created_at is None:
                stamps["created_at"] = existing.created_at
            rules[index] = new_rule.model_copy(update=stamps)
            return self._commit_rules(rules)

        return self._run(command)

    def delete_rule(self, index: int) -> List[Rule]:
        def command() -> List[Rule]:
            rules = list(self._state.rules)
            del rules[self._check_index(index)]
            return self._commit_rules(rules)

        return self._run(command)

    def set_rule_enabled(self, index: int, enabled: bool) -> List[Rule]:
        def command() -> List[Rule]:
            rules = list(self._state.rules)
            position = self._check_index(index)
            rules[position] = rules[position].model_copy(
                update={"enabled": bool(enabled), "updated_at": utc_now_z()}
            )
            return self._commit_rules(rules)

        return self._run(command)

    def duplicate_rule(self, index: int) -> List[Rule]:
        def command() -> List[Rule]:
            rules = list(self._state.rules)
            source = rules[self._check_index(index)]
            now = utc_now_z()
            duplicate = source.model_copy(
                update={
                    "note": (source.note or "") + DUPLICATE_NOTE_SUFFIX,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            return self._commit_rules([*rules, duplicate])

        return self._run(command)

    def import_rules(self, records: Sequence[Any]) -> List[Rule]:
        """
        Append imported rules.

        Records without a pattern or content are dropped silently; records
        that do not parse as rules are dropped with an Error log entry.
        """
        if not isinstance(records, (list, tuple)):
            raise SnapshotError(f"Imported rules must be a list, got {type(records).__name__}")

        def command() -> List[Rule]:
            importable = [record for record in records if _is_importable(record)]
            parsed, errors = _parse_records(importable, "import")
            rules = self._commit_rules([*self._state.rules, *parsed])
            self._log.extend(errors)
            logger.info(f"Imported {len(parsed)} of {len(records)} rules")
            return rules

        return self._run(command)

    def toggle_enabled(self, enabled: bool) -> None:
        """Flip the global switch; when off the compiled set is empty."""
        self._run(lambda: self._apply(list(self._state.rules), bool(enabled)))

    def clear_logs(self) -> None:
        self._run(self._log.clear)

    def simulate(self, url: str, resource_type: str = "other") -> Optional[CompiledRule]:
        """
        Evaluate a request against the current compiled set.

        A hit is recorded as an Intercepted log entry.
        """
        request = RequestDescriptor(url=url, resource_type=resource_type)

        def command() -> Optional[CompiledRule]:
            match = evaluate(self._state.compiled, request)
            if match is not None:
                self._log.append(
                    LogEntry(
                        action=LogAction.INTERCEPTED,
                        url=request.url,
                        pattern=match.pattern,
                        rule_id=match.id,
                        resource_type=request.resource_type,
                    )
                )
                logger.info(f"Intercepted: {request.url}")
            return match

        return self._run(command)

    # --- internals (worker thread only) ---

    def _run(self, fn: Callable[..., T], *args: Any) -> T:
        return self._queue.submit(fn, *args).result()

    def _check_index(self, index: int) -> int:
        size = len(self._state.rules)
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < size:
            raise RuleIndexError(index, size)
        return index

    @staticmethod
    def _to_rule(rule: RuleLike, existing: Optional[Rule] = None) -> Rule:
        if isinstance(rule, RuleInput):
            return validate_rule(rule, existing)
        return check_rule(rule)

    def _commit_rules(self, rules: List[Rule]) -> List[Rule]:
        return list(self._apply(rules, self._state.enabled).rules)

    def _load(self) -> None:
        snapshot = self._store.load()
        if not isinstance(snapshot.rules, list):
            raise SnapshotError(f"Stored rule list must be a list, got {type(snapshot.rules).__name__}")
        rules, errors = _parse_records(snapshot.rules, "stored")
        result = compile_rules(rules, enabled=snapshot.enabled)
        self._install(result.compiled)
        self._state = EngineState(rules=tuple(rules), enabled=snapshot.enabled, compiled=result.compiled)
        self._log.extend(errors)
        self._log.extend(result.diagnostics)
        logger.info(f"Loaded {len(rules)} rules ({len(result.compiled)} active)")

    def _apply(self, rules: List[Rule], enabled: bool) -> EngineState:
        """Compile, persist and install a new snapshot; publish it only if all succeed."""
        previous = self._state
        result = compile_rules(rules, enabled=enabled)

        try:
            self._store.save([rule.to_record() for rule in rules], enabled)
        except EngineSystemError:
            logger.error("Failed to persist rules", exc_info=True)
            raise
        except Exception as exc:
            logger.error("Failed to persist rules", exc_info=True)
            raise PersistenceError(f"Failed to persist rules: {exc}") from exc

        try:
            self._install(result.compiled)
        except SinkError:
            self._restore_store(previous)
            raise

        state = EngineState(rules=tuple(rules), enabled=enabled, compiled=result.compiled)
        self._state = state
        self._log.extend(result.diagnostics)
        return state

    def _install(self, compiled: Tuple[CompiledRule, ...]) -> None:
        try:
            self._sink.replace_rules(compiled)
        except Exception as exc:
            logger.error("Error updating interception rules", exc_info=True)
            raise SinkError(f"Interception substrate rejected the rule set: {exc}") from exc

    def _restore_store(self, previous: EngineState) -> None:
        try:
            self._store.save([rule.to_record() for rule in previous.rules], previous.enabled)
        except Exception:
            logger.error("Failed to restore previous rule snapshot", exc_info=True)
