"""Storage collaborators holding the raw rule list and the enabled flag."""

import copy
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from ..errors import PersistenceError, SnapshotError
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from .schema import Setting
from .sqlite_client import session_context

logger = get_logger(__name__)

RULES_KEY = "autoresponder_rules"
ENABLED_KEY = "autoresponder_enabled"


@dataclass(frozen=True)
class StoredSnapshot:
    rules: Any  # expected to be a list of rule records; checked by the compiler
    enabled: bool


class RuleStore(Protocol):
    def load(self) -> StoredSnapshot:
        ...

    def save(self, rules: List[Dict[str, Any]], enabled: bool) -> None:
        ...


class MemoryRuleStore:
    """Process-local store, mainly for tests and dry runs."""

    def __init__(self, rules: Optional[List[Dict[str, Any]]] = None, enabled: bool = True):
        self._rules: Any = copy.deepcopy(rules) if rules is not None else []
        self._enabled = enabled
        self.save_count = 0

    def load(self) -> StoredSnapshot:
        return StoredSnapshot(rules=copy.deepcopy(self._rules), enabled=self._enabled)

    def save(self, rules: List[Dict[str, Any]], enabled: bool) -> None:
        self._rules = copy.deepcopy(rules)
        self._enabled = enabled
        self.save_count += 1


class SqliteRuleStore:
    """SQLite-backed store; both values are JSON documents in `settings`."""

    def __init__(self, sqlite_path: str, default_enabled: bool = True):
        self.sqlite_path = sqlite_path
        self.default_enabled = default_enabled

    def load(self) -> StoredSnapshot:
        """
        Read the stored rule list and enabled flag.

        Missing keys fall back to an empty list and the configured default.

        Raises:
            SnapshotError: If a stored value is not valid JSON
            PersistenceError: If the database cannot be read
        """
        try:
            with session_context(self.sqlite_path) as session:
                rows = {
                    row.key: row.value
                    for row in session.query(Setting).filter(Setting.key.in_([RULES_KEY, ENABLED_KEY]))
                }
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to read rule store {self.sqlite_path}: {exc}") from exc

        try:
            rules = json.loads(rows[RULES_KEY]) if RULES_KEY in rows else []
            enabled = json.loads(rows[ENABLED_KEY]) if ENABLED_KEY in rows else self.default_enabled
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"Stored rule snapshot is not valid JSON: {exc}") from exc

        return StoredSnapshot(rules=rules, enabled=enabled is not False)

    def save(self, rules: List[Dict[str, Any]], enabled: bool) -> None:
        """
        Replace the stored rule list and enabled flag in one transaction.

        Raises:
            PersistenceError: If the write fails; nothing is committed
        """
        now = utc_now_z()
        values = {
            RULES_KEY: json.dumps(rules, ensure_ascii=False),
            ENABLED_KEY: json.dumps(bool(enabled)),
        }
        try:
            with session_context(self.sqlite_path) as session:
                for key, value in values.items():
                    session.merge(Setting(key=key, value=value, updated_at=now))
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to write rule store {self.sqlite_path}: {exc}") from exc
        logger.debug(f"Saved {len(rules)} rules to {self.sqlite_path}")
