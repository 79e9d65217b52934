"""Pytest configuration and fixtures."""

import pytest

from autoresponder.database.rule_store import MemoryRuleStore, SqliteRuleStore
from autoresponder.database.sqlite_client import dispose_engines
from autoresponder.engine.engine import RuleEngine
from autoresponder.engine.sink import NullSink
from autoresponder.matching.matcher import clear_matcher_cache
from autoresponder.rules.models import MatchType, RuleInput
from autoresponder.rules.validation import validate_rule


@pytest.fixture(autouse=True)
def _fresh_matcher_cache():
    clear_matcher_cache()
    yield
    clear_matcher_cache()


@pytest.fixture
def make_rule():
    """Build a validated Rule from a few keyword arguments."""

    def _make(pattern="api/users", match_type=MatchType.CONTAINS, content='{"a":1}', response_type="json", **kwargs):
        return validate_rule(
            RuleInput(
                pattern=pattern,
                match_type=match_type,
                response_type=response_type,
                response_content=content,
                **kwargs,
            )
        )

    return _make


@pytest.fixture
def memory_store():
    return MemoryRuleStore()


@pytest.fixture
def sink():
    return NullSink()


@pytest.fixture
def engine(memory_store, sink):
    """Engine over an empty in-memory store."""
    eng = RuleEngine(memory_store, sink=sink)
    try:
        yield eng
    finally:
        eng.close()


@pytest.fixture
def sqlite_store(tmp_path):
    """Store backed by a temporary SQLite file."""
    yield SqliteRuleStore(str(tmp_path / "rules.db"))
    dispose_engines()
