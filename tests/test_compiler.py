"""Unit tests for the rule compiler."""

import pytest

from autoresponder.compiler.compiler import compile_rules
from autoresponder.errors import SnapshotError
from autoresponder.ops.event_log import LogAction
from autoresponder.rules.models import ALL_RESOURCE_TYPES, MatchType, Rule, TransportTag


def test_single_contains_rule(make_rule):
    """A lone contains rule compiles to one matcher-ready rule."""
    result = compile_rules([make_rule()])

    assert len(result.compiled) == 1
    compiled = result.compiled[0]
    assert compiled.id == 1
    assert compiled.priority == 1
    assert compiled.mime_type == "application/json;charset=utf-8"
    assert compiled.matcher.test("https://x.com/api/users/1")
    assert not compiled.matcher.test("https://x.com/other")
    assert [d.action for d in result.diagnostics] == [LogAction.REGISTERED]


def test_ids_are_sequential_in_list_order(make_rule):
    """Ids are 1..N over surviving rules, in original order."""
    rules = [
        make_rule("a"),
        make_rule("b", enabled=False),
        make_rule("c", priority=5),
        make_rule("d"),
    ]
    result = compile_rules(rules)

    assert [c.id for c in result.compiled] == [1, 2, 3]
    assert [c.pattern for c in result.compiled] == ["*a*", "*c*", "*d*"]


def test_disabled_and_empty_rules_skipped_silently(make_rule):
    rules = [
        make_rule("a", enabled=False),
        Rule(url_pattern="", response_content="x"),
        Rule(url_pattern="*b*", response_content=""),
    ]
    result = compile_rules(rules)

    assert result.compiled == ()
    assert result.diagnostics == []


def test_bad_rule_does_not_block_others(make_rule):
    """A stored rule with a broken regex is skipped with an Error entry."""
    rules = [
        make_rule("first"),
        Rule(url_pattern="^https://bad\\(", match_type=TransportTag.REGEX, response_content="x"),
        make_rule("third"),
    ]
    result = compile_rules(rules)

    assert [c.id for c in result.compiled] == [1, 2]
    assert [c.pattern for c in result.compiled] == ["*first*", "*third*"]
    errors = result.errors
    assert len(errors) == 1
    assert errors[0].pattern == "^https://bad\\("
    assert errors[0].detail
    assert [d.action for d in result.diagnostics] == [LogAction.REGISTERED, LogAction.ERROR, LogAction.REGISTERED]


def test_corrupted_records_are_recovered_per_rule():
    """Raw snapshot records are coerced one by one."""
    records = [
        {"urlPattern": "*ok*", "responseContent": "fine", "matchType": "urlFilter", "enabled": True},
        {"urlPattern": "*bad*", "responseContent": "x", "priority": "high"},
        "not a record",
        {"urlPattern": "*also-ok*", "responseContent": "x"},
    ]
    result = compile_rules(records)

    assert [c.pattern for c in result.compiled] == ["*ok*", "*also-ok*"]
    assert [c.id for c in result.compiled] == [1, 2]
    assert len(result.errors) == 2


def test_record_without_enabled_flag_defaults_to_enabled():
    result = compile_rules([{"urlPattern": "a", "responseContent": "b"}])
    assert len(result.compiled) == 1


def test_string_disabled_flags_in_records_are_skipped():
    """Stored flags such as "false" or "no" disable the rule like False does."""
    records = [
        {"urlPattern": "*a*", "responseContent": "x", "enabled": "false"},
        {"urlPattern": "*b*", "responseContent": "x", "enabled": "no"},
        {"urlPattern": "*c*", "responseContent": "x", "enabled": "true"},
    ]
    result = compile_rules(records)

    assert [c.pattern for c in result.compiled] == ["*c*"]
    assert [c.id for c in result.compiled] == [1]
    assert result.errors == []
    assert [d.action for d in result.diagnostics] == [LogAction.REGISTERED]


def test_global_disable_yields_nothing(make_rule):
    rules = [make_rule("a"), make_rule("b"), make_rule("c")]
    result = compile_rules(rules, enabled=False)

    assert result.compiled == ()
    assert not [d for d in result.diagnostics if d.action == LogAction.REGISTERED]


def test_snapshot_must_be_a_list():
    with pytest.raises(SnapshotError):
        compile_rules({"urlPattern": "a"})
    with pytest.raises(SnapshotError):
        compile_rules(None)


def test_resource_types_default_to_all(make_rule):
    result = compile_rules([make_rule("a"), make_rule("b", resource_types=["script", "xmlhttprequest"])])

    assert result.compiled[0].resource_types == ALL_RESOURCE_TYPES
    assert result.compiled[1].resource_types == frozenset({"script", "xhr"})


def test_output_never_exceeds_eligible_rules(make_rule):
    rules = [make_rule(str(i), enabled=i % 2 == 0) for i in range(10)]
    rules.append(Rule(url_pattern="", response_content="x"))
    eligible = [r for r in rules if r.enabled and r.url_pattern and r.response_content]

    result = compile_rules(rules)
    assert len(result.compiled) <= len(eligible)
    assert [c.id for c in result.compiled] == list(range(1, len(result.compiled) + 1))


def test_regex_rule_compiles_with_data_url(make_rule):
    rule = make_rule(r"\.js$", match_type=MatchType.REGEX, content="//x", response_type="js")
    compiled = compile_rules([rule]).compiled[0]

    assert compiled.matcher.test("https://x.com/app.js")
    assert compiled.data_url.startswith("data:application/javascript;charset=utf-8;base64,")
