"""Unit tests for the match evaluator."""

from autoresponder.compiler.compiler import compile_rules
from autoresponder.matching.evaluator import RequestDescriptor, evaluate


def _request(url, resource_type="other"):
    return RequestDescriptor(url=url, resource_type=resource_type)


def test_no_match_returns_none(make_rule):
    compiled = compile_rules([make_rule("api/users")]).compiled
    assert evaluate(compiled, _request("https://x.com/other")) is None


def test_highest_priority_wins(make_rule):
    compiled = compile_rules([make_rule("api", priority=1), make_rule("api/users", priority=3)]).compiled
    match = evaluate(compiled, _request("https://x.com/api/users/1"))
    assert match.id == 2


def test_equal_priority_lowest_id_wins(make_rule):
    """With tied priority the rule compiled first is chosen."""
    compiled = compile_rules([make_rule("api", content="first"), make_rule("users", content="second")]).compiled
    match = evaluate(compiled, _request("https://x.com/api/users"))
    assert match.id == 1


def test_resource_type_filter(make_rule):
    compiled = compile_rules([make_rule("app", resource_types=["script"])]).compiled

    assert evaluate(compiled, _request("https://x.com/app.js", "script")) is not None
    assert evaluate(compiled, _request("https://x.com/app.js", "image")) is None


def test_filtered_rule_yields_to_lower_priority(make_rule):
    """A higher-priority rule for another kind does not shadow a matching one."""
    compiled = compile_rules(
        [
            make_rule("app", priority=1),
            make_rule("app", priority=9, resource_types=["image"]),
        ]
    ).compiled
    assert evaluate(compiled, _request("https://x.com/app.js", "script")).id == 1
    assert evaluate(compiled, _request("https://x.com/app.png", "image")).id == 2


def test_request_resource_type_alias():
    assert _request("https://x.com", "XMLHttpRequest").resource_type == "xhr"


def test_empty_compiled_set():
    assert evaluate((), _request("https://x.com")) is None
