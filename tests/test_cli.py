"""CLI behavior tests."""

import json

import pytest

from autoresponder import cli


@pytest.fixture
def run(tmp_path, capsys):
    """Run the CLI against a temporary database and return (exit code, stdout)."""
    db_path = str(tmp_path / "cli.db")
    config_path = str(tmp_path / "missing.yaml")

    def _run(*argv):
        code = cli.main(["--config", config_path, "--db", db_path, *argv])
        return code, capsys.readouterr().out

    return _run


def test_add_list_and_match(run):
    code, out = run("rules", "add", "api/users", "--response-type", "json", "--content", '{"a":1}')
    assert code == 0
    assert "Rule added (1 rules)." in out

    code, out = run("rules", "list")
    assert "api/users" in out
    assert "contains" in out

    code, out = run("match", "https://x.com/api/users/1", "--type", "xhr", "--show-data-url")
    assert "Rule 1 (priority 1) matches: *api/users*" in out
    assert "data:application/json;charset=utf-8;base64," in out

    code, out = run("match", "https://x.com/other")
    assert "No rule matches." in out


def test_validation_error_exit_code(run):
    code, out = run("rules", "add", "^bad(", "--match-type", "regex", "--content", "x")
    assert code == 1
    assert out.startswith("Error: Invalid regular expression")

    code, out = run("rules", "add", "api")
    assert code == 1
    assert "Response content is required" in out


def test_add_from_template_and_file(run, tmp_path):
    code, _ = run("rules", "add", "app", "--template", "empty-js")
    assert code == 0

    css = tmp_path / "site.css"
    css.write_text("body{}", encoding="utf-8")
    code, _ = run("rules", "add", "site.css", "--match-type", "suffix", "--content-file", str(css))
    assert code == 0

    code, out = run("rules", "list")
    assert "JS" in out
    assert "CSS" in out


def test_toggle_and_status(run):
    run("rules", "add", "a", "--content", "b")
    code, out = run("toggle", "off")
    assert "disabled" in out

    code, out = run("status")
    assert "Enabled:        no" in out
    assert "Compiled rules: 0" in out
    assert "Badge:          OFF" in out


def test_enable_disable_duplicate_delete(run):
    run("rules", "add", "a", "--content", "b")
    assert "Rule 0 duplicated as rule 1." in run("rules", "duplicate", "0")[1]
    assert "Rule 1 disabled." in run("rules", "disable", "1")[1]
    assert "Active rules:   1" in run("status")[1]
    assert "Rule 1 enabled." in run("rules", "enable", "1")[1]
    assert "(1 rules)" in run("rules", "delete", "0")[1]

    code, out = run("rules", "delete", "9")
    assert code == 1
    assert "out of range" in out


def test_import_export_roundtrip(run, tmp_path):
    source = tmp_path / "in.json"
    source.write_text(
        json.dumps(
            [
                {"urlPattern": "*a*", "responseContent": "b", "enabled": True},
                {"urlPattern": "", "responseContent": "c"},
            ]
        ),
        encoding="utf-8",
    )
    code, out = run("rules", "import", str(source))
    assert code == 0
    assert "Imported 1 rules." in out

    out_dir = tmp_path / "exports"
    code, out = run("rules", "export", "--output-dir", str(out_dir))
    assert code == 0
    exported = list(out_dir.glob("autoresponder-rules-*.json"))
    assert len(exported) == 1
    assert json.loads(exported[0].read_text(encoding="utf-8"))[0]["urlPattern"] == "*a*"


def test_clear_requires_confirmation(run):
    run("rules", "add", "a", "--content", "b")
    assert "Refusing" in run("rules", "clear")[1]
    assert "All rules cleared." in run("rules", "clear", "--yes")[1]
    assert "No rules configured." in run("rules", "list")[1]


def test_logs_show_registrations(run):
    run("rules", "add", "a", "--content", "b")
    code, out = run("logs")
    assert "RULE_REGISTERED" in out

    code, out = run("logs", "--json")
    assert json.loads(out.splitlines()[0])["action"] == "RULE_REGISTERED"


def test_templates_listing(run):
    code, out = run("templates")
    assert code == 0
    assert "json-mock" in out
