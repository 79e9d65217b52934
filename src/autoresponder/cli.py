"""CLI entrypoint for AutoResponder."""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from autoresponder.api.export import export_rules_file, read_import_file
from autoresponder.config.loader import resolve_config
from autoresponder.database.rule_store import SqliteRuleStore
from autoresponder.encoding.content import load_content_file
from autoresponder.engine.engine import RuleEngine
from autoresponder.errors import AutoResponderError, RuleValidationError
from autoresponder.rules.models import MatchType, Rule, RuleInput
from autoresponder.rules.templates import TEMPLATES, apply_template, list_templates
from autoresponder.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_engine(config: Dict[str, Any]) -> RuleEngine:
    """Create an engine over the SQLite store named in the config."""
    store = SqliteRuleStore(
        config["storage"]["sqlite_path"],
        default_enabled=config["engine"]["default_enabled"],
    )
    return RuleEngine(store, log_capacity=config["engine"]["log_capacity"])


def _format_size(content: str) -> str:
    size = len(content.encode("utf-8"))
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def _print_rules(rules: List[Rule]) -> None:
    if not rules:
        print("No rules configured.")
        return

    print(f"{'#':<4} {'On':<4} {'Pattern':<40} {'Match':<10} {'Type':<6} {'Size':<10} {'Prio':<5} {'Note'}")
    print("-" * 100)
    for index, rule in enumerate(rules):
        enabled = "yes" if rule.enabled else "no"
        match = rule.to_input().match_type.value
        print(
            f"{index:<4} {enabled:<4} {rule.display_pattern[:40]:<40} {match:<10} "
            f"{rule.response_type.upper():<6} {_format_size(rule.response_content):<10} "
            f"{rule.priority:<5} {rule.note or '-'}"
        )


def _rule_input_from_args(args: argparse.Namespace) -> RuleInput:
    if args.template:
        rule_input = apply_template(args.template, args.pattern, MatchType(args.match_type))
    else:
        rule_input = RuleInput(pattern=args.pattern, match_type=MatchType(args.match_type))

    updates: Dict[str, Any] = {}
    if args.content_file:
        content, guessed_type = load_content_file(args.content_file)
        updates["response_content"] = content
        if guessed_type and not args.response_type:
            updates["response_type"] = guessed_type
    elif args.content is not None:
        updates["response_content"] = args.content
    if args.response_type:
        updates["response_type"] = args.response_type
    if args.resource_type:
        updates["resource_types"] = args.resource_type
    if args.priority is not None:
        updates["priority"] = args.priority
    if args.note is not None:
        updates["note"] = args.note

    return RuleInput.model_validate({**rule_input.model_dump(), **updates})


def cmd_status(args: argparse.Namespace, engine: RuleEngine) -> None:
    """Show the global switch and rule counts."""
    status = engine.get_status()
    print(f"Enabled:        {'yes' if status.enabled else 'no'}")
    print(f"Rules:          {status.rule_count}")
    print(f"Active rules:   {status.active_rule_count}")
    print(f"Compiled rules: {status.compiled_count}")
    if status.badge:
        print(f"Badge:          {status.badge}")


def cmd_rules_list(args: argparse.Namespace, engine: RuleEngine) -> None:
    """List stored rules."""
    _print_rules(engine.get_rules())


def cmd_rules_add(args: argparse.Namespace, engine: RuleEngine) -> None:
    """Validate and append a new rule."""
    rules = engine.add_rule(_rule_input_from_args(args))
    print(f"Rule added ({len(rules)} rules).")


def cmd_rules_delete(args: argparse.Namespace, engine: RuleEngine) -> None:
    rules = engine.delete_rule(args.index)
    print(f"Rule {args.index} deleted ({len(rules)} rules).")


def cmd_rules_enable(args: argparse.Namespace, engine: RuleEngine) -> None:
    engine.set_rule_enabled(args.index, True)
    print(f"Rule {args.index} enabled.")


def cmd_rules_disable(args: argparse.Namespace, engine: RuleEngine) -> None:
    engine.set_rule_enabled(args.index, False)
    print(f"Rule {args.index} disabled.")


def cmd_rules_duplicate(args: argparse.Namespace, engine: RuleEngine) -> None:
    rules = engine.duplicate_rule(args.index)
    print(f"Rule {args.index} duplicated as rule {len(rules) - 1}.")


def cmd_rules_clear(args: argparse.Namespace, engine: RuleEngine) -> None:
    if not args.yes:
        print("Refusing to clear all rules without --yes.")
        return
    engine.clear_rules()
    print("All rules cleared.")


def cmd_rules_import(args: argparse.Namespace, engine: RuleEngine) -> None:
    """Append rules from an exported JSON file."""
    records = read_import_file(args.file)
    before = len(engine.get_rules())
    rules = engine.import_rules(records)
    print(f"Imported {len(rules) - before} rules.")


def cmd_rules_export(args: argparse.Namespace, engine: RuleEngine) -> None:
    """Write all rules to a dated JSON file."""
    records = engine.export_rules()
    if not records:
        print("No rules to export.")
        return
    target = export_rules_file(records, args.output_dir)
    print(f"Exported {len(records)} rules to {target}")


def cmd_toggle(args: argparse.Namespace, engine: RuleEngine) -> None:
    """Turn interception on or off globally."""
    engine.toggle_enabled(args.state == "on")
    print(f"AutoResponder {'enabled' if args.state == 'on' else 'disabled'}.")


def cmd_match(args: argparse.Namespace, engine: RuleEngine) -> None:
    """Show which rule would answer a request."""
    match = engine.simulate(args.url, args.type)
    if match is None:
        print("No rule matches.")
        return
    print(f"Rule {match.id} (priority {match.priority}) matches: {match.pattern}")
    print(f"Content-Type: {match.mime_type}")
    if args.show_data_url:
        print(match.data_url)


def cmd_logs(args: argparse.Namespace, engine: RuleEngine) -> None:
    """Print the event log of this process, newest first."""
    entries = engine.get_logs()[: args.limit]
    if not entries:
        print("No log entries.")
        return
    for entry in entries:
        if args.json:
            print(entry.model_dump_json())
        else:
            print(f"{entry.timestamp}  {entry.action.value:<20} {entry.subject}")


def cmd_templates(args: argparse.Namespace, engine: Optional[RuleEngine] = None) -> None:
    for name in list_templates():
        template = TEMPLATES[name]
        print(f"{name:<12} {template['response_type']:<6} {template['note']}")


def _add_index_command(rules_sub, name: str, handler, help_text: str) -> None:
    parser = rules_sub.add_parser(name, help=help_text)
    parser.add_argument("index", type=int, help="Rule index as shown by 'rules list'")
    parser.set_defaults(func=handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autoresponder", description="Local response substitution rules")
    parser.add_argument("--config", type=Path, default=None, help="Path to autoresponder.config.yaml")
    parser.add_argument("--db", default=None, help="Override storage.sqlite_path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show engine status").set_defaults(func=cmd_status)
    subparsers.add_parser("templates", help="List rule templates").set_defaults(func=cmd_templates, no_engine=True)

    toggle = subparsers.add_parser("toggle", help="Enable or disable all rules")
    toggle.add_argument("state", choices=["on", "off"])
    toggle.set_defaults(func=cmd_toggle)

    match = subparsers.add_parser("match", help="Simulate a request against the rules")
    match.add_argument("url")
    match.add_argument("--type", default="other", help="Resource type (script, image, xhr, ...)")
    match.add_argument("--show-data-url", action="store_true", help="Print the data URL served")
    match.set_defaults(func=cmd_match)

    logs = subparsers.add_parser("logs", help="Show the event log")
    logs.add_argument("--limit", type=int, default=50)
    logs.add_argument("--json", action="store_true", help="One JSON object per line")
    logs.set_defaults(func=cmd_logs)

    rules = subparsers.add_parser("rules", help="Manage rules")
    rules_sub = rules.add_subparsers(dest="rules_command", required=True)

    rules_sub.add_parser("list", help="List rules").set_defaults(func=cmd_rules_list)

    add = rules_sub.add_parser("add", help="Add a rule")
    add.add_argument("pattern", help="URL pattern as typed by the user")
    add.add_argument("--match-type", default=MatchType.CONTAINS.value, choices=[m.value for m in MatchType])
    add.add_argument("--response-type", default=None, help="html, js, css, json, png, ...")
    add.add_argument("--content", default=None, help="Response body")
    add.add_argument("--content-file", type=Path, default=None, help="Read the response body from a file")
    add.add_argument("--template", choices=sorted(TEMPLATES), default=None)
    add.add_argument("--resource-type", action="append", default=None, help="Restrict to a request kind (repeatable)")
    add.add_argument("--priority", type=int, default=None)
    add.add_argument("--note", default=None)
    add.set_defaults(func=cmd_rules_add)

    _add_index_command(rules_sub, "delete", cmd_rules_delete, "Delete a rule")
    _add_index_command(rules_sub, "enable", cmd_rules_enable, "Enable a rule")
    _add_index_command(rules_sub, "disable", cmd_rules_disable, "Disable a rule")
    _add_index_command(rules_sub, "duplicate", cmd_rules_duplicate, "Copy a rule")

    clear = rules_sub.add_parser("clear", help="Delete every rule")
    clear.add_argument("--yes", action="store_true", help="Confirm")
    clear.set_defaults(func=cmd_rules_clear)

    imp = rules_sub.add_parser("import", help="Append rules from a JSON export")
    imp.add_argument("file", type=Path)
    imp.set_defaults(func=cmd_rules_import)

    exp = rules_sub.add_parser("export", help="Export rules to JSON")
    exp.add_argument("--output-dir", type=Path, default=Path("."))
    exp.set_defaults(func=cmd_rules_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = resolve_config(args.config)
    if args.db:
        config["storage"]["sqlite_path"] = args.db
    configure_logging(config["logging"]["level"])

    if getattr(args, "no_engine", False):
        args.func(args)
        return 0

    try:
        with build_engine(config) as engine:
            args.func(args, engine)
    except RuleValidationError as e:
        print(f"Error: {e.message}")
        return 1
    except (AutoResponderError, ValueError, FileNotFoundError) as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
