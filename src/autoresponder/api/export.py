"""Rule list import/export to JSON files."""

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..utils.time import today_utc

EXPORT_FILENAME_TEMPLATE = "autoresponder-rules-{date}.json"


def export_filename(date: str | None = None) -> str:
    return EXPORT_FILENAME_TEMPLATE.format(date=date or today_utc())


def dumps_rules(records: Sequence[Dict[str, Any]]) -> str:
    return json.dumps(list(records), indent=2, ensure_ascii=False)


def export_rules_file(records: Sequence[Dict[str, Any]], out_dir: Path | str = Path(".")) -> Path:
    """
    Write rule records to a dated JSON file.

    Args:
        records: Rule records as returned by `RuleEngine.export_rules()`
        out_dir: Directory for the export file (created if missing)

    Returns:
        Path of the written file

    Raises:
        ValueError: If there is nothing to export
    """
    if not records:
        raise ValueError("No rules to export")
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / export_filename()
    target.write_text(dumps_rules(records), encoding="utf-8")
    return target


def filter_importable(records: Sequence[Any]) -> List[Dict[str, Any]]:
    """Keep only records that carry both a urlPattern and responseContent."""
    return [
        record
        for record in records
        if isinstance(record, dict) and record.get("urlPattern") and record.get("responseContent")
    ]


def read_import_file(path: Path | str) -> List[Dict[str, Any]]:
    """
    Read an exported rule file and return its importable records.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON array
    """
    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Import file {file_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError("Import file must contain a JSON array of rules")
    return filter_importable(data)
