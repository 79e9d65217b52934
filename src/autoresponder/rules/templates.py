"""Starter responses for common substitution rules."""

import json
from typing import Dict, List

from .models import MatchType, RuleInput

TEMPLATES: Dict[str, Dict[str, str]] = {
    "empty-html": {
        "response_type": "html",
        "response_content": "<!DOCTYPE html>\n<html>\n<head><title>Empty</title></head>\n<body></body>\n</html>",
        "note": "Blank HTML page",
    },
    "empty-js": {
        "response_type": "js",
        "response_content": "// Empty JavaScript file\n",
        "note": "Blank JS file",
    },
    "empty-css": {
        "response_type": "css",
        "response_content": "/* Empty CSS file */\n",
        "note": "Blank CSS file",
    },
    "json-mock": {
        "response_type": "json",
        "response_content": json.dumps(
            {
                "success": True,
                "code": 200,
                "message": "Mock response",
                "data": {"id": 1, "name": "Test", "items": []},
            },
            indent=2,
        ),
        "note": "JSON mock data",
    },
    "404": {
        "response_type": "html",
        "response_content": (
            "<!DOCTYPE html>\n<html>\n<head><title>404 Not Found</title></head>\n<body>\n"
            "<h1>404 Not Found</h1>\n<p>The requested resource was not found.</p>\n</body>\n</html>"
        ),
        "note": "404 page",
    },
    "cors-json": {
        "response_type": "json",
        "response_content": json.dumps({"success": True, "data": {}}, indent=2),
        "note": "CORS JSON response",
    },
}


def list_templates() -> List[str]:
    return sorted(TEMPLATES)


def apply_template(name: str, pattern: str = "", match_type: MatchType = MatchType.CONTAINS) -> RuleInput:
    """
    Build a rule form pre-filled from a named template.

    Raises:
        KeyError: If no template has that name
    """
    if name not in TEMPLATES:
        raise KeyError(f"Unknown template: {name}")
    return RuleInput(pattern=pattern, match_type=match_type, priority=1, enabled=True, **TEMPLATES[name])
