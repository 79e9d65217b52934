"""Pydantic models for substitution rules."""

from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..utils.time import epoch_ms_to_utc_z


class MatchType(str, Enum):
    """How the user-entered pattern is interpreted."""

    EXACT = "exact"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    CONTAINS = "contains"
    WILDCARD = "wildcard"
    REGEX = "regex"


class TransportTag(str, Enum):
    """Collapsed match type stored on persisted rules."""

    REGEX = "regex"
    URL_FILTER = "urlFilter"


class ResponseType(str, Enum):
    HTML = "html"
    JS = "js"
    CSS = "css"
    JSON = "json"
    XML = "xml"
    TEXT = "text"
    SVG = "svg"
    PNG = "png"
    JPG = "jpg"
    GIF = "gif"
    WEBP = "webp"
    ICO = "ico"
    WOFF = "woff"
    WOFF2 = "woff2"
    TTF = "ttf"
    EOT = "eot"


class ResourceType(str, Enum):
    """Request kinds a rule can be restricted to."""

    MAIN_FRAME = "main_frame"
    SUB_FRAME = "sub_frame"
    STYLESHEET = "stylesheet"
    SCRIPT = "script"
    IMAGE = "image"
    FONT = "font"
    OBJECT = "object"
    XHR = "xhr"
    PING = "ping"
    MEDIA = "media"
    WEBSOCKET = "websocket"
    WEBTRANSPORT = "webtransport"
    WEBBUNDLE = "webbundle"
    OTHER = "other"


ALL_RESOURCE_TYPES = frozenset(rt.value for rt in ResourceType)

# Chrome's name for XHR/fetch requests
_RESOURCE_ALIASES = {"xmlhttprequest": ResourceType.XHR.value}


def normalize_resource_type(value: str) -> str:
    """Lower-case a resource kind and resolve known aliases."""
    lowered = str(value).strip().lower()
    return _RESOURCE_ALIASES.get(lowered, lowered)


def _normalize_resource_types(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError(f"Resource types must be a list, got {type(value).__name__}")
    normalized: List[str] = []
    for item in value:
        if isinstance(item, Enum):
            item = item.value
        kind = normalize_resource_type(item)
        if kind not in ALL_RESOURCE_TYPES:
            raise ValueError(f"Unknown resource type: {item}")
        if kind not in normalized:
            normalized.append(kind)
    return normalized or None


def _coerce_priority(value: Any) -> Any:
    # Mirrors `parseInt(value) || 1` from the rule editor
    if value in (None, "", 0):
        return 1
    return value


ResourceTypeList = Annotated[Optional[List[str]], BeforeValidator(_normalize_resource_types)]
Priority = Annotated[int, BeforeValidator(_coerce_priority)]


class RuleInput(BaseModel):
    """The editable form of a rule, before validation."""

    pattern: str = Field(default="", description="Pattern exactly as the user typed it")
    match_type: MatchType = Field(default=MatchType.CONTAINS, description="How the pattern is interpreted")
    response_type: str = Field(default=ResponseType.HTML.value, description="Content kind of the synthetic response")
    response_content: str = Field(default="", description="Response body; base64 for binary kinds")
    resource_types: ResourceTypeList = Field(default=None, description="Request kinds; empty means all")
    priority: Priority = Field(default=1, ge=1, description="Higher wins on conflict")
    note: str = Field(default="", description="Free-text annotation")
    enabled: bool = Field(default=True, description="Whether the rule takes part in compilation")


class Rule(BaseModel):
    """A validated substitution rule, as persisted and exported."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url_pattern: str = Field(default="", description="Transport pattern after match-type wrapping")
    original_pattern: Optional[str] = Field(default=None, description="User-entered pattern, for editing")
    match_type: TransportTag = Field(default=TransportTag.URL_FILTER, description="Collapsed match type")
    input_match_type: Optional[MatchType] = Field(default=None, description="Richer match type chosen in the editor")
    response_type: str = Field(default=ResponseType.HTML.value)
    response_content: str = Field(default="")
    resource_types: ResourceTypeList = Field(default=None)
    priority: Priority = Field(default=1, ge=1)
    enabled: bool = Field(default=True)
    note: str = Field(default="")
    created_at: Optional[str] = Field(default=None)
    updated_at: Optional[str] = Field(default=None)

    @field_validator("note", mode="before")
    @classmethod
    def _none_note(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("response_type", mode="before")
    @classmethod
    def _default_response_type(cls, value: Any) -> Any:
        return value or ResponseType.HTML.value

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _epoch_timestamps(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("Timestamp must be a string or epoch milliseconds")
        if isinstance(value, (int, float)):
            return epoch_ms_to_utc_z(value)
        return value

    @property
    def display_pattern(self) -> str:
        return self.original_pattern or self.url_pattern

    def is_compilable(self) -> bool:
        """True when the rule carries both a pattern and content."""
        return bool(self.url_pattern) and bool(self.response_content)

    def to_input(self) -> RuleInput:
        """
        Re-derive the editable form of this rule.

        Rules saved before the richer match type was recorded fall back to
        `regex` for regex rules and `contains` for everything else.
        """
        if self.input_match_type is not None:
            match_type = self.input_match_type
        elif self.match_type == TransportTag.REGEX:
            match_type = MatchType.REGEX
        else:
            match_type = MatchType.CONTAINS
        return RuleInput(
            pattern=self.display_pattern,
            match_type=match_type,
            response_type=self.response_type,
            response_content=self.response_content,
            resource_types=self.resource_types,
            priority=self.priority,
            note=self.note,
            enabled=self.enabled,
        )

    def to_record(self) -> dict:
        """Serialize as a camelCase record for storage and export."""
        return self.model_dump(mode="json", by_alias=True)
