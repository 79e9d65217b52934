"""Error taxonomy for rule validation, compilation and engine commands.

Three families:

1. RuleValidationError - raised when a rule is saved; the caller sees it.
2. CompileError - a stored rule that cannot be compiled; the compiler
   catches it and records an Error log entry.
3. EngineSystemError - broken snapshot, storage or substrate; propagated
   to the caller and prior engine state is kept.
"""

from enum import Enum


class AutoResponderError(Exception):
    """Base class for all AutoResponder errors."""


class ValidationCode(str, Enum):
    EMPTY_PATTERN = "EmptyPattern"
    EMPTY_CONTENT = "EmptyContent"
    INVALID_REGEX = "InvalidRegex"


class RuleValidationError(AutoResponderError, ValueError):
    """A rule was rejected at save time."""

    def __init__(self, code: ValidationCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"RuleValidationError(code={self.code.value!r}, message={self.message!r})"


class CompileError(AutoResponderError):
    """A single rule could not be turned into a compiled rule."""


class MatcherError(CompileError):
    """The transport pattern does not compile into a matcher."""


class ContentEncodingError(CompileError):
    """The response content cannot be encoded for its declared type."""


class EngineSystemError(AutoResponderError):
    """Failure outside a single rule; the triggering command is aborted."""


class SnapshotError(EngineSystemError):
    """The persisted rule snapshot is malformed."""


class PersistenceError(EngineSystemError):
    """The rule store could not read or write a snapshot."""


class SinkError(EngineSystemError):
    """The interception substrate rejected the compiled rule set."""


class RuleIndexError(AutoResponderError, IndexError):
    """A command referenced a rule index outside the current list."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Rule index {index} out of range (have {size} rules)")
        self.index = index
        self.size = size
