"""URL matching: pattern compilation and request evaluation."""

from .evaluator import RequestDescriptor, evaluate
from .matcher import Matcher, compile_matcher, wildcard_to_regex

__all__ = ["Matcher", "RequestDescriptor", "compile_matcher", "evaluate", "wildcard_to_regex"]
