"""AutoResponder: local response substitution rules for outgoing requests."""

__version__ = "0.3.0"
