"""Rule compilation into matcher + payload pairs."""

from .compiler import compile_rules
from .models import CompilationResult, CompiledRule

__all__ = ["CompilationResult", "CompiledRule", "compile_rules"]
