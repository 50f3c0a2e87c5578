"""
Formatting layer: literal interpolation, template grammar, compiled-template
cache and CLDR locale data.
"""

from .formatter import CompiledTemplate, TemplateFormatter
from .grammar import is_grammar_message, parse_template
from .interpolate import interpolate
from .lru import DEFAULT_CACHE_SIZE, LRUCache

__all__ = [
    "CompiledTemplate",
    "TemplateFormatter",
    "is_grammar_message",
    "parse_template",
    "interpolate",
    "DEFAULT_CACHE_SIZE",
    "LRUCache",
]
