"""
lingora - message resolution and formatting runtime.

Resolves translation keys through locale fallback chains, renders
plural/select templates with CLDR rules and loads messages from static,
file or remote sources with an optional offline cache.
"""

__version__ = "0.3.0"

from .config import AppConfig, load_config
from .core import (
    MessageStore,
    build_fallback_chain,
    flatten_messages,
    get_by_path,
    has_path,
)
from .errors import (
    ConfigurationError,
    LingoraError,
    LocaleUnavailable,
    NamespaceUnavailable,
    SourceError,
    TemplateFormatError,
)
from .factory import build_runtime
from .formatting import LRUCache, TemplateFormatter, interpolate, is_grammar_message
from .hooks import RuntimeHooks
from .runtime import Runtime
from .sources import (
    CachedSource,
    FileSource,
    FileStorage,
    MemoryStorage,
    MessageSource,
    NamespaceSource,
    RemoteNamespaceSource,
    RemoteSource,
    StaticNamespaceSource,
    StaticSource,
)

__all__ = [
    "__version__",
    "AppConfig",
    "load_config",
    "build_runtime",
    "Runtime",
    "RuntimeHooks",
    "MessageStore",
    "build_fallback_chain",
    "flatten_messages",
    "get_by_path",
    "has_path",
    "LRUCache",
    "TemplateFormatter",
    "interpolate",
    "is_grammar_message",
    "MessageSource",
    "NamespaceSource",
    "StaticSource",
    "StaticNamespaceSource",
    "FileSource",
    "RemoteSource",
    "RemoteNamespaceSource",
    "CachedSource",
    "FileStorage",
    "MemoryStorage",
    "LingoraError",
    "LocaleUnavailable",
    "NamespaceUnavailable",
    "SourceError",
    "TemplateFormatError",
    "ConfigurationError",
]
