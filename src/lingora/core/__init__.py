"""
Core resolution: fallback chains, key-path lookup and the message store.
"""

from .fallback import build_fallback_chain, parse_locale
from .keypath import (
    MessageTree,
    find_message,
    flatten_messages,
    get_by_path,
    has_path,
    merge_messages,
)
from .store import MessageStore

__all__ = [
    "build_fallback_chain",
    "parse_locale",
    "MessageTree",
    "find_message",
    "flatten_messages",
    "get_by_path",
    "has_path",
    "merge_messages",
    "MessageStore",
]
