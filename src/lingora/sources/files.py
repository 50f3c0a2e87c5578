"""
Directory-backed message source.

Reads one file per locale from a directory: ``<dir>/<locale>.json``, or
``.yaml`` / ``.yml``. A missing file is ``LocaleUnavailable``; a file that
cannot be parsed, or does not hold a mapping, is ``SourceError``.

    messages/
      en.json
      tr.yaml
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import structlog
import yaml

from ..core.keypath import MessageTree
from ..errors import LocaleUnavailable, SourceError
from .base import MessageSource

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = (".json", ".yaml", ".yml")


class FileSource(MessageSource):
    """Loads ``{locale}.json|.yaml|.yml`` files from a directory."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()
        self.log = logger.bind(component="file_source", directory=str(self.directory))

    async def load(self, locale: str) -> MessageTree:
        path = self._find(locale)
        if path is None:
            raise LocaleUnavailable(locale)
        data = await asyncio.to_thread(self._read, path, locale)
        self.log.debug("file_source.loaded", locale=locale, file=path.name)
        return data

    def has_locale(self, locale: str) -> bool:
        return self._find(locale) is not None

    def available_locales(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        locales = {
            f.stem for f in self.directory.iterdir()
            if f.is_file() and f.suffix in SUPPORTED_EXTENSIONS
        }
        return sorted(locales)

    def _find(self, locale: str) -> Path | None:
        # Locale codes are used as file stems; reject anything path-like
        if not locale or "/" in locale or "\\" in locale or locale.startswith("."):
            return None
        for ext in SUPPORTED_EXTENSIONS:
            candidate = self.directory / f"{locale}{ext}"
            if candidate.is_file():
                return candidate
        return None

    def _read(self, path: Path, locale: str) -> MessageTree:
        try:
            text = path.read_text(encoding="utf-8")
            data: Any = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise SourceError(f"Failed to read {path}: {e}", locale=locale) from e

        if not isinstance(data, dict):
            raise SourceError(f"{path} does not contain a mapping", locale=locale)
        return data
