"""
Locale catalog served to the frontend, cached per namespace and language.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import TypeAdapter

from shared.errors import ResourceNotFound, ValidationError

from ..caching import cache_keys
from ..caching.cache_store import CacheStore
from .base import CachedResourceService

DEFAULT_LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{1,32}$")
_LOCALE = TypeAdapter(Dict[str, Any])


class LocaleService(CachedResourceService):
    """Reads ``<locales_dir>/<language>/<namespace>.json`` through the cache."""

    def __init__(self, cache: CacheStore, locales_dir: Optional[Union[str, Path]] = None):
        super().__init__(cache, "transit.locale_service")
        self.locales_dir = Path(locales_dir) if locales_dir else DEFAULT_LOCALES_DIR

    async def get_locale(self, namespace: str, language: str) -> Dict[str, Any]:
        for field, value in (("namespace", namespace), ("language", language)):
            if not _NAME_PATTERN.match(value):
                raise ValidationError(f"{field} must match pattern [A-Za-z0-9_]{{1,32}}", details={field: value})

        path = self.locales_dir / language / f"{namespace}.json"

        return await self._cached(
            cache_keys.locale(namespace, language),
            lambda: asyncio.to_thread(self._load, path),
            dict,
            _LOCALE,
        )

    def _load(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ResourceNotFound(
                f"No locale '{path.stem}' for language '{path.parent.name}'",
                details={"namespace": path.stem, "language": path.parent.name}
            )

        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except ValueError as exc:
            raise ValidationError(f"Locale file {path.name} is not valid JSON", details={"error": str(exc)})

        if not isinstance(data, dict):
            raise ValidationError(f"Locale file {path.name} must hold an object")
        return data
