"""File-backed region data and locale bundles.

Region data lives in one or more data directories::

    world.json              top-level regions
    world/us.json           subregions of US
    world/us/ca.json        subregions of US/CA

Each file holds a JSON list of ``{"code": ..., "type": ..., "name": ...}``
objects. Later data paths are overlaid on earlier ones by code, and an entry
with ``"_enabled": false`` removes that region.

Display names come from flat locale files (``<locale>.json``) using keys like
``world.us.ca.name``; missing keys fall back to the default locale, then to
the entry's ``name``, then to the code.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Iterable, Optional, Sequence

from .regions import Region, RegionCollection, World, WORLD_CODE

logger = logging.getLogger("region_select.data")

PROMPT_KEY = "region_select.prompt"
DEFAULT_PROMPT = "Please select"


class RegionSourceError(RuntimeError):
    pass


def _as_paths(paths: Iterable[str] | str | None) -> list[str]:
    if not paths:
        return []
    if isinstance(paths, str):
        return [p for p in paths.split(os.pathsep) if p]
    return [str(p) for p in paths if p]


def _read_json(path: str):
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise RegionSourceError(f"Invalid JSON in {path}: {exc}") from exc


class LocaleBundle:
    """Translations for region names and helper labels."""

    def __init__(
        self,
        locale_paths: Iterable[str] | str | None = None,
        locale: str = "en",
        default_locale: str = "en",
    ) -> None:
        self.locale_paths = _as_paths(locale_paths)
        self.locale = locale or default_locale
        self.default_locale = default_locale
        self._tables: dict[str, dict[str, str]] = {}

    def _table(self, locale: str) -> dict[str, str]:
        if locale not in self._tables:
            merged: dict[str, str] = {}
            for base in self.locale_paths:
                path = os.path.join(base, f"{locale}.json")
                if not os.path.isfile(path):
                    continue
                data = _read_json(path)
                if not isinstance(data, dict):
                    raise RegionSourceError(f"Locale file {path} must hold an object")
                merged.update({str(k): str(v) for k, v in data.items()})
            logger.debug("[REGION-LOCALE] locale=%s keys=%d", locale, len(merged))
            self._tables[locale] = merged
        return self._tables[locale]

    def translate(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._table(self.locale).get(key)
        if value is None and self.default_locale != self.locale:
            value = self._table(self.default_locale).get(key)
        return default if value is None else value

    def with_locale(self, locale: str) -> "LocaleBundle":
        return LocaleBundle(self.locale_paths, locale, self.default_locale)

    def prompt_text(self) -> str:
        return self.translate(PROMPT_KEY, DEFAULT_PROMPT)


class FileRegionSource:
    """Loads a :class:`World` snapshot from the configured data paths."""

    def __init__(
        self,
        data_paths: Iterable[str] | str | None,
        locale_bundle: Optional[LocaleBundle] = None,
    ) -> None:
        self.data_paths = _as_paths(data_paths)
        self.locale_bundle = locale_bundle or LocaleBundle()
        self._world: Optional[World] = None

    def world(self) -> World:
        if self._world is None:
            countries = self._load_level([])
            self._world = World(countries)
            logger.info(
                "[REGION-DATA] paths=%s countries=%d locale=%s",
                os.pathsep.join(self.data_paths),
                len(countries),
                self.locale_bundle.locale,
            )
        return self._world

    def reload(self) -> World:
        self._world = None
        return self.world()

    def _entries(self, path_codes: Sequence[str]) -> list[dict]:
        rel = os.path.join(WORLD_CODE, *path_codes) + ".json" if path_codes else f"{WORLD_CODE}.json"
        merged: dict[str, dict] = {}
        for base in self.data_paths:
            path = os.path.join(base, rel)
            if not os.path.isfile(path):
                continue
            data = _read_json(path)
            if not isinstance(data, list):
                raise RegionSourceError(f"Region file {path} must hold a list")
            for entry in data:
                if not isinstance(entry, dict) or not entry.get("code"):
                    raise RegionSourceError(f"Region file {path} has an entry without a code")
                key = str(entry["code"]).lower()
                if entry.get("_enabled") is False:
                    merged.pop(key, None)
                    continue
                combined = dict(merged.get(key, {}))
                combined.update(entry)
                merged[key] = combined
        return list(merged.values())

    def _load_level(self, path_codes: list[str]) -> list[Region]:
        regions: list[Region] = []
        for entry in self._entries(path_codes):
            code = str(entry["code"])
            child_path = path_codes + [code.lower()]
            key = ".".join([WORLD_CODE, *child_path, "name"])
            name = self.locale_bundle.translate(key, entry.get("name") or code)
            regions.append(
                Region(
                    code=code,
                    name=name,
                    type=entry.get("type"),
                    subregions=RegionCollection(self._load_level(child_path)),
                )
            )
        return regions
