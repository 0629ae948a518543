"""ISO 3166 countries and subdivisions from pycountry."""

from __future__ import annotations

import gettext
import logging
from collections import defaultdict
from typing import Optional

import pycountry

from .data_source import LocaleBundle
from .regions import Region, RegionCollection, World, WORLD_CODE

logger = logging.getLogger("region_select.data")


def _local_code(full_code: str) -> str:
    """``US-CA`` -> ``CA``; subdivision codes are unique within their country."""
    return full_code.split("-", 1)[1] if "-" in full_code else full_code


class IsoRegionSource:
    """Countries (ISO 3166-1) with nested subdivisions (ISO 3166-2).

    Names are taken from the locale bundle first (``world.us.ca.name``), then
    from pycountry's own translations for the bundle's locale.
    """

    def __init__(self, locale_bundle: Optional[LocaleBundle] = None) -> None:
        self.locale_bundle = locale_bundle or LocaleBundle()
        self._world: Optional[World] = None

    def _translator(self, domain: str):
        locale = self.locale_bundle.locale
        if not locale or locale == "en":
            return lambda text: text
        translation = gettext.translation(
            domain, pycountry.LOCALES_DIR, languages=[locale], fallback=True
        )
        return translation.gettext

    def world(self) -> World:
        if self._world is None:
            country_name = self._translator("iso3166-1")
            subdivision_name = self._translator("iso3166-2")
            countries = []
            for country in pycountry.countries:
                code = country.alpha_2
                key = f"{WORLD_CODE}.{code.lower()}.name"
                name = self.locale_bundle.translate(key, country_name(country.name))
                countries.append(
                    Region(
                        code=code,
                        name=name,
                        type="country",
                        subregions=self._subregions(code, subdivision_name),
                    )
                )
            self._world = World(countries)
            logger.info(
                "[REGION-DATA] source=iso countries=%d locale=%s",
                len(countries),
                self.locale_bundle.locale,
            )
        return self._world

    def reload(self) -> World:
        self._world = None
        return self.world()

    def _subregions(self, country_code: str, translate) -> RegionCollection:
        subdivisions = pycountry.subdivisions.get(country_code=country_code) or []
        known = {sub.code.upper() for sub in subdivisions}
        children = defaultdict(list)
        for sub in subdivisions:
            parent = (getattr(sub, "parent_code", None) or "").upper()
            children[parent if parent in known else None].append(sub)

        def build(parent_full: Optional[str], path: list[str]) -> RegionCollection:
            regions = []
            seen: set[str] = set()
            for sub in children.get(parent_full, []):
                code = _local_code(sub.code)
                if code.lower() in seen:
                    continue
                seen.add(code.lower())
                child_path = path + [code.lower()]
                key = ".".join([WORLD_CODE, *child_path, "name"])
                regions.append(
                    Region(
                        code=code,
                        name=self.locale_bundle.translate(key, translate(sub.name)),
                        type=(sub.type or "").lower() or None,
                        subregions=build(sub.code.upper(), child_path),
                    )
                )
            return RegionCollection(regions)

        return build(None, [country_code.lower()])
