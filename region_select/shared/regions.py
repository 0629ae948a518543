"""Immutable region tree used by the select helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence, Union

WORLD_CODE = "world"


class RegionLookupError(LookupError):
    pass


class RegionCollection:
    """Read-only sequence of regions with lookup by code."""

    def __init__(self, regions: Iterable["Region"] = ()) -> None:
        self._regions: tuple[Region, ...] = tuple(regions)
        self._by_code: dict[str, Region] = {}
        for region in self._regions:
            key = region.code.lower()
            if key in self._by_code:
                raise ValueError(f"Duplicate region code: {region.code!r}")
            self._by_code[key] = region

    def __iter__(self) -> Iterator["Region"]:
        return iter(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __getitem__(self, index: int) -> "Region":
        return self._regions[index]

    def __bool__(self) -> bool:
        return bool(self._regions)

    def __repr__(self) -> str:
        codes = ", ".join(region.code for region in self._regions)
        return f"RegionCollection([{codes}])"

    def coded(self, code: Optional[str]) -> Optional["Region"]:
        if code is None:
            return None
        return self._by_code.get(str(code).lower())

    def named(self, name: Optional[str]) -> Optional["Region"]:
        if name is None:
            return None
        for region in self._regions:
            if region.name == name:
                return region
        return None

    def codes(self) -> list[str]:
        return [region.code for region in self._regions]


@dataclass(frozen=True)
class Region:
    code: str
    name: str
    type: Optional[str] = None
    subregions: RegionCollection = field(
        default_factory=RegionCollection, compare=False, repr=False
    )

    def __str__(self) -> str:
        return self.name

    @property
    def has_subregions(self) -> bool:
        return bool(self.subregions)


class World(Region):
    """Root of the tree; its subregions are the top-level countries."""

    def __init__(self, countries: Iterable[Region] = ()) -> None:
        collection = (
            countries
            if isinstance(countries, RegionCollection)
            else RegionCollection(countries)
        )
        super().__init__(code=WORLD_CODE, name="World", type="world", subregions=collection)

    def coded(self, code: Optional[str]) -> Optional[Region]:
        return self.subregions.coded(code)


ParentRef = Union[str, Sequence[str], Region]


def resolve_parent(world: World, parent_region_or_code: ParentRef) -> Region:
    """Resolve a country code, a path of codes, or a region object.

    ``"US"`` resolves a top-level country, ``["US", "CA"]`` walks nested
    subregions starting from the world, and anything exposing
    ``subregions`` is returned unchanged.
    """

    if isinstance(parent_region_or_code, str):
        region = world.coded(parent_region_or_code)
        if region is None:
            raise RegionLookupError(f"Unknown region code: {parent_region_or_code!r}")
        return region
    if isinstance(parent_region_or_code, (list, tuple)):
        parent: Region = world
        for code in parent_region_or_code:
            child = parent.subregions.coded(code)
            if child is None:
                path = "/".join(str(c) for c in parent_region_or_code)
                raise RegionLookupError(f"Unknown region path: {path!r} (at {code!r})")
            parent = child
        return parent
    if hasattr(parent_region_or_code, "subregions"):
        return parent_region_or_code
    raise RegionLookupError(f"Cannot resolve parent region from {parent_region_or_code!r}")
