from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import validates

from .app import db
from .shared.regions import Region, RegionCollection, World

logger = logging.getLogger("region_select.data")


class RegionRow(db.Model):
    __tablename__ = "regions"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(32))
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    parent_id = db.Column(
        db.Integer, db.ForeignKey("regions.id", ondelete="CASCADE"), nullable=True
    )
    children = db.relationship(
        "RegionRow",
        backref=db.backref("parent", remote_side=[id]),
        cascade="all, delete-orphan",
        order_by="RegionRow.sort_order",
    )
    __table_args__ = (
        db.UniqueConstraint("parent_id", "code", name="uix_regions_parent_code"),
    )

    @validates("code")
    def strip_code(self, key, value):  # pragma: no cover - simple normalizer
        return (value or "").strip()

    def to_region(self) -> Region:
        return Region(
            code=self.code,
            name=self.name,
            type=self.type,
            subregions=RegionCollection(child.to_region() for child in self.children),
        )


class SqlRegionSource:
    """Builds a :class:`World` snapshot from the ``regions`` table."""

    def __init__(self, session=None) -> None:
        self._session = session
        self._world: Optional[World] = None

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def world(self) -> World:
        if self._world is None:
            roots = (
                self.session.query(RegionRow)
                .filter(RegionRow.parent_id.is_(None))
                .order_by(RegionRow.sort_order, RegionRow.code)
                .all()
            )
            self._world = World(row.to_region() for row in roots)
            logger.info("[REGION-DATA] source=database countries=%d", len(roots))
        return self._world

    def reload(self) -> World:
        self._world = None
        return self.world()


def _rows_for(region: Region, sort_order: int) -> RegionRow:
    row = RegionRow(
        code=region.code,
        name=region.name,
        type=region.type,
        sort_order=sort_order,
    )
    row.children = [
        _rows_for(child, idx) for idx, child in enumerate(region.subregions)
    ]
    return row


def seed_regions(session, world: World) -> int:
    """Replace the ``regions`` table with ``world``; return rows written."""

    session.query(RegionRow).delete()
    count = 0
    for idx, country in enumerate(world.subregions):
        row = _rows_for(country, idx)
        session.add(row)
        count += _count(country)
    session.commit()
    logger.info("[REGION-SEED] rows=%d", count)
    return count


def _count(region: Region) -> int:
    return 1 + sum(_count(child) for child in region.subregions)
