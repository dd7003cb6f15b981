from __future__ import annotations
"""Read-only catalog lookups feeding the configurator.

Returns plain price records (services.pricing dataclasses) so the pricing engine
never holds ORM objects. Unknown ids raise NotFoundError, which callers propagate.
"""
from typing import Iterable, List, Optional

from sqlalchemy import select

from backoffice.errors import NotFoundError
from backoffice.models.catalog import Version, Color, VersionColor, VersionOptional
from backoffice.services.pricing import VersionPrice, ColorPrice, OptionalPrice


class CatalogProvider:
    def __init__(self, session):
        self.session = session

    def _version_row(self, version_id: int) -> Version:
        version = self.session.execute(select(Version).where(Version.id == version_id)).scalar_one_or_none()
        if version is None:
            raise NotFoundError(f'version {version_id} not found')
        return version

    def get_version(self, version_id: int) -> VersionPrice:
        v = self._version_row(version_id)
        return VersionPrice(
            id=v.id,
            name=v.name,
            public_price=v.public_price,
            pcd_ipi_icms=v.pcd_ipi_icms,
            pcd_ipi=v.pcd_ipi,
            taxi_ipi_icms=v.taxi_ipi_icms,
            taxi_ipi=v.taxi_ipi,
        )

    def get_color(self, version_id: int, color_id: int) -> ColorPrice:
        """Color price for a version: the version-specific override when one exists."""
        color = self.session.execute(select(Color).where(Color.id == color_id)).scalar_one_or_none()
        if color is None:
            raise NotFoundError(f'color {color_id} not found')
        link = self.session.execute(
            select(VersionColor).where(VersionColor.version_id == version_id, VersionColor.color_id == color_id)
        ).scalar_one_or_none()
        price = link.price if link is not None and link.price is not None else color.additional_price
        return ColorPrice(id=color.id, name=color.name, additional_price=price)

    def get_optionals(self, version_id: int, optional_ids: Iterable[int]) -> List[OptionalPrice]:
        wanted = list(dict.fromkeys(optional_ids))
        if not wanted:
            return []
        rows = self.session.execute(
            select(VersionOptional).where(
                VersionOptional.version_id == version_id,
                VersionOptional.optional_id.in_(wanted),
            )
        ).scalars().all()
        found = {r.optional_id: r for r in rows}
        missing = [oid for oid in wanted if oid not in found]
        if missing:
            raise NotFoundError(f'optionals {missing} not offered for version {version_id}')
        return [
            OptionalPrice(id=oid, name=found[oid].optional.name, price=found[oid].price)
            for oid in wanted
        ]

    def list_versions(self, model_id: Optional[int] = None):
        q = self.session.query(Version).filter(Version.is_active.is_(True))
        if model_id is not None:
            q = q.filter(Version.model_id == model_id)
        return q.order_by(Version.id.asc())

    def list_version_colors(self, version_id: int) -> List[ColorPrice]:
        self._version_row(version_id)
        rows = self.session.execute(
            select(VersionColor).where(VersionColor.version_id == version_id).order_by(VersionColor.id.asc())
        ).scalars().all()
        return [
            ColorPrice(
                id=r.color_id,
                name=r.color.name,
                additional_price=r.price if r.price is not None else r.color.additional_price,
            )
            for r in rows
        ]

    def list_version_optionals(self, version_id: int) -> List[OptionalPrice]:
        self._version_row(version_id)
        rows = self.session.execute(
            select(VersionOptional).where(VersionOptional.version_id == version_id).order_by(VersionOptional.id.asc())
        ).scalars().all()
        return [OptionalPrice(id=r.optional_id, name=r.optional.name, price=r.price) for r in rows]


__all__ = ['CatalogProvider']
