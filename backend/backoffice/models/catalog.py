from __future__ import annotations
from decimal import Decimal
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Numeric, Boolean, ForeignKey, DateTime, UniqueConstraint, func
from typing import Optional

from .authz import Base

# Money columns: precision 10, scale 2 (BRL)
Money = Numeric(10, 2, asdecimal=True)


class Brand(Base):
    __tablename__ = 'brands'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    models = relationship('VehicleModel', back_populates='brand')


class VehicleModel(Base):
    __tablename__ = 'models'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    brand_id: Mapped[int] = mapped_column(ForeignKey('brands.id'), nullable=False, index=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    brand = relationship('Brand', back_populates='models')
    versions = relationship('Version', back_populates='model')


class Version(Base):
    """A trim of a model; carries the list price and the four exemption tiers.

    Tiers are stored independently of public_price. They are usually derived when
    the version is written (see utils.money.derive_exemption_tiers) but readers
    must never recompute them.
    """
    __tablename__ = 'versions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    model_id: Mapped[int] = mapped_column(ForeignKey('models.id'), nullable=False, index=True)
    year: Mapped[Optional[int]] = mapped_column(Integer)
    public_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))
    pcd_ipi_icms: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))
    pcd_ipi: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))
    taxi_ipi_icms: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))
    taxi_ipi: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    model = relationship('VehicleModel', back_populates='versions')


class PaintType(Base):
    __tablename__ = 'paint_types'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)


class Color(Base):
    __tablename__ = 'colors'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    hex_code: Mapped[str] = mapped_column(String(16), nullable=False)
    paint_type_id: Mapped[Optional[int]] = mapped_column(ForeignKey('paint_types.id'))
    additional_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))
    image_url: Mapped[Optional[str]] = mapped_column(String(512))
    paint_type = relationship('PaintType')


class VersionColor(Base):
    """Color offered on a version, with optional version-specific price and image."""
    __tablename__ = 'version_colors'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version_id: Mapped[int] = mapped_column(ForeignKey('versions.id', ondelete='CASCADE'), nullable=False, index=True)
    color_id: Mapped[int] = mapped_column(ForeignKey('colors.id', ondelete='CASCADE'), nullable=False)
    price: Mapped[Optional[Decimal]] = mapped_column(Money)
    image_url: Mapped[Optional[str]] = mapped_column(String(512))
    color = relationship('Color')
    __table_args__ = (UniqueConstraint('version_id', 'color_id', name='uq_version_color'),)


class OptionalItem(Base):
    __tablename__ = 'optionals'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(512))
    # generic list price; configurator uses VersionOptional.price instead
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))


class VersionOptional(Base):
    __tablename__ = 'version_optionals'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version_id: Mapped[int] = mapped_column(ForeignKey('versions.id', ondelete='CASCADE'), nullable=False, index=True)
    optional_id: Mapped[int] = mapped_column(ForeignKey('optionals.id', ondelete='CASCADE'), nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal('0'))
    optional = relationship('OptionalItem')
    __table_args__ = (UniqueConstraint('version_id', 'optional_id', name='uq_version_optional'),)


__all__ = ['Brand', 'VehicleModel', 'Version', 'PaintType', 'Color', 'VersionColor', 'OptionalItem', 'VersionOptional']
