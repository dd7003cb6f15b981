from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, JSON, DateTime, func
from typing import Dict

from .authz import Base


class PermissionOverride(Base):
    """Administrator customization of one role's grants.

    permissions maps permission rule keys to booleans; keys missing from the map
    fall back to the compiled-in defaults. Absence of the row means "defaults".
    """
    __tablename__ = 'permission_overrides'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    role_name: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    permissions: Mapped[Dict[str, bool]] = mapped_column(JSON, nullable=False, default=dict)
    updated_by: Mapped[int] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

__all__ = ['PermissionOverride']
