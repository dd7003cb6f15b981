from __future__ import annotations
"""Configurator price composition.

A PriceConfiguration is the session-local state behind the configurator screen.
Every setter only touches its own field (plus the mirrored discount field) and
compute_totals() is a pure function of the current state:

    extras        = color + sum(optionals)
    subtotal      = base + extras
    with_discount = subtotal - discount_amount
    with_markup   = with_discount + markup
    final         = with_markup * quantity

Bad numeric input never raises here: discount/markup fall back to 0 and quantity
to 1 so the live preview keeps rendering. Strict checks live in
submission_quantity(), used only when a quote is actually submitted.

Known surprise: changing the version (and therefore the base price) keeps the
previously entered discount percent/amount untouched; neither is re-derived until
the user edits one of them again.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Protocol

from backoffice.errors import ValidationError
from backoffice.utils.money import ZERO, FREE_ZONE_RATIO, round2, parse_decimal, parse_quantity, parse_strict_int

STATE_NO_VERSION = 'NO_VERSION'
STATE_VERSION_SELECTED = 'VERSION_SELECTED'
STATE_COLOR_SELECTED = 'COLOR_SELECTED'
STATE_PRICED = 'PRICED'

TIER_FIELDS = ('pcd_ipi_icms', 'pcd_ipi', 'taxi_ipi_icms', 'taxi_ipi')


class PriceableVersion(Protocol):
    public_price: Any
    pcd_ipi_icms: Any
    pcd_ipi: Any
    taxi_ipi_icms: Any
    taxi_ipi: Any


@dataclass(frozen=True)
class VersionPrice:
    id: Optional[int]
    public_price: Decimal
    pcd_ipi_icms: Decimal = ZERO
    pcd_ipi: Decimal = ZERO
    taxi_ipi_icms: Decimal = ZERO
    taxi_ipi: Decimal = ZERO
    name: Optional[str] = None


@dataclass(frozen=True)
class ColorPrice:
    id: Optional[int]
    additional_price: Decimal
    name: Optional[str] = None


@dataclass(frozen=True)
class OptionalPrice:
    id: int
    price: Decimal
    name: Optional[str] = None


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: Decimal
    color_price: Decimal
    optionals_price: Decimal
    extras_price: Decimal
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    with_discount: Decimal
    markup_amount: Decimal
    with_markup: Decimal
    quantity: int
    final_price: Decimal
    tiers: Dict[str, Decimal] = field(default_factory=dict)
    free_zone_price: Decimal = ZERO

    def as_dict(self) -> Dict[str, Any]:
        # Decimal -> str keeps cents exact over JSON
        out: Dict[str, Any] = {}
        for name in (
            'base_price', 'color_price', 'optionals_price', 'extras_price', 'subtotal',
            'discount_percent', 'discount_amount', 'with_discount', 'markup_amount',
            'with_markup', 'final_price', 'free_zone_price',
        ):
            out[name] = str(getattr(self, name))
        out['quantity'] = self.quantity
        out['tiers'] = {k: str(v) for k, v in self.tiers.items()}
        return out


class PriceConfiguration:
    def __init__(self):
        self.version: Optional[Any] = None
        self.base_price: Decimal = ZERO
        self.tiers: Dict[str, Decimal] = {name: ZERO for name in TIER_FIELDS}
        self.color: Optional[Any] = None
        self.color_price: Decimal = ZERO
        self.optionals: Dict[Any, Decimal] = {}
        self.discount_percent: Decimal = ZERO
        self.discount_amount: Decimal = ZERO
        self.markup_amount: Decimal = ZERO
        self.quantity_input: Any = 1

    # --- selections ---
    def select_version(self, version: Optional[PriceableVersion]) -> None:
        self.version = version
        # version change invalidates color/optional compatibility
        self.color = None
        self.color_price = ZERO
        self.optionals = {}
        if version is None:
            self.base_price = ZERO
            self.tiers = {name: ZERO for name in TIER_FIELDS}
            return
        self.base_price = parse_decimal(getattr(version, 'public_price', None))
        # stored tiers are taken verbatim, never recomputed from the list price
        self.tiers = {name: parse_decimal(getattr(version, name, None)) for name in TIER_FIELDS}

    def select_color(self, color: Optional[Any]) -> None:
        self.color = color
        self.color_price = parse_decimal(getattr(color, 'additional_price', None)) if color is not None else ZERO

    def add_optional(self, optional: Any) -> None:
        self.optionals[optional.id] = parse_decimal(getattr(optional, 'price', None))

    def remove_optional(self, optional_id: Any) -> None:
        self.optionals.pop(optional_id, None)

    def set_optionals(self, optionals: Iterable[Any]) -> None:
        self.optionals = {}
        for optional in optionals:
            self.add_optional(optional)

    # --- numeric inputs ---
    def set_discount_percent(self, percent: Any) -> None:
        self.discount_percent = parse_decimal(percent)
        if self.base_price > 0:
            self.discount_amount = round2(self.base_price * self.discount_percent / 100)
        else:
            self.discount_amount = ZERO

    def set_discount_amount(self, amount: Any) -> None:
        self.discount_amount = parse_decimal(amount)
        if self.base_price > 0:
            self.discount_percent = round2(self.discount_amount / self.base_price * 100)
        else:
            self.discount_percent = ZERO

    def set_markup_amount(self, amount: Any) -> None:
        # negative markup is allowed and acts as an extra discount
        self.markup_amount = parse_decimal(amount)

    def set_quantity(self, quantity: Any) -> None:
        self.quantity_input = quantity

    @property
    def quantity(self) -> int:
        parsed = parse_quantity(self.quantity_input)
        return parsed if parsed is not None and parsed >= 1 else 1

    def submission_quantity(self) -> int:
        parsed = parse_strict_int(self.quantity_input)
        if parsed is None:
            raise ValidationError('quantity must be an integer')
        if parsed < 1:
            raise ValidationError('quantity must be at least 1')
        return parsed

    # --- derived ---
    @property
    def optionals_price(self) -> Decimal:
        return sum(self.optionals.values(), ZERO)

    @property
    def extras_price(self) -> Decimal:
        return self.color_price + self.optionals_price

    @property
    def state(self) -> str:
        if self.version is None:
            return STATE_NO_VERSION
        if self.discount_amount or self.markup_amount or self.optionals:
            return STATE_PRICED
        if self.color is not None:
            return STATE_COLOR_SELECTED
        return STATE_VERSION_SELECTED

    def compute_totals(self) -> PriceBreakdown:
        extras = self.extras_price
        quantity = self.quantity
        if self.base_price > 0:
            subtotal = self.base_price + extras
            with_discount = subtotal - self.discount_amount
            with_markup = with_discount + self.markup_amount
            final = with_markup * quantity
        else:
            # nothing priced yet: keep every total at zero like the empty screen
            subtotal = with_discount = with_markup = final = ZERO
        return PriceBreakdown(
            base_price=self.base_price,
            color_price=self.color_price,
            optionals_price=self.optionals_price,
            extras_price=extras,
            subtotal=subtotal,
            discount_percent=self.discount_percent,
            discount_amount=self.discount_amount,
            with_discount=with_discount,
            markup_amount=self.markup_amount,
            with_markup=with_markup,
            quantity=quantity,
            final_price=final,
            tiers=dict(self.tiers),
            free_zone_price=round2(self.base_price * FREE_ZONE_RATIO),
        )


def quote(version, color=None, optionals=(), discount_percent=None, discount_amount=None,
          markup_amount=None, quantity=1) -> PriceConfiguration:
    """Build a configuration in one go, applying inputs in screen order.

    When both discount forms are given the amount wins, since it is applied last.
    """
    cfg = PriceConfiguration()
    cfg.select_version(version)
    cfg.select_color(color)
    cfg.set_optionals(optionals)
    if discount_percent is not None:
        cfg.set_discount_percent(discount_percent)
    if discount_amount is not None:
        cfg.set_discount_amount(discount_amount)
    if markup_amount is not None:
        cfg.set_markup_amount(markup_amount)
    cfg.set_quantity(quantity)
    return cfg


__all__ = [
    'PriceConfiguration', 'PriceBreakdown', 'VersionPrice', 'ColorPrice', 'OptionalPrice', 'quote',
    'STATE_NO_VERSION', 'STATE_VERSION_SELECTED', 'STATE_COLOR_SELECTED', 'STATE_PRICED',
]
