from __future__ import annotations
from flask import Blueprint, request
from backoffice import get_db
from backoffice.decorators.auth import require_access
from backoffice.errors import ValidationError
from backoffice.services.catalog import CatalogProvider
from backoffice.services.pricing import quote
from backoffice.utils.money import format_currency, parse_strict_int

cfg_bp = Blueprint('configurator', __name__)

CONFIGURATOR_PAGE = '/configurator'


def _coerce_id(value, field: str) -> int:
    parsed = parse_strict_int(value)
    if parsed is None:
        raise ValidationError(f'{field} must be int')
    return parsed


@cfg_bp.get('/versions/<int:version_id>')
@require_access(CONFIGURATOR_PAGE)
def version_prices(version_id: int):
    v = CatalogProvider(get_db()).get_version(version_id)
    return {
        'id': v.id,
        'name': v.name,
        'public_price': str(v.public_price),
        'tiers': {
            'pcd_ipi_icms': str(v.pcd_ipi_icms),
            'pcd_ipi': str(v.pcd_ipi),
            'taxi_ipi_icms': str(v.taxi_ipi_icms),
            'taxi_ipi': str(v.taxi_ipi),
        },
    }


@cfg_bp.post('/quote')
@require_access(CONFIGURATOR_PAGE)
def price_quote():
    """Recompute the configurator breakdown for the posted selection.

    Numeric fields are lenient (live preview); `submit: true` switches quantity to
    strict validation, the way an order submission would.
    """
    data = request.json or {}
    if data.get('version_id') is None:
        raise ValidationError('version_id required')
    catalog = CatalogProvider(get_db())
    version_id = _coerce_id(data['version_id'], 'version_id')
    version = catalog.get_version(version_id)
    color = None
    if data.get('color_id') not in (None, ''):
        color = catalog.get_color(version_id, _coerce_id(data['color_id'], 'color_id'))
    optional_ids = data.get('optional_ids') or []
    if not isinstance(optional_ids, list):
        raise ValidationError('optional_ids must be a list')
    optionals = catalog.get_optionals(version_id, [_coerce_id(o, 'optional_ids') for o in optional_ids])
    cfg = quote(
        version,
        color=color,
        optionals=optionals,
        discount_percent=data.get('discount_percent'),
        discount_amount=data.get('discount_amount'),
        markup_amount=data.get('markup_amount'),
        quantity=data.get('quantity', 1),
    )
    if data.get('submit'):
        cfg.submission_quantity()
    totals = cfg.compute_totals()
    body = totals.as_dict()
    body['state'] = cfg.state
    body['display'] = {
        'subtotal': format_currency(totals.subtotal),
        'final_price': format_currency(totals.final_price),
    }
    return body
