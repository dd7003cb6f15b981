from __future__ import annotations
from flask import Blueprint, request
from backoffice import get_db
from backoffice.config.pagination import normalize_pagination, build_list_payload
from backoffice.decorators.auth import require_access
from backoffice.errors import ValidationError
from backoffice.models.catalog import Version
from backoffice.services.catalog import CatalogProvider

cat_bp = Blueprint('catalog', __name__)


def _version_json(v: Version):
    return {
        'id': v.id,
        'name': v.name,
        'model_id': v.model_id,
        'year': v.year,
        'public_price': str(v.public_price),
        'pcd_ipi_icms': str(v.pcd_ipi_icms),
        'pcd_ipi': str(v.pcd_ipi),
        'taxi_ipi_icms': str(v.taxi_ipi_icms),
        'taxi_ipi': str(v.taxi_ipi),
    }


@cat_bp.get('/versions')
@require_access('/versions')
def list_versions():
    model_id = request.args.get('model_id')
    if model_id is not None:
        try:
            model_id = int(model_id)
        except ValueError:
            raise ValidationError('model_id must be int')
    q = CatalogProvider(get_db()).list_versions(model_id)
    limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    total = q.count()
    rows = q.offset(offset).limit(limit).all()
    return build_list_payload([_version_json(v) for v in rows], total, limit, offset)


@cat_bp.get('/versions/<int:version_id>/colors')
@require_access('/colors')
def list_version_colors(version_id: int):
    colors = CatalogProvider(get_db()).list_version_colors(version_id)
    return {'data': [{'id': c.id, 'name': c.name, 'additional_price': str(c.additional_price)} for c in colors]}


@cat_bp.get('/versions/<int:version_id>/optionals')
@require_access('/optionals')
def list_version_optionals(version_id: int):
    optionals = CatalogProvider(get_db()).list_version_optionals(version_id)
    return {'data': [{'id': o.id, 'name': o.name, 'price': str(o.price)} for o in optionals]}
