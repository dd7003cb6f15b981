#!/usr/bin/env python
"""Idempotent seed script for the initial administrator and a demo catalog.

Usage:
    python backend/scripts/seed_catalog.py                 # seed normally
    python backend/scripts/seed_catalog.py --show-matrix   # print default role -> route grants
    python backend/scripts/seed_catalog.py --dry-run       # run logic then rollback (no DB changes)
    python backend/scripts/seed_catalog.py --export-json matrix.json
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json
from decimal import Decimal
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from backoffice import create_app, get_db  # type: ignore
from backoffice.constants.permissions import ROLE_ADMIN, ALL_ROLES
from backoffice.models.authz import Base, User
from backoffice.models.catalog import Brand, VehicleModel, Version, PaintType, Color, VersionColor, OptionalItem, VersionOptional
from backoffice.services.matrix import default_matrix
from backoffice.utils.money import derive_exemption_tiers, format_currency

DEMO_CATALOG = {
    'brand': 'Volkswagen',
    'model': 'Polo',
    'versions': [
        {'name': 'Comfortline TSI 116CV', 'year': 2024, 'public_price': '105990.00'},
        {'name': 'Highline TSI 128CV', 'year': 2024, 'public_price': '119990.00'},
    ],
    'paint_types': ['Sólida', 'Metálica'],
    'colors': [
        {'name': 'Branco Cristal', 'hex_code': '#F5F5F5', 'paint_type': 'Sólida', 'additional_price': '0.00'},
        {'name': 'Prata Sirius', 'hex_code': '#C0C0C0', 'paint_type': 'Metálica', 'additional_price': '1650.00'},
    ],
    'optionals': [
        {'name': 'Teto solar', 'description': 'Teto solar elétrico', 'price': '4500.00'},
        {'name': 'Sensor de estacionamento', 'description': 'Sensor traseiro', 'price': '800.00'},
    ],
}


def ensure_admin(session):
    username = os.getenv('SEED_ADMIN_USERNAME', 'admin')
    existing = session.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if existing:
        return 0
    user = User(name='Administrador', username=username, role=ROLE_ADMIN)
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user)
    print(f"[INFO] Created initial admin user {username} with temporary password.")
    return 1


def _get_or_create(session, model, defaults=None, **lookup):
    obj = session.execute(select(model).filter_by(**lookup)).scalar_one_or_none()
    if obj is None:
        obj = model(**lookup, **(defaults or {}))
        session.add(obj)
        session.flush()
        return obj, True
    return obj, False


def ensure_catalog(session, catalog=DEMO_CATALOG):
    created = 0
    brand, new = _get_or_create(session, Brand, name=catalog['brand']); created += new
    model, new = _get_or_create(session, VehicleModel, name=catalog['model'], brand_id=brand.id); created += new
    paint_types = {}
    for name in catalog['paint_types']:
        paint_types[name], new = _get_or_create(session, PaintType, name=name); created += new
    colors = []
    for c in catalog['colors']:
        color, new = _get_or_create(
            session, Color, name=c['name'],
            defaults={'hex_code': c['hex_code'], 'paint_type_id': paint_types[c['paint_type']].id, 'additional_price': Decimal(c['additional_price'])},
        )
        colors.append(color); created += new
    optionals = []
    for o in catalog['optionals']:
        optional, new = _get_or_create(session, OptionalItem, name=o['name'], defaults={'description': o['description'], 'price': Decimal(o['price'])})
        optionals.append(optional); created += new
    for v in catalog['versions']:
        price = Decimal(v['public_price'])
        # tiers are derived once here and stored; readers use them verbatim
        version, new = _get_or_create(
            session, Version, name=v['name'], model_id=model.id,
            defaults={'year': v['year'], 'public_price': price, **derive_exemption_tiers(price)},
        )
        created += new
        for color in colors:
            _, new = _get_or_create(session, VersionColor, version_id=version.id, color_id=color.id); created += new
        for optional in optionals:
            _, new = _get_or_create(session, VersionOptional, version_id=version.id, optional_id=optional.id, defaults={'price': optional.price}); created += new
    return created


def build_matrix_export():
    matrix = default_matrix()
    return {
        'roles': {role: [r.key for r in matrix.rules if r.allows(role)] for role in ALL_ROLES},
        'rules': [r.as_dict() for r in matrix.rules],
    }


def print_matrix():
    matrix = default_matrix()
    key_w = max(len(r.key) for r in matrix.rules)
    print(f"{'Key'.ljust(key_w)} | " + ' | '.join(ALL_ROLES) + ' | Path')
    print('-' * (key_w + 60))
    for r in matrix.rules:
        flags = ' | '.join(('yes' if r.allows(role) else '-').ljust(len(role)) for role in ALL_ROLES)
        print(f"{r.key.ljust(key_w)} | {flags} | {r.path}")


def print_version_prices(session):
    for v in session.execute(select(Version).order_by(Version.id)).scalars():
        print(f"{v.name}: {format_currency(v.public_price)} (PCD IPI/ICMS {format_currency(v.pcd_ipi_icms)})")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed admin user & demo catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_catalog.py\n  dry run: seed_catalog.py --dry-run\n  show matrix: seed_catalog.py --show-matrix\n""")
    )
    p.add_argument('--show-matrix', action='store_true', help='Print the default permission matrix')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--no-catalog', action='store_true', help='Only ensure the admin user')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export default matrix JSON (to FILE or stdout if omitted)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM users LIMIT 1'))
        except Exception:
            # Bootstrap fallback when migrations have not been applied
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        finally:
            session.commit()

    with app.app_context():
        session = get_db()
        try:
            created_users = ensure_admin(session)
            created_catalog = 0 if args.no_catalog else ensure_catalog(session)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Users would create: {created_users}, Catalog rows would create: {created_catalog}")
            else:
                session.commit()
                print(f"[DONE] Users created: {created_users}, Catalog rows created: {created_catalog}")
                print_version_prices(session)
            if args.show_matrix:
                print('\nDefault Permission Matrix:')
                print_matrix()
            if args.export_json is not None:
                payload = build_matrix_export()
                if args.export_json == '-':
                    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
                else:
                    with open(args.export_json, 'w', encoding='utf-8') as f:
                        json.dump(payload, f, indent=2, sort_keys=True, ensure_ascii=False)
                    print(f"[INFO] Exported JSON to {args.export_json}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

if __name__ == '__main__':
    main()
