"""Central role names and the default route permission table.

Rule keys are the stable identifiers persisted in permission overrides. Never rename
a key silently: add a new one and drop the old one in a data migration, otherwise
stored customizations stop applying. Descriptions are display labels only.
"""
from __future__ import annotations
from typing import Dict, List, Any

ROLE_ADMIN = 'Administrador'
ROLE_REGISTRAR = 'Cadastrador'
ROLE_USER = 'Usuário'

ALL_ROLES = (ROLE_ADMIN, ROLE_REGISTRAR, ROLE_USER)
# Administrator is hard-wired to full access and cannot be customized
CUSTOMIZABLE_ROLES = (ROLE_REGISTRAR, ROLE_USER)

CATEGORY_VIEW = 'Visualização'
CATEGORY_HOME = 'Dashboard e Configurador'
CATEGORY_REGISTRATION = 'Cadastro e Edição'
CATEGORY_PROFILE = 'Perfil de Usuário'
CATEGORY_MANAGEMENT = 'Gerencial'

ALL_CATEGORIES = (CATEGORY_VIEW, CATEGORY_HOME, CATEGORY_REGISTRATION, CATEGORY_PROFILE, CATEGORY_MANAGEMENT)

_EVERYONE = [ROLE_ADMIN, ROLE_REGISTRAR, ROLE_USER]
_REGISTRARS = [ROLE_ADMIN, ROLE_REGISTRAR]
_ADMINS = [ROLE_ADMIN]

ROUTE_PERMISSIONS: List[Dict[str, Any]] = [
    # Available to every authenticated user
    {'key': 'dashboard', 'path': '/', 'roles': _EVERYONE, 'description': 'Dashboard', 'category': CATEGORY_HOME},
    {'key': 'configurator', 'path': '/configurator', 'roles': _EVERYONE, 'description': 'Configurador de veículos', 'category': CATEGORY_HOME},
    {'key': 'profile', 'path': '/user/profile', 'roles': _EVERYONE, 'description': 'Perfil de usuário', 'category': CATEGORY_PROFILE},

    # Read-only listings
    {'key': 'brands.view', 'path': '/brands', 'roles': _EVERYONE, 'description': 'Visualizar marcas', 'category': CATEGORY_VIEW},
    {'key': 'models.view', 'path': '/models', 'roles': _EVERYONE, 'description': 'Visualizar modelos', 'category': CATEGORY_VIEW},
    {'key': 'versions.view', 'path': '/versions', 'roles': _EVERYONE, 'description': 'Visualizar versões', 'category': CATEGORY_VIEW},
    {'key': 'colors.view', 'path': '/colors', 'roles': _EVERYONE, 'description': 'Visualizar cores/pinturas', 'category': CATEGORY_VIEW},
    {'key': 'paint_types.view', 'path': '/paint-types', 'roles': _EVERYONE, 'description': 'Visualizar tipos de pintura', 'category': CATEGORY_VIEW},
    {'key': 'optionals.view', 'path': '/optionals', 'roles': _EVERYONE, 'description': 'Visualizar opcionais', 'category': CATEGORY_VIEW},
    {'key': 'vehicles.view', 'path': '/vehicles', 'roles': _EVERYONE, 'description': 'Visualizar veículos', 'category': CATEGORY_VIEW},

    # Registration / editing
    {'key': 'brands.create', 'path': '/brands/new', 'roles': _REGISTRARS, 'description': 'Cadastrar novas marcas', 'category': CATEGORY_REGISTRATION},
    {'key': 'brands.edit', 'path': '/brands/:id/edit', 'roles': _REGISTRARS, 'description': 'Editar marcas existentes', 'category': CATEGORY_REGISTRATION},
    {'key': 'models.create', 'path': '/models/new', 'roles': _REGISTRARS, 'description': 'Cadastrar novos modelos', 'category': CATEGORY_REGISTRATION},
    {'key': 'models.edit', 'path': '/models/:id/edit', 'roles': _REGISTRARS, 'description': 'Editar modelos existentes', 'category': CATEGORY_REGISTRATION},
    {'key': 'versions.create', 'path': '/versions/new', 'roles': _REGISTRARS, 'description': 'Cadastrar novas versões', 'category': CATEGORY_REGISTRATION},
    {'key': 'versions.edit', 'path': '/versions/:id/edit', 'roles': _REGISTRARS, 'description': 'Editar versões existentes', 'category': CATEGORY_REGISTRATION},
    {'key': 'paint_types.create', 'path': '/paint-types/new', 'roles': _REGISTRARS, 'description': 'Cadastrar novos tipos de pintura', 'category': CATEGORY_REGISTRATION},
    {'key': 'paint_types.edit', 'path': '/paint-types/:id/edit', 'roles': _REGISTRARS, 'description': 'Editar tipos de pintura existentes', 'category': CATEGORY_REGISTRATION},
    {'key': 'optionals.create', 'path': '/optionals/new', 'roles': _REGISTRARS, 'description': 'Cadastrar novos opcionais', 'category': CATEGORY_REGISTRATION},
    {'key': 'optionals.edit', 'path': '/optionals/:id/edit', 'roles': _REGISTRARS, 'description': 'Editar opcionais existentes', 'category': CATEGORY_REGISTRATION},
    {'key': 'vehicles.create', 'path': '/vehicles/new', 'roles': _REGISTRARS, 'description': 'Cadastrar novos veículos', 'category': CATEGORY_REGISTRATION},
    {'key': 'vehicles.edit', 'path': '/vehicles/:id/edit', 'roles': _REGISTRARS, 'description': 'Editar veículos existentes', 'category': CATEGORY_REGISTRATION},
    {'key': 'direct_sales.create', 'path': '/direct-sales/new', 'roles': _REGISTRARS, 'description': 'Cadastrar novas vendas diretas', 'category': CATEGORY_REGISTRATION},
    {'key': 'direct_sales.edit', 'path': '/direct-sales/edit/:id', 'roles': _REGISTRARS, 'description': 'Editar vendas diretas existentes', 'category': CATEGORY_REGISTRATION},

    # Administrators only
    {'key': 'settings', 'path': '/settings', 'roles': _ADMINS, 'description': 'Configurações do sistema', 'category': CATEGORY_MANAGEMENT},
    {'key': 'admin.users', 'path': '/admin/users', 'roles': _ADMINS, 'description': 'Gerenciamento de usuários', 'category': CATEGORY_MANAGEMENT},
    # Permission page is readable by everyone; only admins can change it (enforced by the API)
    {'key': 'admin.permissions', 'path': '/admin/permissions', 'roles': _EVERYONE, 'description': 'Visualizar permissões do sistema', 'category': CATEGORY_MANAGEMENT},
]

__all__ = [
    'ROLE_ADMIN', 'ROLE_REGISTRAR', 'ROLE_USER', 'ALL_ROLES', 'CUSTOMIZABLE_ROLES',
    'ALL_CATEGORIES', 'ROUTE_PERMISSIONS',
]
