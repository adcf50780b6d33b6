# app/routes/__init__.py
from flask import Blueprint, current_app, request

# Create blueprints
items_bp = Blueprint('items', __name__, url_prefix='/items')
categories_bp = Blueprint('categories', __name__, url_prefix='/categories')
locations_bp = Blueprint('locations', __name__, url_prefix='/locations')
assignments_bp = Blueprint('assignments', __name__, url_prefix='/assignments')
returns_bp = Blueprint('returns', __name__, url_prefix='/returns')
disposals_bp = Blueprint('disposals', __name__, url_prefix='/disposals')
maintenance_bp = Blueprint('maintenance', __name__, url_prefix='/maintenance')
requests_bp = Blueprint('requests', __name__, url_prefix='/requests')
accounts_bp = Blueprint('accounts', __name__, url_prefix='/users')


def permission_gate():
    return current_app.extensions['permission_gate']


def lifecycle():
    return current_app.extensions['lifecycle']


def json_payload():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def arg_flag(name):
    value = request.args.get(name)
    if value is None:
        return None
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Import views after blueprints are created
from . import (items, catalog, assignments, returns, disposals, maintenance,  # noqa: E402,F401
               requests, accounts)
