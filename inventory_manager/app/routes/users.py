# app/routes/users.py
import logging

from flask import jsonify, request, Blueprint
from flask_login import login_user, current_user, logout_user, login_required

from inventory_manager.app.errors import AuthorizationDenied
from inventory_manager.app.forms import LoginForm, validate_payload
from inventory_manager.app.models.user import User
from inventory_manager.app.routes import permission_gate

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__, url_prefix='/auth')


@users_bp.route("/login", methods=['POST'])
def login():
    data = validate_payload(LoginForm, request.get_json(silent=True) or {})
    user = User.live().filter_by(email=data['email'].lower()).first()
    if user is None or not user.check_password(data['password']) or not user.is_active:
        logger.info('failed login for %s', data['email'])
        raise AuthorizationDenied(message='Login Unsuccessful. Please check email and password')
    login_user(user, remember=bool(data.get('remember')))
    return jsonify(_profile(user))


@users_bp.route("/logout", methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out.'})


@users_bp.route("/me")
@login_required
def me():
    return jsonify(_profile(current_user))


def _profile(user):
    body = user.to_dict()
    body['permissions'] = sorted(permission_gate().permissions_for(user.role))
    return body
