# app/routes/accounts.py
from flask import jsonify, request
from flask_login import login_required, current_user

from inventory_manager.app.routes import (accounts_bp as bp, permission_gate, lifecycle,
                                          json_payload, arg_flag)
from inventory_manager.app.services import users as service


@bp.route('/')
@login_required
def list_users():
    users = service.list_users(permission_gate(), current_user,
                               search=request.args.get('search', ''),
                               role=request.args.get('role', ''),
                               active=arg_flag('active'),
                               with_trashed=bool(arg_flag('with_trashed')))
    return jsonify([user.to_dict() for user in users])


@bp.route('/', methods=['POST'])
@login_required
def add_user():
    user = service.create_user(permission_gate(), current_user, json_payload())
    return jsonify(user.to_dict()), 201


@bp.route('/<int:user_id>')
@login_required
def view_user(user_id):
    user = service.get_user(permission_gate(), current_user, user_id)
    return jsonify(user.to_dict())


@bp.route('/<int:user_id>', methods=['PUT', 'PATCH'])
@login_required
def update_user(user_id):
    user = service.update_user(permission_gate(), current_user, user_id, json_payload())
    return jsonify(user.to_dict())


@bp.route('/<int:user_id>', methods=['DELETE'])
@login_required
def delete_user(user_id):
    service.delete_user(permission_gate(), current_user, user_id)
    return '', 204


@bp.route('/<int:user_id>/restore', methods=['POST'])
@login_required
def restore_user(user_id):
    user = service.restore_user(permission_gate(), current_user, user_id)
    return jsonify(user.to_dict())


@bp.route('/<int:user_id>/role', methods=['PUT'])
@login_required
def assign_role(user_id):
    user = service.assign_role(permission_gate(), current_user, user_id, json_payload())
    return jsonify(user.to_dict())


@bp.route('/<int:user_id>/role', methods=['DELETE'])
@login_required
def revoke_role(user_id):
    user = service.revoke_role(permission_gate(), current_user, user_id)
    return jsonify(user.to_dict())


@bp.route('/<int:user_id>/activate', methods=['POST'])
@login_required
def activate_user(user_id):
    user = service.activate_user(permission_gate(), current_user, user_id)
    return jsonify(user.to_dict())


@bp.route('/<int:user_id>/deactivate', methods=['POST'])
@login_required
def deactivate_user(user_id):
    force = bool(json_payload().get('force_return_items') or arg_flag('force_return_items'))
    user = service.deactivate_user(lifecycle(), current_user, user_id, force_return=force)
    return jsonify(user.to_dict())
