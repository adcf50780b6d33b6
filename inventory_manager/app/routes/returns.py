# app/routes/returns.py
from flask import jsonify, request, abort
from flask_login import login_required, current_user

from inventory_manager.app.lifecycle import Action
from inventory_manager.app.routes import (returns_bp as bp, permission_gate, lifecycle,
                                          json_payload, arg_flag)
from inventory_manager.app.services import returns as service

ACTIONS = {
    'inspect': Action.INSPECT,
    'approve': Action.APPROVE,
    'reject': Action.REJECT,
}


@bp.route('/')
@login_required
def list_returns():
    returns = service.list_returns(permission_gate(), current_user,
                                   status=request.args.get('status', ''),
                                   is_late=arg_flag('is_late'))
    return jsonify([item_return.to_dict() for item_return in returns])


@bp.route('/<int:return_id>')
@login_required
def view_return(return_id):
    item_return = service.get_return(permission_gate(), current_user, return_id)
    return jsonify(item_return.to_dict())


@bp.route('/<int:return_id>/penalty', methods=['POST'])
@login_required
def calculate_penalty(return_id):
    item_return = service.calculate_penalty(permission_gate(), current_user, return_id,
                                            json_payload())
    return jsonify(item_return.to_dict())


@bp.route('/<int:return_id>/penalty-paid', methods=['POST'])
@login_required
def mark_penalty_paid(return_id):
    item_return = service.mark_penalty_paid(permission_gate(), current_user, return_id)
    return jsonify(item_return.to_dict())


@bp.route('/<int:return_id>/<action>', methods=['POST'])
@login_required
def transition_return(return_id, action):
    if action not in ACTIONS:
        abort(404)
    item_return = service.get_return(permission_gate(), current_user, return_id)
    lifecycle().transition(item_return, ACTIONS[action], current_user, json_payload())
    return jsonify(item_return.to_dict())
