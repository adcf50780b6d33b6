# app/routes/disposals.py
from flask import jsonify, request, abort
from flask_login import login_required, current_user

from inventory_manager.app.lifecycle import Action
from inventory_manager.app.routes import (disposals_bp as bp, permission_gate, lifecycle,
                                          json_payload, arg_flag)
from inventory_manager.app.services import disposals as service

ACTIONS = {
    'approve': Action.APPROVE,
    'reject': Action.REJECT,
    'execute': Action.EXECUTE,
}


@bp.route('/')
@login_required
def list_disposals():
    disposals = service.list_disposals(permission_gate(), current_user,
                                       status=request.args.get('status', ''),
                                       reason=request.args.get('reason', ''),
                                       with_trashed=bool(arg_flag('with_trashed')))
    return jsonify([disposal.to_dict() for disposal in disposals])


@bp.route('/', methods=['POST'])
@login_required
def request_disposal():
    disposal = service.create_disposal(permission_gate(), current_user, json_payload())
    return jsonify(disposal.to_dict()), 201


@bp.route('/<int:disposal_id>')
@login_required
def view_disposal(disposal_id):
    disposal = service.get_disposal(permission_gate(), current_user, disposal_id)
    return jsonify(disposal.to_dict())


@bp.route('/<int:disposal_id>', methods=['PUT', 'PATCH'])
@login_required
def update_disposal(disposal_id):
    disposal = service.update_disposal(permission_gate(), current_user, disposal_id, json_payload())
    return jsonify(disposal.to_dict())


@bp.route('/<int:disposal_id>', methods=['DELETE'])
@login_required
def cancel_disposal(disposal_id):
    service.cancel_disposal(permission_gate(), current_user, disposal_id)
    return '', 204


@bp.route('/<int:disposal_id>/<action>', methods=['POST'])
@login_required
def transition_disposal(disposal_id, action):
    if action not in ACTIONS:
        abort(404)
    disposal = service.get_disposal(permission_gate(), current_user, disposal_id)
    lifecycle().transition(disposal, ACTIONS[action], current_user, json_payload())
    return jsonify(disposal.to_dict())
