# app/routes/assignments.py
from flask import jsonify, request, abort
from flask_login import login_required, current_user

from inventory_manager.app.lifecycle import Action
from inventory_manager.app.routes import (assignments_bp as bp, permission_gate, lifecycle,
                                          json_payload)
from inventory_manager.app.services import assignments as service
from inventory_manager.app.services.returns import quick_return

ACTIONS = {
    'approve': Action.APPROVE,
    'activate': Action.ACTIVATE,
    'reject': Action.REJECT,
    'cancel': Action.CANCEL,
    'return': Action.MARK_RETURNED,
}


@bp.route('/')
@login_required
def list_assignments():
    assignments = service.list_assignments(permission_gate(), current_user,
                                           status=request.args.get('status', ''),
                                           item_id=request.args.get('item_id', type=int),
                                           user_id=request.args.get('user_id', type=int))
    return jsonify([assignment.to_dict() for assignment in assignments])


@bp.route('/', methods=['POST'])
@login_required
def add_assignment():
    assignment = service.create_assignment(permission_gate(), current_user, json_payload())
    return jsonify(assignment.to_dict()), 201


@bp.route('/<int:assignment_id>')
@login_required
def view_assignment(assignment_id):
    assignment = service.get_assignment(permission_gate(), current_user, assignment_id)
    body = assignment.to_dict()
    body['allowed_actions'] = lifecycle().machine_for(assignment).allowed_actions(assignment.status)
    return jsonify(body)


@bp.route('/<int:assignment_id>/quick-return', methods=['POST'])
@login_required
def quick_return_assignment(assignment_id):
    item_return = quick_return(lifecycle(), current_user, assignment_id, json_payload())
    return jsonify(item_return.to_dict())


@bp.route('/<int:assignment_id>/<action>', methods=['POST'])
@login_required
def transition_assignment(assignment_id, action):
    if action not in ACTIONS:
        abort(404)
    assignment = service.get_assignment(permission_gate(), current_user, assignment_id)
    lifecycle().transition(assignment, ACTIONS[action], current_user, json_payload())
    if action == 'return':
        return jsonify(assignment.item_return.to_dict()), 201
    return jsonify(assignment.to_dict())
