# app/routes/maintenance.py
from flask import jsonify, request, abort
from flask_login import login_required, current_user

from inventory_manager.app.lifecycle import Action
from inventory_manager.app.routes import (maintenance_bp as bp, permission_gate, lifecycle,
                                          json_payload)
from inventory_manager.app.services import maintenance as service

ACTIONS = {
    'schedule': Action.SCHEDULE,
    'start': Action.START,
    'complete': Action.COMPLETE,
    'cancel': Action.CANCEL,
}


@bp.route('/')
@login_required
def list_maintenance():
    records = service.list_maintenance(permission_gate(), current_user,
                                       status=request.args.get('status', ''),
                                       item_id=request.args.get('item_id', type=int),
                                       priority=request.args.get('priority', ''))
    return jsonify([record.to_dict() for record in records])


@bp.route('/', methods=['POST'])
@login_required
def add_maintenance():
    record = service.create_maintenance(permission_gate(), current_user, json_payload())
    return jsonify(record.to_dict()), 201


@bp.route('/<int:maintenance_id>')
@login_required
def view_maintenance(maintenance_id):
    record = service.get_maintenance(permission_gate(), current_user, maintenance_id)
    return jsonify(record.to_dict())


@bp.route('/<int:maintenance_id>/assign', methods=['POST'])
@login_required
def assign_maintenance(maintenance_id):
    record = service.assign_maintenance(permission_gate(), current_user, maintenance_id,
                                        json_payload())
    return jsonify(record.to_dict())


@bp.route('/<int:maintenance_id>/approve-cost', methods=['POST'])
@login_required
def approve_cost(maintenance_id):
    record = service.approve_cost(permission_gate(), current_user, maintenance_id, json_payload())
    return jsonify(record.to_dict())


@bp.route('/<int:maintenance_id>/<action>', methods=['POST'])
@login_required
def transition_maintenance(maintenance_id, action):
    if action not in ACTIONS:
        abort(404)
    record = service.get_maintenance(permission_gate(), current_user, maintenance_id)
    lifecycle().transition(record, ACTIONS[action], current_user, json_payload())
    return jsonify(record.to_dict())
