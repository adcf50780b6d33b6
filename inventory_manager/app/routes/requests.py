# app/routes/requests.py
from flask import jsonify, request, abort
from flask_login import login_required, current_user

from inventory_manager.app.lifecycle import Action
from inventory_manager.app.routes import (requests_bp as bp, permission_gate, lifecycle,
                                          json_payload, arg_flag)
from inventory_manager.app.services import requests as service

ACTIONS = {
    'start-review': Action.START_REVIEW,
    'approve': Action.APPROVE,
    'reject': Action.REJECT,
    'request-changes': Action.REQUEST_CHANGES,
    'resubmit': Action.RESUBMIT,
    'complete': Action.COMPLETE,
    'cancel': Action.CANCEL,
}


def _with_abilities(record):
    gate = permission_gate()
    body = record.to_dict()
    body['can_edit'] = service.can_edit(record, current_user, gate)
    body['can_review'] = service.can_review(record, current_user, gate)
    body['can_cancel'] = service.can_cancel(record, current_user, gate)
    return body


@bp.route('/')
@login_required
def list_requests():
    records = service.list_requests(permission_gate(), current_user,
                                    status=request.args.get('status', ''),
                                    request_type=request.args.get('type', ''),
                                    user_id=request.args.get('user_id', type=int),
                                    with_trashed=bool(arg_flag('with_trashed')))
    return jsonify([record.to_dict() for record in records])


@bp.route('/', methods=['POST'])
@login_required
def submit_request():
    record = service.create_request(permission_gate(), current_user, json_payload())
    return jsonify(_with_abilities(record)), 201


@bp.route('/<int:request_id>')
@login_required
def view_request(request_id):
    record = service.get_request(permission_gate(), current_user, request_id)
    return jsonify(_with_abilities(record))


@bp.route('/<int:request_id>', methods=['PUT', 'PATCH'])
@login_required
def update_request(request_id):
    record = service.get_request(permission_gate(), current_user, request_id)
    lifecycle().transition(record, Action.EDIT, current_user, json_payload())
    return jsonify(_with_abilities(record))


@bp.route('/<int:request_id>/comments')
@login_required
def list_comments(request_id):
    comments = service.list_comments(permission_gate(), current_user, request_id)
    return jsonify([comment.to_dict() for comment in comments])


@bp.route('/<int:request_id>/comments', methods=['POST'])
@login_required
def add_comment(request_id):
    comment = service.add_comment(permission_gate(), current_user, request_id, json_payload())
    return jsonify(comment.to_dict()), 201


@bp.route('/<int:request_id>/<action>', methods=['POST'])
@login_required
def transition_request(request_id, action):
    if action not in ACTIONS:
        abort(404)
    record = service.get_request(permission_gate(), current_user, request_id)
    lifecycle().transition(record, ACTIONS[action], current_user, json_payload())
    return jsonify(_with_abilities(record))
