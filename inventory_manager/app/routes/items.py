# app/routes/items.py
from flask import jsonify, request, send_file
from flask_login import login_required, current_user

from inventory_manager.app.errors import NotFound
from inventory_manager.app.routes import items_bp as bp, permission_gate, json_payload, arg_flag
from inventory_manager.app.services import items as service


@bp.route('/')
@login_required
def list_items():
    items = service.list_items(permission_gate(), current_user,
                               q=request.args.get('q', ''),
                               status=request.args.get('status', ''),
                               category_id=request.args.get('category_id', type=int),
                               location_id=request.args.get('location_id', type=int),
                               with_trashed=bool(arg_flag('with_trashed')))
    return jsonify([item.to_dict() for item in items])


@bp.route('/', methods=['POST'])
@login_required
def create_item():
    payload = json_payload()
    item = service.create_item(permission_gate(), current_user, payload,
                               generate_qr=bool(payload.get('generate_qr')))
    return jsonify(item.to_dict()), 201


@bp.route('/<int:item_id>')
@login_required
def view_item(item_id):
    item = service.get_item(permission_gate(), current_user, item_id,
                            with_trashed=bool(arg_flag('with_trashed')))
    return jsonify(item.to_dict())


@bp.route('/<int:item_id>', methods=['PUT', 'PATCH'])
@login_required
def update_item(item_id):
    item = service.update_item(permission_gate(), current_user, item_id, json_payload())
    return jsonify(item.to_dict())


@bp.route('/<int:item_id>', methods=['DELETE'])
@login_required
def delete_item(item_id):
    service.delete_item(permission_gate(), current_user, item_id)
    return '', 204


@bp.route('/<int:item_id>/restore', methods=['POST'])
@login_required
def restore_item(item_id):
    item = service.restore_item(permission_gate(), current_user, item_id)
    return jsonify(item.to_dict())


@bp.route('/<int:item_id>/status', methods=['POST'])
@login_required
def change_status(item_id):
    item = service.change_item_status(permission_gate(), current_user, item_id, json_payload())
    return jsonify(item.to_dict())


@bp.route('/<int:item_id>/qr', methods=['POST'])
@login_required
def generate_qr(item_id):
    item = service.generate_qr_code(permission_gate(), current_user, item_id,
                                    regenerate=bool(json_payload().get('regenerate')))
    return jsonify(item.to_dict())


@bp.route('/<int:item_id>/qr')
@login_required
def get_item_qr(item_id):
    gate = permission_gate()
    gate.ensure(current_user, 'items.print_qr')
    item = service.get_item(gate, current_user, item_id)
    if not item.qr_code_path:
        raise NotFound('QR code', item_id)
    return send_file(item.qr_code_path, mimetype='image/png')


@bp.route('/<int:item_id>/history')
@login_required
def item_history(item_id):
    history = service.item_history(permission_gate(), current_user, item_id)
    return jsonify([entry.to_dict() for entry in history])
