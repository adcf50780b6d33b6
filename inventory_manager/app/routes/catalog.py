# app/routes/catalog.py
"""Categories and locations expose the same endpoints on their own blueprints."""
from flask import jsonify, request
from flask_login import login_required, current_user

from inventory_manager.app.models import Category, Location
from inventory_manager.app.routes import (categories_bp, locations_bp, permission_gate,
                                          json_payload, arg_flag)
from inventory_manager.app.services import catalog as service


def register_catalog_routes(bp, model):
    @bp.route('/')
    @login_required
    def list_records():
        records = service.list_records(permission_gate(), current_user, model,
                                       search=request.args.get('search', ''),
                                       is_active=arg_flag('is_active'),
                                       with_trashed=bool(arg_flag('with_trashed')))
        return jsonify([record.to_dict() for record in records])

    @bp.route('/', methods=['POST'])
    @login_required
    def create_record():
        record = service.create_record(permission_gate(), current_user, model, json_payload())
        return jsonify(record.to_dict()), 201

    @bp.route('/<int:record_id>')
    @login_required
    def view_record(record_id):
        record = service.get_record(permission_gate(), current_user, model, record_id)
        return jsonify(record.to_dict())

    @bp.route('/<int:record_id>', methods=['PUT', 'PATCH'])
    @login_required
    def update_record(record_id):
        record = service.update_record(permission_gate(), current_user, model, record_id,
                                       json_payload())
        return jsonify(record.to_dict())

    @bp.route('/<int:record_id>', methods=['DELETE'])
    @login_required
    def delete_record(record_id):
        service.delete_record(permission_gate(), current_user, model, record_id)
        return '', 204

    @bp.route('/<int:record_id>/restore', methods=['POST'])
    @login_required
    def restore_record(record_id):
        record = service.restore_record(permission_gate(), current_user, model, record_id)
        return jsonify(record.to_dict())

    @bp.route('/<int:record_id>/toggle', methods=['POST'])
    @login_required
    def toggle_record(record_id):
        record = service.toggle_active(permission_gate(), current_user, model, record_id)
        return jsonify(record.to_dict())

    @bp.route('/<int:record_id>/reassign', methods=['POST'])
    @login_required
    def reassign_items(record_id):
        moved = service.reassign_items(permission_gate(), current_user, model, record_id,
                                       json_payload().get('target_id'))
        return jsonify({'moved': moved})


register_catalog_routes(categories_bp, Category)
register_catalog_routes(locations_bp, Location)
