# app/services/items.py
import logging

from flask import current_app

from inventory_manager.app import qr
from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import Conflict
from inventory_manager.app.forms import ItemForm, ItemStatusForm, validate_payload
from inventory_manager.app.lifecycle import ensure_item_status_change
from inventory_manager.app.models import (db, Item, ItemHistory, ItemStatus, Maintenance,
                                          MaintenanceStatus, record_history)
from inventory_manager.app.models.mixins import serialize

logger = logging.getLogger(__name__)


def _editable_fields():
    return [c.name for c in Item.__table__.columns
            if c.name not in ('id', 'status', 'qr_code', 'qr_code_path', 'created_by',
                              'updated_by', 'created_at', 'updated_at', 'deleted_at')]


def list_items(gate, actor, q=None, status=None, category_id=None, location_id=None,
               with_trashed=False):
    gate.ensure(actor, 'items.view_any')
    query = Item.query if with_trashed else Item.live()
    if q:
        like = f'%{q}%'
        query = query.filter(db.or_(Item.name.ilike(like), Item.property_number.ilike(like),
                                    Item.serial_number.ilike(like), Item.barcode.ilike(like)))
    if status:
        query = query.filter_by(status=status)
    if category_id:
        query = query.filter_by(category_id=category_id)
    if location_id:
        query = query.filter_by(location_id=location_id)
    return query.order_by(Item.id.desc()).all()


def get_item(gate, actor, item_id, with_trashed=False):
    gate.ensure(actor, 'items.view')
    return Item.find(item_id, with_trashed=with_trashed)


def create_item(gate, actor, payload, generate_qr=False):
    gate.ensure(actor, 'items.create')
    data = validate_payload(ItemForm, payload)
    with unit_of_work():
        item = Item(**data)
        item.created_by = getattr(actor, 'id', None)
        db.session.add(item)
        db.session.flush()  # Flush to get the item ID
        record_history(item, actor, 'Item Created', f'Item {item.property_number} created.')
        if generate_qr:
            _write_qr(item)
    logger.info('item %s created by user %s', item.id, getattr(actor, 'id', None))
    return item


def update_item(gate, actor, item_id, payload):
    gate.ensure(actor, 'items.update')
    item = Item.find(item_id)
    current = {name: serialize(getattr(item, name)) for name in _editable_fields()}
    merged = dict(current)
    merged.update({k: v for k, v in (payload or {}).items() if k in current})
    data = validate_payload(ItemForm, merged, record_id=item.id)
    changed = [k for k in (payload or {}) if k in data and data[k] != getattr(item, k)]
    with unit_of_work():
        for name in _editable_fields():
            setattr(item, name, data.get(name))
        item.updated_by = getattr(actor, 'id', None)
        if changed:
            record_history(item, actor, 'Item Updated', 'Changed: ' + ', '.join(sorted(changed)))
    return item


def change_item_status(gate, actor, item_id, payload):
    gate.ensure(actor, 'items.update')
    item = Item.find(item_id)
    data = validate_payload(ItemStatusForm, payload)
    new_status = data['status']
    ensure_item_status_change(item.status, new_status)
    if new_status == item.status:
        return item
    previous = item.status
    with unit_of_work():
        item.status = new_status
        item.updated_by = getattr(actor, 'id', None)
        record_history(item, actor, 'Status Changed',
                       f"{previous} -> {new_status}" + (f": {data['reason']}" if data.get('reason') else ''))
    return item


def delete_item(gate, actor, item_id):
    gate.ensure(actor, 'items.delete')
    item = Item.find(item_id)
    if item.active_assignment() is not None:
        raise Conflict(f'Item {item.property_number} is currently assigned and cannot be deleted.')
    busy = Maintenance.query.filter_by(item_id=item.id,
                                       status=MaintenanceStatus.IN_PROGRESS.value).first()
    if busy is not None:
        raise Conflict(f'Item {item.property_number} is under maintenance and cannot be deleted.')
    with unit_of_work():
        item.soft_delete()
        record_history(item, actor, 'Item Deleted')
    return item


def restore_item(gate, actor, item_id):
    gate.ensure(actor, 'items.restore')
    item = Item.find(item_id, with_trashed=True)
    if not item.is_trashed:
        return item
    with unit_of_work():
        item.restore()
        record_history(item, actor, 'Item Restored')
    return item


def generate_qr_code(gate, actor, item_id, regenerate=False):
    """Create the item's QR code if it has none; an existing code is returned as is"""
    gate.ensure(actor, 'items.generate_qr')
    item = Item.find(item_id)
    if item.qr_code_path and not regenerate:
        return item
    old_path = item.qr_code_path
    with unit_of_work():
        _write_qr(item)
        record_history(item, actor, 'QR Code Generated' if not old_path else 'QR Code Regenerated')
    if old_path and old_path != item.qr_code_path:
        qr.delete_qr_code(old_path)
    return item


def _write_qr(item):
    item.qr_code = qr.qr_payload(item)
    item.qr_code_path = qr.write_qr_code(item, current_app.config['QR_CODE_FOLDER'])


def item_history(gate, actor, item_id):
    gate.ensure(actor, 'items.view_history')
    item = Item.find(item_id, with_trashed=True)
    return ItemHistory.query.filter_by(item_id=item.id).order_by(ItemHistory.id).all()


def revert_item_status(item):
    """Status an item falls back to once a pending disposal no longer holds it"""
    if item.active_assignment() is not None:
        return ItemStatus.ASSIGNED.value
    in_progress = Maintenance.query.filter_by(item_id=item.id,
                                              status=MaintenanceStatus.IN_PROGRESS.value).first()
    if in_progress is not None:
        return ItemStatus.IN_MAINTENANCE.value
    return ItemStatus.AVAILABLE.value
