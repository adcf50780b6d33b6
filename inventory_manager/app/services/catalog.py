# app/services/catalog.py
"""Categories and locations share one set of operations keyed by model."""
import logging

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import Conflict, UniquenessConflict
from inventory_manager.app.forms import CategoryForm, LocationForm, field_names, validate_payload
from inventory_manager.app.models import db, Category, Location, Item, ItemStatus, record_history
from inventory_manager.app.models.catalog import normalize_code

logger = logging.getLogger(__name__)

CATALOGS = {
    Category: ('categories', 'category', CategoryForm),
    Location: ('locations', 'location', LocationForm),
}


def _perm(model, action):
    return f'{CATALOGS[model][0]}.{action}'


def list_records(gate, actor, model, search=None, is_active=None, with_trashed=False):
    gate.ensure(actor, _perm(model, 'view_any'))
    query = model.query if with_trashed else model.live()
    if search:
        like = f'%{search}%'
        query = query.filter(db.or_(model.name.ilike(like), model.code.ilike(like),
                                    model.description.ilike(like)))
    if is_active is not None:
        query = query.filter_by(is_active=is_active)
    return query.order_by(model.name).all()


def get_record(gate, actor, model, record_id, with_trashed=False):
    gate.ensure(actor, _perm(model, 'view'))
    return model.find(record_id, with_trashed=with_trashed)


def create_record(gate, actor, model, payload):
    gate.ensure(actor, _perm(model, 'create'))
    data = validate_payload(CATALOGS[model][2], payload)
    data.setdefault('is_active', True)
    with unit_of_work():
        record = model(**data)
        db.session.add(record)
    logger.info('%s %s created by user %s', CATALOGS[model][1], record.code,
                getattr(actor, 'id', None))
    return record


def update_record(gate, actor, model, record_id, payload):
    gate.ensure(actor, _perm(model, 'update'))
    record = model.find(record_id)
    form_class = CATALOGS[model][2]
    merged = {name: getattr(record, name) for name in field_names(form_class)}
    merged.update({k: v for k, v in (payload or {}).items() if k in merged})
    data = validate_payload(form_class, merged, record_id=record.id)
    if data.get('is_active') is False and record.is_active:
        _ensure_no_active_items(record)
    with unit_of_work():
        for name, value in data.items():
            setattr(record, name, normalize_code(value) if name == 'code' else value)
    return record


def delete_record(gate, actor, model, record_id):
    gate.ensure(actor, _perm(model, 'delete'))
    record = model.find(record_id)
    if record.live_items().count() > 0:
        label = CATALOGS[model][1]
        raise Conflict(f"Cannot delete {label} '{record.name}' because it has associated items. "
                       "Please reassign or remove items first.")
    with unit_of_work():
        record.soft_delete()
    logger.info('%s %s deleted by user %s', CATALOGS[model][1], record.code,
                getattr(actor, 'id', None))
    return record


def restore_record(gate, actor, model, record_id):
    gate.ensure(actor, _perm(model, 'update'))
    record = model.find(record_id, with_trashed=True)
    if record.is_trashed:
        if model.live().filter(model.code == record.code).first() is not None:
            raise UniquenessConflict({'code': ['The code has already been taken.']})
        with unit_of_work():
            record.restore()
    return record


def toggle_active(gate, actor, model, record_id):
    gate.ensure(actor, _perm(model, 'update'))
    record = model.find(record_id)
    if record.is_active:
        _ensure_no_active_items(record)
    with unit_of_work():
        record.is_active = not record.is_active
    return record


def reassign_items(gate, actor, model, source_id, target_id):
    """Move every live item from one category/location to another"""
    gate.ensure(actor, _perm(model, 'update'))
    gate.ensure(actor, 'items.update')
    source = model.find(source_id)
    target = model.find(target_id)
    if source.id == target.id:
        raise Conflict(f'Cannot reassign items of a {CATALOGS[model][1]} to itself.')
    column = model.item_foreign_key
    items = source.live_items().all()
    with unit_of_work():
        for item in items:
            setattr(item, column, target.id)
            record_history(item, actor, 'Item Reassigned',
                           f'{CATALOGS[model][1].title()} {source.code} -> {target.code}')
    return len(items)


def _ensure_no_active_items(record):
    active = record.live_items().filter(Item.status != ItemStatus.DISPOSED.value).count()
    if active:
        raise Conflict(f"Cannot deactivate {record.name} because it has {active} active items.")
