# app/services/maintenance.py
import logging

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import Conflict, InvalidTransition
from inventory_manager.app.forms import (MaintenanceForm, MaintenanceScheduleForm,
                                         MaintenanceCompletionForm, MaintenanceCancelForm,
                                         MaintenanceAssignForm, MaintenanceCostForm,
                                         validate_payload)
from inventory_manager.app.lifecycle import Action, ActionSpec, MAINTENANCE_MACHINE
from inventory_manager.app.models import (db, Maintenance, MaintenanceStatus, MaintenancePriority,
                                          Item, ItemStatus, record_history)
from inventory_manager.app.models.mixins import get_or_raise, utcnow

logger = logging.getLogger(__name__)


def list_maintenance(gate, actor, status=None, item_id=None, priority=None):
    gate.ensure(actor, 'maintenance.view_any')
    query = Maintenance.query
    if status:
        query = query.filter_by(status=status)
    if item_id:
        query = query.filter_by(item_id=item_id)
    if priority:
        query = query.filter_by(priority=priority)
    return query.order_by(Maintenance.id.desc()).all()


def get_maintenance(gate, actor, maintenance_id):
    gate.ensure(actor, 'maintenance.view')
    return get_or_raise(Maintenance, maintenance_id)


def create_maintenance(gate, actor, payload):
    gate.ensure(actor, 'maintenance.create')
    data = validate_payload(MaintenanceForm, payload)
    item = Item.find(data['item_id'])
    if not item.can_be_maintained():
        raise Conflict(f"Item {item.property_number} cannot be maintained while '{item.status}'.")
    data.setdefault('priority', MaintenancePriority.MEDIUM.value)
    with unit_of_work():
        maintenance = Maintenance(requested_by=actor.id, status=MaintenanceStatus.PENDING.value,
                                  **data)
        db.session.add(maintenance)
        record_history(item, actor, 'Maintenance Requested', data['title'])
    logger.info('maintenance %s requested for item %s by user %s', maintenance.id, item.id,
                actor.id)
    return maintenance


def _schedule(engine, maintenance, actor, data, previous):
    maintenance.scheduled_date = data['scheduled_date']
    if data.get('estimated_duration') is not None:
        maintenance.estimated_duration = data['estimated_duration']
    if data.get('assigned_to') is not None:
        maintenance.assigned_to = data['assigned_to']


def _start(engine, maintenance, actor, data, previous):
    item = maintenance.item
    maintenance.started_at = utcnow()
    maintenance.item_status_before = item.status
    maintenance.item_condition_before = item.condition
    item.status = ItemStatus.IN_MAINTENANCE.value
    record_history(item, actor, 'Maintenance Started', maintenance.title)


def _complete(engine, maintenance, actor, data, previous):
    item = maintenance.item
    now = utcnow()
    maintenance.completed_at = now
    if maintenance.started_at is not None:
        maintenance.actual_duration = int((now - maintenance.started_at).total_seconds() // 60)
    for name in ('action_taken', 'recommendations', 'actual_cost', 'notes'):
        if data.get(name) is not None:
            setattr(maintenance, name, data[name])
    item.status = data.get('item_status_after') or ItemStatus.AVAILABLE.value
    item.condition = data.get('item_condition_after') or item.condition
    item.last_maintenance_date = now.date()
    maintenance.item_status_after = item.status
    maintenance.item_condition_after = item.condition
    record_history(item, actor, 'Maintenance Completed',
                   f'{maintenance.title}: {item.status}, {item.condition}')


def _cancel(engine, maintenance, actor, data, previous):
    if data.get('notes'):
        maintenance.notes = data['notes']
    if previous == MaintenanceStatus.IN_PROGRESS.value:
        item = maintenance.item
        item.status = maintenance.item_status_before or ItemStatus.AVAILABLE.value
        record_history(item, actor, 'Maintenance Cancelled', maintenance.title)


MAINTENANCE_ACTIONS = {
    Action.SCHEDULE: ActionSpec('maintenance.schedule', _schedule, MaintenanceScheduleForm),
    Action.START: ActionSpec('maintenance.update', _start),
    Action.COMPLETE: ActionSpec('maintenance.complete', _complete, MaintenanceCompletionForm),
    Action.CANCEL: ActionSpec('maintenance.update', _cancel, MaintenanceCancelForm),
}


def assign_maintenance(gate, actor, maintenance_id, payload):
    gate.ensure(actor, 'maintenance.assign')
    maintenance = get_or_raise(Maintenance, maintenance_id)
    if MAINTENANCE_MACHINE.is_terminal(maintenance.status):
        raise InvalidTransition(maintenance.status, 'assign')
    data = validate_payload(MaintenanceAssignForm, payload)
    with unit_of_work():
        maintenance.assigned_to = data['assigned_to']
    return maintenance


def approve_cost(gate, actor, maintenance_id, payload=None):
    gate.ensure(actor, 'maintenance.approve_cost')
    maintenance = get_or_raise(Maintenance, maintenance_id)
    if MAINTENANCE_MACHINE.is_terminal(maintenance.status):
        raise InvalidTransition(maintenance.status, 'approve_cost')
    data = validate_payload(MaintenanceCostForm, payload)
    with unit_of_work():
        if data.get('estimated_cost') is not None:
            maintenance.estimated_cost = data['estimated_cost']
        maintenance.cost_approved = True
        maintenance.approved_by = actor.id
    return maintenance
