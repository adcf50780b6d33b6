# app/services/assignments.py
import logging

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import Conflict
from inventory_manager.app.forms import (AssignmentForm, AssignmentApprovalForm,
                                         AssignmentRejectionForm, ReturnForm, validate_payload)
from inventory_manager.app.lifecycle import Action, ActionSpec
from inventory_manager.app.models import (db, Assignment, AssignmentStatus, Item, ItemStatus,
                                          User, record_history)
from inventory_manager.app.models.mixins import get_or_raise, utcnow
from inventory_manager.app.notifications import send_assignment_email
from .returns import record_return

logger = logging.getLogger(__name__)


def list_assignments(gate, actor, status=None, item_id=None, user_id=None):
    if gate.has_permission(actor, 'assignments.view_any'):
        query = Assignment.query
        if user_id:
            query = query.filter_by(user_id=user_id)
    else:
        gate.ensure(actor, 'assignments.view_own')
        query = Assignment.query.filter_by(user_id=actor.id)
    if status:
        query = query.filter_by(status=status)
    if item_id:
        query = query.filter_by(item_id=item_id)
    return query.order_by(Assignment.id.desc()).all()


def get_assignment(gate, actor, assignment_id):
    assignment = get_or_raise(Assignment, assignment_id)
    if not (gate.has_permission(actor, 'assignments.view')
            or gate.has_permission(actor, 'assignments.view_any')):
        gate.ensure(actor, 'assignments.view_own')
        if assignment.user_id != actor.id:
            gate.ensure(actor, 'assignments.view')
    return assignment


def ensure_assignable(item, exclude_id=None):
    """One active assignment per item, and only for items in an assignable state"""
    current = item.active_assignment()
    if current is not None and current.id != exclude_id:
        raise Conflict(f'Item {item.property_number} is currently assigned.')
    if not item.can_be_assigned():
        raise Conflict(f"Item {item.property_number} cannot be assigned while '{item.status}'.")


def open_assignment(item, custodian_id, actor, status, due_date=None, purpose=None, notes=None,
                    admin_notes=None, condition_on_assignment=None):
    """Queue a new assignment on the session; the caller owns the unit of work"""
    ensure_assignable(item)
    assignment = Assignment(item_id=item.id, user_id=custodian_id,
                            assigned_by=getattr(actor, 'id', None), status=status,
                            due_date=due_date, purpose=purpose, notes=notes,
                            admin_notes=admin_notes,
                            condition_on_assignment=condition_on_assignment)
    db.session.add(assignment)
    if status == AssignmentStatus.ACTIVE.value:
        _activate(assignment, item, actor)
    return assignment


def _activate(assignment, item, actor):
    assignment.assigned_date = utcnow()
    item.status = ItemStatus.ASSIGNED.value
    custodian = db.session.get(User, assignment.user_id)
    record_history(item, actor, 'Item Assigned',
                   f'Assigned to {custodian.username}' if custodian else None)


def create_assignment(gate, actor, payload):
    gate.ensure(actor, 'assignments.create')
    data = validate_payload(AssignmentForm, payload)
    item = Item.find(data['item_id'])
    status = data.get('status') or AssignmentStatus.ACTIVE.value
    with unit_of_work():
        assignment = open_assignment(item, data['user_id'], actor, status,
                                     due_date=data.get('due_date'),
                                     purpose=data.get('purpose'), notes=data.get('notes'),
                                     admin_notes=data.get('admin_notes'),
                                     condition_on_assignment=data.get('condition_on_assignment'))
    logger.info('assignment %s (%s) created for item %s by user %s', assignment.id,
                assignment.status, item.id, getattr(actor, 'id', None))
    if assignment.status == AssignmentStatus.ACTIVE.value:
        send_assignment_email(assignment)
    return assignment


def _approve(engine, assignment, actor, data, previous):
    assignment.approved_by = actor.id
    assignment.approved_at = utcnow()
    if data.get('admin_notes'):
        assignment.admin_notes = data['admin_notes']


def _activate_effect(engine, assignment, actor, data, previous):
    item = assignment.item
    ensure_assignable(item, exclude_id=assignment.id)
    _activate(assignment, item, actor)


def _reject(engine, assignment, actor, data, previous):
    assignment.admin_notes = data['admin_notes']
    assignment.cancelled_at = utcnow()


def _cancel(engine, assignment, actor, data, previous):
    assignment.cancelled_at = utcnow()
    if data.get('admin_notes'):
        assignment.admin_notes = data['admin_notes']
    if previous == AssignmentStatus.ACTIVE.value:
        item = assignment.item
        item.status = ItemStatus.AVAILABLE.value
        record_history(item, actor, 'Assignment Cancelled',
                       f'Assignment {assignment.id} cancelled')


def _mark_returned(engine, assignment, actor, data, previous):
    record_return(assignment, actor, data)


ASSIGNMENT_ACTIONS = {
    Action.APPROVE: ActionSpec('assignments.approve', _approve, AssignmentApprovalForm),
    Action.ACTIVATE: ActionSpec('assignments.approve', _activate_effect,
                                after_commit=send_assignment_email),
    Action.REJECT: ActionSpec('assignments.reject', _reject, AssignmentRejectionForm),
    Action.CANCEL: ActionSpec('assignments.update', _cancel, AssignmentApprovalForm),
    Action.MARK_RETURNED: ActionSpec('returns.create', _mark_returned, ReturnForm),
}
