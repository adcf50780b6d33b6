# app/services/returns.py
import logging
from decimal import Decimal

from flask import current_app

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.forms import (InspectionForm, ReturnRejectionForm, PenaltyForm,
                                         validate_payload)
from inventory_manager.app.lifecycle import Action, ActionSpec
from inventory_manager.app.models import (db, ItemReturn, ReturnStatus, ReturnCondition, ItemStatus,
                                          Assignment, record_history)
from inventory_manager.app.models.mixins import get_or_raise, utcnow

logger = logging.getLogger(__name__)


def list_returns(gate, actor, status=None, is_late=None):
    gate.ensure(actor, 'returns.view_any')
    query = ItemReturn.query
    if status:
        query = query.filter_by(status=status)
    if is_late is not None:
        query = query.filter_by(is_late=is_late)
    return query.order_by(ItemReturn.id.desc()).all()


def get_return(gate, actor, return_id):
    gate.ensure(actor, 'returns.view')
    return get_or_raise(ItemReturn, return_id)


def record_return(assignment, actor, data):
    """Open the inspection record for a returned assignment.

    Runs inside the assignment's ``mark_returned`` transition.
    """
    return_date = data.get('return_date') or utcnow()
    item_return = ItemReturn(assignment_id=assignment.id,
                             returned_by=getattr(actor, 'id', None),
                             status=ReturnStatus.PENDING_INSPECTION.value,
                             return_date=return_date,
                             condition_on_return=data['condition_on_return'],
                             is_damaged=bool(data.get('is_damaged')),
                             damage_description=data.get('damage_description'),
                             return_notes=data.get('return_notes'),
                             is_late=False, days_late=0, penalty_paid=False)
    item_return.calculate_late_days(assignment.due_date)
    db.session.add(item_return)
    assignment.item_return = item_return
    assignment.returned_date = return_date
    item = assignment.item
    if item.status == ItemStatus.ASSIGNED.value and item.active_assignment() is None:
        item.status = ItemStatus.AVAILABLE.value
    record_history(item, actor, 'Item Returned',
                   f'Returned in {item_return.condition_on_return} condition'
                   + (f', {item_return.days_late} day(s) late' if item_return.is_late else ''))
    return item_return


def _inspect(engine, item_return, actor, data, previous):
    item_return.inspected_by = actor.id
    item_return.inspection_date = utcnow()
    if 'is_damaged' in data:
        item_return.is_damaged = bool(data['is_damaged'])
    if data.get('damage_description'):
        item_return.damage_description = data['damage_description']
    if data.get('inspection_notes'):
        item_return.inspection_notes = data['inspection_notes']
    if data.get('item_condition'):
        item = item_return.assignment.item
        item.condition = data['item_condition']
        record_history(item, actor, 'Condition Updated',
                       f"Condition set to {data['item_condition']} on inspection")


def _approve(engine, item_return, actor, data, previous):
    item = item_return.assignment.item
    item.status = ItemStatus.DAMAGED.value if item_return.is_damaged else ItemStatus.AVAILABLE.value
    record_history(item, actor, 'Return Approved', f'Item back as {item.status}')


def _reject(engine, item_return, actor, data, previous):
    item_return.inspection_notes = data['inspection_notes']


RETURN_ACTIONS = {
    Action.INSPECT: ActionSpec('returns.inspect', _inspect, InspectionForm),
    Action.APPROVE: ActionSpec('returns.approve_condition', _approve),
    Action.REJECT: ActionSpec('returns.approve_condition', _reject, ReturnRejectionForm),
}


def calculate_penalty(gate, actor, return_id, payload=None):
    gate.ensure(actor, 'returns.update')
    item_return = get_or_raise(ItemReturn, return_id)
    data = validate_payload(PenaltyForm, payload)
    per_day = data.get('per_day')
    if per_day is None:
        per_day = Decimal(str(current_app.config['LATE_RETURN_PENALTY_PER_DAY']))
    with unit_of_work():
        item_return.calculate_penalty(per_day)
    logger.info('penalty for return %s set to %s', item_return.id, item_return.penalty_amount)
    return item_return


def mark_penalty_paid(gate, actor, return_id):
    gate.ensure(actor, 'returns.update')
    item_return = get_or_raise(ItemReturn, return_id)
    with unit_of_work():
        item_return.penalty_paid = True
    return item_return


def quick_return(engine, actor, assignment_id, payload):
    """Return an assignment and, when it comes back in good shape, close the
    inspection at once. Everything commits together."""
    assignment = get_or_raise(Assignment, assignment_id)
    with unit_of_work():
        engine.transition(assignment, Action.MARK_RETURNED, actor, payload)
        item_return = assignment.item_return
        if (item_return.condition_on_return == ReturnCondition.GOOD.value
                and not item_return.is_damaged
                and engine.is_permitted(item_return, Action.INSPECT, actor)
                and engine.is_permitted(item_return, Action.APPROVE, actor)):
            engine.transition(item_return, Action.INSPECT, actor,
                              {'is_damaged': False, 'inspection_notes': 'Quick return'})
            engine.transition(item_return, Action.APPROVE, actor, {})
    return assignment.item_return
