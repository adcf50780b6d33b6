# app/services/disposals.py
import logging

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import Conflict, InvalidTransition
from inventory_manager.app.forms import (DisposalForm, DisposalUpdateForm, DisposalApprovalForm,
                                         DisposalRejectionForm, DisposalExecutionForm,
                                         validate_payload)
from inventory_manager.app.lifecycle import Action, ActionSpec
from inventory_manager.app.models import (db, Disposal, DisposalStatus, Item, ItemStatus,
                                          record_history)
from inventory_manager.app.models.disposal import OPEN_DISPOSAL_STATUSES
from inventory_manager.app.models.mixins import utcnow
from .items import revert_item_status

logger = logging.getLogger(__name__)


def list_disposals(gate, actor, status=None, reason=None, with_trashed=False):
    gate.ensure(actor, 'disposals.view_any')
    query = Disposal.query if with_trashed else Disposal.live()
    if status:
        query = query.filter_by(status=status)
    if reason:
        query = query.filter_by(reason=reason)
    return query.order_by(Disposal.id.desc()).all()


def get_disposal(gate, actor, disposal_id, with_trashed=False):
    gate.ensure(actor, 'disposals.view')
    return Disposal.find(disposal_id, with_trashed=with_trashed)


def open_disposal_for(item):
    return (Disposal.live()
            .filter(Disposal.item_id == item.id, Disposal.status.in_(OPEN_DISPOSAL_STATUSES))
            .order_by(Disposal.id.desc())
            .first())


def create_disposal(gate, actor, payload):
    gate.ensure(actor, 'disposals.create')
    data = validate_payload(DisposalForm, payload)
    item = Item.find(data['item_id'])
    if open_disposal_for(item) is not None:
        raise Conflict(f'Item {item.property_number} already has a pending disposal.')
    if not item.can_be_disposed():
        raise Conflict(f"Item {item.property_number} cannot be disposed while '{item.status}'.")
    with unit_of_work():
        disposal = Disposal(requested_by=actor.id, status=DisposalStatus.PENDING.value,
                            requested_at=utcnow(), **data)
        db.session.add(disposal)
        item.status = ItemStatus.FOR_DISPOSAL.value
        record_history(item, actor, 'Disposal Requested', f"Reason: {data['reason']}")
    logger.info('disposal %s requested for item %s by user %s', disposal.id, item.id, actor.id)
    return disposal


def _ensure_pending(disposal, action, done):
    if disposal.status != DisposalStatus.PENDING.value:
        raise InvalidTransition(disposal.status, action, f'Only pending disposals can be {done}.')


def update_disposal(gate, actor, disposal_id, payload):
    gate.ensure(actor, 'disposals.update')
    disposal = Disposal.find(disposal_id)
    _ensure_pending(disposal, 'update', 'updated')
    data = validate_payload(DisposalUpdateForm, payload)
    with unit_of_work():
        for name, value in data.items():
            if value is None and name in ('reason', 'description'):
                continue
            setattr(disposal, name, value)
    return disposal


def cancel_disposal(gate, actor, disposal_id):
    """Withdraw a pending disposal request and give the item its status back"""
    gate.ensure(actor, 'disposals.delete')
    disposal = Disposal.find(disposal_id)
    _ensure_pending(disposal, 'cancel', 'cancelled')
    item = disposal.item
    with unit_of_work():
        disposal.soft_delete()
        item.status = revert_item_status(item)
        record_history(item, actor, 'Disposal Cancelled', f'Item back as {item.status}')
    logger.info('disposal %s cancelled by user %s', disposal.id, actor.id)
    return disposal


def _approve(engine, disposal, actor, data, previous):
    disposal.approved_by = actor.id
    disposal.approved_at = utcnow()
    for name in ('approval_notes', 'disposal_method', 'scheduled_for'):
        if data.get(name) is not None:
            setattr(disposal, name, data[name])
    disposal.item.status = ItemStatus.FOR_DISPOSAL.value
    record_history(disposal.item, actor, 'Disposal Approved')


def _reject(engine, disposal, actor, data, previous):
    disposal.approved_by = actor.id
    disposal.rejected_at = utcnow()
    disposal.approval_notes = data['approval_notes']
    item = disposal.item
    item.status = revert_item_status(item)
    record_history(item, actor, 'Disposal Rejected', data['approval_notes'])


def _execute(engine, disposal, actor, data, previous):
    disposal.executed_by = actor.id
    disposal.executed_at = utcnow()
    for name in ('execution_notes', 'disposal_cost', 'disposal_method', 'recipient'):
        if data.get(name) is not None:
            setattr(disposal, name, data[name])
    disposal.item.status = ItemStatus.DISPOSED.value
    record_history(disposal.item, actor, 'Item Disposed',
                   f'Method: {disposal.disposal_method}' if disposal.disposal_method else None)


# No dedicated reject permission exists; rejecting is part of approving
DISPOSAL_ACTIONS = {
    Action.APPROVE: ActionSpec('disposals.approve', _approve, DisposalApprovalForm),
    Action.REJECT: ActionSpec('disposals.approve', _reject, DisposalRejectionForm),
    Action.EXECUTE: ActionSpec('disposals.execute', _execute, DisposalExecutionForm),
}
