from decimal import Decimal

import pytest

from inventory_manager.app.errors import (AuthorizationDenied, Conflict, InvalidTransition,
                                          ValidationFailed)
from inventory_manager.app.lifecycle import Action
from inventory_manager.app.models import ItemHistory
from inventory_manager.app.services import disposals


def request_disposal(gate, actor, item, **extra):
    payload = {'item_id': item.id, 'reason': 'obsolete',
               'description': 'Unit no longer boots and parts are unavailable.'}
    payload.update(extra)
    return disposals.create_disposal(gate, actor, payload)


def test_disposal_round_trip(gate, engine, property_admin, admin, item):
    disposal = request_disposal(gate, property_admin, item)
    assert disposal.status == 'pending'
    assert disposal.requested_by == property_admin.id
    assert item.status == 'for_disposal'

    engine.transition(disposal, Action.APPROVE, property_admin,
                      {'approval_notes': 'Approved by committee', 'disposal_method': 'recycle'})
    assert disposal.status == 'approved'
    assert disposal.approved_at is not None
    assert disposal.disposal_method == 'recycle'
    assert item.status == 'for_disposal'

    engine.transition(disposal, Action.EXECUTE, admin, {'execution_notes': 'Sent to recycler'})
    assert disposal.status == 'executed'
    assert disposal.executed_by == admin.id
    assert item.status == 'disposed'

    events = [h.event_type for h in ItemHistory.query.filter_by(item_id=item.id)
                                     .order_by(ItemHistory.id)]
    assert events == ['Disposal Requested', 'Disposal Approved', 'Item Disposed']


def test_execute_requires_approval(gate, engine, property_admin, admin, item):
    disposal = request_disposal(gate, property_admin, item)
    with pytest.raises(InvalidTransition) as excinfo:
        engine.transition(disposal, Action.EXECUTE, admin)
    assert excinfo.value.current == 'pending'
    assert disposal.status == 'pending'


def test_property_administrator_cannot_execute(gate, engine, property_admin, item):
    disposal = request_disposal(gate, property_admin, item)
    engine.transition(disposal, Action.APPROVE, property_admin)
    with pytest.raises(AuthorizationDenied):
        engine.transition(disposal, Action.EXECUTE, property_admin)


def test_rejection_requires_notes_and_restores_item(gate, engine, property_admin, item):
    disposal = request_disposal(gate, property_admin, item)
    with pytest.raises(ValidationFailed):
        engine.transition(disposal, Action.REJECT, property_admin, {'approval_notes': ''})
    assert disposal.status == 'pending'

    engine.transition(disposal, Action.REJECT, property_admin,
                      {'approval_notes': 'Still serviceable'})
    assert disposal.status == 'rejected'
    assert disposal.rejected_at is not None
    assert item.status == 'available'


def test_one_open_disposal_per_item(gate, property_admin, item):
    request_disposal(gate, property_admin, item)
    with pytest.raises(Conflict):
        request_disposal(gate, property_admin, item)


def test_assigned_item_cannot_be_disposed(gate, property_admin, make_item):
    busy = make_item(status='assigned')
    with pytest.raises(Conflict):
        request_disposal(gate, property_admin, busy)


def test_description_is_validated(gate, property_admin, item):
    with pytest.raises(ValidationFailed) as excinfo:
        request_disposal(gate, property_admin, item, description='old', reason='melted')
    assert set(excinfo.value.errors) == {'description', 'reason'}
    assert item.status == 'available'


def test_staff_cannot_request_disposal(gate, staff, item):
    with pytest.raises(AuthorizationDenied):
        request_disposal(gate, staff, item)


def test_pending_disposal_can_be_updated(gate, engine, property_admin, item):
    disposal = request_disposal(gate, property_admin, item)
    disposals.update_disposal(gate, property_admin, disposal.id,
                              {'reason': 'damaged_beyond_repair', 'estimated_value': '150.00',
                               'description': ''})
    assert disposal.reason == 'damaged_beyond_repair'
    assert disposal.estimated_value == Decimal('150')
    assert disposal.description == 'Unit no longer boots and parts are unavailable.'

    with pytest.raises(ValidationFailed):
        disposals.update_disposal(gate, property_admin, disposal.id, {'reason': 'misplaced'})

    engine.transition(disposal, Action.APPROVE, property_admin)
    with pytest.raises(InvalidTransition):
        disposals.update_disposal(gate, property_admin, disposal.id, {'recipient': 'School'})


def test_cancel_withdraws_request_and_restores_item(gate, property_admin, item):
    disposal = request_disposal(gate, property_admin, item)
    disposals.cancel_disposal(gate, property_admin, disposal.id)
    assert disposal.deleted_at is not None
    assert item.status == 'available'
    assert disposals.list_disposals(gate, property_admin) == []
    events = [h.event_type for h in ItemHistory.query.filter_by(item_id=item.id)]
    assert 'Disposal Cancelled' in events

    again = request_disposal(gate, property_admin, item)
    assert again.status == 'pending'


def test_only_pending_disposals_can_be_cancelled(gate, engine, property_admin, clerk, item):
    disposal = request_disposal(gate, property_admin, item)
    with pytest.raises(AuthorizationDenied):
        disposals.cancel_disposal(gate, clerk, disposal.id)
    engine.transition(disposal, Action.APPROVE, property_admin)
    with pytest.raises(InvalidTransition):
        disposals.cancel_disposal(gate, property_admin, disposal.id)
    assert disposal.deleted_at is None
    assert item.status == 'for_disposal'
