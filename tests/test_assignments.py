from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from inventory_manager.app import db
from inventory_manager.app.errors import (AuthorizationDenied, Conflict, InvalidTransition,
                                          ValidationFailed)
from inventory_manager.app.lifecycle import Action
from inventory_manager.app.models import Assignment, ItemHistory
from inventory_manager.app.services import assignments, returns


def assign(gate, actor, item, custodian, **extra):
    payload = {'item_id': item.id, 'user_id': custodian.id,
               'due_date': date.today() + timedelta(days=14)}
    payload.update(extra)
    return assignments.create_assignment(gate, actor, payload)


def test_direct_assignment_marks_item_assigned(gate, property_admin, staff, item):
    assignment = assign(gate, property_admin, item, staff)
    assert assignment.status == 'active'
    assert assignment.assigned_date is not None
    assert item.status == 'assigned'
    events = [h.event_type for h in ItemHistory.query.filter_by(item_id=item.id)]
    assert 'Item Assigned' in events


def test_one_active_assignment_per_item(gate, property_admin, staff, other_staff, item):
    assign(gate, property_admin, item, staff)
    with pytest.raises(Conflict):
        assign(gate, property_admin, item, other_staff)
    assert Assignment.query.filter_by(item_id=item.id).count() == 1


def test_unassignable_item_is_refused(gate, property_admin, staff, make_item):
    broken = make_item(status='damaged')
    with pytest.raises(Conflict):
        assign(gate, property_admin, broken, staff)


def test_due_date_must_be_in_the_future(gate, property_admin, staff, item):
    with pytest.raises(ValidationFailed) as excinfo:
        assign(gate, property_admin, item, staff, due_date=date.today() - timedelta(days=1))
    assert 'due_date' in excinfo.value.errors


def test_staff_cannot_create_assignments(gate, staff, item):
    with pytest.raises(AuthorizationDenied):
        assign(gate, staff, item, staff)


def test_pending_assignment_approval_flow(gate, engine, property_admin, staff, item):
    assignment = assign(gate, property_admin, item, staff, status='pending')
    assert item.status == 'available'

    engine.transition(assignment, Action.APPROVE, property_admin, {'admin_notes': 'ok'})
    assert assignment.status == 'approved'
    assert assignment.approved_by == property_admin.id

    engine.transition(assignment, Action.ACTIVATE, property_admin)
    assert assignment.status == 'active'
    assert item.status == 'assigned'


def test_activate_refuses_when_item_taken_meanwhile(gate, engine, property_admin, staff,
                                                    other_staff, item):
    pending = assign(gate, property_admin, item, staff, status='pending')
    engine.transition(pending, Action.APPROVE, property_admin)
    assign(gate, property_admin, item, other_staff)
    with pytest.raises(Conflict):
        engine.transition(pending, Action.ACTIVATE, property_admin)
    assert pending.status == 'approved'


def test_reject_requires_admin_notes(gate, engine, property_admin, staff, item):
    assignment = assign(gate, property_admin, item, staff, status='pending')
    with pytest.raises(ValidationFailed) as excinfo:
        engine.transition(assignment, Action.REJECT, property_admin, {'admin_notes': ''})
    assert 'admin_notes' in excinfo.value.errors
    assert assignment.status == 'pending'

    engine.transition(assignment, Action.REJECT, property_admin, {'admin_notes': 'Not needed'})
    assert assignment.status == 'cancelled'
    assert assignment.cancelled_at is not None


def test_authorization_is_checked_before_status(gate, engine, property_admin, officer, staff,
                                                item):
    assignment = assign(gate, property_admin, item, staff)
    # active assignments cannot be approved, but the officer lacks the permission anyway
    with pytest.raises(AuthorizationDenied):
        engine.transition(assignment, Action.APPROVE, officer)
    with pytest.raises(InvalidTransition):
        engine.transition(assignment, Action.APPROVE, property_admin)


def test_cancel_active_assignment_releases_item(gate, engine, property_admin, staff, item):
    assignment = assign(gate, property_admin, item, staff)
    engine.transition(assignment, Action.CANCEL, property_admin)
    assert assignment.status == 'cancelled'
    assert item.status == 'available'
    assert item.active_assignment() is None


def test_list_assignments_scoped_to_own(gate, property_admin, staff, other_staff, make_item):
    mine = assign(gate, property_admin, make_item(), staff)
    assign(gate, property_admin, make_item(), other_staff)
    assert [a.id for a in assignments.list_assignments(gate, staff)] == [mine.id]
    assert len(assignments.list_assignments(gate, property_admin)) == 2
    with pytest.raises(AuthorizationDenied):
        assignments.get_assignment(gate, other_staff, mine.id)


def _overdue_assignment(item, custodian):
    assignment = Assignment(item_id=item.id, user_id=custodian.id, status='active',
                            assigned_date=datetime(2024, 1, 1, 9, 0), due_date=date(2024, 1, 10))
    item.status = 'assigned'
    db.session.add(assignment)
    db.session.commit()
    return assignment


def test_late_return_is_flagged(engine, property_admin, staff, item):
    assignment = _overdue_assignment(item, staff)
    assert assignment.is_overdue()

    engine.transition(assignment, Action.MARK_RETURNED, property_admin,
                      {'condition_on_return': 'good', 'return_date': '2024-01-15T12:00:00'})

    item_return = assignment.item_return
    assert assignment.status == 'returned'
    assert assignment.returned_date == datetime(2024, 1, 15, 12, 0)
    assert item_return.status == 'pending_inspection'
    assert item_return.is_late is True
    assert item_return.days_late == 5


def test_return_on_due_date_is_not_late(engine, property_admin, staff, item):
    assignment = _overdue_assignment(item, staff)
    engine.transition(assignment, Action.MARK_RETURNED, property_admin,
                      {'condition_on_return': 'good', 'return_date': '2024-01-10T00:00:00'})
    assert assignment.item_return.is_late is False
    assert assignment.item_return.days_late == 0


def test_damaged_return_needs_description(engine, property_admin, staff, item):
    assignment = _overdue_assignment(item, staff)
    with pytest.raises(ValidationFailed) as excinfo:
        engine.transition(assignment, Action.MARK_RETURNED, property_admin,
                          {'condition_on_return': 'damaged', 'is_damaged': True})
    assert 'damage_description' in excinfo.value.errors
    assert assignment.status == 'active'


def test_inspection_and_approval_of_damaged_return(gate, engine, property_admin, staff, item):
    assignment = _overdue_assignment(item, staff)
    engine.transition(assignment, Action.MARK_RETURNED, property_admin,
                      {'condition_on_return': 'damaged', 'is_damaged': True,
                       'damage_description': 'Cracked screen'})
    item_return = assignment.item_return

    with pytest.raises(InvalidTransition):
        engine.transition(item_return, Action.APPROVE, property_admin)

    engine.transition(item_return, Action.INSPECT, property_admin,
                      {'is_damaged': True, 'item_condition': 'for_repair'})
    assert item_return.status == 'inspected'
    assert item_return.inspected_by == property_admin.id
    assert item.condition == 'for_repair'

    engine.transition(item_return, Action.APPROVE, property_admin)
    assert item_return.status == 'approved'
    assert item.status == 'damaged'


def test_return_rejection_requires_notes(engine, property_admin, staff, item):
    assignment = _overdue_assignment(item, staff)
    engine.transition(assignment, Action.MARK_RETURNED, property_admin,
                      {'condition_on_return': 'fair'})
    item_return = assignment.item_return
    engine.transition(item_return, Action.INSPECT, property_admin)
    with pytest.raises(ValidationFailed):
        engine.transition(item_return, Action.REJECT, property_admin, {'inspection_notes': ' '})
    assert item_return.status == 'inspected'


def test_penalty_uses_configured_rate(gate, engine, property_admin, staff, item):
    assignment = _overdue_assignment(item, staff)
    engine.transition(assignment, Action.MARK_RETURNED, property_admin,
                      {'condition_on_return': 'good', 'return_date': '2024-01-12T08:00:00'})
    item_return = returns.calculate_penalty(gate, property_admin, assignment.item_return.id)
    assert item_return.days_late == 2
    assert item_return.penalty_amount == Decimal('20.00')

    item_return = returns.mark_penalty_paid(gate, property_admin, item_return.id)
    assert item_return.penalty_paid is True


def test_quick_return_closes_inspection(engine, property_admin, staff, item):
    assignment = _overdue_assignment(item, staff)
    item_return = returns.quick_return(engine, property_admin, assignment.id,
                                       {'condition_on_return': 'good'})
    assert assignment.status == 'returned'
    assert item_return.status == 'approved'
    assert item.status == 'available'


def test_quick_return_by_custodian_waits_for_inspection(engine, staff, item):
    assignment = _overdue_assignment(item, staff)
    item_return = returns.quick_return(engine, staff, assignment.id,
                                       {'condition_on_return': 'good'})
    assert item_return.status == 'pending_inspection'
    assert item.status == 'available'


def test_returned_item_is_free_even_if_return_is_rejected(gate, engine, property_admin, staff,
                                                          other_staff, item):
    assignment = assign(gate, property_admin, item, staff)
    engine.transition(assignment, Action.MARK_RETURNED, property_admin,
                      {'condition_on_return': 'fair'})
    assert item.status == 'available'
    assert item.active_assignment() is None

    item_return = assignment.item_return
    engine.transition(item_return, Action.INSPECT, property_admin)
    engine.transition(item_return, Action.REJECT, property_admin,
                      {'inspection_notes': 'Charger missing'})
    assert item_return.status == 'rejected'
    assert item.status == 'available'

    again = assign(gate, property_admin, item, other_staff)
    assert again.status == 'active'
    assert item.status == 'assigned'
