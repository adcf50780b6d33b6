import pytest

from inventory_manager.app.errors import (AuthorizationDenied, Conflict, InvalidTransition,
                                          ValidationFailed)
from inventory_manager.app.lifecycle import Action
from inventory_manager.app.models import Assignment
from inventory_manager.app.services import assignments, requests
from inventory_manager.app.services.requests import can_edit, can_review, can_cancel


def submit(gate, actor, **extra):
    payload = {'type': 'purchase', 'title': 'New projector',
               'description': 'The conference room projector is failing.'}
    payload.update(extra)
    return requests.create_request(gate, actor, payload)


def test_submission_defaults(gate, staff):
    record = submit(gate, staff, metadata={'budget': 30000})
    assert record.status == 'pending'
    assert record.priority == 'medium'
    assert record.user_id == staff.id
    assert record.metadata_ == {'budget': 30000}


def test_rejection_requires_notes(gate, engine, staff, admin):
    record = submit(gate, staff)
    with pytest.raises(ValidationFailed) as excinfo:
        engine.transition(record, Action.REJECT, admin, {'review_notes': ''})
    assert excinfo.value.errors['review_notes'] == ['Please provide a reason for your decision.']
    assert record.status == 'pending'

    engine.transition(record, Action.REJECT, admin, {'review_notes': 'No budget this year'})
    assert record.status == 'rejected'
    assert record.reviewed_by == admin.id
    assert record.reviewed_at is not None


def test_request_changes_requires_notes(gate, engine, staff, admin):
    record = submit(gate, staff)
    with pytest.raises(ValidationFailed):
        engine.transition(record, Action.REQUEST_CHANGES, admin)
    assert record.status == 'pending'


def test_ownership_boundary(gate, engine, staff, other_staff):
    record = submit(gate, staff)
    for status in ('pending', 'changes_requested', 'approved', 'completed'):
        record.status = status
        with pytest.raises(AuthorizationDenied):
            engine.transition(record, Action.EDIT, other_staff, {'title': 'Mine now'})
    assert record.title == 'New projector'


def test_owner_can_edit_and_cancel(gate, engine, staff):
    record = submit(gate, staff)
    engine.transition(record, Action.EDIT, staff, {'title': 'Two projectors', 'priority': 'high'})
    assert record.title == 'Two projectors'
    assert record.priority == 'high'
    assert record.description == 'The conference room projector is failing.'
    assert record.status == 'pending'

    engine.transition(record, Action.CANCEL, staff, {'reason': 'Bought one already'})
    assert record.status == 'cancelled'
    assert [c.comment for c in record.comments] == ['Cancelled: Bought one already']
    with pytest.raises(InvalidTransition):
        engine.transition(record, Action.CANCEL, staff)


def test_owner_cannot_edit_once_under_review(gate, engine, staff, admin):
    record = submit(gate, staff)
    engine.transition(record, Action.START_REVIEW, admin)
    assert record.status == 'under_review'
    with pytest.raises(InvalidTransition):
        engine.transition(record, Action.EDIT, staff, {'title': 'Changed'})


def test_owner_cannot_approve_own_request(gate, engine, staff):
    record = submit(gate, staff)
    with pytest.raises(AuthorizationDenied):
        engine.transition(record, Action.APPROVE, staff)


def test_changes_requested_round_trip(gate, engine, staff, admin):
    record = submit(gate, staff)
    engine.transition(record, Action.REQUEST_CHANGES, admin, {'review_notes': 'Add a quote'})
    assert record.status == 'changes_requested'

    # approval is only reachable again through review
    with pytest.raises(InvalidTransition):
        engine.transition(record, Action.APPROVE, admin)

    engine.transition(record, Action.EDIT, staff, {'description': 'Quote attached: 28,500.'})
    engine.transition(record, Action.RESUBMIT, staff)
    assert record.status == 'pending'
    assert record.review_notes is None
    assert record.reviewed_by is None


def test_rejected_is_terminal(gate, engine, staff, admin):
    record = submit(gate, staff)
    engine.transition(record, Action.REJECT, admin, {'review_notes': 'Duplicate'})
    for action in (Action.APPROVE, Action.CANCEL, Action.RESUBMIT, Action.COMPLETE):
        with pytest.raises(InvalidTransition):
            engine.transition(record, action, admin)


def test_completing_assignment_request_opens_assignment(gate, engine, staff, admin, item):
    record = submit(gate, staff, type='assignment', item_id=item.id, title='Laptop for fieldwork')
    engine.transition(record, Action.APPROVE, admin, {'review_notes': 'Granted'})
    assert record.status == 'approved'
    assert item.status == 'available'

    engine.transition(record, Action.COMPLETE, admin)
    assert record.status == 'completed'
    assert record.completed_at is not None
    assignment = item.active_assignment()
    assert assignment.user_id == staff.id
    assert assignment.due_date is not None
    assert item.status == 'assigned'


def test_auto_execute_on_approval(gate, engine, staff, admin, item):
    record = submit(gate, staff, type='assignment', item_id=item.id)
    engine.transition(record, Action.APPROVE, admin, {'auto_execute': True})
    assert record.status == 'completed'
    assert item.active_assignment().user_id == staff.id


def test_failed_completion_rolls_back(gate, engine, staff, other_staff, admin, property_admin,
                                      item):
    record = submit(gate, staff, type='assignment', item_id=item.id)
    engine.transition(record, Action.APPROVE, admin)
    assignments.create_assignment(gate, property_admin,
                                  {'item_id': item.id, 'user_id': other_staff.id})

    with pytest.raises(Conflict):
        engine.transition(record, Action.COMPLETE, admin)
    assert record.status == 'approved'
    assert record.completed_at is None
    assert Assignment.query.filter_by(item_id=item.id).count() == 1


def test_presentation_queries(gate, engine, staff, other_staff, admin):
    record = submit(gate, staff)
    assert can_edit(record, staff, gate)
    assert not can_edit(record, other_staff, gate)
    assert can_cancel(record, staff, gate)
    assert not can_review(record, staff, gate)
    assert can_review(record, admin, gate)

    engine.transition(record, Action.START_REVIEW, admin)
    assert not can_edit(record, staff, gate)
    assert can_cancel(record, staff, gate)

    engine.transition(record, Action.APPROVE, admin)
    assert not can_review(record, admin, gate)
    assert can_cancel(record, staff, gate)

    engine.transition(record, Action.COMPLETE, admin)
    assert not can_cancel(record, staff, gate)
    assert not can_cancel(record, admin, gate)


def test_listing_is_scoped_to_owner(gate, staff, other_staff, admin):
    mine = submit(gate, staff)
    submit(gate, other_staff)
    assert [r.id for r in requests.list_requests(gate, staff)] == [mine.id]
    assert len(requests.list_requests(gate, admin)) == 2
    with pytest.raises(AuthorizationDenied):
        requests.get_request(gate, other_staff, mine.id)


def test_internal_comments(gate, staff, other_staff, admin):
    record = submit(gate, staff)
    requests.add_comment(gate, staff, record.id, {'comment': 'Any update?'})
    requests.add_comment(gate, admin, record.id,
                         {'comment': 'Check the budget first', 'is_internal': True})

    with pytest.raises(AuthorizationDenied):
        requests.add_comment(gate, staff, record.id, {'comment': 'psst', 'is_internal': True})
    with pytest.raises(AuthorizationDenied):
        requests.add_comment(gate, other_staff, record.id, {'comment': 'Me too'})

    assert [c.comment for c in requests.list_comments(gate, staff, record.id)] == ['Any update?']
    assert len(requests.list_comments(gate, admin, record.id)) == 2


def test_view_permission_does_not_open_other_requests(gate, make_user, staff):
    head = make_user('department_head', 'head')
    theirs = submit(gate, staff)
    own = submit(gate, head)
    with pytest.raises(AuthorizationDenied):
        requests.get_request(gate, head, theirs.id)
    assert requests.get_request(gate, head, own.id) is own
    assert [r.id for r in requests.list_requests(gate, head)] == [own.id]
