import pytest

from inventory_manager.app.errors import InvalidTransition
from inventory_manager.app.lifecycle import (Action, ASSIGNMENT_MACHINE, RETURN_MACHINE,
                                             DISPOSAL_MACHINE, MAINTENANCE_MACHINE,
                                             REQUEST_MACHINE, can_change_item_status,
                                             ensure_item_status_change)

LEGAL = {
    ASSIGNMENT_MACHINE: {
        ('pending', 'approve'): 'approved',
        ('pending', 'reject'): 'cancelled',
        ('pending', 'cancel'): 'cancelled',
        ('approved', 'activate'): 'active',
        ('approved', 'cancel'): 'cancelled',
        ('active', 'mark_returned'): 'returned',
        ('active', 'cancel'): 'cancelled',
    },
    RETURN_MACHINE: {
        ('pending_inspection', 'inspect'): 'inspected',
        ('inspected', 'approve'): 'approved',
        ('inspected', 'reject'): 'rejected',
    },
    DISPOSAL_MACHINE: {
        ('pending', 'approve'): 'approved',
        ('pending', 'reject'): 'rejected',
        ('approved', 'execute'): 'executed',
    },
    MAINTENANCE_MACHINE: {
        ('pending', 'schedule'): 'scheduled',
        ('pending', 'cancel'): 'cancelled',
        ('scheduled', 'start'): 'in_progress',
        ('scheduled', 'cancel'): 'cancelled',
        ('in_progress', 'complete'): 'completed',
        ('in_progress', 'cancel'): 'cancelled',
    },
    REQUEST_MACHINE: {
        ('pending', 'edit'): 'pending',
        ('pending', 'start_review'): 'under_review',
        ('pending', 'approve'): 'approved',
        ('pending', 'reject'): 'rejected',
        ('pending', 'request_changes'): 'changes_requested',
        ('pending', 'cancel'): 'cancelled',
        ('under_review', 'approve'): 'approved',
        ('under_review', 'reject'): 'rejected',
        ('under_review', 'request_changes'): 'changes_requested',
        ('under_review', 'cancel'): 'cancelled',
        ('changes_requested', 'edit'): 'changes_requested',
        ('changes_requested', 'start_review'): 'under_review',
        ('changes_requested', 'resubmit'): 'pending',
        ('changes_requested', 'cancel'): 'cancelled',
        ('approved', 'complete'): 'completed',
        ('approved', 'cancel'): 'cancelled',
    },
}


def all_pairs():
    for machine, legal in LEGAL.items():
        for status in machine.statuses:
            for action in Action:
                yield machine, status.value, action.value, legal.get((status.value, action.value))


@pytest.mark.parametrize('machine,status,action,target', list(all_pairs()),
                         ids=lambda v: getattr(v, 'name', v))
def test_transition_table_is_total(machine, status, action, target):
    if target is None:
        with pytest.raises(InvalidTransition) as excinfo:
            machine.next_status(status, action)
        assert excinfo.value.current == status
        assert excinfo.value.action == action
        assert not machine.can(status, action)
    else:
        assert machine.next_status(status, action) == target
        assert machine.can(status, action)


def test_unknown_status_is_rejected():
    with pytest.raises(InvalidTransition):
        DISPOSAL_MACHINE.next_status('archived', 'approve')


def test_unknown_action_name_is_rejected():
    with pytest.raises(InvalidTransition):
        DISPOSAL_MACHINE.next_status('pending', 'shred')


@pytest.mark.parametrize('machine,terminal', [
    (ASSIGNMENT_MACHINE, {'returned', 'cancelled'}),
    (RETURN_MACHINE, {'approved', 'rejected'}),
    (DISPOSAL_MACHINE, {'rejected', 'executed'}),
    (MAINTENANCE_MACHINE, {'completed', 'cancelled'}),
    (REQUEST_MACHINE, {'rejected', 'completed', 'cancelled'}),
])
def test_terminal_statuses(machine, terminal):
    assert {s.value for s in machine.statuses if machine.is_terminal(s.value)} == terminal


def test_allowed_actions():
    assert set(ASSIGNMENT_MACHINE.allowed_actions('approved')) == {'activate', 'cancel'}
    assert REQUEST_MACHINE.sources(Action.RESUBMIT) == {'changes_requested'}


def test_item_status_changes():
    assert can_change_item_status('available', 'assigned')
    assert can_change_item_status('lost', 'lost')
    assert not can_change_item_status('disposed', 'available')
    with pytest.raises(InvalidTransition):
        ensure_item_status_change('damaged', 'assigned')
