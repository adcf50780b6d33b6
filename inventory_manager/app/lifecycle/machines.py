# app/lifecycle/machines.py
from enum import Enum

from inventory_manager.app.errors import InvalidTransition
from inventory_manager.app.models import (AssignmentStatus, ReturnStatus, DisposalStatus,
                                          MaintenanceStatus, RequestStatus, ItemStatus)


class Action(Enum):
    APPROVE = "approve"
    REJECT = "reject"
    ACTIVATE = "activate"
    CANCEL = "cancel"
    MARK_RETURNED = "mark_returned"
    INSPECT = "inspect"
    EXECUTE = "execute"
    SCHEDULE = "schedule"
    START = "start"
    COMPLETE = "complete"
    EDIT = "edit"
    START_REVIEW = "start_review"
    REQUEST_CHANGES = "request_changes"
    RESUBMIT = "resubmit"


class StateMachine:
    """Closed transition table for one entity.

    ``rules`` maps each action to ``(sources, target)``. A ``None`` target
    keeps the current status (edits that are only legal in some states).
    """

    def __init__(self, name, statuses, rules):
        self.name = name
        self.statuses = statuses
        self.rules = {}
        for action, (sources, target) in rules.items():
            self.rules[action] = (frozenset(s.value for s in sources),
                                  target.value if target is not None else None)

    def _rule(self, action):
        try:
            return self.rules[Action(action)]
        except (ValueError, KeyError):
            return None

    def next_status(self, current, action):
        """Return the status ``action`` leads to from ``current`` or raise InvalidTransition"""
        action_name = action.value if isinstance(action, Action) else str(action)
        rule = self._rule(action)
        if current not in {s.value for s in self.statuses}:
            raise InvalidTransition(current, action_name,
                                    f"Unknown {self.name} status '{current}'.")
        if rule is None or current not in rule[0]:
            raise InvalidTransition(current, action_name)
        return rule[1] if rule[1] is not None else current

    def can(self, current, action):
        rule = self._rule(action)
        return rule is not None and current in rule[0]

    def sources(self, action):
        rule = self._rule(action)
        return set(rule[0]) if rule else set()

    def allowed_actions(self, current):
        return [action.value for action, (sources, _) in self.rules.items() if current in sources]

    def is_terminal(self, current):
        return not self.allowed_actions(current)


A = AssignmentStatus
ASSIGNMENT_MACHINE = StateMachine('assignment', A, {
    Action.APPROVE: ({A.PENDING}, A.APPROVED),
    Action.REJECT: ({A.PENDING}, A.CANCELLED),
    Action.ACTIVATE: ({A.APPROVED}, A.ACTIVE),
    Action.MARK_RETURNED: ({A.ACTIVE}, A.RETURNED),
    Action.CANCEL: ({A.PENDING, A.APPROVED, A.ACTIVE}, A.CANCELLED),
})

R = ReturnStatus
RETURN_MACHINE = StateMachine('return', R, {
    Action.INSPECT: ({R.PENDING_INSPECTION}, R.INSPECTED),
    Action.APPROVE: ({R.INSPECTED}, R.APPROVED),
    Action.REJECT: ({R.INSPECTED}, R.REJECTED),
})

D = DisposalStatus
DISPOSAL_MACHINE = StateMachine('disposal', D, {
    Action.APPROVE: ({D.PENDING}, D.APPROVED),
    Action.REJECT: ({D.PENDING}, D.REJECTED),
    Action.EXECUTE: ({D.APPROVED}, D.EXECUTED),
})

M = MaintenanceStatus
MAINTENANCE_MACHINE = StateMachine('maintenance', M, {
    Action.SCHEDULE: ({M.PENDING}, M.SCHEDULED),
    Action.START: ({M.SCHEDULED}, M.IN_PROGRESS),
    Action.COMPLETE: ({M.IN_PROGRESS}, M.COMPLETED),
    Action.CANCEL: ({M.PENDING, M.SCHEDULED, M.IN_PROGRESS}, M.CANCELLED),
})

Q = RequestStatus
REQUEST_MACHINE = StateMachine('request', Q, {
    Action.EDIT: ({Q.PENDING, Q.CHANGES_REQUESTED}, None),
    Action.START_REVIEW: ({Q.PENDING, Q.CHANGES_REQUESTED}, Q.UNDER_REVIEW),
    Action.APPROVE: ({Q.PENDING, Q.UNDER_REVIEW}, Q.APPROVED),
    Action.REJECT: ({Q.PENDING, Q.UNDER_REVIEW}, Q.REJECTED),
    Action.REQUEST_CHANGES: ({Q.PENDING, Q.UNDER_REVIEW}, Q.CHANGES_REQUESTED),
    Action.RESUBMIT: ({Q.CHANGES_REQUESTED}, Q.PENDING),
    Action.COMPLETE: ({Q.APPROVED}, Q.COMPLETED),
    Action.CANCEL: ({Q.PENDING, Q.UNDER_REVIEW, Q.CHANGES_REQUESTED, Q.APPROVED}, Q.CANCELLED),
})

# Manual item status changes; lifecycle side effects write Item.status directly
IS = ItemStatus
ITEM_TRANSITIONS = {
    IS.AVAILABLE.value: {IS.ASSIGNED.value, IS.IN_USE.value, IS.IN_MAINTENANCE.value,
                        IS.FOR_DISPOSAL.value, IS.LOST.value},
    IS.ASSIGNED.value: {IS.AVAILABLE.value, IS.IN_MAINTENANCE.value, IS.DAMAGED.value, IS.LOST.value},
    IS.IN_USE.value: {IS.AVAILABLE.value, IS.IN_MAINTENANCE.value, IS.DAMAGED.value, IS.LOST.value},
    IS.IN_MAINTENANCE.value: {IS.AVAILABLE.value, IS.DAMAGED.value, IS.FOR_DISPOSAL.value},
    IS.DAMAGED.value: {IS.IN_MAINTENANCE.value, IS.FOR_DISPOSAL.value},
    IS.FOR_DISPOSAL.value: {IS.DISPOSED.value, IS.AVAILABLE.value},
    IS.DISPOSED.value: set(),
    IS.LOST.value: {IS.AVAILABLE.value, IS.DISPOSED.value},
}


def can_change_item_status(current, new):
    if current == new:
        return True
    return new in ITEM_TRANSITIONS.get(current, set())


def ensure_item_status_change(current, new):
    if not can_change_item_status(current, new):
        raise InvalidTransition(current, f'change status to {new}',
                                f"Cannot change item status from '{current}' to '{new}'.")
