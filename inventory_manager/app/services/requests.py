# app/services/requests.py
import logging
from datetime import timedelta

from flask import current_app

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import AuthorizationDenied
from inventory_manager.app.forms import (RequestForm, RequestEditForm, RequestApprovalForm,
                                         RequestDecisionForm, RequestCompletionForm, RequestCancelForm,
                                         CommentForm, validate_payload)
from inventory_manager.app.lifecycle import Action, ActionSpec
from inventory_manager.app.models import (db, Request, RequestComment, RequestStatus, RequestType,
                                          RequestPriority, AssignmentStatus)
from inventory_manager.app.models.mixins import utcnow
from inventory_manager.app.notifications import send_assignment_email
from .assignments import open_assignment

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = {RequestStatus.PENDING.value, RequestStatus.CHANGES_REQUESTED.value}
REVIEWABLE_STATUSES = {RequestStatus.PENDING.value, RequestStatus.UNDER_REVIEW.value,
                       RequestStatus.CHANGES_REQUESTED.value}
UNCANCELLABLE_STATUSES = {RequestStatus.COMPLETED.value, RequestStatus.CANCELLED.value}


def list_requests(gate, actor, status=None, request_type=None, user_id=None, with_trashed=False):
    query = Request.query if with_trashed else Request.live()
    if gate.has_permission(actor, 'requests.view_any'):
        if user_id:
            query = query.filter_by(user_id=user_id)
    else:
        query = query.filter_by(user_id=actor.id)
    if status:
        query = query.filter_by(status=status)
    if request_type:
        query = query.filter_by(type=request_type)
    return query.order_by(Request.id.desc()).all()


def get_request(gate, actor, request_id, with_trashed=False):
    record = Request.find(request_id, with_trashed=with_trashed)
    # requests.view alone does not open other people's requests
    gate.ensure(actor, 'requests.view_any', record, owner_permitted=True)
    return record


def create_request(gate, actor, payload):
    gate.ensure(actor, 'requests.create')
    data = validate_payload(RequestForm, payload)
    metadata = (payload or {}).get('metadata')
    data.setdefault('priority', RequestPriority.MEDIUM.value)
    with unit_of_work():
        record = Request(user_id=actor.id, status=RequestStatus.PENDING.value,
                         metadata_=metadata if isinstance(metadata, dict) else None, **data)
        db.session.add(record)
    logger.info('request %s (%s) submitted by user %s', record.id, record.type, actor.id)
    return record


# Presentation queries: status rule and permission/owner rule together

def can_edit(record, actor, gate):
    return (record.status in EDITABLE_STATUSES
            and gate.authorize(actor, 'requests.update', record, owner_permitted=True))


def can_review(record, actor, gate):
    return (record.status in REVIEWABLE_STATUSES
            and gate.has_permission(actor, 'requests.approve'))


def can_cancel(record, actor, gate):
    return (record.status not in UNCANCELLABLE_STATUSES
            and gate.authorize(actor, 'requests.delete', record, owner_permitted=True))


def _stamp_review(record, actor, data):
    record.reviewed_by = actor.id
    record.reviewed_at = utcnow()
    if data.get('review_notes'):
        record.review_notes = data['review_notes']


def _edit(engine, record, actor, data, previous):
    for name, value in data.items():
        # blank item_id detaches the item; other blanks keep the current value
        if value is None and name != 'item_id':
            continue
        setattr(record, name, value)


def _start_review(engine, record, actor, data, previous):
    _stamp_review(record, actor, data)


def _fulfil(record, actor, data):
    """Close an approved request, opening the assignment it asked for"""
    record.status = RequestStatus.COMPLETED.value
    record.completed_at = utcnow()
    if record.type != RequestType.ASSIGNMENT.value or record.item is None:
        return None
    due_date = data.get('due_date')
    if due_date is None:
        days = int(current_app.config['DEFAULT_ASSIGNMENT_DAYS'])
        due_date = (utcnow() + timedelta(days=days)).date()
    return open_assignment(record.item, record.user_id, actor, AssignmentStatus.ACTIVE.value,
                           due_date=due_date, purpose=record.title,
                           notes=f'Created from request #{record.id}')


def _approve(engine, record, actor, data, previous):
    _stamp_review(record, actor, data)
    if data.get('auto_execute'):
        _fulfil(record, actor, data)


def _decide(engine, record, actor, data, previous):
    _stamp_review(record, actor, data)


def _resubmit(engine, record, actor, data, previous):
    record.reviewed_by = None
    record.reviewed_at = None
    record.review_notes = None


def _complete(engine, record, actor, data, previous):
    _fulfil(record, actor, data)


def _cancel(engine, record, actor, data, previous):
    if data.get('reason'):
        db.session.add(RequestComment(request_id=record.id, user_id=actor.id,
                                      comment=f"Cancelled: {data['reason']}", is_internal=False))


def _notify_assignment(record):
    if (record.status != RequestStatus.COMPLETED.value
            or record.type != RequestType.ASSIGNMENT.value or record.item is None):
        return
    assignment = record.item.active_assignment()
    if assignment is not None and assignment.user_id == record.user_id:
        send_assignment_email(assignment)


REQUEST_ACTIONS = {
    Action.EDIT: ActionSpec('requests.update', _edit, RequestEditForm, owner_permitted=True),
    Action.START_REVIEW: ActionSpec('requests.approve', _start_review),
    Action.APPROVE: ActionSpec('requests.approve', _approve, RequestApprovalForm,
                               after_commit=_notify_assignment),
    Action.REJECT: ActionSpec(('requests.reject', 'requests.approve'), _decide,
                              RequestDecisionForm),
    Action.REQUEST_CHANGES: ActionSpec('requests.approve', _decide, RequestDecisionForm),
    Action.RESUBMIT: ActionSpec('requests.update', _resubmit, owner_permitted=True),
    Action.COMPLETE: ActionSpec('requests.approve', _complete, RequestCompletionForm,
                                after_commit=_notify_assignment),
    Action.CANCEL: ActionSpec('requests.delete', _cancel, RequestCancelForm, owner_permitted=True),
}


def add_comment(gate, actor, request_id, payload):
    record = Request.find(request_id)
    gate.ensure(actor, 'requests.view_any', record, owner_permitted=True)
    data = validate_payload(CommentForm, payload)
    is_internal = bool(data.get('is_internal'))
    if is_internal and not gate.has_permission(actor, 'requests.approve'):
        raise AuthorizationDenied('requests.approve')
    with unit_of_work():
        comment = RequestComment(request_id=record.id, user_id=actor.id,
                                 comment=data['comment'], is_internal=is_internal)
        db.session.add(comment)
    return comment


def list_comments(gate, actor, request_id):
    record = get_request(gate, actor, request_id)
    show_internal = gate.has_permission(actor, 'requests.approve')
    return [c for c in record.comments if show_internal or not c.is_internal]
