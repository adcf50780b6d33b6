# app/services/users.py
"""Account management. Roles come from the permission gate's table."""
import logging

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import Conflict, ValidationFailed
from inventory_manager.app.forms import UserForm, UserUpdateForm, RoleForm, validate_payload
from inventory_manager.app.lifecycle import Action
from inventory_manager.app.models import db, User, Assignment, AssignmentStatus, ReturnCondition

logger = logging.getLogger(__name__)

DEFAULT_ROLE = 'staff'
FORCED_RETURN_NOTE = 'User deactivated - forced return'


def list_users(gate, actor, search=None, role=None, active=None, with_trashed=False):
    gate.ensure(actor, 'users.view_any')
    query = User.query if with_trashed else User.live()
    if search:
        like = f'%{search}%'
        query = query.filter(db.or_(User.username.ilike(like), User.email.ilike(like)))
    if role:
        query = query.filter_by(role=role)
    if active is not None:
        query = query.filter_by(active=active)
    return query.order_by(User.username).all()


def get_user(gate, actor, user_id, with_trashed=False):
    gate.ensure(actor, 'users.view')
    return User.find(user_id, with_trashed=with_trashed)


def _check_role(gate, role):
    if role not in gate.roles:
        raise ValidationFailed({'role': [f"Must be one of: {', '.join(gate.roles)}."]})


def create_user(gate, actor, payload):
    gate.ensure(actor, 'users.create')
    data = validate_payload(UserForm, payload)
    _check_role(gate, data['role'])
    with unit_of_work():
        user = User(username=data['username'], email=data['email'].lower(), role=data['role'],
                    active=True)
        user.set_password(data['password'])
        db.session.add(user)
    logger.info('user %s (%s) created by user %s', user.email, user.role, actor.id)
    return user


def update_user(gate, actor, user_id, payload):
    gate.ensure(actor, 'users.update')
    user = User.find(user_id)
    data = validate_payload(UserUpdateForm, payload, record_id=user.id)
    with unit_of_work():
        if data.get('username'):
            user.username = data['username']
        if data.get('email'):
            user.email = data['email'].lower()
        # blank password keeps the current one
        if data.get('password'):
            user.set_password(data['password'])
    return user


def assign_role(gate, actor, user_id, payload):
    gate.ensure(actor, 'users.assign_roles')
    user = User.find(user_id)
    data = validate_payload(RoleForm, payload)
    _check_role(gate, data['role'])
    with unit_of_work():
        user.role = data['role']
    logger.info('user %s given role %s by user %s', user.id, user.role, actor.id)
    return user


def revoke_role(gate, actor, user_id):
    """Drop the user back to the default role"""
    gate.ensure(actor, 'users.revoke_roles')
    user = User.find(user_id)
    if user.id == actor.id:
        raise Conflict('You cannot revoke your own role.')
    with unit_of_work():
        user.role = DEFAULT_ROLE
    return user


def active_assignments(user):
    return (Assignment.query
            .filter_by(user_id=user.id, status=AssignmentStatus.ACTIVE.value)
            .order_by(Assignment.id)
            .all())


def activate_user(gate, actor, user_id):
    gate.ensure(actor, 'users.update')
    user = User.find(user_id)
    with unit_of_work():
        user.active = True
    logger.info('user %s activated by user %s', user.id, actor.id)
    return user


def deactivate_user(engine, actor, user_id, force_return=False):
    """Switch an account off.

    A user still holding items is refused unless ``force_return`` is set; the
    items are then returned through the assignment lifecycle in the same unit
    of work and wait for inspection like any other return.
    """
    engine.gate.ensure(actor, 'users.update')
    user = User.find(user_id)
    if user.id == actor.id:
        raise Conflict('You cannot deactivate your own account.')
    held = active_assignments(user)
    if held and not force_return:
        raise Conflict(f"Cannot deactivate user '{user.username}' because they have {len(held)} "
                       "active item assignment(s). Please return all items first or use the "
                       "force return option.")
    with unit_of_work():
        for assignment in held:
            engine.transition(assignment, Action.MARK_RETURNED, actor,
                              {'condition_on_return': ReturnCondition.GOOD.value,
                               'return_notes': FORCED_RETURN_NOTE})
        user.active = False
    if held:
        logger.info('force returned %s item(s) held by user %s', len(held), user.id)
    logger.info('user %s deactivated by user %s', user.id, actor.id)
    return user


def delete_user(gate, actor, user_id):
    gate.ensure(actor, 'users.delete')
    user = User.find(user_id)
    if user.active:
        raise Conflict(f"Cannot delete active user '{user.username}'. "
                       "Please deactivate the user first.")
    if active_assignments(user):
        raise Conflict(f"Cannot delete user '{user.username}' because they have active item "
                       "assignments. All items must be returned before deletion.")
    with unit_of_work():
        user.soft_delete()
    logger.info('user %s deleted by user %s', user.id, actor.id)
    return user


def restore_user(gate, actor, user_id):
    gate.ensure(actor, 'users.restore')
    user = User.find(user_id, with_trashed=True)
    if user.is_trashed:
        with unit_of_work():
            user.restore()
    return user
