from datetime import date, timedelta

import pytest

from inventory_manager.app.errors import (AuthorizationDenied, Conflict, UniquenessConflict,
                                          ValidationFailed)
from inventory_manager.app.models import User
from inventory_manager.app.services import assignments, users


def new_user(gate, actor, **extra):
    payload = {'username': 'jdelacruz', 'email': 'JDelaCruz@Example.com',
               'password': 'secret-pass', 'role': 'staff'}
    payload.update(extra)
    return users.create_user(gate, actor, payload)


def hand_over(gate, actor, item, custodian):
    return assignments.create_assignment(gate, actor, {
        'item_id': item.id, 'user_id': custodian.id,
        'due_date': date.today() + timedelta(days=7)})


def test_create_user(gate, admin):
    user = new_user(gate, admin)
    assert user.email == 'jdelacruz@example.com'
    assert user.role == 'staff'
    assert user.is_active
    assert user.check_password('secret-pass')
    assert not user.check_password('wrong')


def test_create_user_validation(gate, admin):
    new_user(gate, admin)
    with pytest.raises(UniquenessConflict) as excinfo:
        new_user(gate, admin, username='other', email='jdelacruz@example.com')
    assert list(excinfo.value.errors) == ['email']

    with pytest.raises(ValidationFailed) as excinfo:
        new_user(gate, admin, username='x2', email='not-an-email', password='short')
    assert set(excinfo.value.errors) == {'email', 'password'}

    with pytest.raises(ValidationFailed) as excinfo:
        new_user(gate, admin, username='x3', email='x3@example.com', role='janitor')
    assert 'role' in excinfo.value.errors


def test_only_user_managers_create_accounts(gate, property_admin):
    with pytest.raises(AuthorizationDenied):
        new_user(gate, property_admin)


def test_update_keeps_password_when_blank(gate, admin):
    user = new_user(gate, admin)
    users.update_user(gate, admin, user.id, {'username': 'juan', 'password': ''})
    assert user.username == 'juan'
    assert user.check_password('secret-pass')

    users.update_user(gate, admin, user.id, {'password': 'another-pass'})
    assert user.check_password('another-pass')


def test_role_assignment(gate, admin, staff):
    users.assign_role(gate, admin, staff.id, {'role': 'auditor'})
    assert staff.role == 'auditor'
    assert gate.has_permission(staff, 'items.view_history')

    users.revoke_role(gate, admin, staff.id)
    assert staff.role == 'staff'


def test_deactivation_refused_while_holding_items(gate, engine, admin, property_admin, staff,
                                                   item):
    hand_over(gate, property_admin, item, staff)
    with pytest.raises(Conflict) as excinfo:
        users.deactivate_user(engine, admin, staff.id)
    assert '1 active item assignment(s)' in excinfo.value.message
    assert staff.is_active


def test_forced_deactivation_returns_items(gate, engine, admin, property_admin, staff, item):
    assignment = hand_over(gate, property_admin, item, staff)
    users.deactivate_user(engine, admin, staff.id, force_return=True)

    assert not staff.is_active
    assert assignment.status == 'returned'
    assert assignment.item_return.status == 'pending_inspection'
    assert assignment.item_return.return_notes == 'User deactivated - forced return'
    assert item.status == 'available'
    assert not gate.has_permission(staff, 'requests.create')

    users.activate_user(gate, admin, staff.id)
    assert staff.is_active


def test_cannot_deactivate_yourself(engine, admin):
    with pytest.raises(Conflict):
        users.deactivate_user(engine, admin, admin.id)


def test_delete_and_restore(gate, engine, admin, staff):
    with pytest.raises(Conflict):
        users.delete_user(gate, admin, staff.id)

    users.deactivate_user(engine, admin, staff.id)
    users.delete_user(gate, admin, staff.id)
    assert staff.deleted_at is not None
    assert staff.id not in [u.id for u in users.list_users(gate, admin)]
    assert staff.id in [u.id for u in users.list_users(gate, admin, with_trashed=True)]

    users.restore_user(gate, admin, staff.id)
    assert users.get_user(gate, admin, staff.id).deleted_at is None


def test_list_users_filters(gate, admin, staff, auditor):
    assert [u.username for u in users.list_users(gate, admin, role='staff')] == ['staff']
    assert {u.username for u in users.list_users(gate, admin, search='aud')} == {'auditor'}
    assert User.query.count() == 3
