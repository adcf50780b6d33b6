# app/permissions.py
import logging

from inventory_manager.app.errors import AuthorizationDenied
from inventory_manager.roles import SUPERUSER_ROLE, ALL_PERMISSIONS

logger = logging.getLogger(__name__)


class PermissionGate:
    """Role -> permission lookup built once from configuration.

    The gate is handed to every service call; nothing reads permissions from
    module globals at request time.
    """

    def __init__(self, role_permissions, superuser_role=SUPERUSER_ROLE):
        self.superuser_role = superuser_role
        self._roles = {role: frozenset(perms) for role, perms in role_permissions.items()}
        if superuser_role not in self._roles:
            self._roles[superuser_role] = frozenset(ALL_PERMISSIONS)

    @property
    def roles(self):
        return sorted(self._roles)

    def permissions_for(self, role):
        return self._roles.get(role, frozenset())

    def has_permission(self, actor, permission):
        if actor is None or not getattr(actor, 'is_authenticated', False):
            return False
        if not actor.is_active:
            return False
        if actor.role == self.superuser_role:
            return True
        return permission in self.permissions_for(actor.role)

    def authorize(self, actor, permission, resource=None, owner_permitted=False):
        """Return True when the actor holds the permission, or owns the
        resource and the action allows the owner path."""
        if self.has_permission(actor, permission):
            return True
        if owner_permitted and resource is not None and actor is not None:
            return getattr(resource, 'owner_id', None) == getattr(actor, 'id', None)
        return False

    def ensure(self, actor, permission, resource=None, owner_permitted=False):
        if not self.authorize(actor, permission, resource, owner_permitted):
            logger.warning('user %s denied %s', getattr(actor, 'id', None), permission)
            raise AuthorizationDenied(permission)
