# app/lifecycle/engine.py
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, Type, Union

from inventory_manager.app.database import unit_of_work
from inventory_manager.app.errors import AuthorizationDenied, InvalidTransition
from inventory_manager.app.forms import EmptyForm, validate_payload
from .machines import Action, StateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionSpec:
    """Gate, payload contract and side effect of one lifecycle action.

    ``permission`` may be a tuple, in which case any one of them is enough.
    ``effect(engine, entity, actor, data, previous)`` runs after the new
    status is set and inside the same unit of work; ``after_commit(entity)``
    runs once that work is committed.
    """
    permission: Union[str, Tuple[str, ...]]
    effect: Optional[Callable] = None
    form: Type = EmptyForm
    owner_permitted: bool = False
    after_commit: Optional[Callable] = None


@dataclass
class Registration:
    machine: StateMachine
    actions: dict = field(default_factory=dict)


class LifecycleEngine:
    def __init__(self, gate):
        self.gate = gate
        self._registry = {}

    def register(self, model, machine, actions):
        self._registry[model] = Registration(machine, dict(actions))

    def machine_for(self, entity_or_model):
        model = entity_or_model if isinstance(entity_or_model, type) else type(entity_or_model)
        return self._registry[model].machine

    def is_permitted(self, entity, action, actor):
        """Permission half of the gate, without touching status"""
        spec = self._spec(entity, action)
        return spec is not None and self._authorized(spec, entity, actor)

    def transition(self, entity, action, actor, payload=None):
        """Move ``entity`` along ``action`` on behalf of ``actor``.

        Checks run in order: permission (or owner path), source status, then
        the payload contract. The status change, the side effect and any Item
        update are committed together.
        """
        spec = self._spec(entity, action)
        registration = self._registry[type(entity)]
        name = action.value if isinstance(action, Action) else str(action)
        if spec is None:
            raise InvalidTransition(entity.status, name)
        if not self._authorized(spec, entity, actor):
            logger.warning('%s %s: user %s denied %s', registration.machine.name, entity.id,
                           getattr(actor, 'id', None), name)
            permission = spec.permission if isinstance(spec.permission, str) else spec.permission[0]
            raise AuthorizationDenied(permission)

        previous = entity.status
        try:
            target = registration.machine.next_status(previous, action)
        except InvalidTransition:
            logger.warning('%s %s: %s refused in status %s', registration.machine.name,
                           entity.id, name, previous)
            raise
        data = validate_payload(spec.form, payload)

        with unit_of_work():
            entity.status = target
            if spec.effect is not None:
                spec.effect(self, entity, actor, data, previous)

        logger.info('%s %s: %s -> %s (%s) by user %s', registration.machine.name, entity.id,
                    previous, entity.status, name, getattr(actor, 'id', None))
        if spec.after_commit is not None:
            spec.after_commit(entity)
        return entity

    def _spec(self, entity, action):
        registration = self._registry.get(type(entity))
        if registration is None:
            raise TypeError(f'{type(entity).__name__} has no lifecycle')
        try:
            return registration.actions.get(Action(action))
        except ValueError:
            return None

    def _authorized(self, spec, entity, actor):
        permissions = (spec.permission,) if isinstance(spec.permission, str) else spec.permission
        return any(self.gate.authorize(actor, p, entity, spec.owner_permitted) for p in permissions)
