# app/lifecycle/__init__.py
from .machines import (Action, StateMachine, ASSIGNMENT_MACHINE, RETURN_MACHINE, DISPOSAL_MACHINE,
                       MAINTENANCE_MACHINE, REQUEST_MACHINE, can_change_item_status,
                       ensure_item_status_change)
from .engine import ActionSpec, LifecycleEngine

__all__ = ['Action', 'StateMachine', 'ASSIGNMENT_MACHINE', 'RETURN_MACHINE', 'DISPOSAL_MACHINE',
    'MAINTENANCE_MACHINE', 'REQUEST_MACHINE', 'can_change_item_status',
    'ensure_item_status_change', 'ActionSpec', 'LifecycleEngine']
