# app/services/__init__.py
from inventory_manager.app.lifecycle import (LifecycleEngine, ASSIGNMENT_MACHINE, RETURN_MACHINE,
                                             DISPOSAL_MACHINE, MAINTENANCE_MACHINE,
                                             REQUEST_MACHINE)
from inventory_manager.app.models import Assignment, ItemReturn, Disposal, Maintenance, Request
from .assignments import ASSIGNMENT_ACTIONS
from .returns import RETURN_ACTIONS
from .disposals import DISPOSAL_ACTIONS
from .maintenance import MAINTENANCE_ACTIONS
from .requests import REQUEST_ACTIONS


def build_engine(gate):
    engine = LifecycleEngine(gate)
    engine.register(Assignment, ASSIGNMENT_MACHINE, ASSIGNMENT_ACTIONS)
    engine.register(ItemReturn, RETURN_MACHINE, RETURN_ACTIONS)
    engine.register(Disposal, DISPOSAL_MACHINE, DISPOSAL_ACTIONS)
    engine.register(Maintenance, MAINTENANCE_MACHINE, MAINTENANCE_ACTIONS)
    engine.register(Request, REQUEST_MACHINE, REQUEST_ACTIONS)
    return engine
