# app/models/__init__.py
from inventory_manager.app import db

# Import models after db
from .user import User
from .item_history import ItemHistory, record_history
from .item import Item, ItemStatus, ItemCondition
from .catalog import Category, Location
from .assignment import Assignment, AssignmentStatus
from .item_return import ItemReturn, ReturnStatus, ReturnCondition
from .disposal import Disposal, DisposalStatus, DisposalReason, DisposalMethod
from .maintenance import Maintenance, MaintenanceStatus, MaintenanceType, MaintenancePriority
from .request import Request, RequestComment, RequestStatus, RequestType, RequestPriority

__all__ = ['db', 'User', 'ItemHistory', 'record_history', 'Item', 'ItemStatus', 'ItemCondition',
    'Category', 'Location', 'Assignment', 'AssignmentStatus', 'ItemReturn', 'ReturnStatus',
    'ReturnCondition', 'Disposal', 'DisposalStatus', 'DisposalReason', 'DisposalMethod',
    'Maintenance', 'MaintenanceStatus', 'MaintenanceType', 'MaintenancePriority',
    'Request', 'RequestComment', 'RequestStatus', 'RequestType', 'RequestPriority']
