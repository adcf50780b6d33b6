# app/models/item.py
from enum import Enum

from inventory_manager.app import db
from .mixins import TimestampMixin, SoftDeleteMixin, coerce_enum, serialize
from .item_history import ItemHistory


class ItemStatus(Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    IN_USE = "in_use"
    IN_MAINTENANCE = "in_maintenance"
    FOR_DISPOSAL = "for_disposal"
    DISPOSED = "disposed"
    LOST = "lost"
    DAMAGED = "damaged"


class ItemCondition(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    FOR_REPAIR = "for_repair"
    UNSERVICEABLE = "unserviceable"


ASSIGNABLE_STATUSES = {ItemStatus.AVAILABLE.value, ItemStatus.IN_USE.value}
MAINTAINABLE_STATUSES = {ItemStatus.AVAILABLE.value, ItemStatus.ASSIGNED.value,
                         ItemStatus.IN_USE.value, ItemStatus.DAMAGED.value}
DISPOSABLE_STATUSES = {ItemStatus.AVAILABLE.value, ItemStatus.DAMAGED.value,
                       ItemStatus.IN_MAINTENANCE.value, ItemStatus.FOR_DISPOSAL.value}


class Item(db.Model, TimestampMixin, SoftDeleteMixin):
    id = db.Column(db.Integer, primary_key=True)
    iar_number = db.Column(db.String(100))
    property_number = db.Column(db.String(255), unique=True, nullable=False)
    fund_cluster = db.Column(db.String(100))
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    brand = db.Column(db.String(255))
    model = db.Column(db.String(255))
    serial_number = db.Column(db.String(255), unique=True)
    barcode = db.Column(db.String(255), unique=True)
    specifications = db.Column(db.Text)
    acquisition_cost = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    unit_of_measure = db.Column(db.String(50))
    quantity = db.Column(db.Integer, nullable=False, default=1)
    category_id = db.Column(db.Integer, db.ForeignKey('category.id'))
    location_id = db.Column(db.Integer, db.ForeignKey('location.id'))
    accountable_person_id = db.Column(db.Integer, db.ForeignKey('user.id'))
    date_acquired = db.Column(db.Date)
    date_inventoried = db.Column(db.Date)
    warranty_expiry = db.Column(db.Date)
    last_maintenance_date = db.Column(db.Date)
    next_maintenance_due = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default=ItemStatus.AVAILABLE.value)
    condition = db.Column(db.String(20), nullable=False, default=ItemCondition.GOOD.value)
    qr_code = db.Column(db.Text)
    qr_code_path = db.Column(db.String(500))
    remarks = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    updated_by = db.Column(db.Integer, db.ForeignKey('user.id'))

    assignments = db.relationship('Assignment', backref='item', lazy=True)
    disposals = db.relationship('Disposal', backref='item', lazy=True)
    maintenance_records = db.relationship('Maintenance', backref='item', lazy=True)
    history = db.relationship('ItemHistory', backref='item', lazy=True,
                              order_by=ItemHistory.id)

    def __init__(self, **kwargs):
        status = kwargs.pop('status', None)
        condition = kwargs.pop('condition', None)
        super().__init__(**kwargs)
        self.property_number = str(self.property_number).strip()
        self.status = coerce_enum(ItemStatus, status) if status else ItemStatus.AVAILABLE.value
        self.condition = (coerce_enum(ItemCondition, condition, 'condition')
                          if condition else ItemCondition.GOOD.value)

    def can_be_assigned(self):
        return self.status in ASSIGNABLE_STATUSES

    def can_be_maintained(self):
        return self.status in MAINTAINABLE_STATUSES

    def can_be_disposed(self):
        return self.status in DISPOSABLE_STATUSES

    def active_assignment(self):
        from .assignment import Assignment, AssignmentStatus
        return (Assignment.query
                .filter_by(item_id=self.id, status=AssignmentStatus.ACTIVE.value)
                .order_by(Assignment.id.desc())
                .first())

    def to_dict(self):
        data = {c.name: serialize(getattr(self, c.name)) for c in self.__table__.columns
                if c.name != 'qr_code'}
        data['has_qr_code'] = bool(self.qr_code)
        return data

    def __repr__(self):
        return f'<Item {self.property_number}: {self.name} ({self.status})>'
