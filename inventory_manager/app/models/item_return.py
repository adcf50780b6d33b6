# app/models/item_return.py
from datetime import datetime, time
from decimal import Decimal
from enum import Enum

from inventory_manager.app import db
from .mixins import TimestampMixin, serialize


class ReturnStatus(Enum):
    PENDING_INSPECTION = "pending_inspection"
    INSPECTED = "inspected"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReturnCondition(Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    DAMAGED = "damaged"


class ItemReturn(db.Model, TimestampMixin):
    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=False)
    returned_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    inspected_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    status = db.Column(db.String(20), nullable=False, default=ReturnStatus.PENDING_INSPECTION.value)
    return_date = db.Column(db.DateTime, nullable=False)
    inspection_date = db.Column(db.DateTime)
    condition_on_return = db.Column(db.String(20), nullable=False)
    is_damaged = db.Column(db.Boolean, nullable=False, default=False)
    damage_description = db.Column(db.Text)
    is_late = db.Column(db.Boolean, nullable=False, default=False)
    days_late = db.Column(db.Integer, nullable=False, default=0)
    return_notes = db.Column(db.Text)
    inspection_notes = db.Column(db.Text)
    penalty_amount = db.Column(db.Numeric(10, 2))
    penalty_paid = db.Column(db.Boolean, nullable=False, default=False)

    def calculate_late_days(self, due_date):
        """Flag the return late when it comes strictly after the due date.

        A previously set late flag is never cleared here.
        """
        if due_date is None or self.return_date is None:
            return
        due = datetime.combine(due_date, time.min)
        if self.return_date > due:
            self.is_late = True
            self.days_late = (self.return_date - due).days

    def calculate_penalty(self, per_day):
        self.penalty_amount = Decimal(self.days_late or 0) * Decimal(str(per_day))
        return self.penalty_amount

    def to_dict(self):
        return {c.name: serialize(getattr(self, c.name)) for c in self.__table__.columns}

    def __repr__(self):
        return f'<ItemReturn {self.id}: assignment {self.assignment_id} ({self.status})>'
