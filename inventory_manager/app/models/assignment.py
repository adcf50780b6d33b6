# app/models/assignment.py
from datetime import date
from enum import Enum

from inventory_manager.app import db
from .mixins import TimestampMixin, serialize


class AssignmentStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    RETURNED = "returned"
    CANCELLED = "cancelled"


class Assignment(db.Model, TimestampMixin):
    __table_args__ = (
        # at most one active assignment per item
        db.Index('uq_assignment_active_item', 'item_id', unique=True,
                 sqlite_where=db.text("status = 'active'"),
                 postgresql_where=db.text("status = 'active'")),
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey('item.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    assigned_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    approved_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    status = db.Column(db.String(20), nullable=False, default=AssignmentStatus.ACTIVE.value)
    assigned_date = db.Column(db.DateTime)
    due_date = db.Column(db.Date)
    returned_date = db.Column(db.DateTime)
    approved_at = db.Column(db.DateTime)
    cancelled_at = db.Column(db.DateTime)
    purpose = db.Column(db.String(255))
    notes = db.Column(db.Text)
    admin_notes = db.Column(db.Text)
    condition_on_assignment = db.Column(db.String(20))

    custodian = db.relationship('User', foreign_keys=[user_id], lazy=True)
    assigner = db.relationship('User', foreign_keys=[assigned_by], lazy=True)
    item_return = db.relationship('ItemReturn', backref='assignment', uselist=False, lazy=True)

    def is_overdue(self, today=None):
        today = today or date.today()
        return (self.status == AssignmentStatus.ACTIVE.value
                and self.due_date is not None and self.due_date < today)

    def to_dict(self):
        data = {c.name: serialize(getattr(self, c.name)) for c in self.__table__.columns}
        data['is_overdue'] = self.is_overdue()
        data['return_id'] = self.item_return.id if self.item_return else None
        return data

    def __repr__(self):
        return f'<Assignment {self.id}: item {self.item_id} -> user {self.user_id} ({self.status})>'
