# app/models/maintenance.py
from enum import Enum

from inventory_manager.app import db
from .mixins import TimestampMixin, serialize, utcnow


class MaintenanceType(Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    PREDICTIVE = "predictive"
    EMERGENCY = "emergency"


class MaintenanceStatus(Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaintenancePriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Maintenance(db.Model, TimestampMixin):
    """A maintenance job on a single item"""
    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey('item.id'), nullable=False)
    maintenance_type = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=MaintenanceStatus.PENDING.value)
    priority = db.Column(db.String(20), nullable=False, default=MaintenancePriority.MEDIUM.value)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    issue_reported = db.Column(db.Text)
    action_taken = db.Column(db.Text)
    recommendations = db.Column(db.Text)
    estimated_cost = db.Column(db.Numeric(10, 2))
    actual_cost = db.Column(db.Numeric(10, 2))
    cost_approved = db.Column(db.Boolean, nullable=False, default=False)
    scheduled_date = db.Column(db.DateTime)
    started_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)
    estimated_duration = db.Column(db.Integer)  # minutes
    actual_duration = db.Column(db.Integer)  # minutes
    assigned_to = db.Column(db.Integer, db.ForeignKey('user.id'))
    requested_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    approved_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    notes = db.Column(db.Text)
    item_condition_before = db.Column(db.String(20))
    item_condition_after = db.Column(db.String(20))
    item_status_before = db.Column(db.String(20))
    item_status_after = db.Column(db.String(20))

    def is_overdue(self, now=None):
        now = now or utcnow()
        return (self.status == MaintenanceStatus.SCHEDULED.value
                and self.scheduled_date is not None and self.scheduled_date < now)

    def to_dict(self):
        data = {c.name: serialize(getattr(self, c.name)) for c in self.__table__.columns}
        data['is_overdue'] = self.is_overdue()
        return data

    def __repr__(self):
        return f'<Maintenance {self.id}: {self.title} ({self.status})>'
