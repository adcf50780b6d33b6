# app/models/disposal.py
from enum import Enum

from inventory_manager.app import db
from .mixins import TimestampMixin, SoftDeleteMixin, serialize


class DisposalStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXECUTED = "executed"


class DisposalReason(Enum):
    OBSOLETE = "obsolete"
    DAMAGED_BEYOND_REPAIR = "damaged_beyond_repair"
    EXPIRED = "expired"
    LOST = "lost"
    STOLEN = "stolen"
    DONATED = "donated"
    SOLD = "sold"
    OTHER = "other"


class DisposalMethod(Enum):
    DESTROY = "destroy"
    DONATE = "donate"
    SELL = "sell"
    RECYCLE = "recycle"
    OTHER = "other"


OPEN_DISPOSAL_STATUSES = (DisposalStatus.PENDING.value, DisposalStatus.APPROVED.value)


class Disposal(db.Model, TimestampMixin, SoftDeleteMixin):
    __table_args__ = (
        # at most one open disposal per item
        db.Index('uq_disposal_open_item', 'item_id', unique=True,
                 sqlite_where=db.text("status IN ('pending', 'approved') AND deleted_at IS NULL"),
                 postgresql_where=db.text("status IN ('pending', 'approved') AND deleted_at IS NULL")),
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey('item.id'), nullable=False)
    requested_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    approved_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    executed_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    status = db.Column(db.String(20), nullable=False, default=DisposalStatus.PENDING.value)
    reason = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=False)
    approval_notes = db.Column(db.Text)
    execution_notes = db.Column(db.Text)
    estimated_value = db.Column(db.Numeric(15, 2))
    disposal_cost = db.Column(db.Numeric(15, 2))
    disposal_method = db.Column(db.String(20))
    recipient = db.Column(db.String(255))
    requested_at = db.Column(db.DateTime)
    approved_at = db.Column(db.DateTime)
    rejected_at = db.Column(db.DateTime)
    executed_at = db.Column(db.DateTime)
    scheduled_for = db.Column(db.DateTime)

    def to_dict(self):
        return {c.name: serialize(getattr(self, c.name)) for c in self.__table__.columns}

    def __repr__(self):
        return f'<Disposal {self.id}: item {self.item_id} ({self.status})>'
