# app/models/request.py
from enum import Enum

from inventory_manager.app import db
from .mixins import TimestampMixin, SoftDeleteMixin, serialize


class RequestType(Enum):
    ASSIGNMENT = "assignment"
    PURCHASE = "purchase"
    DISPOSAL = "disposal"
    MAINTENANCE = "maintenance"
    TRANSFER = "transfer"
    OTHER = "other"


class RequestStatus(Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    CHANGES_REQUESTED = "changes_requested"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RequestPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Request(db.Model, TimestampMixin, SoftDeleteMixin):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    type = db.Column(db.String(20), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('item.id'))
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    priority = db.Column(db.String(20), nullable=False, default=RequestPriority.MEDIUM.value)
    status = db.Column(db.String(20), nullable=False, default=RequestStatus.PENDING.value)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    reviewed_at = db.Column(db.DateTime)
    review_notes = db.Column(db.Text)
    metadata_ = db.Column('metadata', db.JSON)
    completed_at = db.Column(db.DateTime)

    requester = db.relationship('User', foreign_keys=[user_id], lazy=True)
    item = db.relationship('Item', lazy=True)
    comments = db.relationship('RequestComment', backref='request', lazy=True,
                               order_by='RequestComment.id')

    @property
    def owner_id(self):
        return self.user_id

    def to_dict(self):
        data = {c.key: serialize(getattr(self, c.key))
                for c in self.__mapper__.column_attrs}
        data['metadata'] = data.pop('metadata_')
        return data

    def __repr__(self):
        return f'<Request {self.id}: {self.type} ({self.status})>'


class RequestComment(db.Model, TimestampMixin):
    id = db.Column(db.Integer, primary_key=True)
    request_id = db.Column(db.Integer, db.ForeignKey('request.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    comment = db.Column(db.Text, nullable=False)
    is_internal = db.Column(db.Boolean, nullable=False, default=False)

    author = db.relationship('User', lazy=True)

    def to_dict(self):
        return {'id': self.id, 'request_id': self.request_id, 'user_id': self.user_id,
                'author': self.author.username if self.author else None,
                'comment': self.comment, 'is_internal': self.is_internal,
                'created_at': serialize(self.created_at)}
