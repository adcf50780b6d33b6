from inventory_manager.app import db
from .mixins import utcnow, serialize

class ItemHistory(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey('item.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True) # Nullable for system events
    event_type = db.Column(db.String(100), nullable=False)
    details = db.Column(db.String(500), nullable=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {'id': self.id, 'item_id': self.item_id, 'user_id': self.user_id,
                'event_type': self.event_type, 'details': self.details,
                'timestamp': serialize(self.timestamp)}

    def __repr__(self):
        return f"ItemHistory('{self.event_type}', '{self.timestamp}')"


def record_history(item, actor, event_type, details=None):
    """Queue a history row on the current session; committed with the caller's unit of work"""
    entry = ItemHistory(item=item, user_id=getattr(actor, 'id', None),
                        event_type=event_type, details=(details or '')[:500] or None)
    db.session.add(entry)
    return entry
