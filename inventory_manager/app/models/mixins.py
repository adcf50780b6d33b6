# app/models/mixins.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from inventory_manager.app import db
from inventory_manager.app.errors import NotFound


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def coerce_enum(enum_cls, value, field='status'):
    """Match a value to an enum member, case-insensitively"""
    if isinstance(value, enum_cls):
        return value.value
    try:
        return next(m.value for m in enum_cls if m.value == str(value).strip().lower())
    except StopIteration:
        raise ValueError(f"Invalid {field}: {value}")


def enum_values(enum_cls):
    return [m.value for m in enum_cls]


class TimestampMixin:
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class SoftDeleteMixin:
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    @property
    def is_trashed(self):
        return self.deleted_at is not None

    def soft_delete(self):
        self.deleted_at = utcnow()

    def restore(self):
        self.deleted_at = None

    @classmethod
    def live(cls):
        return cls.query.filter(cls.deleted_at.is_(None))

    @classmethod
    def find(cls, ident, with_trashed=False):
        record = db.session.get(cls, ident) if ident is not None else None
        if record is None or (record.is_trashed and not with_trashed):
            raise NotFound(cls, ident)
        return record


def get_or_raise(model, ident):
    """Plain lookup for models without soft deletes"""
    record = db.session.get(model, ident) if ident is not None else None
    if record is None:
        raise NotFound(model, ident)
    return record


def serialize(value):
    if isinstance(value, datetime):
        return value.isoformat(timespec='seconds')
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value
