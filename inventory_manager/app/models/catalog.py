# app/models/catalog.py
from sqlalchemy.orm import declared_attr

from inventory_manager.app import db
from .mixins import TimestampMixin, SoftDeleteMixin, serialize


class CatalogMixin(TimestampMixin, SoftDeleteMixin):
    """Shared shape of categories and locations: a named, coded, switchable record"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    @declared_attr
    def __table_args__(cls):
        # codes stay unique among live rows; a trashed record frees its code
        live = db.text('deleted_at IS NULL')
        return (db.Index(f'uq_{cls.__name__.lower()}_live_code', 'code', unique=True,
                         sqlite_where=live, postgresql_where=live),)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.code = normalize_code(self.code)

    def live_items(self):
        from .item import Item
        return Item.live().filter(getattr(Item, self.item_foreign_key) == self.id)

    def to_dict(self):
        data = {c.name: serialize(getattr(self, c.name)) for c in self.__table__.columns}
        data['items_count'] = self.live_items().count() if self.id else 0
        return data


class Category(CatalogMixin, db.Model):
    item_foreign_key = 'category_id'
    items = db.relationship('Item', backref='category', lazy=True)

    def __repr__(self):
        return f'<Category {self.code}: {self.name}>'


class Location(CatalogMixin, db.Model):
    item_foreign_key = 'location_id'
    building = db.Column(db.String(255))
    floor = db.Column(db.String(50))
    room = db.Column(db.String(50))
    items = db.relationship('Item', backref='location', lazy=True)

    @property
    def full_address(self):
        parts = [self.building, f'Floor {self.floor}' if self.floor else None,
                 f'Room {self.room}' if self.room else None]
        return ', '.join(p for p in parts if p) or self.name

    def to_dict(self):
        data = super().to_dict()
        data['full_address'] = self.full_address
        return data

    def __repr__(self):
        return f'<Location {self.code}: {self.name}>'


def normalize_code(code):
    return str(code).strip().upper() if code is not None else None
