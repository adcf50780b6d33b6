# app/models/user.py
from flask_login import UserMixin

from inventory_manager.app import db, bcrypt
from .mixins import TimestampMixin, SoftDeleteMixin, serialize


class User(db.Model, UserMixin, TimestampMixin, SoftDeleteMixin):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(128), nullable=False, default='')
    role = db.Column(db.String(50), nullable=False, default='staff')
    active = db.Column(db.Boolean, nullable=False, default=True)

    @property
    def is_active(self):
        return bool(self.active) and self.deleted_at is None

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {'id': self.id, 'username': self.username, 'email': self.email, 'role': self.role,
                'active': bool(self.active), 'created_at': serialize(self.created_at),
                'deleted_at': serialize(self.deleted_at)}

    def __repr__(self):
        return f"User('{self.username}', '{self.email}', '{self.role}')"
