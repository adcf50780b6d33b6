import os
from pathlib import Path

from inventory_manager.roles import ROLE_PERMISSIONS

BASE_DIR = Path(__file__).resolve().parent

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-this'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{BASE_DIR}/data/inventory.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT') or 25)
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS') is not None
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or 'noreply@inventory.local'

    # JSON API, forms are fed from request payloads
    WTF_CSRF_ENABLED = False

    QR_CODE_FOLDER = os.environ.get('QR_CODE_FOLDER') or str(BASE_DIR / 'data' / 'qrcodes')
    LATE_RETURN_PENALTY_PER_DAY = os.environ.get('LATE_RETURN_PENALTY_PER_DAY') or '10.00'
    DEFAULT_ASSIGNMENT_DAYS = int(os.environ.get('DEFAULT_ASSIGNMENT_DAYS') or 30)
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

    ROLE_PERMISSIONS = ROLE_PERMISSIONS


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    MAIL_SUPPRESS_SEND = True
    LOG_LEVEL = 'DEBUG'
