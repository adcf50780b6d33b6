import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_bcrypt import Bcrypt
from flask_mail import Mail
from inventory_manager.config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
mail = Mail()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)

    from inventory_manager.app.errors import register_error_handlers
    from inventory_manager.app.permissions import PermissionGate
    from inventory_manager.app.services import build_engine
    from inventory_manager.app.models.user import User

    gate = PermissionGate(app.config['ROLE_PERMISSIONS'])
    app.extensions['permission_gate'] = gate
    app.extensions['lifecycle'] = build_engine(gate)
    register_error_handlers(app)

    @login_manager.user_loader
    def load_user(user_id):
        user = db.session.get(User, int(user_id))
        if user is None or user.deleted_at is not None:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'unauthorized', 'message': 'Please log in to access this page.'}), 401

    with app.app_context():
        @app.route('/')
        def index():
            return jsonify({'name': 'inventory-manager', 'status': 'ok'})

        # Import blueprints inside context
        from inventory_manager.app.routes import (items_bp, categories_bp, locations_bp,
                                                  assignments_bp, returns_bp, disposals_bp,
                                                  maintenance_bp, requests_bp, accounts_bp)
        from inventory_manager.app.routes.users import users_bp

        # Register blueprints
        app.register_blueprint(users_bp)
        app.register_blueprint(items_bp)
        app.register_blueprint(categories_bp)
        app.register_blueprint(locations_bp)
        app.register_blueprint(assignments_bp)
        app.register_blueprint(returns_bp)
        app.register_blueprint(disposals_bp)
        app.register_blueprint(maintenance_bp)
        app.register_blueprint(requests_bp)
        app.register_blueprint(accounts_bp)

        # Create all database tables
        db.create_all()

    app.logger.info('inventory manager started with %d roles',
                    len(gate.roles))
    return app
