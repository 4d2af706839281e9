import logging
import os

from flask import Flask
from pardna.extensions import db, login_manager
from config import Config


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # User loader for Flask-Login
    from pardna.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Register blueprints
    from pardna.routes import handle_service_error
    from pardna.routes.plans import plans_bp
    from pardna.routes.payments import payments_bp
    from pardna.services.errors import PardnaError

    app.register_blueprint(plans_bp)
    app.register_blueprint(payments_bp)
    app.register_error_handler(PardnaError, handle_service_error)

    with app.app_context():
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
            os.makedirs(app.instance_path, exist_ok=True)
        db.create_all()
        app.logger.info("Database tables created")

    return app
