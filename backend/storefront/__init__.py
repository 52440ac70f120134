# backend/storefront/__init__.py
from flask import Flask

from .config import Config
from .extensions import db, migrate



def create_app(config_object=None) -> Flask:
    """
    Build the storefront payment/fulfillment app.

    config_object may be a class/object (loaded with from_object) or a dict of
    overrides applied on top of Config.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if isinstance(config_object, dict):
        app.config.update(config_object)
    elif config_object is not None:
        app.config.from_object(config_object)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Refuse to start with a policy that could stamp a decided status
    from .services.attempt_service import validate_payment_policy
    app.config["PAYMENT_POLICY"] = validate_payment_policy(app.config["PAYMENT_POLICY"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.payments import payments_bp
    from .routes.admin_payments import admin_payments_bp
    from .routes.orders import orders_bp
    from .routes.order_statuses import order_statuses_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(admin_payments_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(order_statuses_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
