import logging
import os

from flask import Flask
from flask_cors import CORS
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError

from thriftmarket.config import CONFIGS
from thriftmarket.extensions import bcrypt, change_feed, db, jwt, ma, migrate
from thriftmarket.utils.exceptions import ServiceError
from thriftmarket.utils.response_formatter import error_response, service_error_response

# imported for their mappers
from thriftmarket.models import cart_item, message, notification, order, product, profile, rating, wishlist_item  # noqa: F401


def create_app(config_name=None):
    app = Flask(__name__, instance_relative_config=False)
    env = config_name or os.getenv("FLASK_ENV", "development")
    app.config.from_object(CONFIGS.get(env, CONFIGS["development"]))

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("thriftmarket").setLevel(app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    bcrypt.init_app(app)
    change_feed.init_app(app)
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",")]
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    # register blueprints
    from thriftmarket.routes.auth_routes import bp as auth_bp
    from thriftmarket.routes.cart_routes import bp as cart_bp
    from thriftmarket.routes.order_routes import bp as order_bp
    from thriftmarket.routes.rating_routes import bp as rating_bp
    from thriftmarket.routes.chat_routes import bp as chat_bp
    from thriftmarket.routes.notification_routes import bp as notification_bp
    from thriftmarket.routes.realtime_routes import bp as realtime_bp
    from thriftmarket.routes.wishlist_routes import bp as wishlist_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(order_bp)
    app.register_blueprint(rating_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(notification_bp)
    app.register_blueprint(realtime_bp)
    app.register_blueprint(wishlist_bp)

    register_error_handlers(app)
    register_jwt_handlers()

    return app


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def service_error(e):
        if e.status >= 500:
            app.logger.error("%s: %s %s", e.code, e.message, e.details)
        return service_error_response(e)

    @app.errorhandler(SchemaValidationError)
    def schema_error(e):
        return error_response("VALIDATION_ERROR", "Invalid input", e.messages, status=422)

    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        app.logger.exception("Database error")
        return error_response("SERVER_ERROR", "Internal server error", status=500)

    @app.errorhandler(400)
    def bad_request(e):
        return error_response("BAD_REQUEST", str(e), status=400)

    @app.errorhandler(401)
    def unauthorized(e):
        return error_response("UNAUTHORIZED", str(e), status=401)

    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", str(e), status=405)

    @app.errorhandler(500)
    def server_error(e):
        return error_response("SERVER_ERROR", "Internal server error", status=500)


def register_jwt_handlers():
    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response("UNAUTHORIZED", reason, status=401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response("INVALID_TOKEN", reason, status=401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response("TOKEN_EXPIRED", "Token has expired", status=401)
