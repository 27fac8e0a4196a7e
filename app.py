"""Application factory."""

import os
import uuid

from flask import Flask, current_app, g, jsonify, request, send_from_directory
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_jwt_extended.exceptions import InvalidHeaderError
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from commands import register_commands
from config import Config
from models import db
from models.user import User
from routes.admin import admin_bp
from routes.auth import auth_bp
from routes.items import items_bp
from routes.users import users_bp

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

UNAUTHENTICATED_MESSAGE = "Authorization header missing or malformed"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"
USER_NOT_FOUND_MESSAGE = "User not found"


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Ensure uploads directory exists
    upload_dir = app.config.get("UPLOAD_DIR")
    if upload_dir:
        os.makedirs(upload_dir, exist_ok=True)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(items_bp, url_prefix="/items")
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    @app.route("/uploads/<path:filename>", methods=["GET"])
    def uploaded_file(filename: str):
        return send_from_directory(os.path.abspath(app.config["UPLOAD_DIR"]), filename)

    register_commands(app)

    # Errors
    _register_jwt_callbacks(app)
    _register_error_handlers(app)

    return app


def _error_response(status: int, error: str, message: str):
    request_id = g.get("request_id") or str(uuid.uuid4())
    response = jsonify({"error": error, "message": message, "request_id": request_id})
    response.status_code = status
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_jwt_callbacks(app: Flask) -> None:
    """Resolve bearer tokens to users and render every failure as a 401."""

    @jwt.user_lookup_loader
    def _load_user(_jwt_header, jwt_data):
        try:
            user_id = int(jwt_data["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        return db.session.get(User, user_id)

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        current_app.logger.warning("Unauthenticated request to %s: %s", request.path, reason)
        return _error_response(401, "Unauthorized", UNAUTHENTICATED_MESSAGE)

    # "Bearer" with no token, or with extra parts, is a malformed header.
    @app.errorhandler(InvalidHeaderError)
    def _malformed_header(error: InvalidHeaderError):
        return _missing_token(str(error))

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        current_app.logger.warning("Invalid token on %s: %s", request.path, reason)
        return _error_response(401, "Unauthorized", INVALID_TOKEN_MESSAGE)

    @jwt.expired_token_loader
    def _expired_token(_jwt_header, _jwt_data):
        current_app.logger.warning("Expired token on %s", request.path)
        return _error_response(401, "Unauthorized", INVALID_TOKEN_MESSAGE)

    @jwt.user_lookup_error_loader
    def _unknown_user(_jwt_header, jwt_data):
        current_app.logger.warning("Token subject %s has no user", jwt_data.get("sub"))
        return _error_response(401, "Unauthorized", USER_NOT_FOUND_MESSAGE)


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        if error.code and error.code >= 500:
            db.session.rollback()
            app.logger.error("%s: %s", error.name, error.description)
        response = _error_response(
            error.code or 500,
            getattr(error, "name", "Error"),
            error.description,
        )
        # Keep headers such as Allow and Retry-After.
        for key, value in error.get_headers():
            if key.lower() != "content-type":
                response.headers.setdefault(key, value)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled application error", exc_info=error)
        return _error_response(500, "Internal Server Error", "Server error")


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
