import os

from flask import Flask, send_file, current_app
from flask_swagger_ui import get_swaggerui_blueprint

from .config import config_by_name
from .extensions import db, migrate, jwt, cors
from .errors import register_error_handlers, register_jwt_handlers
from .logging_config import setup_logging


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    missing = [key for key in app.config.get("REQUIRED_SETTINGS", ()) if not app.config.get(key)]
    if missing:
        raise RuntimeError(f"Missing required settings for {config_name}: {', '.join(missing)}")

    setup_logging(app.config["LOG_LEVEL"])

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    from . import models  # noqa: F401  registers every table on db.metadata

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})
    register_jwt_handlers(jwt)

    # -------------------------------------------------
    # API Blueprints
    # -------------------------------------------------
    from .api.v1 import v1_bp

    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)

    # -------------------------------------------------
    # CLI
    # -------------------------------------------------
    from .cli import register_commands

    register_commands(app)

    # -------------------------------------------------
    # Serve OpenAPI YAML (PUBLIC)
    # -------------------------------------------------
    @app.route("/openapi/lp-builder.yaml", methods=["GET"], endpoint="openapi_lp_builder")
    def serve_openapi():
        spec_path = os.path.join(
            current_app.root_path,
            "api",
            "v1",
            "lp_builder_openapi.yaml",
        )

        if not os.path.exists(spec_path):
            raise FileNotFoundError("lp_builder_openapi.yaml not found")

        return send_file(
            spec_path,
            mimetype="application/yaml",
            as_attachment=False,
        )

    # -------------------------------------------------
    # Swagger UI
    # -------------------------------------------------
    SWAGGER_URL = "/swagger"
    API_URL = "/openapi/lp-builder.yaml"

    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            "app_name": "LP Builder API",
            "deepLinking": True,
            "persistAuthorization": True,
        },
    )

    app.register_blueprint(swaggerui_blueprint, url_prefix=SWAGGER_URL)

    app.logger.info("LP Builder started with %s config", config_name)
    return app
