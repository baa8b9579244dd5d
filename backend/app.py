"""
Flask Application Factory - Chronicle ingestion service.

Exposes the ingestion pipeline over HTTP under /api/reviews. The pipeline
itself (browser, caches, TMDB, poster storage) is built once per app by
services.ingestion.init_ingestion.
"""

from flask import Flask, jsonify
from flask_cors import CORS
from config import Config, configure_logging
from models.database import db
from flask_migrate import Migrate

# Initialize Flask-Migrate (will be initialized in create_app)
migrate = Migrate()


def create_app(config_class=Config, **ingestion_overrides):
    """
    Build the app.

    Args:
        config_class: Config or TestConfig
        ingestion_overrides: renderer / cache / image_fetcher / tmdb_client
            replacements passed to init_ingestion
    """
    configure_logging(config_class.LOG_LEVEL)

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config['SQLALCHEMY_DATABASE_URI'] = config_class.database_url()

    CORS(app,
         resources={r"/api/*": {"origins": "*"}},
         methods=["GET", "POST", "OPTIONS"],
         allow_headers=["Content-Type", "X-Request-ID"],
         expose_headers=["X-Request-ID"],
         supports_credentials=False,
         send_wildcard=True)

    from api.middleware import setup_request_id_middleware, setup_error_handlers
    setup_request_id_middleware(app)
    setup_error_handlers(app)

    # Initialize SQLAlchemy
    db.init_app(app)

    # Initialize Flask-Migrate for database migrations
    migrate.init_app(app, db)

    with app.app_context():
        # Import all models so metadata is complete for migrations/create_all
        import models  # noqa: F401
        from scrapers.models import IngestionRun  # noqa: F401

    from services.ingestion import init_ingestion
    init_ingestion(app, **ingestion_overrides)

    from routes.reviews import reviews_bp
    app.register_blueprint(reviews_bp, url_prefix='/api/reviews')

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "name": "Nanarland ingestion API",
            "status": "running",
        })

    return app


def run_app():
    """Main entry point for local development - starts server with Flask's dev server."""
    app = create_app()
    app.run(debug=app.config['DEBUG'], host="0.0.0.0", port=5000)


if __name__ == "__main__":
    run_app()
