from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from library.config import Config
from library.extensions import db, migrate
from library.services.errors import StoreFailure
from library.utils.responses import json_error


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # 1) db init (db.engine / db.session)
    db.init_app(app)
    migrate.init_app(app, db)

    # 2) models must be imported before create_all / migrations see them
    from library.models import borrower, loan, title, volume  # noqa: F401

    # 3) API blueprints
    from library.controllers.loan_controller import loan_bp
    from library.controllers.volume_controller import volume_bp
    from library.controllers.borrower_controller import borrower_bp
    app.register_blueprint(loan_bp)
    app.register_blueprint(volume_bp)
    app.register_blueprint(borrower_bp)

    from library.cli import register_cli
    register_cli(app)

    @app.errorhandler(SQLAlchemyError)
    def _store_error(e):
        db.session.rollback()
        app.logger.exception(f"[db] Unhandled database error: {e}")
        return json_error(StoreFailure(detail=str(e)))

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    @app.get("/health/db")
    def health_db():
        try:
            db.session.execute(text("SELECT 1"))
            return jsonify({"ok": True})
        except SQLAlchemyError as e:
            db.session.rollback()
            app.logger.error(f"[db] Health check failed: {e}")
            return jsonify({"ok": False, "error": "Database unavailable"}), 503

    app.logger.info("[app] Library loan service configured")
    return app
