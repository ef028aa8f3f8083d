import logging

from flask import Flask, jsonify
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from config import Config
from database import init_db
from utils.cache import cache
from routes.auth_routes import auth_bp
from routes.asset_routes import asset_bp
from routes.comment_routes import comment_bp
from routes.dashboard_routes import dashboard_bp


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.from_mapping(test_config)

    logging.basicConfig(
        level=getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # --- Extensions ---
    JWTManager(app)
    cache.init_app(app)
    init_db(app)

    # --- CORS ---
    CORS(app, supports_credentials=True, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # --- Blueprints ---
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(asset_bp, url_prefix="/api")
    app.register_blueprint(comment_bp, url_prefix="/api")
    app.register_blueprint(dashboard_bp, url_prefix="/api")

    # --- Health check route ---
    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
