import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from database import StoreError
from models.asset_model import get_assets
from models.dashboard_model import build_dashboard
from utils.validation import validate_view

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.get("/dashboard")
@jwt_required()
def dashboard():
    """
    Chart feed for one owner view: GET /api/dashboard?view=All|Husband|Wife|Joint
    """
    try:
        view = validate_view(request.args.get("view", "All"))
    except ValueError as e:
        return jsonify({"msg": str(e)}), 400

    try:
        snapshots = get_assets()
    except StoreError:
        logger.exception("failed to read assets for dashboard")
        return jsonify({"msg": "Failed to load assets"}), 500
    return jsonify(build_dashboard(snapshots, view)), 200
