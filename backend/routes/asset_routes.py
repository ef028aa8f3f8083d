import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from database import StoreError
from models.asset_model import add_asset, delete_assets, get_assets
from utils.validation import MissingFieldError, validate_asset_payload, validate_row_ids

logger = logging.getLogger(__name__)

asset_bp = Blueprint("assets", __name__)


@asset_bp.get("/assets")
@jwt_required()
def list_assets():
    try:
        items = get_assets()
    except StoreError:
        logger.exception("failed to read assets")
        return jsonify({"msg": "Failed to load assets"}), 500
    return jsonify([x.to_dict() for x in items]), 200


@asset_bp.post("/assets")
@jwt_required()
def create_asset():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    try:
        row = validate_asset_payload(data)
    except MissingFieldError as e:
        return jsonify({"msg": "Missing required fields", "missing": e.fields}), 400
    except ValueError as e:
        return jsonify({"msg": str(e)}), 400

    try:
        row_id = add_asset(row)
    except StoreError:
        logger.exception("failed to save asset")
        return jsonify({"msg": "Failed to save asset"}), 500
    return jsonify({"msg": "Asset added", "row_id": row_id}), 201


@asset_bp.delete("/assets")
@jwt_required()
def remove_assets():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    if "rows" not in data:
        return jsonify({"msg": "Missing required fields", "missing": ["rows"]}), 400
    try:
        row_ids = validate_row_ids(data["rows"])
    except ValueError as e:
        return jsonify({"msg": str(e)}), 400

    try:
        deleted = delete_assets(row_ids)
    except StoreError:
        logger.exception("failed to delete assets")
        return jsonify({"msg": "Failed to delete assets"}), 500
    return jsonify({"msg": "Deleted", "deleted": deleted}), 200
