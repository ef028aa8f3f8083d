import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from database import StoreError
from models.comment_model import add_comment, delete_comment, get_comments
from utils.validation import MissingFieldError, validate_comment_payload

logger = logging.getLogger(__name__)

comment_bp = Blueprint("comments", __name__)


@comment_bp.get("/comments")
@jwt_required()
def list_comments():
    try:
        items = get_comments()
    except StoreError:
        logger.exception("failed to read comments")
        return jsonify({"msg": "Failed to load comments"}), 500
    return jsonify([x.to_dict() for x in items]), 200


@comment_bp.post("/comments")
@jwt_required()
def create_comment():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    try:
        comment = validate_comment_payload(data)
    except MissingFieldError as e:
        return jsonify({"msg": "Missing required fields", "missing": e.fields}), 400
    except ValueError as e:
        return jsonify({"msg": str(e)}), 400

    try:
        row_id = add_comment(comment["date"], comment["owner"], comment["message"])
    except StoreError:
        logger.exception("failed to save comment")
        return jsonify({"msg": "Failed to save comment"}), 500
    return jsonify({"msg": "Comment added", "row_id": row_id}), 201


@comment_bp.delete("/comments/<int:row_id>")
@jwt_required()
def remove_comment(row_id):
    try:
        found = delete_comment(row_id)
    except StoreError:
        logger.exception("failed to delete comment %s", row_id)
        return jsonify({"msg": "Failed to delete comment"}), 500
    if not found:
        return jsonify({"msg": "Not found"}), 404
    return jsonify({"msg": "Deleted"}), 200
