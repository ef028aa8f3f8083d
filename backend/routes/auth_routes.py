import hmac
import logging

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

# Single shared session identity, there are no user accounts
HOUSEHOLD_IDENTITY = "household"


@auth_bp.post("/auth")
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    pin = data.get("pin")
    expected = current_app.config.get("ACCESS_PIN") or ""

    if not expected:
        logger.warning("ACCESS_PIN is not set, refusing login")
        return jsonify({"success": False}), 401

    if not isinstance(pin, str) or not hmac.compare_digest(pin.encode(), expected.encode()):
        return jsonify({"success": False}), 401

    resp = jsonify({"success": True})
    set_access_cookies(resp, create_access_token(identity=HOUSEHOLD_IDENTITY))
    return resp, 200


@auth_bp.post("/auth/logout")
def logout():
    resp = jsonify({"success": True})
    unset_jwt_cookies(resp)
    return resp, 200
