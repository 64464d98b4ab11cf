# Overview: Flask API routes for cash drawer sessions; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..services import cash_service


cash_bp = Blueprint("cash", __name__, url_prefix="/api/cash")


@cash_bp.post("/sessions")
@require_auth
@require_permission("CASH_OPEN_SESSION")
def open_session_route():
    """
    Open a drawer session for the caller.

    Request body:
    {
        "initial_cash": "50.00",
        "notes": "..."  (optional)
    }
    """
    data = request.get_json(silent=True) or {}
    session = cash_service.open_session(g.principal, data.get("initial_cash"), notes=data.get("notes"))
    return jsonify({"session": session.to_dict()}), 201


@cash_bp.post("/sessions/<int:session_id>/close")
@require_auth
@require_permission("CASH_CLOSE_SESSION")
def close_session_route(session_id: int):
    data = request.get_json(silent=True) or {}
    session = cash_service.close_session(
        g.principal,
        session_id,
        data.get("final_cash"),
        notes=data.get("notes"),
    )
    return jsonify({"session": session.to_dict()}), 200


@cash_bp.get("/sessions/active")
@require_auth
@require_permission("CASH_OPEN_SESSION")
def active_session_route():
    session = cash_service.get_active_session(g.principal.user_id)
    return jsonify({"session": session.to_dict() if session else None}), 200


@cash_bp.get("/sessions")
@require_auth
def list_sessions_route():
    user_id = request.args.get("user_id", type=int)
    sessions = cash_service.list_user_sessions(g.principal, user_id)
    return jsonify({"sessions": [session.to_dict() for session in sessions]}), 200


@cash_bp.get("/sessions/<int:session_id>")
@require_auth
def get_session_route(session_id: int):
    return jsonify({"session": cash_service.get_session(g.principal, session_id).to_dict()}), 200


@cash_bp.get("/sessions/<int:session_id>/summary")
@require_auth
def session_summary_route(session_id: int):
    return jsonify(cash_service.session_summary(g.principal, session_id)), 200
