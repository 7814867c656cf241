"""Pre-launch waiting list: public sign-up, admin triage and replies."""
import re

from flask import current_app, jsonify, request
from sqlalchemy import case

from lp_builder.errors import BadRequest, Conflict, NotFound
from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.waiting_room import (
    ACCOUNT_TYPES,
    ENTRY_STATUSES,
    WAITING_PLANS,
    WaitingRoomEntry,
    WaitingRoomReply,
)
from lp_builder.normalizers.waiting_room import normalize_entry, normalize_reply
from lp_builder.utils.decorators import auth_required, current_user_settings, roles_required
from lp_builder.utils.transaction import transactional
from . import v1_bp

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
EMAIL_TAKEN = "This email address is already registered"


def _text(data, key, required=False):
    value = data.get(key)
    if value is None or value == "":
        if required:
            raise BadRequest(f"{key} is required")
        return None
    if not isinstance(value, str):
        raise BadRequest(f"{key} must be a string")
    value = value.strip()
    if required and not value:
        raise BadRequest(f"{key} is required")
    return value or None


def _entry_or_404(entry_id):
    entry = db.session.get(WaitingRoomEntry, entry_id) if isinstance(entry_id, str) and entry_id else None
    if entry is None:
        raise NotFound("Entry not found")
    return entry


@v1_bp.route("/waitingroom", methods=["POST"])
def join_waiting_room():
    data = request.get_json(silent=True) or {}

    account_type = _text(data, "accountType", required=True)
    plan = _text(data, "selectedPlan", required=True)
    name = _text(data, "name", required=True)
    email = _text(data, "email", required=True)
    company_name = _text(data, "companyName")

    if account_type not in ACCOUNT_TYPES:
        raise BadRequest(f"accountType must be one of {sorted(ACCOUNT_TYPES)}")
    if plan not in WAITING_PLANS:
        raise BadRequest("Please choose a valid plan")
    if account_type == "corporate" and not company_name:
        raise BadRequest("companyName is required for corporate accounts")
    if not EMAIL_PATTERN.fullmatch(email):
        raise BadRequest("Please enter a valid email address")
    if WaitingRoomEntry.query.filter_by(email=email).first() is not None:
        raise Conflict(EMAIL_TAKEN)

    entry = WaitingRoomEntry(
        account_type=account_type,
        company_name=company_name,
        name=name,
        email=email,
        phone=_text(data, "phone"),
        remarks=_text(data, "remarks"),
        plan=plan,
        status="pending",
    )
    with transactional(conflict=EMAIL_TAKEN):
        db.session.add(entry)

    current_app.logger.info("Waiting room entry %s (%s, %s)", entry.id, account_type, plan)
    return jsonify({
        "success": True,
        "data": {"id": entry.id, "createdAt": entry.created_at.isoformat()},
    }), 201


@v1_bp.route("/admin/waitingroom", methods=["GET"])
@auth_required()
@roles_required("admin")
def list_waiting_room():
    pending_first = case((WaitingRoomEntry.status == "pending", 0), else_=1)
    entries = (
        WaitingRoomEntry.query
        .order_by(pending_first, WaitingRoomEntry.created_at.desc())
        .all()
    )
    return jsonify([normalize_entry(e) for e in entries])


@v1_bp.route("/admin/waitingroom", methods=["POST"])
@auth_required()
@roles_required("admin")
def reply_to_waiting_room():
    settings = current_user_settings()
    data = request.get_json(silent=True) or {}

    message = _text(data, "message", required=True)
    entry = _entry_or_404(data.get("entryId"))

    reply = WaitingRoomReply(
        entry_id=entry.id,
        message=message,
        admin_id=settings.user_id,
        admin_name=settings.email or "Admin",
    )
    db.session.add(reply)
    db.session.commit()

    return jsonify({"success": True, "reply": normalize_reply(reply)}), 201


@v1_bp.route("/admin/waitingroom", methods=["PATCH"])
@auth_required()
@roles_required("admin")
def update_waiting_room():
    data = request.get_json(silent=True) or {}
    entry = _entry_or_404(data.get("entryId"))

    status = _text(data, "status")
    if status is not None and status not in ENTRY_STATUSES:
        raise BadRequest(f"status must be one of {sorted(ENTRY_STATUSES)}")

    if status:
        entry.status = status
    if "adminNotes" in data:
        entry.admin_notes = _text(data, "adminNotes")
    entry.processed_at = utcnow()
    entry.processed_by = current_user_settings().user_id
    db.session.commit()

    return jsonify({"success": True, "entry": normalize_entry(entry)})


@v1_bp.route("/admin/waitingroom", methods=["DELETE"])
@auth_required()
@roles_required("admin")
def delete_waiting_room_entry():
    entry = _entry_or_404(request.args.get("entryId"))

    db.session.delete(entry)
    db.session.commit()

    return jsonify({"success": True})
