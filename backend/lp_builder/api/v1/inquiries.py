from flask import current_app, jsonify, request

from lp_builder.errors import BadRequest, NotFound
from lp_builder.extensions import db
from lp_builder.models.contact_inquiry import ContactInquiry, INQUIRY_STATUSES
from lp_builder.normalizers.inquiry import normalize_inquiry
from lp_builder.utils.decorators import auth_required, current_user_settings, roles_required
from . import v1_bp

MAX_SUBJECT_LENGTH = 255


@v1_bp.route("/inquiries", methods=["POST"])
@auth_required()
def create_inquiry():
    settings = current_user_settings()
    data = request.get_json(silent=True) or {}

    subject = data.get("subject")
    body = data.get("body")
    subject = subject.strip() if isinstance(subject, str) else ""
    body = body.strip() if isinstance(body, str) else ""

    if not subject or not body:
        raise BadRequest("subject and body are required")
    if len(subject) > MAX_SUBJECT_LENGTH:
        raise BadRequest(f"subject must be at most {MAX_SUBJECT_LENGTH} characters")

    inquiry = ContactInquiry(
        user_id=settings.user_id,
        email=settings.email,
        subject=subject,
        body=body,
    )
    db.session.add(inquiry)
    db.session.commit()

    current_app.logger.info("Inquiry %s opened by %s", inquiry.id, settings.user_id)
    return jsonify(normalize_inquiry(inquiry)), 201


@v1_bp.route("/inquiries", methods=["GET"])
@auth_required()
def list_inquiries():
    settings = current_user_settings()

    query = ContactInquiry.query
    if not settings.is_admin:
        query = query.filter_by(user_id=settings.user_id)

    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)

    inquiries = query.order_by(ContactInquiry.created_at.desc()).all()
    return jsonify([normalize_inquiry(i) for i in inquiries])


@v1_bp.route("/inquiries/<inquiry_id>", methods=["PATCH"])
@auth_required()
@roles_required("admin")
def update_inquiry(inquiry_id):
    inquiry = db.session.get(ContactInquiry, inquiry_id)
    if inquiry is None:
        raise NotFound("Inquiry not found")

    data = request.get_json(silent=True) or {}

    if "isRead" in data:
        if not isinstance(data["isRead"], bool):
            raise BadRequest("isRead must be a boolean")
        inquiry.is_read = data["isRead"]

    if "status" in data:
        if data["status"] not in INQUIRY_STATUSES:
            raise BadRequest(f"status must be one of {sorted(INQUIRY_STATUSES)}")
        inquiry.status = data["status"]

    if "adminNote" in data:
        inquiry.admin_note = data["adminNote"]

    db.session.commit()
    return jsonify(normalize_inquiry(inquiry))
