from flask import jsonify, request

from lp_builder.application.upgrade_requests import request_upgrade, review_upgrade
from lp_builder.errors import NotFound
from lp_builder.extensions import db
from lp_builder.models.upgrade_request import UpgradeRequest
from lp_builder.normalizers.upgrade_request import normalize_upgrade_request
from lp_builder.utils.decorators import auth_required, current_user_settings, roles_required
from . import v1_bp


@v1_bp.route("/upgrade-request", methods=["POST"])
@auth_required()
def create_upgrade_request():
    data = request.get_json(silent=True) or {}

    upgrade = request_upgrade(
        settings=current_user_settings(),
        desired_plan=data.get("desiredPlan"),
        reason=data.get("reason"),
        company_name=data.get("companyName"),
    )

    return jsonify(normalize_upgrade_request(upgrade)), 201


@v1_bp.route("/upgrade-request", methods=["GET"])
@auth_required()
def list_upgrade_requests():
    settings = current_user_settings()

    query = UpgradeRequest.query
    if not settings.is_admin:
        query = query.filter_by(user_id=settings.user_id)

    upgrades = query.order_by(UpgradeRequest.created_at.desc()).all()
    return jsonify([normalize_upgrade_request(u) for u in upgrades])


@v1_bp.route("/upgrade-request/<request_id>", methods=["PATCH"])
@auth_required()
@roles_required("admin")
def update_upgrade_request(request_id):
    upgrade = db.session.get(UpgradeRequest, request_id)
    if upgrade is None:
        raise NotFound("Upgrade request not found")

    data = request.get_json(silent=True) or {}
    upgrade = review_upgrade(
        upgrade=upgrade,
        status=data.get("status"),
        reviewer_id=current_user_settings().user_id,
        review_note=data.get("reviewNote"),
    )

    return jsonify(normalize_upgrade_request(upgrade))
