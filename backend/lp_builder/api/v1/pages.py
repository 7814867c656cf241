from flask import current_app, jsonify, request

from lp_builder.application.pages.create_page import create_page as create_page_op
from lp_builder.application.pages.delete_page import delete_page as delete_page_op
from lp_builder.application.pages.replace_sections import replace_sections
from lp_builder.application.pages.update_page import update_page as update_page_op
from lp_builder.application.usage import check_page_limit
from lp_builder.errors import PaymentRequired
from lp_builder.models.page import Page
from lp_builder.normalizers.page import normalize_page
from lp_builder.utils.access import get_owned_or_404
from lp_builder.utils.decorators import auth_required, current_user_id
from lp_builder.utils.optimistic_lock import enforce_optimistic_lock
from . import v1_bp


@v1_bp.route("/pages", methods=["GET"])
@auth_required(optional=True)
def list_pages():
    user_id = current_user_id()
    if not user_id:
        return jsonify([])

    pages = (
        Page.query.filter_by(user_id=user_id)
        .order_by(Page.updated_at.desc())
        .all()
    )
    return jsonify([normalize_page(p, include_sections=False) for p in pages])


@v1_bp.route("/pages", methods=["POST"])
@auth_required()
def create_page():
    user_id = current_user_id()
    data = request.get_json(silent=True) or {}

    check = check_page_limit(user_id)
    if not check.allowed:
        raise PaymentRequired(check.reason, **check.to_dict())

    page = create_page_op(user_id=user_id, data=data)
    current_app.logger.info("Page %s created by %s", page.id, user_id)

    return jsonify(normalize_page(page)), 201


@v1_bp.route("/pages/<page_id>", methods=["GET"])
@auth_required()
def get_page(page_id):
    page = get_owned_or_404(Page, page_id, "Page")
    return jsonify(normalize_page(page))


@v1_bp.route("/pages/<page_id>", methods=["PUT"])
@auth_required()
def save_page(page_id):
    page = get_owned_or_404(Page, page_id, "Page")
    data = request.get_json(silent=True) or {}

    page = replace_sections(page=page, data=data)

    return jsonify({"success": True, "page": normalize_page(page)})


@v1_bp.route("/pages/<page_id>", methods=["PATCH"])
@auth_required()
def patch_page(page_id):
    page = get_owned_or_404(Page, page_id, "Page")

    enforce_optimistic_lock(page)

    data = request.get_json(silent=True) or {}
    page = update_page_op(page=page, data=data)

    return jsonify({"success": True, "page": normalize_page(page, include_sections=False)})


@v1_bp.route("/pages/<page_id>", methods=["DELETE"])
@auth_required()
def delete_page(page_id):
    page = get_owned_or_404(Page, page_id, "Page")
    delete_page_op(page=page, actor_id=current_user_id())
    return jsonify({"success": True})
