from flask import jsonify, request

from lp_builder.application.pages.copy_template import copy_template as copy_template_op
from lp_builder.application.templates import create_template, delete_template, update_template
from lp_builder.application.usage import check_page_limit
from lp_builder.errors import NotFound, PaymentRequired
from lp_builder.extensions import db
from lp_builder.models.lp_template import LpTemplate
from lp_builder.normalizers.page import normalize_page
from lp_builder.normalizers.template import normalize_template
from lp_builder.utils.decorators import auth_required, current_user_id, roles_required
from . import v1_bp


def _get_template_or_404(template_id, published_only=False):
    template = db.session.get(LpTemplate, template_id)
    if template is None or (published_only and not template.is_published):
        raise NotFound("Template not found")
    return template


@v1_bp.route("/templates", methods=["GET"])
@auth_required()
def list_published_templates():
    query = LpTemplate.query.filter_by(is_published=True)

    category = request.args.get("category")
    if category:
        query = query.filter_by(category=category)

    templates = query.order_by(LpTemplate.updated_at.desc()).all()
    return jsonify([normalize_template(t) for t in templates])


@v1_bp.route("/templates/<template_id>/copy", methods=["POST"])
@auth_required()
def copy_template(template_id):
    template = _get_template_or_404(template_id, published_only=True)
    user_id = current_user_id()

    check = check_page_limit(user_id)
    if not check.allowed:
        raise PaymentRequired(check.reason, **check.to_dict())

    page = copy_template_op(template=template, user_id=user_id)
    return jsonify(normalize_page(page)), 201


# ------------------------
# Admin
# ------------------------

@v1_bp.route("/admin/templates", methods=["GET"])
@auth_required()
@roles_required("admin")
def admin_list_templates():
    templates = LpTemplate.query.order_by(LpTemplate.updated_at.desc()).all()
    return jsonify([normalize_template(t) for t in templates])


@v1_bp.route("/admin/templates", methods=["POST"])
@auth_required()
@roles_required("admin")
def admin_create_template():
    data = request.get_json(silent=True) or {}
    template = create_template(data=data, created_by=current_user_id())
    return jsonify(normalize_template(template, include_sections=True)), 201


@v1_bp.route("/admin/templates/<template_id>", methods=["GET"])
@auth_required()
@roles_required("admin")
def admin_get_template(template_id):
    return jsonify(normalize_template(_get_template_or_404(template_id), include_sections=True))


@v1_bp.route("/admin/templates/<template_id>", methods=["PUT"])
@auth_required()
@roles_required("admin")
def admin_update_template(template_id):
    template = _get_template_or_404(template_id)
    data = request.get_json(silent=True) or {}
    template = update_template(template=template, data=data)
    return jsonify(normalize_template(template, include_sections=True))


@v1_bp.route("/admin/templates/<template_id>", methods=["DELETE"])
@auth_required()
@roles_required("admin")
def admin_delete_template(template_id):
    delete_template(_get_template_or_404(template_id))
    return jsonify({"success": True})
