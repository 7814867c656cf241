from flask import jsonify, request

from lp_builder.application.form_submissions import submit_form
from lp_builder.models.form_submission import FormSubmission
from lp_builder.models.page import Page
from lp_builder.normalizers.form_submission import normalize_form_submission
from lp_builder.utils.access import get_owned_or_404
from lp_builder.utils.decorators import auth_required, current_user_settings
from . import v1_bp


@v1_bp.route("/form-submissions", methods=["POST"])
def create_form_submission():
    data = request.get_json(silent=True) or {}

    submission = submit_form(
        page_slug=data.get("pageSlug"),
        form_title=data.get("formTitle"),
        form_fields=data.get("formFields"),
    )

    return jsonify({"success": True, "id": submission.id}), 201


@v1_bp.route("/form-submissions", methods=["GET"])
@auth_required()
def list_form_submissions():
    """Submissions to the caller's pages, newest first; admins see all."""
    settings = current_user_settings()
    query = FormSubmission.query

    page_id = request.args.get("pageId")
    if page_id:
        get_owned_or_404(Page, page_id, "Page")
        query = query.filter(FormSubmission.page_id == page_id)
    elif not settings.is_admin:
        query = query.join(Page).filter(Page.user_id == settings.user_id)

    submissions = query.order_by(FormSubmission.created_at.desc()).all()
    return jsonify([normalize_form_submission(s) for s in submissions])
