import logging
from typing import Any, Dict, List, Optional

from lp_builder.domain.lifecycle.page import STATUS_PUBLISHED
from lp_builder.errors import BadRequest, NotFound
from lp_builder.extensions import db
from lp_builder.models.form_submission import FormSubmission
from lp_builder.models.page import Page
from lp_builder.utils.json_fields import dump_json
from lp_builder.utils.transaction import transactional

logger = logging.getLogger(__name__)

DEFAULT_FORM_TITLE = "Contact"
MAX_FIELDS = 50
MAX_VALUE_LENGTH = 5000

# fieldName, then label fragments (Japanese forms label them メール / お名前)
SENDER_EMAIL = ("email", ("email", "メール"))
SENDER_NAME = ("name", ("name", "名前"))


def _validate_fields(form_fields: Any) -> List[Dict[str, str]]:
    if not isinstance(form_fields, list) or not form_fields:
        raise BadRequest("formFields must be a non-empty list")
    if len(form_fields) > MAX_FIELDS:
        raise BadRequest(f"At most {MAX_FIELDS} form fields are accepted")

    cleaned = []
    for field in form_fields:
        if not isinstance(field, dict):
            raise BadRequest("Each form field must be an object")
        name, label, value = field.get("fieldName"), field.get("fieldLabel"), field.get("value", "")
        if not isinstance(name, str) or not isinstance(label, str) or not isinstance(value, str):
            raise BadRequest("fieldName, fieldLabel and value must be strings")
        if len(value) > MAX_VALUE_LENGTH:
            raise BadRequest(f"Field values must be at most {MAX_VALUE_LENGTH} characters")
        cleaned.append({"fieldName": name, "fieldLabel": label, "value": value})

    return cleaned


def _find_value(fields: List[Dict[str, str]], rule) -> Optional[str]:
    field_name, fragments = rule
    for field in fields:
        label = field["fieldLabel"].lower()
        if field["fieldName"] == field_name or any(f in label for f in fragments):
            return field["value"] or None
    return None


def submit_form(*, page_slug: Any, form_title: Any, form_fields: Any) -> FormSubmission:
    """Store a visitor's form post against a published page."""
    if not isinstance(page_slug, str) or not page_slug:
        raise BadRequest("pageSlug is required")
    if form_title is not None and not isinstance(form_title, str):
        raise BadRequest("formTitle must be a string")

    fields = _validate_fields(form_fields)

    page = Page.query.filter_by(slug=page_slug, status=STATUS_PUBLISHED).first()
    if page is None:
        raise NotFound("Page not found")

    submission = FormSubmission(
        page_id=page.id,
        page_slug=page_slug,
        form_title=form_title or DEFAULT_FORM_TITLE,
        fields=dump_json(fields),
        sender_email=_find_value(fields, SENDER_EMAIL),
        sender_name=_find_value(fields, SENDER_NAME),
    )

    with transactional():
        db.session.add(submission)

    logger.info("Form submission %s received for page %s", submission.id, page.id)
    return submission
