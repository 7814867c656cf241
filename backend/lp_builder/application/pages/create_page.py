import time
import uuid
from datetime import date
from typing import Any, Dict, Optional

from lp_builder.domain.invariants.page import assert_page
from lp_builder.errors import BadRequest
from lp_builder.extensions import db
from lp_builder.models.page import Page
from lp_builder.utils.json_fields import dump_json
from lp_builder.utils.transaction import transactional
from .sections import build_sections
from .update_page import SLUG_TAKEN, validate_slug


def generate_slug() -> str:
    return f"page-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def create_page(
    *,
    user_id: Optional[str],
    data: Dict[str, Any],
) -> Page:
    """
    Create a draft page with its initial sections.

    Title and slug default to generated values when omitted.
    """
    page = Page()
    page.user_id = user_id
    title = data.get("title")
    if title is not None and not isinstance(title, str):
        raise BadRequest("title must be a string")
    if data.get("slug"):
        validate_slug(data["slug"])

    page.title = title or f"New Page {date.today().isoformat()}"
    page.slug = data.get("slug") or generate_slug()
    page.status = "draft"
    page.header_config = dump_json(data.get("headerConfig") or {})
    page.form_config = dump_json(data.get("formConfig") or {})
    if data.get("designDefinition") is not None:
        page.design_definition = dump_json(data["designDefinition"])

    with transactional(conflict=SLUG_TAKEN):
        page.sections = build_sections(data.get("sections") or [], owner_id=user_id)
        db.session.add(page)
        db.session.flush()

        assert_page(page)

    return page
